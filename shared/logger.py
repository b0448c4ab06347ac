"""
Airgraph Structured Logger
===========================

Provides :class:`AirLogger`, a structured logging facade that emits
both human-friendly Rich console output and machine-parseable JSON logs
to rotating log files.

Every record carries the emitting *component* (``airgraph.core.graph``,
``airgraph.collectors.wifi`` ...) and, while one is active, the current
*operation* (``capture``, ``upsert`` ...).

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Rich theme consistent with AirConsole colour palette
# ---------------------------------------------------------------------------
_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)


# ========================== JSON Formatter =================================


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "...",
          "level": "DEBUG",
          "logger": "airgraph.core.graph",
          "message": "...",
          "component": "core.graph",
          "operation": "upsert",
          "extra": {"identity": "AA:BB:CC:DD:EE:FF"},
          "exc_info": "..."
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for attr in ("component", "operation"):
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val

        extra = getattr(record, "air_extra", None)
        if extra is not None:
            entry["extra"] = extra

        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


# ========================== Rich Console Handler ===========================


class _ColorConsoleHandler(RichHandler):
    """Thin wrapper over :class:`rich.logging.RichHandler` applying the
    Airgraph log theme on stderr.
    """

    def __init__(self, **kwargs: Any) -> None:
        console = Console(theme=_LOG_THEME, stderr=True)
        super().__init__(
            console=console,
            show_path=False,
            show_time=True,
            rich_tracebacks=True,
            tracebacks_show_locals=False,
            markup=False,
            **kwargs,
        )


# ========================== AirLogger ======================================


class AirLogger:
    """Structured, context-aware logger for Airgraph components.

    Each instance is bound to a *component* name and can carry a temporary
    *operation* context via a context manager.  Instances sharing a
    component name share the underlying stdlib logger, so
    :func:`configure_logging` reaches loggers created at import time.

    Usage::

        log = AirLogger("airgraph.core.graph")
        log.info("Graph created")
        with log.operation("upsert"):
            log.debug(f"Updating node {identity}", identity=identity)

    Args:
        component:       Dotted component name; used as the stdlib logger name.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Path to the rotating log file. ``None`` disables file logging.
        json_logs:       If ``True`` the file handler emits JSON lines.
        max_bytes:       Maximum log-file size before rotation (default 10 MiB).
        backup_count:    Number of rotated backup files to keep.
        console_output:  If ``True`` attach a colour Rich console handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._operation: str | None = None

        self._logger = logging.getLogger(component)
        self._logger.setLevel(
            getattr(logging, log_level.upper(), logging.INFO)
        )
        self._logger.propagate = False

        # Prevent duplicate handlers on re-instantiation
        self._logger.handlers.clear()

        if console_output:
            ch = _ColorConsoleHandler(level=logging.NOTSET)
            self._logger.addHandler(ch)

        if log_file is not None:
            self._logger.addHandler(
                _build_file_handler(log_file, json_logs, max_bytes, backup_count)
            )

    # ------------------------------------------------------------------ #
    #  Context management -- operation scope
    # ------------------------------------------------------------------ #

    class _OperationContext:
        """Context manager that temporarily binds an operation name."""

        def __init__(self, parent: AirLogger, operation: str) -> None:
            self._parent = parent
            self._operation = operation
            self._prev: str | None = None

        def __enter__(self) -> AirLogger:
            self._prev = self._parent._operation
            self._parent._operation = self._operation
            return self._parent

        def __exit__(self, *exc: Any) -> None:
            self._parent._operation = self._prev

    def operation(self, name: str) -> _OperationContext:
        """Return a context manager that sets the *operation* field.

        While active, every log record will include ``operation=<name>``.
        """
        return self._OperationContext(self, name)

    # ------------------------------------------------------------------ #
    #  Log methods
    # ------------------------------------------------------------------ #

    def _enrich(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Inject component context into the log record via *extra*."""
        extra = kwargs.pop("extra", {}) or {}

        air_extra: dict[str, Any] = {}
        standard_keys = {"exc_info", "stack_info", "stacklevel"}
        for key in list(kwargs):
            if key not in standard_keys:
                air_extra[key] = kwargs.pop(key)

        extra["component"] = self._component
        extra["operation"] = self._operation
        if air_extra:
            extra["air_extra"] = air_extra

        kwargs["extra"] = extra
        return kwargs

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a DEBUG-level message."""
        kwargs = self._enrich(kwargs)
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an INFO-level message."""
        kwargs = self._enrich(kwargs)
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a WARNING-level message."""
        kwargs = self._enrich(kwargs)
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log an ERROR-level message."""
        kwargs = self._enrich(kwargs)
        self._logger.error(msg, *args, **kwargs)


# ========================== Configuration ==================================


def _build_file_handler(
    log_file: str | Path,
    json_logs: bool,
    max_bytes: int = 10_485_760,
    backup_count: int = 5,
) -> RotatingFileHandler:
    file_path = Path(log_file)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    fh = RotatingFileHandler(
        filename=str(file_path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    if json_logs:
        fh.setFormatter(_JSONFormatter())
    else:
        fh.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S%z",
            )
        )
    return fh


def configure_logging(
    *,
    debug: bool = False,
    log_level: str = "INFO",
    log_file: str | Path | None = None,
    json_logs: bool = False,
    prefix: str = "airgraph",
) -> None:
    """Apply run-time settings to every logger under *prefix*.

    Loggers are created at import time with default settings; the CLI
    calls this once the configuration is known.  ``debug=True`` lowers
    the threshold to DEBUG regardless of *log_level*.
    """
    level = logging.DEBUG if debug else getattr(
        logging, log_level.upper(), logging.INFO
    )
    file_handler = (
        _build_file_handler(log_file, json_logs) if log_file is not None else None
    )

    for name in list(logging.root.manager.loggerDict):
        if name != prefix and not name.startswith(prefix + "."):
            continue
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.setLevel(level)
        for handler in list(stdlib_logger.handlers):
            if isinstance(handler, RotatingFileHandler):
                stdlib_logger.removeHandler(handler)
                handler.close()
        if file_handler is not None:
            stdlib_logger.addHandler(file_handler)
