"""
Airgraph Configuration Management
==================================

Centralized configuration for the Airgraph toolkit using Python
dataclasses and TOML-based persistence.

Configuration is threaded explicitly through the ingestion adapter,
node graph and engine constructors; no module reads process-wide
settings on its own.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any


# ---------------------------------------------------------------------------
# Default configuration file path relative to the Airgraph root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ========================== Tool-Specific Configs ==========================


@dataclass(frozen=False, slots=True)
class GraphConfig:
    """Configuration for the wireless node graph.

    Controls the capture interface, the capacity of every per-node
    bounded history buffer, and where emitted node records land.

    Attributes:
        interface:        Monitor-mode wireless interface to sniff on.
        buffer_size:      Capacity of the signal and observation histories.
        db_name:          Directory receiving JSON-lines node records.
        capture_duration: Default capture length in seconds.
        queue_size:       Maximum pending observations between the
                          capture thread and the graph consumer.
        debug:            Verbose internal logging (no effect on results).
    """

    interface: str = "wlan0mon"
    buffer_size: int = 10
    db_name: str = "airgraph-db"
    capture_duration: int = 60
    queue_size: int = 10_000
    debug: bool = False

    def __post_init__(self) -> None:
        if self.buffer_size < 1:
            raise ValueError(
                f"buffer_size must be a positive integer, got {self.buffer_size}"
            )
        if self.queue_size < 0:
            raise ValueError(
                f"queue_size must be >= 0, got {self.queue_size}"
            )


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings shared across Airgraph modules.

    Controls logging verbosity and log destinations.
    """

    log_level: str = "INFO"
    log_file: str = "airgraph.log"
    log_json: bool = False
    debug: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class AirgraphConfig:
    """Master configuration aggregating global and graph settings.

    Usage:
        >>> config = AirgraphConfig.load()                  # from default path
        >>> config = AirgraphConfig.load("custom.toml")     # from custom path
        >>> print(config.graph.buffer_size)
        10
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    graph: GraphConfig = field(default_factory=GraphConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> AirgraphConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.
                  Defaults to ``<project_root>/config.toml``.

        Returns:
            A fully-populated :class:`AirgraphConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
            ValueError: If a section holds an out-of-range value.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            graph=cls._build_section(GraphConfig, raw.get("airgraph", {})),
        )

    # ------------------------------------------------------------------ #
    #  Serialisation helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    @property
    def debug(self) -> bool:
        """True when either the global or the graph debug flag is set."""
        return self.global_settings.debug or self.graph.debug

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored so that
        forward-compatible config files do not break older code.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)
