"""
Airgraph Node Record Sinks
===========================

Persistence collaborators receiving one :class:`NodeRecord` per processed
observation.  Records are snapshots taken before hand-off, so a sink may
buffer or defer them without observing later graph mutations.

Sinks wrap every serialization or I/O failure in
:class:`RecordSerializationError`; the graph turns that into a
recoverable :class:`RecordEmissionError` for its caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional, TextIO

from shared.console import AirConsole
from shared.logger import AirLogger

from airgraph.core.models import NodeRecord, RecordSerializationError

logger = AirLogger("airgraph.core.sink")


class NodeSink(ABC):
    """Destination for emitted node records."""

    @abstractmethod
    def emit(self, record: NodeRecord) -> None:
        """Persist one node record.

        Raises:
            RecordSerializationError: If the record cannot be written.
        """

    def close(self) -> None:
        """Release any held resources."""

    def __enter__(self) -> NodeSink:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class NullSink(NodeSink):
    """Discards every record."""

    def emit(self, record: NodeRecord) -> None:
        return None


class JsonLinesSink(NodeSink):
    """Appends each record as one JSON object per line.

    The file lives under the configured database directory and is opened
    lazily on the first emission.

    Usage::

        with JsonLinesSink("airgraph-db") as sink:
            graph = NodeGraph(config, sink=sink)
    """

    FILE_NAME = "nodes.jsonl"

    def __init__(self, db_dir: str | Path, file_name: str = FILE_NAME) -> None:
        self._path = Path(db_dir) / file_name
        self._fh: Optional[TextIO] = None
        self._written = 0

    @property
    def path(self) -> Path:
        """Path of the JSON-lines file."""
        return self._path

    @property
    def written(self) -> int:
        """Records written since the sink was created."""
        return self._written

    def emit(self, record: NodeRecord) -> None:
        try:
            line = record.to_json()
        except (TypeError, ValueError) as exc:
            raise RecordSerializationError(
                f"Cannot serialize node {record.identity!r}: {exc}"
            ) from exc

        try:
            if self._fh is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._fh = open(self._path, "a", encoding="utf-8")
                logger.info(f"Writing node records to {self._path}")
            self._fh.write(line + "\n")
            self._fh.flush()
        except OSError as exc:
            raise RecordSerializationError(
                f"Cannot write node {record.identity!r} to {self._path}: {exc}"
            ) from exc

        self._written += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


class ConsoleSink(NodeSink):
    """Prints each record's JSON on the console."""

    def __init__(self, console: Optional[AirConsole] = None) -> None:
        self._console = console or AirConsole()

    def emit(self, record: NodeRecord) -> None:
        try:
            line = record.to_json()
        except (TypeError, ValueError) as exc:
            raise RecordSerializationError(
                f"Cannot serialize node {record.identity!r}: {exc}"
            ) from exc
        self._console.rich.print_json(line)
