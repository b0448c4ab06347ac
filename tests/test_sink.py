"""Tests for node record sinks."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from shared.console import AirConsole

from airgraph.core.models import Node, RecordSerializationError
from airgraph.core.sink import ConsoleSink, JsonLinesSink, NullSink

from conftest import beacon, probe


def test_jsonl_sink_appends_lines(tmp_path: Path) -> None:
    """Each record becomes one camelCase JSON line."""
    db = tmp_path / "airgraph-db"
    with JsonLinesSink(db) as sink:
        sink.emit(Node.from_observation(beacon("Cafe")).snapshot())
        sink.emit(Node.from_observation(probe("AA:BB", "Cafe")).snapshot())
        assert sink.written == 2

    lines = (db / "nodes.jsonl").read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["identity"] for line in lines] == ["Cafe", "AA:BB"]
    assert json.loads(lines[0])["timesSeen"] == 1


def test_jsonl_sink_is_lazy(tmp_path: Path) -> None:
    """Nothing is created until the first record arrives."""
    sink = JsonLinesSink(tmp_path / "db")
    sink.close()

    assert not sink.path.exists()


def test_jsonl_sink_write_failure(tmp_path: Path) -> None:
    """I/O errors are reported as RecordSerializationError."""
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("x", encoding="utf-8")
    sink = JsonLinesSink(blocker)

    with pytest.raises(RecordSerializationError):
        sink.emit(Node.from_observation(beacon("Cafe")).snapshot())
    assert sink.written == 0


def test_console_sink_prints_json() -> None:
    """The console sink prints the record as JSON."""
    console = AirConsole(record=True)
    ConsoleSink(console).emit(Node.from_observation(beacon("Cafe")).snapshot())

    assert '"networkName": "Cafe"' in console.export_text()


def test_null_sink_discards() -> None:
    """The null sink accepts anything."""
    NullSink().emit(Node.skeleton("Cafe").snapshot())
