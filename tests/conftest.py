"""Shared fixtures for Airgraph tests."""

from __future__ import annotations

import pytest

from shared.config import GraphConfig

from airgraph.core.models import (
    FrameClass,
    FrameObservation,
    NodeRecord,
    RecordSerializationError,
)
from airgraph.core.sink import NodeSink


class RecordingSink(NodeSink):
    """Keeps every emitted record in memory."""

    def __init__(self) -> None:
        self.records: list[NodeRecord] = []
        self.closed = False

    def emit(self, record: NodeRecord) -> None:
        self.records.append(record)

    def close(self) -> None:
        self.closed = True


class FailingSink(NodeSink):
    """Rejects records for the identities it is given."""

    def __init__(self, *identities: str) -> None:
        self._identities = set(identities)
        self.accepted: list[NodeRecord] = []

    def emit(self, record: NodeRecord) -> None:
        if not self._identities or record.identity in self._identities:
            raise RecordSerializationError("disk full")
        self.accepted.append(record)


def beacon(name: str, signal: int = -40, timestamp: str = "t0") -> FrameObservation:
    return FrameObservation(
        timestamp=timestamp,
        network_name=name,
        hardware_address="00:11:22:33:44:55",
        transmitter_address="00:11:22:33:44:55",
        classification=FrameClass.BEACON,
        signal_strength=signal,
    )


def probe(
    transmitter: str, name: str, signal: int = -60, timestamp: str = "t0"
) -> FrameObservation:
    return FrameObservation(
        timestamp=timestamp,
        network_name=name,
        hardware_address="FF:FF:FF:FF:FF:FF",
        transmitter_address=transmitter,
        classification=FrameClass.PROBE_REQUEST,
        signal_strength=signal,
    )


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def small_config() -> GraphConfig:
    return GraphConfig(buffer_size=3)
