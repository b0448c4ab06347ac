"""
Airgraph Core Data Models
==========================

Domain models for the wireless node graph.

A :class:`FrameObservation` is one decoded 802.11 management frame.
Each observation resolves to a :class:`Node` -- an access point's network
name for beacons, a client's transmitter address for probe requests --
whose statistics are kept in fixed-capacity :class:`BoundedHistory`
buffers.  :class:`NodeRecord` is the detached snapshot handed to the
persistence sink after every observation.

References:
    - IEEE. (2020). IEEE Std 802.11-2020. Section 9.3.3: Management frames.
    - Pydantic v2 Documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import enum
from collections import deque
from typing import Any, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DEFAULT_BUFFER_SIZE = 10

INT8_MIN = -128
INT8_MAX = 127


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AirgraphError(Exception):
    """Base class for Airgraph errors."""


class RecordSerializationError(AirgraphError):
    """A node record could not be serialized or written by a sink."""


class RecordEmissionError(AirgraphError):
    """The graph committed an update but its record did not reach the sink.

    The in-memory graph is correct when this is raised; only the
    persistence side effect for *identity* was lost.
    """

    def __init__(self, identity: str, reason: str) -> None:
        super().__init__(f"Failed to emit node record for {identity!r}: {reason}")
        self.identity = identity


class CaptureError(AirgraphError):
    """Live capture could not be started or failed while running."""


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class FrameClass(str, enum.Enum):
    """Management frame classification driving identity resolution.

    Reference:
        IEEE. (2020). IEEE Std 802.11-2020. Table 9-1: Valid type and
        subtype combinations.
    """

    BEACON = "Beacon"
    PROBE_REQUEST = "ProbeRequest"
    OTHER = "Other"


# ---------------------------------------------------------------------------
# Bounded History Buffer
# ---------------------------------------------------------------------------


class BoundedHistory:
    """Fixed-capacity FIFO keeping the most recent *capacity* samples.

    Pushing onto a full buffer discards the oldest element first, so after
    any sequence of pushes the contents equal the last
    ``min(pushes, capacity)`` values in push order.

    Usage::

        history = BoundedHistory(3)
        for rssi in (-40, -42, -45, -50):
            history.push(rssi)
        history.snapshot()   # [-42, -45, -50]
    """

    __slots__ = ("_items",)

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._items: deque[Any] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        """Maximum number of retained samples."""
        return self._items.maxlen  # type: ignore[return-value]

    def push(self, value: Any) -> None:
        """Append *value*, evicting the oldest sample when full."""
        self._items.append(value)

    def snapshot(self) -> list[Any]:
        """Return a copy of the retained samples, oldest first."""
        return list(self._items)

    @property
    def latest(self) -> Any | None:
        """Most recently pushed sample, or ``None`` when empty."""
        return self._items[-1] if self._items else None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundedHistory):
            return NotImplemented
        return (
            self.capacity == other.capacity
            and list(self._items) == list(other._items)
        )

    def __repr__(self) -> str:
        return f"BoundedHistory(capacity={self.capacity}, items={list(self._items)!r})"


# ---------------------------------------------------------------------------
# Inbound observation
# ---------------------------------------------------------------------------


class FrameObservation(BaseModel):
    """One decoded management frame, as delivered by the capture side.

    Any field may be empty; empty network names or transmitter addresses
    degrade identity resolution but are never rejected.

    Attributes:
        timestamp: Capture time of the frame.
        network_name: Advertised (beacon) or requested (probe) SSID.
        hardware_address: BSSID field of the frame (addr3).
        transmitter_address: Transmitter address of the frame (addr2).
        classification: Frame classification.
        signal_strength: Received signal strength in dBm (signed 8-bit).
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str = ""
    network_name: str = ""
    hardware_address: str = ""
    transmitter_address: str = ""
    classification: FrameClass = FrameClass.OTHER
    signal_strength: int = Field(default=0, ge=INT8_MIN, le=INT8_MAX)

    def resolve_identity(self) -> str:
        """Return the node identity this observation folds into.

        Probe requests are keyed by the transmitting device; beacons and
        every other frame type are keyed by the network name.
        """
        if self.classification is FrameClass.PROBE_REQUEST:
            return self.transmitter_address
        return self.network_name


# ---------------------------------------------------------------------------
# Outbound record
# ---------------------------------------------------------------------------


class NodeRecord(BaseModel):
    """Detached, serialisable snapshot of a :class:`Node`.

    Serialised with camelCase keys (``networkName``, ``timesSeen`` ...).
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    identity: str
    network_name: Optional[str] = None
    hardware_addresses: list[str] = Field(default_factory=list)
    classification: Optional[FrameClass] = None
    transmitter_addresses: list[str] = Field(default_factory=list)
    times_seen: int = 0
    signal_history: list[int] = Field(default_factory=list)
    observation_history: list[str] = Field(default_factory=list)
    first_seen: Optional[str] = None
    associations: list[str] = Field(default_factory=list)

    def to_json(self) -> str:
        """Serialise with camelCase field names."""
        return self.model_dump_json(by_alias=True)


# ---------------------------------------------------------------------------
# Node
# ---------------------------------------------------------------------------


class Node(BaseModel):
    """The record for one observed identity.

    Nodes are owned by a :class:`~airgraph.core.graph.NodeGraph`;
    ``associations`` holds the identity keys of linked nodes, never the
    node objects themselves.

    Attributes:
        identity: Stable deduplication key.
        network_name: Network name carried by the latest probe; cleared
            after a probe association is recorded.
        hardware_addresses: BSSIDs claimed by this identity.
        classification: Frame type that created the node (``None`` for
            skeleton nodes).
        transmitter_addresses: Transmitter addresses seen under this identity.
        times_seen: Observations folded into this node (0 for skeletons).
        signal_history: Most recent signal-strength samples.
        observation_history: Most recent observation timestamps.
        first_seen: Timestamp of the first observation.
        associations: Identities of probe-linked nodes, insertion-ordered.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    identity: str
    network_name: Optional[str] = None
    hardware_addresses: list[str] = Field(default_factory=list)
    classification: Optional[FrameClass] = None
    transmitter_addresses: list[str] = Field(default_factory=list)
    times_seen: int = Field(default=0, ge=0)
    signal_history: BoundedHistory = Field(
        default_factory=lambda: BoundedHistory(DEFAULT_BUFFER_SIZE)
    )
    observation_history: BoundedHistory = Field(
        default_factory=lambda: BoundedHistory(DEFAULT_BUFFER_SIZE)
    )
    first_seen: Optional[str] = None
    associations: list[str] = Field(default_factory=list)

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def from_observation(
        cls, observation: FrameObservation, capacity: int = DEFAULT_BUFFER_SIZE
    ) -> Node:
        """Build a fully populated candidate node from one observation.

        Histories start empty at *capacity* and immediately receive the
        observation's signal strength and timestamp, so both hold exactly
        one sample.
        """
        node = cls(
            identity=observation.resolve_identity(),
            network_name=observation.network_name,
            hardware_addresses=[observation.hardware_address],
            classification=observation.classification,
            transmitter_addresses=[observation.transmitter_address],
            times_seen=1,
            signal_history=BoundedHistory(capacity),
            observation_history=BoundedHistory(capacity),
            first_seen=observation.timestamp,
        )
        node.signal_history.push(observation.signal_strength)
        node.observation_history.push(observation.timestamp)
        return node

    @classmethod
    def skeleton(cls, identity: str, capacity: int = DEFAULT_BUFFER_SIZE) -> Node:
        """Create an association target with no observation data of its own."""
        return cls(
            identity=identity,
            signal_history=BoundedHistory(capacity),
            observation_history=BoundedHistory(capacity),
        )

    # ------------------------------------------------------------------ #
    #  Mutation
    # ------------------------------------------------------------------ #

    def record_sighting(self, observation: FrameObservation) -> None:
        """Fold a repeat observation of this identity into the statistics.

        Only the counter and the two histories change; descriptive fields
        keep the values set when the node was created, so a skeleton that
        is later observed directly stays without classification,
        addresses or ``first_seen``.
        """
        self.times_seen += 1
        self.signal_history.push(observation.signal_strength)
        self.observation_history.push(observation.timestamp)

    def add_association(self, identity: str) -> bool:
        """Link *identity* to this node; returns ``False`` if already linked."""
        if identity in self.associations:
            return False
        self.associations.append(identity)
        return True

    # ------------------------------------------------------------------ #
    #  Views
    # ------------------------------------------------------------------ #

    @property
    def is_skeleton(self) -> bool:
        """True until the node's identity has been observed directly."""
        return self.times_seen == 0

    @property
    def last_signal(self) -> Optional[int]:
        """Most recent signal-strength sample."""
        return self.signal_history.latest

    @property
    def last_seen(self) -> Optional[str]:
        """Most recent observation timestamp."""
        return self.observation_history.latest

    def snapshot(self) -> NodeRecord:
        """Capture the node's current state as a detached record."""
        return NodeRecord(
            identity=self.identity,
            network_name=self.network_name,
            hardware_addresses=list(self.hardware_addresses),
            classification=self.classification,
            transmitter_addresses=list(self.transmitter_addresses),
            times_seen=self.times_seen,
            signal_history=self.signal_history.snapshot(),
            observation_history=self.observation_history.snapshot(),
            first_seen=self.first_seen,
            associations=list(self.associations),
        )
