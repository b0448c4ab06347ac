"""
Airgraph Node Graph
====================

Keyed collection of :class:`Node` records plus the upsert and
association algorithm that turns a stream of management-frame
observations into a device/network graph.

Per observation:
    1. Resolve the identity and create or update its node.
    2. For probe requests, link the probing device and the probed
       network in both directions, creating a skeleton node for a
       network that has never beaconed.
    3. Emit a snapshot of the updated node to the persistence sink.

Invariants:
    - Every identity named in any node's ``associations`` is a key of
      the graph.
    - Association links are symmetric and never duplicated.

The graph has no internal locking; all mutation must come from a single
consumer (see :class:`~airgraph.core.engine.AirgraphEngine`).

References:
    - Vanhoef, M., et al. (2016). Why MAC Address Randomization is
      Not Enough: An Analysis of Wi-Fi Probe Requests. AsiaCCS.
    - Newman, M. E. J. (2010). Networks: An Introduction.
      Oxford University Press.
"""

from __future__ import annotations

from typing import Iterator, Optional

from pydantic import BaseModel, Field

from shared.config import GraphConfig
from shared.logger import AirLogger

from airgraph.core.models import (
    FrameClass,
    FrameObservation,
    Node,
    NodeRecord,
    RecordEmissionError,
    RecordSerializationError,
)
from airgraph.core.sink import NodeSink, NullSink

logger = AirLogger("airgraph.core.graph")


class GraphStats(BaseModel):
    """Point-in-time counters describing a :class:`NodeGraph`.

    Attributes:
        nodes: Total nodes, skeletons included.
        beacons: Nodes created by beacon frames.
        probe_requests: Nodes created by probe requests.
        other: Nodes created by other frame types.
        skeletons: Nodes never observed directly.
        associations: Undirected association links.
        observations: Observations processed by the graph.
    """

    nodes: int = 0
    beacons: int = 0
    probe_requests: int = 0
    other: int = 0
    skeletons: int = 0
    associations: int = 0
    observations: int = 0
    by_classification: dict[str, int] = Field(default_factory=dict)


class NodeGraph:
    """Owning map from identity to :class:`Node` with probe associations.

    Usage::

        graph = NodeGraph(GraphConfig(buffer_size=5), sink=JsonLinesSink("db"))
        graph.upsert(FrameObservation(
            classification=FrameClass.PROBE_REQUEST,
            transmitter_address="AA:BB:CC:DD:EE:FF",
            network_name="Cafe",
        ))
        [n.identity for n in graph.associations_of("Cafe")]
        # ['AA:BB:CC:DD:EE:FF']
    """

    def __init__(
        self,
        config: Optional[GraphConfig] = None,
        sink: Optional[NodeSink] = None,
    ) -> None:
        self._config = config or GraphConfig()
        self._sink = sink or NullSink()
        self._nodes: dict[str, Node] = {}
        self._observations = 0

        if self._config.debug:
            logger.debug(f"Creating node graph (buffer size {self._config.buffer_size})")

    # ------------------------------------------------------------------ #
    #  Upsert
    # ------------------------------------------------------------------ #

    def upsert(self, observation: FrameObservation) -> bool:
        """Fold one observation into the graph.

        Args:
            observation: Decoded management-frame observation.

        Returns:
            ``True`` once the graph has been updated.

        Raises:
            RecordEmissionError: If the sink rejects the node record.  The
                graph update is already committed when this is raised.
        """
        debug = self._config.debug
        candidate = Node.from_observation(observation, self._config.buffer_size)
        self._observations += 1

        node = self._nodes.get(candidate.identity)
        if node is not None:
            node.record_sighting(observation)
            if debug:
                logger.debug(
                    f"Updating node {node.identity!r}, seen {node.times_seen} times "
                    f"on {len(node.transmitter_addresses)} transmitting addresses"
                )
        else:
            node = candidate
            self._nodes[node.identity] = node
            if debug:
                logger.debug(
                    f"New {observation.classification.value} node "
                    f"{node.identity!r} added to graph"
                )

        if node.classification is FrameClass.PROBE_REQUEST:
            self._associate_probe(node, candidate.network_name or "")

        self._emit(node)
        return True

    def _associate_probe(self, node: Node, network_name: str) -> None:
        """Link a probing node and the network it probed, in both directions."""
        debug = self._config.debug

        target = self._nodes.get(network_name)
        if target is None:
            target = Node.skeleton(network_name, self._config.buffer_size)
            self._nodes[network_name] = target
            if debug:
                logger.debug(
                    f"Probe request to undiscovered network {network_name!r}, "
                    "adding skeleton node"
                )

        forward = node.add_association(target.identity)
        backward = target.add_association(node.identity)

        # The probed name survives only as the association.
        node.network_name = ""

        if debug and (forward or backward):
            logger.debug(f"Associated {node.identity!r} with {target.identity!r}")

    def _emit(self, node: Node) -> None:
        record = node.snapshot()
        try:
            self._sink.emit(record)
        except RecordSerializationError as exc:
            raise RecordEmissionError(node.identity, str(exc)) from exc

    # ------------------------------------------------------------------ #
    #  Queries
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> GraphConfig:
        """Configuration the graph was created with."""
        return self._config

    @property
    def observations(self) -> int:
        """Observations processed so far."""
        return self._observations

    def get(self, identity: str) -> Optional[Node]:
        """Return the node for *identity*, or ``None``."""
        return self._nodes.get(identity)

    def identities(self) -> list[str]:
        """All identities in insertion order."""
        return list(self._nodes)

    def associations_of(self, identity: str) -> list[Node]:
        """Resolve the association identities of *identity* to nodes."""
        node = self._nodes.get(identity)
        if node is None:
            return []
        return [self._nodes[key] for key in node.associations]

    def snapshot(self) -> list[NodeRecord]:
        """Detached records for every node in the graph."""
        return [node.snapshot() for node in self._nodes.values()]

    def stats(self) -> GraphStats:
        """Compute summary counters for the current graph."""
        by_class: dict[str, int] = {}
        skeletons = 0
        link_ends = 0
        for node in self._nodes.values():
            if node.is_skeleton:
                skeletons += 1
            else:
                key = node.classification.value if node.classification else "Unknown"
                by_class[key] = by_class.get(key, 0) + 1
            link_ends += sum(1 for key in node.associations if key != node.identity)
            if node.identity in node.associations:
                link_ends += 2

        return GraphStats(
            nodes=len(self._nodes),
            beacons=by_class.get(FrameClass.BEACON.value, 0),
            probe_requests=by_class.get(FrameClass.PROBE_REQUEST.value, 0),
            other=by_class.get(FrameClass.OTHER.value, 0),
            skeletons=skeletons,
            associations=link_ends // 2,
            observations=self._observations,
            by_classification=by_class,
        )

    def __contains__(self, identity: object) -> bool:
        return identity in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))
