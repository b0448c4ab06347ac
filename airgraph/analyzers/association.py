"""
Airgraph Association Analyzer
==============================

Read-only analysis of the probe association graph using NetworkX.

The node graph is projected onto an undirected :class:`networkx.Graph`
whose vertices are node identities and whose edges are probe
associations.  From it the analyzer reports:
    - Most-probed networks (degree of network-side vertices).
    - Devices probing the most networks (degree of probing vertices).
    - Connected components, i.e. clusters of devices sharing probed
      networks.

References:
    - Newman, M. E. J. (2010). Networks: An Introduction.
      Oxford University Press.
    - Cunche, M. (2014). I know your MAC address: targeted tracking of
      individual using Wi-Fi. Journal of Computer Virology and Hacking
      Techniques, 10(4), 219-227.
"""

from __future__ import annotations

import networkx as nx
from pydantic import BaseModel, Field

from shared.logger import AirLogger

from airgraph.core.graph import NodeGraph
from airgraph.core.models import FrameClass

logger = AirLogger("airgraph.analyzers.association")


class RankedNode(BaseModel):
    """An identity paired with its association degree."""

    identity: str
    degree: int
    times_seen: int = 0
    skeleton: bool = False


class AssociationAnalysis(BaseModel):
    """Result of :meth:`AssociationAnalyzer.analyze`.

    Attributes:
        top_networks: Networks probed by the most devices.
        top_devices: Devices probing the most networks.
        components: Connected components with at least one edge.
        largest_component: Size of the largest such component.
        isolated: Nodes with no associations.
        edges: Association pairs as ``(device, network)``.
    """

    top_networks: list[RankedNode] = Field(default_factory=list)
    top_devices: list[RankedNode] = Field(default_factory=list)
    components: int = 0
    largest_component: int = 0
    isolated: int = 0
    edges: list[tuple[str, str]] = Field(default_factory=list)


class AssociationAnalyzer:
    """Summarises who probed for what.

    Usage::

        analyzer = AssociationAnalyzer(top_n=5)
        analysis = analyzer.analyze(graph)
        analysis.top_networks[0].identity
    """

    def __init__(self, top_n: int = 10) -> None:
        """Initialise the analyzer.

        Args:
            top_n: Number of entries kept in each ranking.
        """
        self.top_n: int = top_n

    def build_graph(self, graph: NodeGraph) -> nx.Graph:
        """Project the node graph onto an undirected NetworkX graph."""
        g = nx.Graph()
        for node in graph:
            g.add_node(
                node.identity,
                classification=node.classification.value if node.classification else None,
                times_seen=node.times_seen,
                skeleton=node.is_skeleton,
            )
        for node in graph:
            for other in node.associations:
                g.add_edge(node.identity, other)
        return g

    def analyze(self, graph: NodeGraph) -> AssociationAnalysis:
        """Rank probing devices and probed networks."""
        g = self.build_graph(graph)

        devices: list[RankedNode] = []
        networks: list[RankedNode] = []
        for identity, data in g.nodes(data=True):
            degree = g.degree(identity)
            if degree == 0:
                continue
            ranked = RankedNode(
                identity=identity,
                degree=degree,
                times_seen=data.get("times_seen", 0),
                skeleton=data.get("skeleton", False),
            )
            if data.get("classification") == FrameClass.PROBE_REQUEST.value:
                devices.append(ranked)
            else:
                networks.append(ranked)

        def _rank(items: list[RankedNode]) -> list[RankedNode]:
            return sorted(items, key=lambda r: (-r.degree, -r.times_seen, r.identity))[
                : self.top_n
            ]

        linked = [c for c in nx.connected_components(g) if len(c) > 1]
        edges = [self._orient(g, a, b) for a, b in g.edges()]

        analysis = AssociationAnalysis(
            top_networks=_rank(networks),
            top_devices=_rank(devices),
            components=len(linked),
            largest_component=max((len(c) for c in linked), default=0),
            isolated=sum(1 for _, degree in g.degree() if degree == 0),
            edges=sorted(edges),
        )

        logger.debug(
            f"Association graph: {g.number_of_nodes()} vertices, "
            f"{g.number_of_edges()} edges, {analysis.components} components"
        )
        return analysis

    @staticmethod
    def _orient(g: nx.Graph, a: str, b: str) -> tuple[str, str]:
        """Order an edge as ``(probing device, network)`` where possible."""
        probe = FrameClass.PROBE_REQUEST.value
        a_probe = g.nodes[a].get("classification") == probe
        b_probe = g.nodes[b].get("classification") == probe
        if b_probe and not a_probe:
            return (b, a)
        return (a, b)
