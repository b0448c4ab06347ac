"""Tests for node graph upsert and probe association."""

from __future__ import annotations

import pytest

from shared.config import GraphConfig

from airgraph.core.graph import NodeGraph
from airgraph.core.models import FrameClass, FrameObservation, RecordEmissionError

from conftest import FailingSink, RecordingSink, beacon, probe


def _assert_closed_and_symmetric(graph: NodeGraph) -> None:
    for node in graph:
        for other in node.associations:
            assert other in graph
            assert node.identity in graph.get(other).associations
        assert len(node.associations) == len(set(node.associations))


def test_cafe_scenario(sink: RecordingSink) -> None:
    """A beacon plus two identical probes yields two mutually linked nodes."""
    graph = NodeGraph(sink=sink)
    graph.upsert(beacon("Cafe"))
    graph.upsert(probe("AA:BB", "Cafe"))
    graph.upsert(probe("AA:BB", "Cafe"))

    assert sorted(graph.identities()) == ["AA:BB", "Cafe"]
    assert graph.get("Cafe").times_seen == 1
    assert graph.get("AA:BB").times_seen == 2
    assert graph.get("Cafe").associations == ["AA:BB"]
    assert graph.get("AA:BB").associations == ["Cafe"]
    assert graph.stats().associations == 1
    _assert_closed_and_symmetric(graph)


def test_upsert_returns_true() -> None:
    """Upsert reports success for ordinary observations."""
    assert NodeGraph().upsert(beacon("Cafe")) is True


def test_repeat_observations_count(sink: RecordingSink) -> None:
    """k observations of one identity give times_seen == k."""
    graph = NodeGraph(sink=sink)
    for i in range(5):
        graph.upsert(beacon("Cafe", timestamp=f"t{i}"))

    assert len(graph) == 1
    assert graph.get("Cafe").times_seen == 5
    assert graph.observations == 5


def test_histories_bounded_by_config(small_config: GraphConfig) -> None:
    """Histories never grow past the configured buffer size."""
    graph = NodeGraph(small_config)
    for i in range(6):
        graph.upsert(beacon("Cafe", signal=-40 - i, timestamp=f"t{i}"))

    node = graph.get("Cafe")
    assert node.signal_history.snapshot() == [-43, -44, -45]
    assert node.observation_history.snapshot() == ["t3", "t4", "t5"]
    assert node.first_seen == "t0"


def test_probe_to_unseen_network_creates_skeleton() -> None:
    """Probing an unknown network adds a skeleton node linked back."""
    graph = NodeGraph()
    graph.upsert(probe("AA:BB", "Home"))

    skeleton = graph.get("Home")
    assert skeleton is not None
    assert skeleton.is_skeleton
    assert skeleton.times_seen == 0
    assert skeleton.classification is None
    assert skeleton.hardware_addresses == []
    assert skeleton.transmitter_addresses == []
    assert skeleton.first_seen is None
    assert len(skeleton.signal_history) == 0
    assert skeleton.associations == ["AA:BB"]
    _assert_closed_and_symmetric(graph)


def test_beacon_for_skeleton_takes_found_path(sink: RecordingSink) -> None:
    """A later beacon for a skeleton only bumps its counter and histories."""
    graph = NodeGraph(sink=sink)
    graph.upsert(probe("AA:BB", "Home"))
    graph.upsert(beacon("Home", signal=-50, timestamp="t9"))

    node = graph.get("Home")
    assert node.times_seen == 1
    assert node.classification is None
    assert node.first_seen is None
    assert node.hardware_addresses == []
    assert node.signal_history.snapshot() == [-50]
    assert node.associations == ["AA:BB"]

    record = sink.records[-1]
    assert record.identity == "Home"
    assert record.classification is None
    assert record.first_seen is None
    assert record.observation_history == ["t9"]


def test_probe_clears_network_name() -> None:
    """After linking, the probing node no longer carries the probed name."""
    graph = NodeGraph()
    graph.upsert(probe("AA:BB", "Cafe"))

    assert graph.get("AA:BB").network_name == ""
    assert graph.get("AA:BB").associations == ["Cafe"]


def test_device_probing_several_networks() -> None:
    """One device accumulates one link per probed network."""
    graph = NodeGraph()
    for name in ("Cafe", "Home", "Office", "Cafe"):
        graph.upsert(probe("AA:BB", name))

    assert graph.get("AA:BB").associations == ["Cafe", "Home", "Office"]
    assert [n.identity for n in graph.associations_of("AA:BB")] == [
        "Cafe",
        "Home",
        "Office",
    ]
    assert graph.stats().associations == 3
    _assert_closed_and_symmetric(graph)


def test_several_devices_probing_one_network() -> None:
    """A network collects a link from every probing device."""
    graph = NodeGraph()
    graph.upsert(beacon("Cafe"))
    for device in ("AA", "BB", "CC"):
        graph.upsert(probe(device, "Cafe"))

    assert graph.get("Cafe").associations == ["AA", "BB", "CC"]
    stats = graph.stats()
    assert stats.beacons == 1
    assert stats.probe_requests == 3
    assert stats.skeletons == 0
    _assert_closed_and_symmetric(graph)


def test_empty_identities_are_tolerated() -> None:
    """Empty transmitter and network names produce degenerate nodes."""
    graph = NodeGraph()
    graph.upsert(FrameObservation(classification=FrameClass.PROBE_REQUEST))
    graph.upsert(FrameObservation(classification=FrameClass.BEACON))

    assert graph.identities() == [""]
    node = graph.get("")
    assert node.times_seen == 2
    assert node.associations == [""]
    assert graph.stats().associations == 1


def test_every_observation_emits_a_record(sink: RecordingSink) -> None:
    """Each observation emits exactly one snapshot of the working node."""
    graph = NodeGraph(sink=sink)
    graph.upsert(beacon("Cafe"))
    graph.upsert(probe("AA:BB", "Cafe"))
    graph.upsert(beacon("Cafe"))

    assert [r.identity for r in sink.records] == ["Cafe", "AA:BB", "Cafe"]
    assert sink.records[0].times_seen == 1
    assert sink.records[0].associations == []
    assert sink.records[1].associations == ["Cafe"]
    assert sink.records[1].network_name == ""
    assert sink.records[2].times_seen == 2
    assert sink.records[2].associations == ["AA:BB"]


def test_emission_failure_keeps_graph_state() -> None:
    """A rejected record surfaces as RecordEmissionError after commit."""
    failing = FailingSink("AA:BB")
    graph = NodeGraph(sink=failing)
    graph.upsert(beacon("Cafe"))

    with pytest.raises(RecordEmissionError) as excinfo:
        graph.upsert(probe("AA:BB", "Cafe"))

    assert excinfo.value.identity == "AA:BB"
    assert graph.get("AA:BB").times_seen == 1
    assert graph.get("Cafe").associations == ["AA:BB"]

    graph.upsert(beacon("Cafe"))
    assert graph.get("Cafe").times_seen == 2
    assert [r.identity for r in failing.accepted] == ["Cafe", "Cafe"]


def test_snapshot_lists_every_node() -> None:
    """Graph snapshot covers skeletons too."""
    graph = NodeGraph()
    graph.upsert(probe("AA:BB", "Home"))

    records = {r.identity: r for r in graph.snapshot()}
    assert set(records) == {"AA:BB", "Home"}
    assert records["Home"].times_seen == 0


def test_debug_flag_does_not_change_results() -> None:
    """Debug logging has no effect on the resulting graph."""
    quiet = NodeGraph(GraphConfig(debug=False))
    loud = NodeGraph(GraphConfig(debug=True))
    for graph in (quiet, loud):
        graph.upsert(beacon("Cafe"))
        graph.upsert(probe("AA:BB", "Cafe"))
        graph.upsert(probe("AA:BB", "Home"))

    assert [r.model_dump() for r in quiet.snapshot()] == [
        r.model_dump() for r in loud.snapshot()
    ]
