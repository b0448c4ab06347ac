"""Tests for mapping events and scapy packets onto observations."""

from __future__ import annotations

import pytest
from scapy.layers.dot11 import (
    Dot11,
    Dot11Beacon,
    Dot11Elt,
    Dot11ProbeReq,
    RadioTap,
)
from scapy.layers.inet import IP

from airgraph.collectors.frame_adapter import (
    FrameAdapter,
    clamp_int8,
    decode_ssid,
    format_timestamp,
    parse_classification,
)
from airgraph.core.models import FrameClass


@pytest.fixture
def adapter() -> FrameAdapter:
    return FrameAdapter()


def _probe_packet(ssid: bytes = b"Cafe", signal: int = -42):
    pkt = (
        RadioTap(present="dBm_AntSignal", dBm_AntSignal=signal)
        / Dot11(
            type=0,
            subtype=4,
            addr1="ff:ff:ff:ff:ff:ff",
            addr2="aa:bb:cc:dd:ee:01",
            addr3="ff:ff:ff:ff:ff:ff",
        )
        / Dot11ProbeReq()
        / Dot11Elt(ID=0, info=ssid)
    )
    pkt.time = 1700000000.0
    return pkt


def _beacon_packet(ssid: bytes = b"Cafe"):
    pkt = (
        RadioTap()
        / Dot11(
            type=0,
            subtype=8,
            addr1="ff:ff:ff:ff:ff:ff",
            addr2="00:11:22:33:44:55",
            addr3="00:11:22:33:44:55",
        )
        / Dot11Beacon()
        / Dot11Elt(ID=1, info=b"\x82\x84")
        / Dot11Elt(ID=0, info=ssid)
    )
    pkt.time = 1700000000.0
    return pkt


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "label, expected",
    [
        ("Beacon", FrameClass.BEACON),
        ("MgmtBeacon", FrameClass.BEACON),
        ("ProbeRequest", FrameClass.PROBE_REQUEST),
        ("MgmtProbeReq", FrameClass.PROBE_REQUEST),
        ("probe_request", FrameClass.PROBE_REQUEST),
        ("Deauth", FrameClass.OTHER),
        ("", FrameClass.OTHER),
        (None, FrameClass.OTHER),
    ],
)
def test_parse_classification(label, expected) -> None:
    """Known labels map onto FrameClass; everything else is Other."""
    assert parse_classification(label) is expected


def test_clamp_int8() -> None:
    """Signal readings are clamped to the signed 8-bit range."""
    assert clamp_int8(-42) == -42
    assert clamp_int8("-61") == -61
    assert clamp_int8(-300) == -128
    assert clamp_int8(300) == 127
    assert clamp_int8("n/a") == 0
    assert clamp_int8(None) == 0


def test_decode_ssid() -> None:
    """SSID payloads are decoded and stripped of NUL padding."""
    assert decode_ssid(b"Cafe\x00\x00") == "Cafe"
    assert decode_ssid(None) == ""
    assert decode_ssid("Home") == "Home"


def test_format_timestamp() -> None:
    """Capture times render as ISO-8601 UTC."""
    assert format_timestamp(1700000000) == "2023-11-14T22:13:20+00:00"
    assert format_timestamp(None) == ""


# ---------------------------------------------------------------------------
# Mapping events
# ---------------------------------------------------------------------------


def test_from_event_camel_case(adapter: FrameAdapter) -> None:
    """camelCase event keys populate every field."""
    obs = adapter.from_event(
        {
            "timestamp": "t0",
            "networkName": "Cafe",
            "hardwareAddress": "00:11",
            "transmitterAddress": "AA:BB",
            "classification": "ProbeRequest",
            "signalStrength": -50,
        }
    )

    assert obs.timestamp == "t0"
    assert obs.network_name == "Cafe"
    assert obs.hardware_address == "00:11"
    assert obs.transmitter_address == "AA:BB"
    assert obs.classification is FrameClass.PROBE_REQUEST
    assert obs.signal_strength == -50
    assert obs.resolve_identity() == "AA:BB"


def test_from_event_snake_case_and_aliases(adapter: FrameAdapter) -> None:
    """snake_case keys and decoder-style labels are accepted."""
    obs = adapter.from_event(
        {
            "network_name": "Cafe",
            "bssid": "00:11",
            "ptype": "MgmtBeacon",
            "sigStrength": -500,
        }
    )

    assert obs.network_name == "Cafe"
    assert obs.hardware_address == "00:11"
    assert obs.classification is FrameClass.BEACON
    assert obs.signal_strength == -128


def test_from_event_empty(adapter: FrameAdapter) -> None:
    """An empty event yields an empty Other observation."""
    obs = adapter.from_event({})

    assert obs.classification is FrameClass.OTHER
    assert obs.network_name == ""
    assert obs.signal_strength == 0
    assert obs.resolve_identity() == ""


# ---------------------------------------------------------------------------
# Scapy packets
# ---------------------------------------------------------------------------


def test_from_packet_probe(adapter: FrameAdapter) -> None:
    """Probe requests key on the upper-cased transmitter address."""
    obs = adapter.from_packet(_probe_packet())

    assert obs is not None
    assert obs.classification is FrameClass.PROBE_REQUEST
    assert obs.transmitter_address == "AA:BB:CC:DD:EE:01"
    assert obs.hardware_address == "FF:FF:FF:FF:FF:FF"
    assert obs.network_name == "Cafe"
    assert obs.signal_strength == -42
    assert obs.timestamp == "2023-11-14T22:13:20+00:00"
    assert obs.resolve_identity() == "AA:BB:CC:DD:EE:01"


def test_from_packet_beacon_skips_other_elements(adapter: FrameAdapter) -> None:
    """The SSID is found even when it is not the first element."""
    obs = adapter.from_packet(_beacon_packet(b"Office"))

    assert obs is not None
    assert obs.classification is FrameClass.BEACON
    assert obs.network_name == "Office"
    assert obs.hardware_address == "00:11:22:33:44:55"
    assert obs.signal_strength == 0


def test_from_packet_wildcard_probe(adapter: FrameAdapter) -> None:
    """A broadcast probe carries an empty network name."""
    obs = adapter.from_packet(_probe_packet(ssid=b""))

    assert obs is not None
    assert obs.network_name == ""


def test_from_packet_other_management(adapter: FrameAdapter) -> None:
    """Management frames other than beacons and probes are Other."""
    pkt = Dot11(type=0, subtype=12, addr2="aa:aa:aa:aa:aa:aa", addr3="bb:bb:bb:bb:bb:bb")
    obs = adapter.from_packet(pkt)

    assert obs is not None
    assert obs.classification is FrameClass.OTHER
    assert obs.timestamp != ""


def test_from_packet_ignores_non_management(adapter: FrameAdapter) -> None:
    """Data frames and non-802.11 packets produce no observation."""
    assert adapter.from_packet(Dot11(type=2, subtype=0)) is None
    assert adapter.from_packet(IP(dst="10.0.0.1")) is None
