"""
Airgraph Frame Adapter
=======================

Maps decoded 802.11 management frames onto :class:`FrameObservation`
records, the only input the node graph accepts.

Two sources are supported:
    - Scapy packets from live capture (RadioTap + Dot11 layers).
    - Plain mappings produced by any other decoder, keyed either by the
      snake_case field names or by the camelCase event names
      (``networkName``, ``hardwareAddress``, ``transmitterAddress``,
      ``signalStrength``).

Field extraction follows the 802.11 management frame layout: addr2 is
the transmitter, addr3 the BSSID, and the SSID travels in information
element 0.

References:
    - IEEE. (2020). IEEE Std 802.11-2020. Section 9.3.3.3: Beacon frame
      format; Section 9.3.3.9: Probe Request frame format.
    - Biondi, P. (2024). Scapy: Packet Manipulation Library.
      https://scapy.net/
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from scapy.layers.dot11 import (  # type: ignore[import-untyped]
    Dot11,
    Dot11Beacon,
    Dot11Elt,
    Dot11ProbeReq,
    RadioTap,
)

from shared.config import GraphConfig
from shared.logger import AirLogger

from airgraph.core.models import (
    INT8_MAX,
    INT8_MIN,
    FrameClass,
    FrameObservation,
)

logger = AirLogger("airgraph.collectors.adapter")


# ---------------------------------------------------------------------------
# Classification aliases accepted from external decoders
# ---------------------------------------------------------------------------

CLASSIFICATION_ALIASES: dict[str, FrameClass] = {
    "beacon": FrameClass.BEACON,
    "mgmtbeacon": FrameClass.BEACON,
    "proberequest": FrameClass.PROBE_REQUEST,
    "probe_request": FrameClass.PROBE_REQUEST,
    "probereq": FrameClass.PROBE_REQUEST,
    "mgmtprobereq": FrameClass.PROBE_REQUEST,
    "other": FrameClass.OTHER,
}

_EVENT_KEYS: dict[str, tuple[str, ...]] = {
    "timestamp": ("timestamp",),
    "network_name": ("network_name", "networkName", "ssid"),
    "hardware_address": ("hardware_address", "hardwareAddress", "bssid"),
    "transmitter_address": ("transmitter_address", "transmitterAddress", "transmitter"),
    "classification": ("classification", "ptype"),
    "signal_strength": ("signal_strength", "signalStrength", "sigStrength"),
}

_SSID_ELEMENT_ID = 0


def parse_classification(value: Any) -> FrameClass:
    """Map a classification label onto :class:`FrameClass`.

    Unknown or empty labels classify as :attr:`FrameClass.OTHER`.
    """
    if isinstance(value, FrameClass):
        return value
    if value is None:
        return FrameClass.OTHER
    return CLASSIFICATION_ALIASES.get(str(value).strip().lower(), FrameClass.OTHER)


def clamp_int8(value: Any) -> int:
    """Coerce a signal reading into the signed 8-bit range."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return max(INT8_MIN, min(INT8_MAX, number))


def decode_ssid(raw: bytes | str | None) -> str:
    """Decode an SSID element payload, dropping NUL padding."""
    if raw is None:
        return ""
    if isinstance(raw, str):
        return raw.strip("\x00")
    return raw.decode("utf-8", errors="replace").strip("\x00")


def format_timestamp(epoch: float | None) -> str:
    """Render a capture time as ISO-8601 UTC; empty for unknown times."""
    if epoch is None:
        return ""
    return datetime.fromtimestamp(float(epoch), tz=timezone.utc).isoformat()


class FrameAdapter:
    """Converts decoded frames into :class:`FrameObservation` records.

    The adapter never touches the graph; it only shapes input.

    Usage::

        adapter = FrameAdapter(GraphConfig(debug=True))
        observation = adapter.from_packet(packet)
        observation = adapter.from_event({"classification": "Beacon",
                                          "networkName": "Cafe"})
    """

    def __init__(self, config: Optional[GraphConfig] = None) -> None:
        self._config = config or GraphConfig()

    # ------------------------------------------------------------------ #
    #  Mapping events
    # ------------------------------------------------------------------ #

    def from_event(self, event: Mapping[str, Any]) -> FrameObservation:
        """Build an observation from a decoded-frame mapping.

        Missing fields default to empty strings and a zero signal.
        """
        values: dict[str, Any] = {}
        for field_name, keys in _EVENT_KEYS.items():
            for key in keys:
                if key in event and event[key] is not None:
                    values[field_name] = event[key]
                    break

        observation = FrameObservation(
            timestamp=str(values.get("timestamp", "")),
            network_name=str(values.get("network_name", "")),
            hardware_address=str(values.get("hardware_address", "")),
            transmitter_address=str(values.get("transmitter_address", "")),
            classification=parse_classification(values.get("classification")),
            signal_strength=clamp_int8(values.get("signal_strength", 0)),
        )
        self._log(observation)
        return observation

    # ------------------------------------------------------------------ #
    #  Scapy packets
    # ------------------------------------------------------------------ #

    def from_packet(self, packet: Any) -> Optional[FrameObservation]:
        """Build an observation from a captured 802.11 frame.

        Returns:
            The observation, or ``None`` when the packet carries no
            802.11 header or is not a management frame.
        """
        if not packet.haslayer(Dot11):
            return None

        dot11 = packet.getlayer(Dot11)
        if dot11.type != 0:
            return None

        if packet.haslayer(Dot11Beacon):
            classification = FrameClass.BEACON
        elif packet.haslayer(Dot11ProbeReq):
            classification = FrameClass.PROBE_REQUEST
        else:
            classification = FrameClass.OTHER

        signal = 0
        if packet.haslayer(RadioTap):
            radiotap = packet.getlayer(RadioTap)
            reading = getattr(radiotap, "dBm_AntSignal", None)
            if reading is not None:
                signal = clamp_int8(reading)

        observation = FrameObservation(
            timestamp=format_timestamp(getattr(packet, "time", None)),
            network_name=self._extract_ssid(packet),
            hardware_address=(dot11.addr3 or "").upper(),
            transmitter_address=(dot11.addr2 or "").upper(),
            classification=classification,
            signal_strength=signal,
        )
        self._log(observation)
        return observation

    @staticmethod
    def _extract_ssid(packet: Any) -> str:
        """Return the first SSID information element of *packet*."""
        elt = packet.getlayer(Dot11Elt)
        while elt is not None:
            if elt.ID == _SSID_ELEMENT_ID:
                return decode_ssid(getattr(elt, "info", b""))
            elt = elt.payload.getlayer(Dot11Elt) if elt.payload else None
        return ""

    def _log(self, observation: FrameObservation) -> None:
        if self._config.debug:
            logger.debug(
                f"{observation.classification.value} frame resolves to identity "
                f"{observation.resolve_identity()!r}",
                network_name=observation.network_name,
                transmitter=observation.transmitter_address,
            )
