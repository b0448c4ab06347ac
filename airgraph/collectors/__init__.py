"""
Airgraph Collectors
====================

Modules:
    frame_adapter  -- Decoded frame to observation mapping
    wifi_capture   -- Scapy monitor-mode capture
"""

from airgraph.collectors.frame_adapter import FrameAdapter
from airgraph.collectors.wifi_capture import WiFiCapture

__all__ = [
    "FrameAdapter",
    "WiFiCapture",
]
