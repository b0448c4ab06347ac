"""
Airgraph WiFi Capture
======================

Passive 802.11 capture on a single monitor-mode interface using Scapy's
:class:`AsyncSniffer`.

Scapy invokes the per-packet callback on its own sniffing thread.  The
callback only decodes the frame through :class:`FrameAdapter` and hands
the resulting observation to the asyncio loop with
``loop.call_soon_threadsafe``; it never touches the node graph.

References:
    - Biondi, P. (2024). Scapy: Packet Manipulation Library.
      https://scapy.net/
    - IEEE. (2020). IEEE Std 802.11-2020. Section 11.1.3: Scanning.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Callable, Optional

from scapy.error import Scapy_Exception  # type: ignore[import-untyped]
from scapy.sendrecv import AsyncSniffer  # type: ignore[import-untyped]

from shared.logger import AirLogger

from airgraph.collectors.frame_adapter import FrameAdapter
from airgraph.core.models import CaptureError, FrameObservation

logger = AirLogger("airgraph.collectors.wifi")

# Management frames only (type 0).
MANAGEMENT_FILTER = "type mgt"

DEFAULT_STARTUP_TIMEOUT = 5.0
_READY_POLL_INTERVAL = 0.01

# Raised by AsyncSniffer for missing interfaces, socket failures and
# stop() on a sniffer whose thread already died.
_SNIFFER_ERRORS = (OSError, ValueError, Scapy_Exception)


class WiFiCapture:
    """Live management-frame capture feeding an asyncio queue.

    Usage::

        capture = WiFiCapture("wlan0mon", FrameAdapter(config))
        capture.start(loop, queue.put_nowait)
        await capture.wait_ready()
        await asyncio.sleep(30)
        capture.stop()
    """

    def __init__(
        self,
        interface: str,
        adapter: FrameAdapter,
        *,
        bpf_filter: Optional[str] = MANAGEMENT_FILTER,
        sniffer_factory: Callable[..., Any] = AsyncSniffer,
        startup_timeout: float = DEFAULT_STARTUP_TIMEOUT,
    ) -> None:
        self._interface = interface
        self._adapter = adapter
        self._bpf_filter = bpf_filter
        self._sniffer_factory = sniffer_factory
        self._startup_timeout = startup_timeout
        self._sniffer: Any = None
        self._started = threading.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._deliver: Optional[Callable[[FrameObservation], None]] = None
        self._frames = 0
        self._dropped = 0

    @property
    def interface(self) -> str:
        """Interface being sniffed."""
        return self._interface

    @property
    def frames(self) -> int:
        """Management frames decoded so far."""
        return self._frames

    @property
    def dropped(self) -> int:
        """Frames that could not be decoded."""
        return self._dropped

    def start(
        self,
        loop: asyncio.AbstractEventLoop,
        deliver: Callable[[FrameObservation], None],
    ) -> None:
        """Start sniffing; *deliver* is called on *loop* per observation.

        The sniffer opens its sockets on its own thread, so a bad
        interface only shows up later; await :meth:`wait_ready` after
        this call.

        Raises:
            CaptureError: If the interface cannot be opened.
        """
        self._loop = loop
        self._deliver = deliver
        self._started.clear()

        logger.info(f"Starting capture on {self._interface}")
        try:
            self._sniffer = self._sniffer_factory(
                iface=self._interface,
                prn=self._on_packet,
                store=False,
                filter=self._bpf_filter,
                monitor=True,
                started_callback=self._started.set,
            )
            self._sniffer.start()
        except _SNIFFER_ERRORS as exc:
            raise self._capture_error(exc) from exc

    async def wait_ready(self) -> None:
        """Wait until the sniffer thread has opened the interface.

        Raises:
            CaptureError: If the sniffer thread failed or did not come up
                within ``startup_timeout`` seconds.
        """
        if self._sniffer is None:
            return

        deadline = asyncio.get_running_loop().time() + self._startup_timeout
        while not self._started.is_set():
            exc = getattr(self._sniffer, "exception", None)
            if exc is not None:
                raise self._capture_error(exc) from exc
            if asyncio.get_running_loop().time() >= deadline:
                raise CaptureError(
                    f"Capture on {self._interface} did not start within "
                    f"{self._startup_timeout:g}s"
                )
            await asyncio.sleep(_READY_POLL_INTERVAL)
        logger.debug(f"Sniffer on {self._interface} is running")

    def stop(self) -> None:
        """Stop sniffing.  Safe to call when not running.

        Raises:
            CaptureError: If the sniffer thread died with an error.
        """
        if self._sniffer is None:
            return
        sniffer, self._sniffer = self._sniffer, None
        logger.info(
            f"Capture on {self._interface} stopped. "
            f"Frames: {self._frames}, undecodable: {self._dropped}"
        )

        try:
            if getattr(sniffer, "running", True):
                sniffer.stop()
        except _SNIFFER_ERRORS as exc:
            raise self._capture_error(exc) from exc

        exc = getattr(sniffer, "exception", None)
        if exc is not None:
            raise self._capture_error(exc) from exc

    def _capture_error(self, exc: BaseException) -> CaptureError:
        if isinstance(exc, CaptureError):
            return exc
        if isinstance(exc, PermissionError):
            return CaptureError(
                f"Permission denied opening {self._interface}; "
                "capture requires root privileges and monitor mode"
            )
        return CaptureError(f"Cannot open interface {self._interface}: {exc}")

    def _on_packet(self, packet: Any) -> None:
        """Sniffer-thread callback: decode and hand off to the loop."""
        try:
            observation = self._adapter.from_packet(packet)
        except (AttributeError, ValueError, UnicodeError) as exc:
            self._dropped += 1
            logger.warning(f"Undecodable frame skipped: {exc}")
            return

        if observation is None or self._loop is None or self._deliver is None:
            return

        self._frames += 1
        self._loop.call_soon_threadsafe(self._deliver, observation)
