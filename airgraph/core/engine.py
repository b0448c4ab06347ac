"""
Airgraph Engine
================

Central orchestration engine for Airgraph.  Coordinates the capture
collaborator, the node graph, the persistence sink and the output
generators.

The engine follows a pipeline architecture:
    1. Collection: capture thread decodes frames into observations.
    2. Hand-off: observations cross into the asyncio loop via a queue.
    3. Graph update: a single consumer task applies every observation
       to the :class:`NodeGraph`, which emits node records to the sink.
    4. Output: console tables and optional JSON report.

Only the consumer task mutates the graph, so no locking is needed
around the upsert-and-associate step.
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Mapping, Optional, Union

from shared.config import AirgraphConfig
from shared.console import AirConsole
from shared.logger import AirLogger
from shared.models import RunSummary

from airgraph.analyzers.association import AssociationAnalyzer
from airgraph.collectors.frame_adapter import FrameAdapter
from airgraph.collectors.wifi_capture import WiFiCapture
from airgraph.core.graph import NodeGraph
from airgraph.core.models import CaptureError, FrameObservation, RecordEmissionError
from airgraph.core.sink import NodeSink, NullSink
from airgraph.output.console import AirgraphConsoleOutput
from airgraph.output.report import AirgraphReportGenerator

logger = AirLogger("airgraph.core.engine")

ObservationInput = Union[FrameObservation, Mapping[str, Any]]


class AirgraphEngine:
    """Owns the node graph and the single consumer that mutates it.

    Usage::

        engine = AirgraphEngine(config, sink=JsonLinesSink("airgraph-db"))
        summary = await engine.capture("wlan0mon", duration=30)
        summary = await engine.ingest(events)
    """

    def __init__(
        self,
        config: Optional[AirgraphConfig] = None,
        console: Optional[AirConsole] = None,
        sink: Optional[NodeSink] = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Airgraph configuration. Uses defaults if None.
            console: AirConsole for output. Creates new if None.
            sink: Destination for node records. Discards them if None.
        """
        self._config = config or AirgraphConfig()
        self._console = console or AirConsole()
        self._output = AirgraphConsoleOutput(self._console)
        self._sink = sink or NullSink()

        self._adapter = FrameAdapter(self._config.graph)
        self._graph = NodeGraph(self._config.graph, self._sink)
        self._analyzer = AssociationAnalyzer()
        self._report_gen = AirgraphReportGenerator()

        self._emission_failures = 0
        self._queue_overflows = 0

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def graph(self) -> NodeGraph:
        """The node graph owned by this engine."""
        return self._graph

    @property
    def adapter(self) -> FrameAdapter:
        """The ingestion adapter used for captured and mapped frames."""
        return self._adapter

    @property
    def emission_failures(self) -> int:
        """Node records the sink has rejected so far."""
        return self._emission_failures

    # ------------------------------------------------------------------ #
    #  Live capture
    # ------------------------------------------------------------------ #

    async def capture(
        self,
        interface: Optional[str] = None,
        duration: Optional[int] = None,
        output_path: Optional[str] = None,
        capture: Optional[WiFiCapture] = None,
    ) -> RunSummary:
        """Capture management frames and fold them into the graph.

        Args:
            interface: Monitor-mode interface. Defaults to the configured one.
            duration: Capture length in seconds. Defaults to the configured one.
            output_path: Optional JSON report path.
            capture: Pre-built capture collaborator (defaults to a
                :class:`WiFiCapture` on *interface*).

        Returns:
            RunSummary for the capture.

        Raises:
            CaptureError: If the interface cannot be opened or the sniffer
                thread fails.
        """
        interface = interface or self._config.graph.interface
        duration = duration if duration is not None else self._config.graph.capture_duration
        summary = RunSummary(target=f"wifi://{interface}")
        observed_before = self._graph.observations
        failures_before = self._emission_failures

        self._output.display_banner()
        self._console.info(f"Starting capture on {interface} for {duration}s")

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[Optional[FrameObservation]] = asyncio.Queue(
            maxsize=self._config.graph.queue_size
        )
        consumer = asyncio.create_task(self._consume(queue))
        capture = capture or WiFiCapture(interface, self._adapter)

        with logger.operation("capture"):
            try:
                try:
                    capture.start(loop, lambda obs: self._enqueue(queue, obs))
                    await capture.wait_ready()
                    with self._console.status(f"Capturing on {interface}..."):
                        await asyncio.sleep(duration)
                finally:
                    try:
                        capture.stop()
                    finally:
                        # Let callbacks already scheduled by the sniffer thread land.
                        await asyncio.sleep(0)
                        await queue.put(None)
                        await consumer
            except CaptureError as exc:
                logger.error(f"Capture failed: {exc}")
                raise

        summary.metadata = {
            "interface": interface,
            "duration": duration,
            "frames": capture.frames,
            "undecodable_frames": capture.dropped,
            "queue_overflows": self._queue_overflows,
        }
        return self._finish(summary, observed_before, failures_before, output_path)

    # ------------------------------------------------------------------ #
    #  Event ingestion
    # ------------------------------------------------------------------ #

    async def ingest(
        self,
        observations: Iterable[ObservationInput],
        target: str = "events://local",
        output_path: Optional[str] = None,
        display: bool = False,
    ) -> RunSummary:
        """Feed already-decoded observations through the consumer path.

        Mappings are converted with :meth:`FrameAdapter.from_event`.
        """
        summary = RunSummary(target=target)
        observed_before = self._graph.observations
        failures_before = self._emission_failures

        queue: asyncio.Queue[Optional[FrameObservation]] = asyncio.Queue(
            maxsize=self._config.graph.queue_size
        )
        consumer = asyncio.create_task(self._consume(queue))

        with logger.operation("ingest"):
            try:
                for item in observations:
                    if not isinstance(item, FrameObservation):
                        item = self._adapter.from_event(item)
                    await queue.put(item)
            finally:
                await queue.put(None)
                await consumer

        return self._finish(
            summary, observed_before, failures_before, output_path, display=display
        )

    # ------------------------------------------------------------------ #
    #  Consumer
    # ------------------------------------------------------------------ #

    def _enqueue(
        self,
        queue: asyncio.Queue[Optional[FrameObservation]],
        observation: FrameObservation,
    ) -> None:
        try:
            queue.put_nowait(observation)
        except asyncio.QueueFull:
            self._queue_overflows += 1
            logger.warning(
                "Observation queue full; dropping frame",
                identity=observation.resolve_identity(),
            )

    async def _consume(
        self, queue: asyncio.Queue[Optional[FrameObservation]]
    ) -> None:
        """Apply queued observations to the graph until a ``None`` sentinel."""
        while True:
            observation = await queue.get()
            try:
                if observation is None:
                    return
                self._apply(observation)
            finally:
                queue.task_done()

    def _apply(self, observation: FrameObservation) -> None:
        try:
            self._graph.upsert(observation)
        except RecordEmissionError as exc:
            self._emission_failures += 1
            logger.error(str(exc), identity=exc.identity)

    # ------------------------------------------------------------------ #
    #  Results
    # ------------------------------------------------------------------ #

    def _finish(
        self,
        summary: RunSummary,
        observed_before: int,
        failures_before: int,
        output_path: Optional[str],
        display: bool = True,
    ) -> RunSummary:
        summary.observations = self._graph.observations - observed_before
        summary.nodes = len(self._graph)
        summary.emission_failures = self._emission_failures - failures_before
        summary.finalize()

        analysis = self._analyzer.analyze(self._graph)

        if display:
            self._output.display_summary(self._graph.stats(), summary)
            self._output.display_nodes(self._graph)
            self._output.display_associations(analysis)

        if output_path:
            try:
                path = self._report_gen.generate_json(
                    summary, output_path, graph=self._graph, analysis=analysis
                )
                self._console.info(f"JSON report: {path}")
            except OSError as exc:
                logger.error(f"JSON report error: {exc}")
                self._console.error(f"Could not write report: {exc}")

        if summary.emission_failures:
            self._console.warning(
                f"{summary.emission_failures} node record(s) failed to persist"
            )

        logger.info(summary.summary)
        return summary
