"""
Airgraph Console Output
========================

Rich-based console output for Airgraph.  Provides formatted tables for
the run summary, the node listing and the probe association rankings.

References:
    - Rich library: https://github.com/Textualize/rich
    - Airgraph Console: shared.console.AirConsole
"""

from __future__ import annotations

from typing import Optional

from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from shared.console import AirConsole
from shared.models import RunSummary

from airgraph.analyzers.association import AssociationAnalysis, RankedNode
from airgraph.analyzers.signal import NO_READING, classify_signal_quality
from airgraph.core.graph import GraphStats, NodeGraph


# ---------------------------------------------------------------------------
# Colour mappings
# ---------------------------------------------------------------------------

_SIGNAL_COLORS: dict[str, str] = {
    "Excellent": "bold bright_green",
    "Good": "bold green",
    "Fair": "bold yellow",
    "Weak": "bold bright_red",
    "Very Weak": "bold red",
}

_CLASS_COLORS: dict[str, str] = {
    "Beacon": "bold bright_cyan",
    "ProbeRequest": "bold bright_magenta",
    "Other": "bold white",
}

_MAX_LISTED_ASSOCIATIONS = 4


class AirgraphConsoleOutput:
    """Rich-based console output for Airgraph results.

    Usage::

        output = AirgraphConsoleOutput()
        output.display_summary(graph.stats(), summary)
        output.display_nodes(graph)
    """

    def __init__(self, console: Optional[AirConsole] = None) -> None:
        """Initialize the console output.

        Args:
            console: AirConsole instance. Creates a new one if None.
        """
        self._console = console or AirConsole()

    def display_banner(self) -> None:
        """Display the Airgraph tool banner."""
        banner_text = """
[bright_cyan]   █████╗ ██╗██████╗  ██████╗ ██████╗  █████╗ ██████╗ ██╗  ██╗
  ██╔══██╗██║██╔══██╗██╔════╝ ██╔══██╗██╔══██╗██╔══██╗██║  ██║
  ███████║██║██████╔╝██║  ███╗██████╔╝███████║██████╔╝███████║
  ██╔══██║██║██╔══██╗██║   ██║██╔══██╗██╔══██║██╔═══╝ ██╔══██║
  ██║  ██║██║██║  ██║╚██████╔╝██║  ██║██║  ██║██║     ██║  ██║
  ╚═╝  ╚═╝╚═╝╚═╝  ╚═╝ ╚═════╝ ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝     ╚═╝  ╚═╝[/bright_cyan]
[bright_magenta]  Probe and beacon association graph[/bright_magenta]
"""
        panel = Panel(
            Align.center(Text.from_markup(banner_text)),
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def display_summary(self, stats: GraphStats, summary: RunSummary) -> None:
        """Display graph counters for a finished run.

        Args:
            stats: Graph counters at the end of the run.
            summary: The run summary.
        """
        self._console.section("Run Summary")

        table = Table(
            title="Graph Summary",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=False,
            padding=(0, 2),
        )
        table.add_column("Metric", style="bold")
        table.add_column("Value", style="bright_white")

        table.add_row("Target", summary.target)
        if summary.duration_seconds is not None:
            table.add_row("Duration", f"{summary.duration_seconds:.1f}s")
        table.add_row("Observations", str(summary.observations))
        table.add_row("Nodes", str(stats.nodes))
        table.add_row("  Beacons", str(stats.beacons))
        table.add_row("  Probe requests", str(stats.probe_requests))
        table.add_row("  Other", str(stats.other))
        table.add_row("  Skeletons", str(stats.skeletons))
        table.add_row("Associations", str(stats.associations))

        if summary.emission_failures:
            table.add_row(
                "[bold red]Emission failures[/bold red]",
                str(summary.emission_failures),
            )

        self._console.rich.print(table)
        self._console.blank()

    def display_nodes(self, graph: NodeGraph) -> None:
        """Display every node in the graph, most-seen first."""
        self._console.section("Nodes")

        if len(graph) == 0:
            self._console.info("No nodes observed")
            return

        table = Table(
            title="Observed Nodes",
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            show_lines=True,
            padding=(0, 1),
        )
        table.add_column("Identity", style="bright_white")
        table.add_column("Type", width=13)
        table.add_column("Hardware", width=19)
        table.add_column("Seen", justify="right", width=6)
        table.add_column("Signal", justify="center", width=10)
        table.add_column("Last Seen")
        table.add_column("Associations", width=36)

        nodes = sorted(graph, key=lambda n: (-n.times_seen, n.identity))
        for node in nodes:
            identity = node.identity or "[dim italic]<empty>[/dim italic]"

            if node.is_skeleton:
                type_str = "[dim]skeleton[/dim]"
            elif node.classification is None:
                type_str = "[dim]unknown[/dim]"
            else:
                color = _CLASS_COLORS.get(node.classification.value, "")
                type_str = f"[{color}]{node.classification.value}[/{color}]"

            hardware = node.hardware_addresses[0] if node.hardware_addresses else ""

            signal = node.last_signal
            if signal is None or signal == NO_READING:
                signal_str = "[dim]-[/dim]"
            else:
                quality = classify_signal_quality(signal)
                sig_color = _SIGNAL_COLORS.get(quality.value, "")
                signal_str = f"[{sig_color}]{signal} dBm[/{sig_color}]"

            if node.associations:
                linked = ", ".join(node.associations[:_MAX_LISTED_ASSOCIATIONS])
                extra = len(node.associations) - _MAX_LISTED_ASSOCIATIONS
                if extra > 0:
                    linked += f" (+{extra} more)"
            else:
                linked = "[dim]-[/dim]"

            table.add_row(
                identity,
                type_str,
                hardware or "[dim]-[/dim]",
                str(node.times_seen),
                signal_str,
                node.last_seen or "[dim]-[/dim]",
                linked,
            )

        self._console.rich.print(table)
        self._console.blank()

    def display_associations(self, analysis: AssociationAnalysis) -> None:
        """Display the most-probed networks and the busiest probers."""
        self._console.section("Probe Associations")

        if not analysis.edges:
            self._console.info("No probe associations recorded")
            return

        self._ranking_table("Most Probed Networks", "Devices", analysis.top_networks)
        self._ranking_table("Most Active Devices", "Networks", analysis.top_devices)

        self._console.info(
            f"{len(analysis.edges)} association(s) across "
            f"{analysis.components} cluster(s); largest cluster has "
            f"{analysis.largest_component} node(s)"
        )
        self._console.blank()

    def _ranking_table(
        self, title: str, degree_label: str, ranked: list[RankedNode]
    ) -> None:
        if not ranked:
            return

        table = Table(
            title=title,
            border_style="bright_cyan",
            header_style="bold bright_magenta",
            padding=(0, 1),
        )
        table.add_column("#", justify="right", width=3)
        table.add_column("Identity", style="bright_white")
        table.add_column(degree_label, justify="right")
        table.add_column("Seen", justify="right")

        for rank, entry in enumerate(ranked, start=1):
            name = entry.identity or "[dim italic]<empty>[/dim italic]"
            if entry.skeleton:
                name += " [dim](never beaconed)[/dim]"
            table.add_row(str(rank), name, str(entry.degree), str(entry.times_seen))

        self._console.rich.print(table)
        self._console.blank()
