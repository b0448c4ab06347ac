"""
Airgraph Console Interface
===========================

Rich-powered console abstraction providing a unified presentation layer
for every Airgraph module.

The class wraps :class:`rich.console.Console` and adds convenience methods
for section headers, severity-coloured messages and status spinners, all
with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from rich.console import Console
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme -- consistent palette across all Airgraph output
# ---------------------------------------------------------------------------
_AIR_THEME = Theme(
    {
        "air.section": "bold bright_magenta",
        "air.warning": "bold yellow",
        "air.error": "bold red",
        "air.info": "bold bright_blue",
    }
)


class AirConsole:
    """Unified console interface for all Airgraph modules.

    Usage::

        con = AirConsole()
        con.section("Nodes")
        con.info("Capture complete")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording for text export.
        """
        self._console = Console(
            theme=_AIR_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Sections
    # ------------------------------------------------------------------ #

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(
            f"  {title}  ",
            style="air.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def warning(self, message: str) -> None:
        """Print a warning message."""
        self._console.print(
            f"[air.warning][⚠] WARNING:[/air.warning] {message}"
        )

    def error(self, message: str) -> None:
        """Print an error message."""
        self._console.print(
            f"[air.error][✘] ERROR:[/air.error] {message}"
        )

    def info(self, message: str) -> None:
        """Print an informational message."""
        self._console.print(
            f"[air.info][ℹ] INFO:[/air.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Status spinner
    # ------------------------------------------------------------------ #

    @contextmanager
    def status(
        self, message: str = "Working..."
    ) -> Generator[Any, None, None]:
        """Context-manager showing a spinner with a status message.

        Example::

            with con.status("Capturing on wlan0mon..."):
                await asyncio.sleep(duration)
        """
        with self._console.status(
            f"[air.info]{message}[/air.info]",
            spinner="dots",
            spinner_style="bright_cyan",
        ) as status_obj:
            yield status_obj

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
