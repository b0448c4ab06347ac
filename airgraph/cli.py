"""
Airgraph CLI
=============

Click-based command-line interface for Airgraph.

Commands:
    airgraph capture --interface IFACE   Capture and build the node graph

Common options:
    --config PATH       TOML configuration file
    --quiet             Suppress console output
    --output PATH       JSON report file path
    --verbose           Enable debug logging

References:
    - Click Documentation: https://click.palletsprojects.com/
    - IEEE. (2020). IEEE Std 802.11-2020.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from shared.config import AirgraphConfig
from shared.console import AirConsole
from shared.logger import configure_logging

from airgraph import __version__


# ---------------------------------------------------------------------------
# Async helper
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click commands.

    Args:
        coro: Coroutine to execute.

    Returns:
        The coroutine's return value.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = None

    if loop and loop.is_running():
        import concurrent.futures
        with concurrent.futures.ThreadPoolExecutor() as pool:
            future = pool.submit(asyncio.run, coro)
            return future.result()
    else:
        return asyncio.run(coro)


# ---------------------------------------------------------------------------
# CLI Group
# ---------------------------------------------------------------------------


@click.group(
    name="airgraph",
    help=(
        "AIRGRAPH - Passive 802.11 association graph\n\n"
        "Builds a graph of wireless networks and the devices probing for "
        "them from beacon and probe-request frames."
    ),
)
@click.version_option(__version__, prog_name="airgraph")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to Airgraph configuration file (TOML).",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress console output.",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], quiet: bool) -> None:
    """Airgraph - main CLI entry point."""
    ctx.ensure_object(dict)

    try:
        config = AirgraphConfig.load(config_path) if config_path else AirgraphConfig()
    except (FileNotFoundError, ValueError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    ctx.obj["config"] = config
    ctx.obj["console"] = AirConsole(quiet=quiet)
    ctx.obj["quiet"] = quiet


# ---------------------------------------------------------------------------
# Capture Command
# ---------------------------------------------------------------------------


@cli.command(
    name="capture",
    help=(
        "Capture beacons and probe requests.\n\n"
        "Sniffs 802.11 management frames on a monitor-mode interface, "
        "folds them into the node graph, links probing devices to the "
        "networks they ask for and persists every updated node as a "
        "JSON line.\n\n"
        "Requires root privileges and an interface in monitor mode."
    ),
)
@click.option(
    "--interface", "-i",
    type=str,
    default=None,
    help="Wireless interface in monitor mode (default from config).",
)
@click.option(
    "--duration", "-d",
    type=click.IntRange(min=0),
    default=None,
    help="Capture duration in seconds (default from config).",
)
@click.option(
    "--buffer", "-b",
    "buffer_size",
    type=click.IntRange(min=1),
    default=None,
    help="Per-node signal and timestamp history size.",
)
@click.option(
    "--db",
    "db_path",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory receiving node records (default from config).",
)
@click.option(
    "--stdout",
    "to_stdout",
    is_flag=True,
    default=False,
    help="Print node records to stdout instead of persisting them (not silenced by --quiet).",
)
@click.option(
    "--output", "-o",
    type=click.Path(),
    default=None,
    help="JSON report file path.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.pass_context
def capture(
    ctx: click.Context,
    interface: Optional[str],
    duration: Optional[int],
    buffer_size: Optional[int],
    db_path: Optional[str],
    to_stdout: bool,
    output: Optional[str],
    verbose: bool,
) -> None:
    """Capture management frames and build the node graph."""
    config: AirgraphConfig = ctx.obj["config"]
    console: AirConsole = ctx.obj["console"]

    if interface:
        config.graph.interface = interface
    if buffer_size is not None:
        config.graph.buffer_size = buffer_size
    if db_path:
        config.graph.db_name = db_path
    if verbose:
        config.graph.debug = True

    configure_logging(
        debug=config.debug,
        log_level=config.global_settings.log_level,
        log_file=config.global_settings.log_file,
        json_logs=config.global_settings.log_json,
    )

    from airgraph.core.engine import AirgraphEngine
    from airgraph.core.models import CaptureError
    from airgraph.core.sink import ConsoleSink, JsonLinesSink, NodeSink

    # Records requested on stdout are printed even under --quiet.
    sink: NodeSink = (
        ConsoleSink(AirConsole()) if to_stdout else JsonLinesSink(config.graph.db_name)
    )

    with sink:
        engine = AirgraphEngine(config=config, console=console, sink=sink)
        try:
            summary = _run_async(
                engine.capture(duration=duration, output_path=output)
            )
        except CaptureError as exc:
            console.error(str(exc))
            sys.exit(1)

    if not summary.clean:
        sys.exit(2)


def main() -> None:
    """Console-script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
