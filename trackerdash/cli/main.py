"""Command line interface for trackerdash.

Fetches the tracker's statistics snapshot and prints the dashboard
charts as Rich tables:

- ``connected``: connected peers over time for one torrent
- ``completed``: completed downloads per recently active torrent
- ``torrents``: torrent registrations over time
- ``config show``: effective configuration
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from trackerdash.config.config import ConfigManager, init_config
from trackerdash.models import Config, Granularity, LogLevel, StatsQuery, Window
from trackerdash.stats.charts import (
    ChartData,
    prepare_completed_chart,
    prepare_connected_chart,
    prepare_torrents_chart,
)
from trackerdash.stats.client import fetch_stats
from trackerdash.stats.selection import UnrecognizedSelection
from trackerdash.stats.snapshot import StatsSnapshot, parse_info_hash
from trackerdash.utils.exceptions import TrackerDashError
from trackerdash.utils.time import Clock

logger = logging.getLogger(__name__)

BAR_WIDTH = 40

_clock = Clock()

window_option = click.option(
    "--window",
    "-w",
    type=click.Choice([w.value for w in Window]),
    default=None,
    help="Lookback window (defaults to the configured one)",
)
granularity_option = click.option(
    "--granularity",
    "-g",
    type=click.Choice([g.value for g in Granularity]),
    default=None,
    help="Bucket width (defaults to the configured one)",
)
url_option = click.option("--url", type=str, default=None, help="Stats data URL")
json_option = click.option(
    "--json", "as_json", is_flag=True, help="Print chart data as JSON"
)


def _now() -> datetime:
    return _clock.now()


def _get_config(ctx: click.Context) -> Config:
    ctx.ensure_object(dict)
    config = ctx.obj.get("config")
    if config is None:
        config = Config()
        ctx.obj["config"] = config
    return config


def _load_snapshot(config: Config, url: str | None) -> StatsSnapshot:
    try:
        return asyncio.run(fetch_stats(url or config.stats.url, config.stats.timeout))
    except TrackerDashError as e:
        raise click.ClickException(str(e)) from e


def _render_chart(console: Console, chart: ChartData, title: str) -> None:
    values = chart.values
    peak = max(values, default=0)

    table = Table(title=title)
    table.add_column("Label", style="cyan")
    table.add_column("Count", justify="right", style="green")
    table.add_column("")

    for label, value in zip(chart.labels, values):
        width = round(value / peak * BAR_WIDTH) if peak else 0
        bar = f"[{chart.series.terminal_color}]{'█' * width}[/{chart.series.terminal_color}]"
        table.add_row(label, str(value), bar)

    console.print(table)


def _emit(console: Console, result: Any, title: str, as_json: bool) -> None:
    if isinstance(result, UnrecognizedSelection):
        raise click.ClickException(str(result))
    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        _render_chart(console, result, title)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: info, -vv: debug)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: int) -> None:
    """Tracker statistics dashboard."""
    ctx.ensure_object(dict)
    try:
        manager = init_config(config_path)
    except TrackerDashError as e:
        raise click.ClickException(str(e)) from e

    config = manager.config
    if verbose:
        level = LogLevel.DEBUG if verbose > 1 else LogLevel.INFO
        config.observability.log_level = level
        logging.getLogger("trackerdash").setLevel(level.value)
        for handler in logging.getLogger("trackerdash").handlers:
            handler.setLevel(level.value)

    ctx.obj["manager"] = manager
    ctx.obj["config"] = config


@cli.command("connected")
@window_option
@granularity_option
@click.option(
    "--info-hash",
    "-i",
    type=str,
    default=None,
    help="Torrent info hash (hex); defaults to the first active torrent",
)
@url_option
@json_option
@click.pass_context
def connected(
    ctx: click.Context,
    window: str | None,
    granularity: str | None,
    info_hash: str | None,
    url: str | None,
    as_json: bool,
) -> None:
    """Connected peers over time for one torrent."""
    console = Console()
    config = _get_config(ctx)

    if info_hash is not None:
        try:
            parse_info_hash(info_hash)
        except ValueError as e:
            msg = f"Invalid info hash: {info_hash}"
            raise click.ClickException(msg) from e

    query = config.dashboard.to_query(window=window, granularity=granularity)
    snapshot = _load_snapshot(config, url)
    result = prepare_connected_chart(snapshot, query, _now(), selected=info_hash)
    if isinstance(result, UnrecognizedSelection):
        raise click.ClickException(str(result))

    if as_json:
        payload = result.chart.to_dict()
        payload["info_hashes"] = [bytes(ih).hex() for ih in result.info_hashes]
        payload["selected"] = bytes(result.selected).hex() if result.selected else None
        click.echo(json.dumps(payload, indent=2))
        return

    if not result.info_hashes:
        console.print("[yellow]There are no Torrents with Data[/yellow]")
    title = "Connected Peers"
    if result.selected is not None:
        title = f"Connected Peers ({bytes(result.selected).hex()})"
    _render_chart(console, result.chart, title)


@cli.command("completed")
@window_option
@url_option
@json_option
@click.pass_context
def completed(
    ctx: click.Context, window: str | None, url: str | None, as_json: bool
) -> None:
    """Completed downloads per recently active torrent."""
    console = Console()
    config = _get_config(ctx)
    snapshot = _load_snapshot(config, url)
    result = prepare_completed_chart(snapshot, window or config.dashboard.window, _now())
    _emit(console, result, "Completed Peers", as_json)


@cli.command("torrents")
@window_option
@granularity_option
@url_option
@json_option
@click.pass_context
def torrents(
    ctx: click.Context,
    window: str | None,
    granularity: str | None,
    url: str | None,
    as_json: bool,
) -> None:
    """Torrent registrations over time."""
    console = Console()
    config = _get_config(ctx)
    query: StatsQuery = config.dashboard.to_query(window=window, granularity=granularity)
    snapshot = _load_snapshot(config, url)
    result = prepare_torrents_chart(snapshot, query, _now())
    _emit(console, result, "Total of Torrents", as_json)


@cli.group("config")
def config_group() -> None:
    """Configuration commands."""


@config_group.command("show")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["toml", "json"]),
    default="toml",
    help="Output format",
)
@click.pass_context
def config_show(ctx: click.Context, fmt: str) -> None:
    """Print the effective configuration."""
    ctx.ensure_object(dict)
    manager: ConfigManager | None = ctx.obj.get("manager")
    if manager is None:
        manager = init_config(None)
    click.echo(manager.export(fmt))


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
