"""Chart data for the tracker dashboard.

Defines the three dashboard series and turns a stats snapshot into the
``{labels, datasets}`` structure a charting widget consumes. Nothing here
renders; the CLI and any web front end draw from these values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from trackerdash.models import Bucket, StatsQuery, Window
from trackerdash.stats.bucketing import group_by_query
from trackerdash.stats.filters import (
    connected_timestamps,
    filter_by_window,
    info_hashes_equal,
    info_hashes_with_recent_events,
    total_completed,
)
from trackerdash.stats.selection import UnrecognizedSelection
from trackerdash.stats.snapshot import InfoHash, StatsSnapshot, parse_info_hash


class ChartKind(Enum):
    """Widget type a series is drawn with."""

    LINE = "line"
    BAR = "bar"


BAR_BACKGROUND_COLORS: Tuple[str, ...] = (
    "rgba(255, 99, 132, 0.2)",
    "rgba(54, 162, 235, 0.2)",
    "rgba(255, 206, 86, 0.2)",
    "rgba(75, 192, 192, 0.2)",
    "rgba(153, 102, 255, 0.2)",
    "rgba(255, 159, 64, 0.2)",
)

BAR_BORDER_COLORS: Tuple[str, ...] = (
    "rgba(255, 99, 132, 1)",
    "rgba(54, 162, 235, 1)",
    "rgba(255, 206, 86, 1)",
    "rgba(75, 192, 192, 1)",
    "rgba(153, 102, 255, 1)",
    "rgba(255, 159, 64, 1)",
)


@dataclass(frozen=True)
class ChartSeries:
    """Metadata for a single dashboard series."""

    key: str
    label: str
    kind: ChartKind = ChartKind.LINE
    color: str = "rgb(75, 192, 192)"
    terminal_color: str = "cyan"
    description: str | None = None

    def dataset(self, data: List[int]) -> Dict[str, Any]:
        """Build the dataset entry for ``data`` in the widget's format."""
        if self.kind is ChartKind.BAR:
            return {
                "label": self.label,
                "data": data,
                "backgroundColor": list(BAR_BACKGROUND_COLORS),
                "borderColor": list(BAR_BORDER_COLORS),
                "borderWidth": 1,
            }
        return {
            "label": self.label,
            "data": data,
            "fill": False,
            "borderColor": self.color,
            "tension": 0.1,
        }


SERIES_REGISTRY: Dict[str, ChartSeries] = {
    "connected_peers": ChartSeries(
        key="connected_peers",
        label="Connected Peers",
        color="rgb(75, 192, 192)",
        terminal_color="cyan",
        description="Peer connections of the selected torrent over time",
    ),
    "completed_peers": ChartSeries(
        key="completed_peers",
        label="Completed Peers",
        kind=ChartKind.BAR,
        color="rgba(255, 99, 132, 1)",
        terminal_color="magenta",
        description="Completed downloads per recently active torrent",
    ),
    "total_torrents": ChartSeries(
        key="total_torrents",
        label="Total of Torrents",
        color="#fc9403",
        terminal_color="orange1",
        description="Torrents registered with the tracker over time",
    ),
}


def get_series(key: str) -> Optional[ChartSeries]:
    """Get a series definition by key."""
    return SERIES_REGISTRY.get(key)


@dataclass
class ChartData:
    """Labels plus datasets, ready for a chart widget."""

    series: ChartSeries
    labels: List[str] = field(default_factory=list)
    datasets: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def values(self) -> List[int]:
        """Values of the first dataset."""
        return list(self.datasets[0]["data"]) if self.datasets else []

    def to_dict(self) -> Dict[str, Any]:
        """Export as ``{"type", "labels", "datasets"}``."""
        return {
            "type": self.series.kind.value,
            "labels": list(self.labels),
            "datasets": self.datasets,
        }


@dataclass
class ConnectedChart:
    """Connected-peers chart plus the torrent picker state."""

    chart: ChartData
    info_hashes: List[InfoHash]
    selected: Optional[InfoHash] = None


def split_buckets(buckets: Iterable[Bucket]) -> Tuple[List[str], List[int]]:
    """Split buckets into the category axis and the value series."""
    labels: List[str] = []
    counts: List[int] = []
    for count, label in buckets:
        labels.append(label)
        counts.append(count)
    return labels, counts


def _line_chart(series_key: str, buckets: List[Bucket]) -> ChartData:
    series = SERIES_REGISTRY[series_key]
    labels, counts = split_buckets(buckets)
    return ChartData(series=series, labels=labels, datasets=[series.dataset(counts)])


def prepare_connected_chart(
    snapshot: StatsSnapshot,
    query: StatsQuery,
    now: datetime | None = None,
    selected: Any = None,
) -> ConnectedChart | UnrecognizedSelection:
    """Connected peers over time for one torrent.

    The torrent is ``selected`` when it is among the recently active ones,
    otherwise the first recently active torrent. With no recent activity
    the chart is empty and nothing is selected.
    """
    info_hashes = info_hashes_with_recent_events(snapshot, query.window, now)
    if isinstance(info_hashes, UnrecognizedSelection):
        return info_hashes

    choice: Optional[InfoHash] = None
    if selected is not None:
        wanted = parse_info_hash(selected)
        choice = next(
            (ih for ih in info_hashes if info_hashes_equal(ih, wanted)), None
        )
    if choice is None and info_hashes:
        choice = info_hashes[0]

    timestamps = connected_timestamps(snapshot, choice) if choice is not None else []
    buckets = group_by_query(timestamps, query, now)
    if isinstance(buckets, UnrecognizedSelection):
        return buckets

    return ConnectedChart(
        chart=_line_chart("connected_peers", buckets),
        info_hashes=list(info_hashes),
        selected=choice,
    )


def prepare_completed_chart(
    snapshot: StatsSnapshot,
    window: Window | str,
    now: datetime | None = None,
) -> ChartData | UnrecognizedSelection:
    """Completed downloads per recently active torrent."""
    info_hashes = info_hashes_with_recent_events(snapshot, window, now)
    if isinstance(info_hashes, UnrecognizedSelection):
        return info_hashes

    series = SERIES_REGISTRY["completed_peers"]
    labels = [bytes(ih).hex() for ih in info_hashes]
    data = [total_completed(snapshot, ih) for ih in info_hashes]
    return ChartData(series=series, labels=labels, datasets=[series.dataset(data)])


def prepare_torrents_chart(
    snapshot: StatsSnapshot,
    query: StatsQuery,
    now: datetime | None = None,
) -> ChartData | UnrecognizedSelection:
    """Torrent registrations inside the window, bucketed over time."""
    timestamps = filter_by_window(snapshot.historical_torrents, query.window, now)
    if isinstance(timestamps, UnrecognizedSelection):
        return timestamps

    buckets = group_by_query(timestamps, query, now)
    if isinstance(buckets, UnrecognizedSelection):
        return buckets
    return _line_chart("total_torrents", buckets)
