"""Tracker statistics: selection handling, bucketing, filtering and charts."""

from __future__ import annotations

from trackerdash.stats.bucketing import correct_day, format_label, group_by, group_by_query
from trackerdash.stats.filters import (
    connected_timestamps,
    filter_by_window,
    info_hashes_equal,
    info_hashes_with_recent_events,
    total_completed,
)
from trackerdash.stats.selection import (
    UnrecognizedSelection,
    parse_granularity,
    parse_window,
    window_hours,
    window_minutes,
    window_to_millis,
)
from trackerdash.stats.snapshot import StatsSnapshot, TorrentHistory

__all__ = [
    "StatsSnapshot",
    "TorrentHistory",
    "UnrecognizedSelection",
    "connected_timestamps",
    "correct_day",
    "filter_by_window",
    "format_label",
    "group_by",
    "group_by_query",
    "info_hashes_equal",
    "info_hashes_with_recent_events",
    "parse_granularity",
    "parse_window",
    "total_completed",
    "window_hours",
    "window_minutes",
    "window_to_millis",
]
