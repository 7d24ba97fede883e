"""Helpers deciding which timestamps and torrents feed a chart."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Sequence

from trackerdash.stats.selection import UnrecognizedSelection, window_to_millis
from trackerdash.stats.snapshot import (
    COMPLETED,
    CONNECTED,
    InfoHash,
    StatsSnapshot,
    parse_info_hash,
)

logger = logging.getLogger(__name__)


def _now_ms(now: datetime | None) -> float:
    reference = now if now is not None else datetime.now()
    return reference.timestamp() * 1000


def filter_by_window(
    timestamps: Iterable[float],
    window: Any,
    now: datetime | None = None,
) -> list[float] | UnrecognizedSelection:
    """Keep the timestamps no older than the window, in their original order."""
    limit = window_to_millis(window)
    if isinstance(limit, UnrecognizedSelection):
        return limit

    now_ms = _now_ms(now)
    return [t for t in timestamps if now_ms - t * 1000 <= limit]


def _event_stream(
    source: StatsSnapshot | Iterable[tuple[Any, float]],
) -> Iterable[tuple[Any, float]]:
    if isinstance(source, StatsSnapshot):
        for history in source.historical_peers:
            for timestamp in history.first_category_timestamps():
                yield history.info_hash, timestamp
    else:
        yield from source


def info_hashes_with_recent_events(
    source: StatsSnapshot | Iterable[tuple[Any, float]],
    window: Any,
    now: datetime | None = None,
) -> list[Any] | UnrecognizedSelection:
    """List the tracked items with at least one event inside the window.

    ``source`` is either a snapshot (each torrent contributes the
    timestamps of its first event category, in payload order) or a flat
    sequence of ``(item_id, timestamp)`` events.

    An item is skipped only when it equals the item emitted just before
    it, so ``[A, A, B, A]`` yields ``[A, B, A]``.
    """
    limit = window_to_millis(window)
    if isinstance(limit, UnrecognizedSelection):
        return limit

    now_ms = _now_ms(now)
    result: list[Any] = []
    for item, timestamp in _event_stream(source):
        if now_ms - timestamp * 1000 > limit:
            continue
        if result and result[-1] == item:
            continue
        result.append(item)
    return result


def info_hashes_equal(first: Sequence[int], second: Sequence[int]) -> bool:
    """Compare ``first`` element-wise against the same positions of ``second``.

    Only the length of ``first`` is walked, so an empty ``first`` matches
    anything.
    """
    for i, value in enumerate(first):
        if i >= len(second) or second[i] != value:
            return False
    return True


def connected_timestamps(snapshot: StatsSnapshot, info_hash: Any) -> list[int]:
    """All ``connected`` timestamps recorded for ``info_hash``."""
    target = parse_info_hash(info_hash)
    result: list[int] = []
    for history in snapshot.historical_peers:
        if info_hashes_equal(history.info_hash, target):
            result.extend(history.timestamps(CONNECTED))
    return result


def total_completed(snapshot: StatsSnapshot, info_hash: Any) -> int:
    """Number of ``completed`` events recorded for ``info_hash``."""
    target: InfoHash = parse_info_hash(info_hash)
    return sum(
        len(history.timestamps(COMPLETED))
        for history in snapshot.historical_peers
        if history.info_hash == target
    )
