"""Time-series bucketing for the tracker dashboard charts.

Turns a bag of Unix timestamps into an ordered series of labeled counts
anchored to a reference instant ("now"). The last bucket of every span
always sits on the reference hour (and minute, for minute granularity);
earlier buckets walk back from there, crossing midnight as needed.

Two behaviours are kept for compatibility with the existing dashboard:

* counts are running totals over the whole call unless ``cumulative`` is
  turned off;
* with ``DayRollover.HEURISTIC`` a day-of-month that falls below 1 is
  counted back from 31 (0 is 31, -1 is 30, ...) regardless of the previous
  month's real length.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Hashable, Iterable

from trackerdash.models import Bucket, DayRollover, Granularity, StatsQuery, Window
from trackerdash.stats.selection import (
    WINDOW_HOURS,
    UnrecognizedSelection,
    parse_granularity,
    parse_window,
)

logger = logging.getLogger(__name__)

THREE_DAY_SPANS = 3
# Each three-day span runs from one day's current hour to the next day's
# current hour inclusive.
HOURS_PER_DAY_SPAN = 25

# Hour range of the single span used by minute granularity.
MINUTE_SPAN_HOURS: dict[Window, int] = {
    Window.LAST_DAY: 24,
    Window.LAST_FIVE_HOURS: 6,
    Window.LAST_HOUR: 2,
}

UNITS_PER_DAY: dict[Granularity, int] = {
    Granularity.HOURS: 24,
    Granularity.MINUTES: 24 * 60,
}


@dataclass(frozen=True)
class SpanPlan:
    """How many spans to walk and how many buckets each one holds."""

    spans: int
    length: int
    show_day: bool

    @property
    def bucket_count(self) -> int:
        return self.spans * self.length


def plan_spans(window: Window, granularity: Granularity) -> SpanPlan:
    """Work out the span layout for a window/granularity pair."""
    if window is Window.LAST_THREE_DAYS:
        hours = HOURS_PER_DAY_SPAN
        spans = THREE_DAY_SPANS
    elif granularity is Granularity.HOURS:
        hours = WINDOW_HOURS[window] + 1
        spans = 1
    else:
        hours = MINUTE_SPAN_HOURS[window]
        spans = 1

    length = hours if granularity is Granularity.HOURS else hours * 60
    return SpanPlan(spans=spans, length=length, show_day=spans > 1)


def correct_day(day: int) -> int:
    """Map a day-of-month that underflowed into the previous month.

    The previous month is always taken to be 31 days long, so 0 becomes 31,
    -1 becomes 30, -2 becomes 29 and so on. Positive days pass through
    unchanged.

    >>> correct_day(0), correct_day(-1), correct_day(-3), correct_day(17)
    (31, 30, 28, 17)
    """
    return 31 + day if day <= 0 else day


def format_label(day: int, hour: int, minute: int, show_day: bool = True) -> str:
    """Format a bucket label as ``"DD / HH:MM"`` or ``"HH:MM"``."""
    if show_day:
        return f"{day:02d} / {hour:02d}:{minute:02d}"
    return f"{hour:02d}:{minute:02d}"


def _day_key(
    reference: datetime, day_offset: int, day_rollover: DayRollover
) -> Hashable:
    if day_rollover is DayRollover.CALENDAR:
        return reference.date() + timedelta(days=day_offset)
    return correct_day(reference.day + day_offset)


def _label_day(key: Hashable) -> int:
    return key.day if isinstance(key, date) else int(key)


def _count_events(
    timestamps: Iterable[float],
    reference: datetime,
    granularity: Granularity,
    day_rollover: DayRollover,
) -> Counter:
    counts: Counter = Counter()
    tz = reference.tzinfo
    for value in sorted(timestamps):
        moment = datetime.fromtimestamp(value, tz=tz)
        day: Hashable = (
            moment.date() if day_rollover is DayRollover.CALENDAR else moment.day
        )
        minute = moment.minute if granularity is Granularity.MINUTES else 0
        counts[(day, moment.hour, minute)] += 1
    return counts


def group_by(
    timestamps: Iterable[float],
    granularity: Any,
    window: Any,
    now: datetime | None = None,
    *,
    day_rollover: DayRollover = DayRollover.HEURISTIC,
    cumulative: bool = True,
) -> list[Bucket] | UnrecognizedSelection:
    """Bucket ``timestamps`` into a chart series ending at ``now``.

    Args:
        timestamps: Unix timestamps in seconds, in any order
        granularity: Granularity member or its value ("hours"/"minutes")
        window: Window member or its value ("last_hour", ...)
        now: Reference instant; its time zone (local time when naive) is
            also used to decompose the timestamps. Defaults to the current
            local time.
        day_rollover: Previous-month day mapping
        cumulative: Report running totals (the dashboard's behaviour)
            instead of per-bucket counts

    Returns:
        Buckets oldest first, or UnrecognizedSelection for an unknown
        window or granularity.

    """
    parsed_granularity = parse_granularity(granularity)
    if isinstance(parsed_granularity, UnrecognizedSelection):
        return parsed_granularity
    parsed_window = parse_window(window)
    if isinstance(parsed_window, UnrecognizedSelection):
        return parsed_window

    reference = now if now is not None else datetime.now()
    plan = plan_spans(parsed_window, parsed_granularity)
    per_day = UNITS_PER_DAY[parsed_granularity]
    if parsed_granularity is Granularity.HOURS:
        now_units = reference.hour
    else:
        now_units = reference.hour * 60 + reference.minute

    counts = _count_events(timestamps, reference, parsed_granularity, day_rollover)

    result: list[Bucket] = []
    counter = 0
    for span in range(plan.spans):
        spans_remaining = plan.spans - 1 - span
        for k in range(plan.length):
            position = now_units - (plan.length - 1) + k
            day_shift, unit = divmod(position, per_day)
            if parsed_granularity is Granularity.HOURS:
                hour, minute = unit, 0
            else:
                hour, minute = divmod(unit, 60)

            day = _day_key(reference, day_shift - spans_remaining, day_rollover)
            matched = counts.get((day, hour, minute), 0)
            counter = counter + matched if cumulative else matched
            result.append(
                Bucket(counter, format_label(_label_day(day), hour, minute, plan.show_day))
            )

    logger.debug(
        "Grouped %d timestamps into %d buckets (%s, %s)",
        sum(counts.values()),
        len(result),
        parsed_window.value,
        parsed_granularity.value,
    )
    return result


def group_by_query(
    timestamps: Iterable[float],
    query: StatsQuery,
    now: datetime | None = None,
) -> list[Bucket] | UnrecognizedSelection:
    """Run :func:`group_by` with the parameters held by ``query``."""
    return group_by(
        timestamps,
        query.granularity,
        query.window,
        now,
        day_rollover=query.day_rollover,
        cumulative=query.cumulative,
    )
