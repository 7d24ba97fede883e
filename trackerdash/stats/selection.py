"""Window and granularity selections.

Selections come straight from user-controlled UI state, so an
unrecognized value is reported through the ``UnrecognizedSelection``
sentinel instead of an exception; callers can then simply skip the
chart update.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from trackerdash.models import Granularity, Window

logger = logging.getLogger(__name__)

ONE_HOUR_MS = 3_600_000
ONE_DAY_MS = 86_400_000

WINDOW_MILLIS: dict[Window, int] = {
    Window.LAST_HOUR: ONE_HOUR_MS,
    Window.LAST_FIVE_HOURS: 5 * ONE_HOUR_MS,
    Window.LAST_DAY: ONE_DAY_MS,
    Window.LAST_THREE_DAYS: 3 * ONE_DAY_MS,
}

WINDOW_HOURS: dict[Window, int] = {
    Window.LAST_HOUR: 1,
    Window.LAST_FIVE_HOURS: 5,
    Window.LAST_DAY: 24,
    Window.LAST_THREE_DAYS: 72,
}


@dataclass(frozen=True)
class UnrecognizedSelection:
    """Sentinel returned when a window or granularity value is unknown."""

    kind: str
    value: Any

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"Unrecognized {self.kind}: {self.value!r}"


def _parse(enum_cls: type[Window] | type[Granularity], kind: str, value: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        logger.error("%s did not match: %r", kind.capitalize(), value)
        return UnrecognizedSelection(kind, value)


def parse_window(value: Any) -> Window | UnrecognizedSelection:
    """Return the Window for ``value`` or the sentinel."""
    return _parse(Window, "window", value)


def parse_granularity(value: Any) -> Granularity | UnrecognizedSelection:
    """Return the Granularity for ``value`` or the sentinel."""
    return _parse(Granularity, "granularity", value)


def window_to_millis(window: Any) -> int | UnrecognizedSelection:
    """Duration of a window in milliseconds.

    >>> window_to_millis("last_five_hours")
    18000000
    """
    parsed = parse_window(window)
    if isinstance(parsed, UnrecognizedSelection):
        return parsed
    return WINDOW_MILLIS[parsed]


def window_hours(window: Any) -> int | UnrecognizedSelection:
    """Length of a window in hours."""
    parsed = parse_window(window)
    if isinstance(parsed, UnrecognizedSelection):
        return parsed
    return WINDOW_HOURS[parsed]


def window_minutes(window: Any) -> int | UnrecognizedSelection:
    """Length of a window in minutes."""
    hours = window_hours(window)
    if isinstance(hours, UnrecognizedSelection):
        return hours
    return hours * 60
