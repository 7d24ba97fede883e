"""Clock abstraction supplying the reference instant."""

from __future__ import annotations

import time as _time
from datetime import datetime, tzinfo


class Clock:
    """Clock abstraction to aid testability."""

    def __init__(self, tz: tzinfo | None = None):
        self.tz = tz

    def now(self) -> datetime:
        """Return the current wall-clock time.

        Naive local time unless the clock was built with a time zone.
        """
        return datetime.fromtimestamp(_time.time(), tz=self.tz)


class FixedClock(Clock):
    """Clock frozen at a given instant."""

    def __init__(self, instant: datetime):
        super().__init__(instant.tzinfo)
        self.instant = instant

    def now(self) -> datetime:
        return self.instant
