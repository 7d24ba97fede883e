"""Tests for the clock helpers."""

from __future__ import annotations

import time
from datetime import timezone

import pytest

from trackerdash.stats.bucketing import group_by
from trackerdash.utils.time import Clock, FixedClock

pytestmark = [pytest.mark.unit]


def test_clock_uses_configured_timezone():
    now = Clock(timezone.utc).now()
    assert now.tzinfo is timezone.utc
    assert abs(now.timestamp() - time.time()) < 5


def test_naive_clock():
    assert Clock().now().tzinfo is None


def test_fixed_clock(reference, ago):
    clock = FixedClock(reference)
    assert clock.now() is reference
    assert clock.tz is reference.tzinfo

    buckets = group_by([ago(minutes=20)], "hours", "last_hour", clock.now())
    assert buckets[-1].count == 1
