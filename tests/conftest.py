"""Pytest configuration and shared fixtures for trackerdash tests."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from trackerdash.config.config import ENV_MAPPINGS

# 2024-05-10 14:30:00 UTC
REFERENCE = datetime(2024, 5, 10, 14, 30, tzinfo=timezone.utc)

INFO_HASH_A = list(range(20))
INFO_HASH_B = [255] * 20


def pytest_configure(config):
    """Register project markers to avoid warnings when ini isn't loaded."""
    markers = [
        ("unit", "marks tests as unit tests"),
        ("stats", "marks tests as statistics/bucketing tests"),
        ("cli", "marks tests as CLI tests"),
        ("config", "marks tests as configuration tests"),
        ("observability", "marks tests as logging tests"),
    ]
    for name, desc in markers:
        config.addinivalue_line("markers", f"{name}: {desc}")


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path):
    """Keep user config files and TRACKERDASH_* variables out of tests."""
    for env_name in ENV_MAPPINGS:
        monkeypatch.delenv(env_name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def cleanup_logging():
    """Clean up logging handlers after each test to prevent closed file errors."""
    yield
    for logger_name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(logger_name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)

    package_logger = logging.getLogger("trackerdash")
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)


@pytest.fixture
def reference():
    """Fixed reference instant in UTC."""
    return REFERENCE


def _ago(**kwargs) -> int:
    return int((REFERENCE - timedelta(**kwargs)).timestamp())


@pytest.fixture
def ago():
    """Build Unix timestamps relative to the reference instant."""
    return _ago


@pytest.fixture
def stats_payload():
    """Decoded /stats/data body with two tracked torrents."""
    return {
        "torrents": [],
        "historical_torrents": [_ago(hours=1), _ago(hours=2), _ago(days=5)],
        "historical_peers": [
            [
                INFO_HASH_A,
                [
                    ["connected", [_ago(hours=3), _ago(hours=1), _ago(minutes=10)]],
                    ["completed", [_ago(hours=1), _ago(minutes=5)]],
                ],
            ],
            [
                INFO_HASH_B,
                [
                    ["connected", [_ago(days=4), _ago(hours=2)]],
                    ["completed", [_ago(hours=2)]],
                ],
            ],
        ],
        "new_changes": False,
    }


@pytest.fixture
def stats_snapshot(stats_payload):
    """Parsed snapshot of ``stats_payload``."""
    from trackerdash.stats.snapshot import StatsSnapshot

    return StatsSnapshot.from_payload(stats_payload)


@pytest.fixture
def info_hash_a():
    return tuple(INFO_HASH_A)


@pytest.fixture
def info_hash_b():
    return tuple(INFO_HASH_B)
