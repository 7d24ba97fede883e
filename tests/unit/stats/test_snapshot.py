"""Tests for the stats snapshot model."""

from __future__ import annotations

import json

import pydantic
import pytest

from trackerdash.stats.snapshot import (
    COMPLETED,
    CONNECTED,
    StatsSnapshot,
    TorrentHistory,
    parse_info_hash,
)
from trackerdash.utils.exceptions import StatsPayloadError, ValidationError

pytestmark = [pytest.mark.unit, pytest.mark.stats]


class TestParseInfoHash:
    """Info hash normalization."""

    def test_hex(self):
        assert parse_info_hash("0aff") == (10, 255)

    def test_comma_separated(self):
        assert parse_info_hash("10, 255,") == (10, 255)

    def test_bytes_and_lists(self):
        assert parse_info_hash(b"\x01\x02") == (1, 2)
        assert parse_info_hash([1, 2]) == (1, 2)

    def test_invalid_hex(self):
        with pytest.raises(ValueError):
            parse_info_hash("zz")


class TestStatsSnapshot:
    """Building snapshots from the tracker payload."""

    def test_from_payload(self, stats_payload, info_hash_a, info_hash_b):
        snapshot = StatsSnapshot.from_payload(stats_payload)

        assert len(snapshot.historical_torrents) == 3
        assert [h.info_hash for h in snapshot.historical_peers] == [
            info_hash_a,
            info_hash_b,
        ]
        assert len(snapshot.historical_peers[0].timestamps(CONNECTED)) == 3
        assert len(snapshot.historical_peers[1].timestamps(COMPLETED)) == 1

    def test_from_json(self, stats_payload):
        body = json.dumps(stats_payload).encode()
        assert StatsSnapshot.from_json(body) == StatsSnapshot.from_payload(stats_payload)

    def test_missing_history_fields(self):
        snapshot = StatsSnapshot.from_payload({"torrents": [], "historical_peers": None})
        assert snapshot.historical_torrents == ()
        assert snapshot.historical_peers == ()

    def test_events_as_mapping(self):
        history = TorrentHistory(
            info_hash="00ff", events={"completed": [5], "connected": [1, 2]}
        )
        assert history.info_hash == (0, 255)
        assert history.hex_info_hash == "00ff"
        assert history.first_category_timestamps() == (5,)
        assert history.timestamps(CONNECTED) == [1, 2]
        assert history.timestamps("stopped") == []

    def test_no_events(self):
        history = TorrentHistory(info_hash=[1, 2, 3])
        assert history.first_category_timestamps() == ()

    def test_repeated_category_is_concatenated(self):
        history = TorrentHistory(
            info_hash=[1], events=[["connected", [1]], ["connected", [2, 3]]]
        )
        assert history.timestamps(CONNECTED) == [1, 2, 3]

    def test_find(self, stats_snapshot, info_hash_b):
        assert stats_snapshot.find("ff" * 20).info_hash == info_hash_b
        assert stats_snapshot.find("ab" * 20) is None

    def test_snapshot_is_frozen(self, stats_snapshot):
        with pytest.raises(pydantic.ValidationError):
            stats_snapshot.historical_torrents = ()

    @pytest.mark.parametrize("payload", [[], "text", 42])
    def test_non_object_payload(self, payload):
        with pytest.raises(StatsPayloadError, match="JSON object"):
            StatsSnapshot.from_payload(payload)

    def test_bad_shape(self):
        with pytest.raises(StatsPayloadError) as exc_info:
            StatsSnapshot.from_payload({"historical_torrents": ["soon"]})
        assert exc_info.value.details["errors"] >= 1
        assert isinstance(exc_info.value, ValidationError)

    def test_invalid_json(self):
        with pytest.raises(StatsPayloadError, match="not valid JSON"):
            StatsSnapshot.from_json(b"<html>")
