"""Tracker statistics snapshot.

The tracker serializes its history as JSON on ``GET /stats/data``::

    {
        "torrents": [...],
        "historical_torrents": [1690000000, ...],
        "historical_peers": [
            [[18, 52, ...], [["connected", [1690000100, ...]],
                             ["completed", [1690000900]]]],
            ...
        ],
        "new_changes": false
    }

Info hashes are byte arrays and each tracked torrent carries an ordered
list of ``[category, timestamps]`` pairs. Only the two history fields are
kept; everything else is ignored.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from trackerdash.utils.exceptions import StatsPayloadError

CONNECTED = "connected"
COMPLETED = "completed"

InfoHash = tuple[int, ...]


def parse_info_hash(value: str | bytes | list[int] | tuple[int, ...]) -> InfoHash:
    """Normalize an info hash given as hex, comma-separated bytes or raw bytes.

    >>> parse_info_hash("0aff")
    (10, 255)
    >>> parse_info_hash("10,255")
    (10, 255)
    """
    if isinstance(value, (bytes, bytearray)):
        return tuple(value)
    if isinstance(value, str):
        text = value.strip()
        if "," in text:
            return tuple(int(part) for part in text.split(",") if part.strip())
        return tuple(bytes.fromhex(text))
    return tuple(int(b) for b in value)


class TorrentHistory(BaseModel):
    """Event history of one tracked torrent."""

    model_config = {"frozen": True}

    info_hash: InfoHash
    events: tuple[tuple[str, tuple[int, ...]], ...] = Field(default_factory=tuple)

    @field_validator("info_hash", mode="before")
    @classmethod
    def normalize_info_hash(cls, v: Any) -> Any:
        """Accept hex strings and raw bytes."""
        if isinstance(v, (str, bytes, bytearray)):
            try:
                return parse_info_hash(v)
            except ValueError as e:
                msg = f"Invalid info hash: {v!r}"
                raise ValueError(msg) from e
        return v

    @field_validator("events", mode="before")
    @classmethod
    def normalize_events(cls, v: Any) -> Any:
        """Accept a mapping of category to timestamps as well as pairs."""
        if isinstance(v, dict):
            return tuple(v.items())
        return v

    @property
    def hex_info_hash(self) -> str:
        return bytes(self.info_hash).hex()

    def timestamps(self, category: str) -> list[int]:
        """All timestamps recorded under ``category``."""
        result: list[int] = []
        for name, values in self.events:
            if name == category:
                result.extend(values)
        return result

    def first_category_timestamps(self) -> tuple[int, ...]:
        """Timestamps of the first category listed, empty if none."""
        if not self.events:
            return ()
        return self.events[0][1]


class StatsSnapshot(BaseModel):
    """The parts of the tracker stats payload the charts use."""

    model_config = {"frozen": True}

    historical_torrents: tuple[int, ...] = Field(
        default_factory=tuple,
        description="Torrent registration timestamps",
    )
    historical_peers: tuple[TorrentHistory, ...] = Field(
        default_factory=tuple,
        description="Per-torrent peer event history",
    )

    @field_validator("historical_peers", mode="before")
    @classmethod
    def normalize_peers(cls, v: Any) -> Any:
        """Turn ``[info_hash, events]`` pairs into TorrentHistory input."""
        if isinstance(v, dict):
            v = list(v.items())
        if not isinstance(v, (list, tuple)):
            return v
        normalized = []
        for item in v:
            if isinstance(item, (list, tuple)) and len(item) == 2:
                normalized.append({"info_hash": item[0], "events": item[1]})
            else:
                normalized.append(item)
        return normalized

    @classmethod
    def from_payload(cls, payload: Any) -> StatsSnapshot:
        """Build a snapshot from decoded JSON.

        Raises:
            StatsPayloadError: If the payload is not an object or its
                history fields have the wrong shape

        """
        if not isinstance(payload, dict):
            msg = f"Stats payload must be a JSON object, got {type(payload).__name__}"
            raise StatsPayloadError(msg)
        data = {
            key: payload[key]
            for key in ("historical_torrents", "historical_peers")
            if payload.get(key) is not None
        }
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = "Invalid stats payload"
            raise StatsPayloadError(msg, {"errors": e.error_count()}) from e

    @classmethod
    def from_json(cls, text: str | bytes) -> StatsSnapshot:
        """Parse a snapshot from the raw ``/stats/data`` body."""
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"Stats payload is not valid JSON: {e}"
            raise StatsPayloadError(msg) from e
        return cls.from_payload(payload)

    def find(self, info_hash: Any) -> TorrentHistory | None:
        """First tracked torrent whose info hash equals ``info_hash``."""
        target = parse_info_hash(info_hash)
        for history in self.historical_peers:
            if history.info_hash == target:
                return history
        return None
