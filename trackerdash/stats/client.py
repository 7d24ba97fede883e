"""Async client for the tracker's ``/stats/data`` endpoint."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp

from trackerdash import __version__
from trackerdash.models import StatsSourceConfig
from trackerdash.stats.snapshot import StatsSnapshot
from trackerdash.utils.exceptions import StatsFetchError, StatsPayloadError


class StatsClient:
    """Fetches statistics snapshots from a tracker.

    Use as an async context manager, or call :meth:`start` and
    :meth:`stop` explicitly.
    """

    def __init__(self, config: StatsSourceConfig | None = None):
        """Initialize the stats client.

        Args:
            config: Stats source configuration (URL and timeout)

        """
        self.config = config or StatsSourceConfig()
        self.session: aiohttp.ClientSession | None = None
        self.user_agent = f"trackerdash/{__version__}"
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Open the HTTP session."""
        if self.session is not None:
            return
        timeout = aiohttp.ClientTimeout(
            total=self.config.timeout,
            connect=self.config.timeout,
        )
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            headers={"User-Agent": self.user_agent, "Accept": "application/json"},
        )
        self.logger.debug("Stats client started for %s", self.config.url)

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def __aenter__(self) -> StatsClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def _get(self, url: str) -> bytes:
        if self.session is None:
            msg = "HTTP session not initialized"
            raise RuntimeError(msg)

        request_start = time.time()
        try:
            async with self.session.get(url) as response:
                if response.status != 200:
                    msg = f"HTTP {response.status}: {response.reason}"
                    raise StatsFetchError(msg, {"url": url, "status": response.status})
                body = await response.read()
        except asyncio.TimeoutError as e:
            msg = f"Stats request timed out after {self.config.timeout}s ({url})"
            raise StatsFetchError(msg) from e
        except aiohttp.ClientError as e:
            msg = f"Stats request failed ({url}, {type(e).__name__}): {e}"
            raise StatsFetchError(msg) from e

        self.logger.debug(
            "Fetched %d bytes from %s in %.3fs",
            len(body),
            url,
            time.time() - request_start,
        )
        return body

    async def fetch_snapshot(self) -> StatsSnapshot:
        """Fetch and parse the current statistics snapshot.

        Raises:
            StatsFetchError: If the endpoint cannot be reached or does not
                answer 200
            StatsPayloadError: If the body is not a valid stats payload

        """
        body = await self._get(self.config.url)
        try:
            return StatsSnapshot.from_json(body)
        except StatsPayloadError:
            self.logger.exception("Error getting stats from %s", self.config.url)
            raise


async def fetch_stats(url: str | None = None, timeout: float | None = None) -> StatsSnapshot:
    """Fetch one snapshot without managing a client."""
    overrides = {"url": url, "timeout": timeout}
    config = StatsSourceConfig(**{k: v for k, v in overrides.items() if v is not None})
    async with StatsClient(config) as client:
        return await client.fetch_snapshot()
