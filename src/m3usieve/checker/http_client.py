"""
HTTP client issuing header-only probes against stream URLs.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import aiohttp
import structlog

from m3usieve.config.config import Config
from m3usieve.observability.metrics import METRICS

logger = structlog.get_logger(__name__)


@dataclass
class ProbeResponse:
    """Status and redirect target of a single HEAD request."""

    status: int
    location: Optional[str]
    url: str
    start_ts: float
    end_ts: float

    @property
    def elapsed(self) -> float:
        return self.end_ts - self.start_ts


class ProbeClient:
    """Owns the aiohttp session shared by every probe of a run."""

    def __init__(self, config: Config):
        self.config = config
        self.checker_config = config.checker

        self.session: Optional[aiohttp.ClientSession] = None
        self._is_initialized = False
        self._in_flight_requests = 0
        self._probe_count = 0

        logger.info(
            "Probe client initialized",
            concurrency_limit=self.checker_config.concurrency_limit,
            timeout=self.checker_config.timeout,
            user_agent=self.checker_config.user_agent,
        )

    async def initialize(self) -> None:
        """Initialize the HTTP client session."""
        if self.session is None:
            # Connector limit matches the executor's worker count.
            connector = aiohttp.TCPConnector(
                limit=self.checker_config.concurrency_limit,
                ttl_dns_cache=30,
                use_dns_cache=True,
            )
            self.session = aiohttp.ClientSession(
                connector=connector,
                headers={"User-Agent": self.checker_config.user_agent, "Accept": "*/*"},
            )
            self._is_initialized = True
            logger.debug("Probe client session initialized")

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        if self.session:
            await self.session.close()
            self.session = None
        self._is_initialized = False
        logger.debug("Probe client closed", probes=self._probe_count)

    async def __aenter__(self) -> "ProbeClient":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _set_in_flight(self, delta: int) -> None:
        self._in_flight_requests += delta
        METRICS["probes_in_flight"].set(self._in_flight_requests)

    async def head(self, url: str, *, timeout: float) -> ProbeResponse:
        """
        Issue one HEAD request without following redirects.

        Args:
            url: Absolute URL to probe
            timeout: Budget for this request in seconds

        Returns:
            ProbeResponse with status and Location header

        Raises:
            asyncio.TimeoutError: when the request exceeds ``timeout``
            aiohttp.ClientError: on resolution, connection or TLS failure,
                or when ``url`` is not an absolute http(s) URL
        """
        if not self._is_initialized:
            raise RuntimeError("Probe client not initialized. Call initialize() first.")

        parsed_url = urlparse(url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise aiohttp.InvalidURL(url)

        start_time = time.time()
        self._probe_count += 1
        self._set_in_flight(1)
        try:
            async with asyncio.timeout(timeout):
                assert self.session is not None
                async with self.session.head(url, allow_redirects=False) as response:
                    return ProbeResponse(
                        status=response.status,
                        location=response.headers.get("Location"),
                        url=url,
                        start_ts=start_time,
                        end_ts=time.time(),
                    )
        finally:
            self._set_in_flight(-1)

    def get_stats(self) -> Dict[str, Any]:
        """Get current client statistics."""
        return {
            "in_flight_requests": self._in_flight_requests,
            "probe_count": self._probe_count,
        }
