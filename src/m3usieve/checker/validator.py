"""
Reachability check for a single playlist entry.
"""

from __future__ import annotations

import asyncio
import time
from typing import Protocol
from urllib.parse import urljoin

import aiohttp
import structlog

from m3usieve.checker.http_client import ProbeResponse
from m3usieve.observability.metrics import METRICS
from m3usieve.protocols import (
    Outcome,
    Reachable,
    ResourceEntry,
    TimedOut,
    TransportError,
    Unreachable,
    ValidationResult,
)

logger = structlog.get_logger(__name__)


class HeadClient(Protocol):
    async def head(self, url: str, *, timeout: float) -> ProbeResponse: ...


def _is_success(status: int) -> bool:
    return 200 <= status < 300


def _is_redirect(status: int) -> bool:
    return 300 <= status < 400


async def validate(
    client: HeadClient,
    entry: ResourceEntry,
    timeout: float,
    max_redirects: int,
    final_hop_attempts: int = 1,
) -> ValidationResult:
    """
    Probe ``entry.resource_uri`` and classify the result.

    Redirects are followed by hand, one HEAD request per hop, each with its own
    ``timeout``. Up to ``max_redirects`` hops are followed; after that the loop
    still probes the next redirect target ``final_hop_attempts`` more times and
    reports whatever status comes back. A redirect without a Location header,
    or one still pending when the budget is spent, is reported as Unreachable.

    Never raises for network problems; they become TimedOut or TransportError.
    """
    current_uri = entry.resource_uri
    hops = 0
    boundary_attempts = 0
    start_time = time.time()
    outcome: Outcome

    while True:
        try:
            response = await client.head(current_uri, timeout=timeout)
        except asyncio.TimeoutError:
            logger.debug("Probe timed out", url=current_uri, timeout=timeout, hops=hops)
            outcome = TimedOut()
            break
        except (aiohttp.ClientError, ValueError) as e:
            logger.debug("Probe failed", url=current_uri, error=str(e), hops=hops)
            outcome = TransportError(message=str(e) or type(e).__name__)
            break

        status = response.status
        if _is_success(status):
            outcome = Reachable(final_uri=current_uri)
            break

        if _is_redirect(status) and response.location:
            target = urljoin(current_uri, response.location)
            if hops < max_redirects:
                hops += 1
                current_uri = target
                continue
            if boundary_attempts < final_hop_attempts:
                boundary_attempts += 1
                hops += 1
                current_uri = target
                continue

        outcome = Unreachable(status_code=status)
        break

    result = ValidationResult(entry=entry, outcome=outcome, redirects=hops)
    METRICS["probes_total"].labels(outcome=result.outcome_label).inc()
    METRICS["probe_latency_seconds"].observe(time.time() - start_time)
    logger.debug(
        "Probe finished",
        url=entry.resource_uri,
        final_url=current_uri,
        outcome=result.outcome_label,
        redirects=hops,
    )
    return result
