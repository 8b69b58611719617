"""
Bounded-concurrency execution of stream probes.

A fixed pool of worker tasks drains a queue of entries. A worker picks up the
next entry as soon as its current probe resolves, so a slow stream only ever
holds its own slot. Workers never touch the validated set: they hand results
back through a second queue and ``run_all`` alone records them.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Sequence

import structlog

from m3usieve.protocols import (
    ProbeFunc,
    Reachable,
    ResourceEntry,
    ResultCallback,
    TransportError,
    ValidatedLink,
    ValidatedSet,
    ValidationResult,
)

logger = structlog.get_logger(__name__)


async def _worker(
    worker_id: str,
    work: asyncio.Queue[Optional[ResourceEntry]],
    results: asyncio.Queue[ValidationResult],
    probe: ProbeFunc,
) -> None:
    while True:
        entry = await work.get()
        if entry is None:
            break

        try:
            result = await probe(entry)
        except Exception as e:
            # A faulty probe must not take down the task group and its siblings.
            logger.warning("Probe raised", worker=worker_id, url=entry.resource_uri, error=str(e))
            result = ValidationResult(entry=entry, outcome=TransportError(message=str(e) or type(e).__name__))

        await results.put(result)


async def run_all(
    entries: Sequence[ResourceEntry],
    probe: ProbeFunc,
    concurrency_limit: int,
    on_result: Optional[ResultCallback] = None,
) -> ValidatedSet:
    """
    Probe every entry once with at most ``concurrency_limit`` probes in flight.

    Args:
        entries: Entries to validate, each submitted exactly once
        probe: Coroutine function validating one entry
        concurrency_limit: Maximum simultaneous probes (>= 1)
        on_result: Optional callback invoked for every result as it arrives

    Returns:
        Reachable entries keyed by their original resource-line position.
        Returned only after every entry has resolved.
    """
    if concurrency_limit < 1:
        raise ValueError(f"concurrency_limit must be >= 1, got {concurrency_limit}")

    validated: ValidatedSet = {}
    if not entries:
        return validated

    work: asyncio.Queue[Optional[ResourceEntry]] = asyncio.Queue()
    results: asyncio.Queue[ValidationResult] = asyncio.Queue()

    num_workers = min(concurrency_limit, len(entries))
    for entry in entries:
        work.put_nowait(entry)
    for _ in range(num_workers):
        work.put_nowait(None)

    logger.debug("Starting probe workers", entries=len(entries), workers=num_workers)

    async with asyncio.TaskGroup() as tg:
        for i in range(num_workers):
            tg.create_task(_worker(f"probe-worker-{i}", work, results, probe))

        for _ in range(len(entries)):
            result = await results.get()
            if isinstance(result.outcome, Reachable):
                validated[result.entry.position] = ValidatedLink(
                    metadata_line=result.entry.metadata_line,
                    final_uri=result.outcome.final_uri,
                )
            if on_result is not None:
                on_result(result)

    logger.debug("Probe workers finished", entries=len(entries), reachable=len(validated))
    return validated
