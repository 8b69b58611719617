"""
Pipeline orchestration for m3usieve.

For every playlist document: parse, probe all entries with bounded
concurrency, rebuild from the reachable ones, then decide whether the result is
worth writing.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import AsyncIterator, Callable, Optional, Sequence
from uuid import uuid4

import structlog
from structlog.contextvars import bound_contextvars

from m3usieve.checker.executor import run_all
from m3usieve.checker.http_client import ProbeClient
from m3usieve.checker.validator import HeadClient, validate
from m3usieve.config.config import Config
from m3usieve.observability.metrics import METRICS
from m3usieve.playlist.parser import parse
from m3usieve.playlist.rebuilder import has_content, rebuild
from m3usieve.protocols import DocumentReport, Persister, ResultCallback, RunSummary
from m3usieve.utils.atomic import atomic_write_text
from m3usieve.utils.naming import checked_output_path

logger = structlog.get_logger(__name__)


class DocumentError(Exception):
    """A playlist could not be read or its checked copy could not be written."""

    def __init__(self, source: Path, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


@dataclass
class CheckOutcome:
    """Result of checking one document in memory.

    ``text`` is None when nothing should be written.
    """

    text: Optional[str]
    validated_count: int
    total_count: int
    reason: str


class PlaylistPipeline:
    """
    Runs documents through parse, validation and rebuild.

    The probe client is shared across all documents of a ``run``. When none is
    injected, the pipeline opens its own ``ProbeClient`` for the duration of
    each public call.
    """

    def __init__(
        self,
        config: Config,
        client: Optional[HeadClient] = None,
        persist: Persister = atomic_write_text,
        on_result: Optional[ResultCallback] = None,
        on_document: Optional[Callable[[Path, int], None]] = None,
    ) -> None:
        self.config = config
        self.client = client
        self.persist = persist
        self.on_result = on_result
        self.on_document = on_document
        self.logger = structlog.get_logger(self.__class__.__name__)

    @asynccontextmanager
    async def _probe_client(self) -> AsyncIterator[HeadClient]:
        if self.client is not None:
            yield self.client
            return
        async with ProbeClient(self.config) as client:
            yield client

    async def check_document(self, raw_text: str) -> CheckOutcome:
        """Check playlist text without touching the filesystem."""
        async with self._probe_client() as client:
            return await self._check(raw_text, client)

    async def process_file(self, source: Path, destination: Path) -> DocumentReport:
        """Check ``source`` and write the surviving entries to ``destination``."""
        async with self._probe_client() as client:
            return await self._process(Path(source), Path(destination), client)

    async def run(self, sources: Sequence[Path], output_dir: Path) -> RunSummary:
        """
        Process every source document, writing checked copies into ``output_dir``.

        A document that cannot be read or written is recorded as a failure and
        the run moves on to the next one.
        """
        summary = RunSummary()
        run_id = str(uuid4())
        start_time = time.time()

        with bound_contextvars(run_id=run_id):
            self.logger.info("Starting playlist run", documents=len(sources), output_dir=str(output_dir))

            async with self._probe_client() as client:
                for source in sources:
                    source = Path(source)
                    destination = checked_output_path(source, output_dir, self.config.output.suffix)
                    try:
                        report = await self._process(source, destination, client)
                    except DocumentError as e:
                        self.logger.error("Document failed", document=str(source), error=str(e))
                        METRICS["documents_total"].labels(result="failed").inc()
                        summary.record_failure(str(source), str(e))
                        continue
                    summary.record(report)

            self.logger.info(
                "Playlist run finished",
                documents=len(summary.documents),
                persisted=summary.persisted_count,
                failed=len(summary.failures),
                validated=summary.validated_total,
                checked=summary.checked_total,
                duration=round(time.time() - start_time, 2),
            )
        return summary

    async def _check(self, raw_text: str, client: HeadClient, source: Optional[Path] = None) -> CheckOutcome:
        playlist_config = self.config.playlist
        checker_config = self.config.checker

        document = parse(raw_text, playlist_config)
        total = document.total_count
        if self.on_document is not None and source is not None:
            self.on_document(source, total)

        if total == 0:
            text = rebuild(document.lines, {}, playlist_config)
            if has_content(text, playlist_config):
                return CheckOutcome(text=text, validated_count=0, total_count=0, reason="no_streams_content_kept")
            return CheckOutcome(text=None, validated_count=0, total_count=0, reason="empty")

        probe = partial(
            validate,
            client,
            timeout=checker_config.timeout,
            max_redirects=checker_config.max_redirects,
            final_hop_attempts=checker_config.final_hop_attempts,
        )
        validated = await run_all(document.entries, probe, checker_config.concurrency_limit, self.on_result)

        if not validated:
            return CheckOutcome(text=None, validated_count=0, total_count=total, reason="none_reachable")

        text = rebuild(document.lines, validated, playlist_config)
        return CheckOutcome(text=text, validated_count=len(validated), total_count=total, reason="checked")

    async def _process(self, source: Path, destination: Path, client: HeadClient) -> DocumentReport:
        try:
            raw_text = source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise DocumentError(source, f"cannot read playlist: {e}") from e

        outcome = await self._check(raw_text, client, source)
        self.logger.info(
            "Check complete",
            document=source.name,
            validated=outcome.validated_count,
            total=outcome.total_count,
            reason=outcome.reason,
        )

        persisted = False
        if outcome.text is not None:
            try:
                self.persist(destination, outcome.text)
            except OSError as e:
                raise DocumentError(source, f"cannot write {destination}: {e}") from e
            persisted = True
            self.logger.info("Saved checked playlist", document=source.name, destination=str(destination))

        METRICS["documents_total"].labels(result="persisted" if persisted else "skipped").inc()
        return DocumentReport(
            source=str(source),
            validated_count=outcome.validated_count,
            total_count=outcome.total_count,
            persisted=persisted,
            destination=str(destination) if persisted else None,
            reason=outcome.reason,
        )
