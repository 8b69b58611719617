"""
Protocols and dataclasses shared across m3usieve.

The playlist core moves three kinds of values between its stages:

- ``ResourceEntry`` values produced once per document by the parser
- ``ValidationResult`` values produced by the validator, one per entry
- a ``ValidatedSet`` assembled by the executor and consumed by the rebuilder

All of them are immutable once created.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Tuple, Union

# ============================================================================
# Playlist model
# ============================================================================


@dataclass(frozen=True)
class ResourceEntry:
    """A resource line and the metadata line that was pending when it was read."""

    resource_uri: str
    position: int
    metadata_line: Optional[str] = None
    metadata_position: Optional[int] = None


@dataclass(frozen=True)
class Document:
    """Raw playlist lines plus the entries derived from them."""

    lines: Tuple[str, ...]
    entries: Tuple[ResourceEntry, ...]

    @property
    def total_count(self) -> int:
        return len(self.entries)


# ============================================================================
# Probe outcomes
# ============================================================================


@dataclass(frozen=True)
class Reachable:
    """Success status, possibly after following redirects."""

    final_uri: str


@dataclass(frozen=True)
class Unreachable:
    """A response arrived but its status is not acceptable."""

    status_code: int


@dataclass(frozen=True)
class TimedOut:
    """A single probe exceeded its time budget."""


@dataclass(frozen=True)
class TransportError:
    """Resolution, connection or TLS failure."""

    message: str


Outcome = Union[Reachable, Unreachable, TimedOut, TransportError]


@dataclass(frozen=True)
class ValidationResult:
    entry: ResourceEntry
    outcome: Outcome
    redirects: int = 0

    @property
    def is_reachable(self) -> bool:
        return isinstance(self.outcome, Reachable)

    @property
    def outcome_label(self) -> str:
        """Short name used for logs and metric labels."""
        if isinstance(self.outcome, Reachable):
            return "reachable"
        if isinstance(self.outcome, Unreachable):
            return "unreachable"
        if isinstance(self.outcome, TimedOut):
            return "timed_out"
        return "transport_error"


@dataclass(frozen=True)
class ValidatedLink:
    """What the rebuilder needs to emit a surviving entry."""

    metadata_line: Optional[str]
    final_uri: str


# Keyed by the original resource-line position.
ValidatedSet = Dict[int, ValidatedLink]

ProbeFunc = Callable[[ResourceEntry], Awaitable[ValidationResult]]
ResultCallback = Callable[[ValidationResult], None]


# ============================================================================
# Run reporting
# ============================================================================


@dataclass
class DocumentReport:
    """Outcome of checking a single playlist document."""

    source: str
    validated_count: int
    total_count: int
    persisted: bool
    destination: Optional[str] = None
    reason: Optional[str] = None


@dataclass
class RunSummary:
    """Per-document counts plus process-wide running totals."""

    documents: List[DocumentReport] = field(default_factory=list)
    failures: Dict[str, str] = field(default_factory=dict)
    validated_total: int = 0
    checked_total: int = 0

    def record(self, report: DocumentReport) -> None:
        self.documents.append(report)
        self.validated_total += report.validated_count
        self.checked_total += report.total_count

    def record_failure(self, source: str, error: str) -> None:
        self.failures[source] = error

    @property
    def persisted_count(self) -> int:
        return sum(1 for report in self.documents if report.persisted)


# ============================================================================
# Collaborator protocols
# ============================================================================


class Persister(Protocol):
    """Writes a rebuilt document to its destination."""

    def __call__(self, target_path: Path, content: str) -> None: ...
