"""Stream probing: HTTP client, validator and bounded executor."""

from .executor import run_all
from .http_client import ProbeClient, ProbeResponse
from .validator import validate

__all__ = ["ProbeClient", "ProbeResponse", "run_all", "validate"]
