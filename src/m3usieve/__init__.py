"""
m3usieve - checks the streams of M3U playlists and keeps only the reachable ones.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .checker import ProbeClient, run_all, validate
from .config import Config
from .pipeline import DocumentError, PlaylistPipeline
from .playlist import parse, rebuild

__all__ = [
    "__version__",
    "Config",
    "DocumentError",
    "PlaylistPipeline",
    "ProbeClient",
    "parse",
    "rebuild",
    "run_all",
    "validate",
]
