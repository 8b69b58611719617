"""
Playlist reconstruction from validation results.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Set

import structlog

from m3usieve.config.config import PlaylistConfig
from m3usieve.playlist.parser import is_metadata_line, is_resource_line
from m3usieve.protocols import ValidatedSet

logger = structlog.get_logger(__name__)

_DEFAULT_PLAYLIST = PlaylistConfig()


class _Emitter:
    """Collects output lines, dropping any value already written."""

    def __init__(self) -> None:
        self.lines: List[str] = []
        self._seen: Set[str] = set()

    def __contains__(self, line: str) -> bool:
        return line in self._seen

    def emit(self, line: str) -> None:
        if line not in self._seen:
            self.lines.append(line)
            self._seen.add(line)


def rebuild(
    original_lines: Sequence[str],
    validated: ValidatedSet,
    config: Optional[PlaylistConfig] = None,
) -> str:
    """
    Rebuild a playlist keeping only validated resources.

    Single forward pass over the original lines:

    - existing header lines are skipped, the configured header is written first
    - a metadata line survives only together with the resource line directly
      below it, and only when that line's position is in ``validated``
    - a bare resource line survives when its own position is in ``validated``
    - every other non-empty line is copied as-is
    - no line value is written twice

    Surviving resources are written with their final (redirect-resolved) URI.

    Returns:
        The rebuilt document, newline-terminated
    """
    config = config or _DEFAULT_PLAYLIST
    out = _Emitter()
    out.emit(config.header)

    index = 0
    count = len(original_lines)
    while index < count:
        line = original_lines[index].strip()

        if line.startswith(config.header):
            pass
        elif is_metadata_line(line, config):
            next_index = index + 1
            if next_index < count:
                next_line = original_lines[next_index].strip()
                link = validated.get(next_index)
                if link is not None and is_resource_line(next_line, config):
                    # A pair whose URI was already written is dropped whole so
                    # the metadata line cannot end up without its resource.
                    if link.final_uri not in out:
                        out.emit(line)
                        out.emit(link.final_uri)
                    index = next_index
        elif is_resource_line(line, config):
            link = validated.get(index)
            if link is not None:
                out.emit(link.final_uri)
        elif line:
            out.emit(line)

        index += 1

    logger.debug("Rebuilt playlist", input_lines=count, output_lines=len(out.lines), validated=len(validated))
    return "\n".join(out.lines) + "\n"


def has_content(text: str, config: Optional[PlaylistConfig] = None) -> bool:
    """Return True when a rebuilt document holds anything beyond its header."""
    config = config or _DEFAULT_PLAYLIST
    return any(line.strip() and line.strip() != config.header for line in text.split("\n"))
