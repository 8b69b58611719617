"""
Playlist parsing.

Turns raw M3U text into its lines and the ordered list of resource entries,
pairing each resource line with the metadata marker that preceded it.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from m3usieve.config.config import PlaylistConfig
from m3usieve.protocols import Document, ResourceEntry

logger = structlog.get_logger(__name__)

_DEFAULT_PLAYLIST = PlaylistConfig()


def split_lines(raw_text: str) -> List[str]:
    """Split on line boundaries, tolerating CRLF input."""
    return raw_text.split("\n")


def is_metadata_line(line: str, config: PlaylistConfig = _DEFAULT_PLAYLIST) -> bool:
    return line.startswith(config.metadata_prefix)


def is_resource_line(line: str, config: PlaylistConfig = _DEFAULT_PLAYLIST) -> bool:
    return line.startswith(tuple(config.uri_schemes))


def parse(raw_text: str, config: Optional[PlaylistConfig] = None) -> Document:
    """
    Parse playlist text into a Document.

    A metadata line stays pending until the next resource line consumes it,
    so anything between the two (comments, blank lines, other directives) does
    not break the pairing. A second metadata line replaces a pending one.
    Lines are compared stripped; positions refer to the unstripped line list.

    Args:
        raw_text: Playlist content
        config: Marker and scheme configuration (defaults to ``#EXTINF``/``http``)

    Returns:
        Document with the original lines and the derived entries
    """
    config = config or _DEFAULT_PLAYLIST
    lines = split_lines(raw_text)
    entries: List[ResourceEntry] = []

    pending_metadata: Optional[str] = None
    pending_position: Optional[int] = None

    for index, raw_line in enumerate(lines):
        line = raw_line.strip()

        if is_metadata_line(line, config):
            pending_metadata = line
            pending_position = index
        elif is_resource_line(line, config):
            entries.append(
                ResourceEntry(
                    resource_uri=line,
                    position=index,
                    metadata_line=pending_metadata,
                    metadata_position=pending_position,
                )
            )
            pending_metadata = None
            pending_position = None

    logger.debug("Parsed playlist", lines=len(lines), entries=len(entries))
    return Document(lines=tuple(lines), entries=tuple(entries))
