"""Playlist parsing and reconstruction."""

from .parser import is_metadata_line, is_resource_line, parse
from .rebuilder import has_content, rebuild

__all__ = ["has_content", "is_metadata_line", "is_resource_line", "parse", "rebuild"]
