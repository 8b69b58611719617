"""Utility modules for m3usieve."""

from .atomic import atomic_write_text
from .naming import checked_output_path, find_playlists

__all__ = ["atomic_write_text", "checked_output_path", "find_playlists"]
