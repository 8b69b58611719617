"""Output file naming and playlist discovery."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

DEFAULT_EXTENSIONS = (".m3u", ".m3u8")


def checked_output_path(source: Path, output_dir: Path, suffix: str = "_checked") -> Path:
    """
    Destination for the checked copy of ``source``.

    >>> checked_output_path(Path("in/news.m3u8"), Path("out")).name
    'news_checked.m3u8'
    """
    return Path(output_dir) / f"{source.stem}{suffix}{source.suffix}"


def find_playlists(input_dir: Path, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> List[Path]:
    """Playlist files directly inside ``input_dir``, sorted by name."""
    wanted = {ext.lower() for ext in extensions}
    return sorted(path for path in Path(input_dir).iterdir() if path.is_file() and path.suffix.lower() in wanted)
