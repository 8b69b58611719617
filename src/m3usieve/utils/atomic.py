"""
Atomic file writing for checked playlists.

A reader of the output directory never sees a half-written playlist: content
goes to a temporary file next to the target and is then renamed over it.
"""

import os
import shutil
import tempfile
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


def atomic_write_text(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Atomically write text content to a file, creating parent directories.

    Uses a same-directory temporary file followed by ``os.replace``, with a
    fallback to ``shutil.move`` where the rename is refused.

    Args:
        target_path: Target file path to write to
        content: Text content to write
        encoding: Text encoding to use (default: utf-8)

    Raises:
        OSError: If writing fails
    """
    target_path = Path(target_path)
    target_path.parent.mkdir(parents=True, exist_ok=True)

    temp_file_path = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            dir=target_path.parent,
            prefix=f".{target_path.name}.",
            suffix=".tmp",
            delete=False,
            encoding=encoding,
            newline="",
        ) as temp_file:
            temp_file_path = Path(temp_file.name)
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())

        try:
            os.replace(str(temp_file_path), str(target_path))
            logger.debug("Atomic write completed", target=str(target_path), method="os.replace")
        except OSError as rename_error:
            logger.warning("Atomic rename failed, falling back to shutil.move", error=str(rename_error))
            shutil.move(str(temp_file_path), str(target_path))

    except Exception as e:
        if temp_file_path and temp_file_path.exists():
            try:
                temp_file_path.unlink()
            except OSError as cleanup_error:
                logger.warning(
                    "Failed to clean up temporary file", temp_file=str(temp_file_path), error=str(cleanup_error)
                )
        raise OSError(f"Failed to atomically write {target_path}: {e}") from e
