"""File utility functions."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Final

logger: Final = logging.getLogger(__name__)


def ensure_directory_exists(directory: Path) -> None:
    """Create directory if it doesn't exist.

    Args:
        directory: Path to create
    """
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        logger.debug("Created directory: %s", directory)


def write_file_durably(path: Path, data: bytes) -> None:
    """Write bytes to a new file and flush them to storage before returning.

    The file is created exclusively, so an existing file is never overwritten.

    Args:
        path: Destination file path
        data: Bytes to write

    Raises:
        FileExistsError: If ``path`` already exists
        OSError: If the write or flush fails
    """
    with open(path, "xb") as fh:
        fh.write(data)
        fh.flush()
        os.fsync(fh.fileno())
