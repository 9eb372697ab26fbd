"""File utility functions."""

from __future__ import annotations

import logging
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


def require_directory(directory: Path, source: str) -> Path:
    """Return directory, or raise if it does not exist.

    Args:
        directory: Directory that must exist
        source: Where the path came from, used in the error message

    Raises:
        FileNotFoundError: If the directory is missing
    """
    if not directory.is_dir():
        raise FileNotFoundError(f"Directory from {source} not found: {directory}")
    return directory
