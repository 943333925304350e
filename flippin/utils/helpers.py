"""Utility functions."""

import hashlib
from pathlib import Path


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    Path(path).mkdir(parents=True, exist_ok=True)


def get_file_size_mb(path: str) -> float:
    """Get file size in megabytes."""
    if not Path(path).exists():
        return 0.0
    return Path(path).stat().st_size / (1024 * 1024)


def short_hash(text: str, length: int = 16) -> str:
    """Stable hex digest prefix of a string."""
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:length]
