"""File utility functions."""

from __future__ import annotations

import hashlib
from pathlib import Path

BINARY_SNIFF_BYTES = 8192


def is_binary_file(path: Path) -> bool:
    """NUL byte in the first few KB means binary; unreadable files count as binary too."""
    try:
        with path.open("rb") as f:
            head = f.read(BINARY_SNIFF_BYTES)
    except OSError:
        return True
    return b"\x00" in head


def content_sha256(text: str) -> str:
    """Lower-case hex SHA-256 of the UTF-8 encoded text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def read_text(path: Path) -> str:
    """Decode as UTF-8, dropping a leading BOM and replacing undecodable bytes."""
    return path.read_bytes().decode("utf-8-sig", errors="replace")
