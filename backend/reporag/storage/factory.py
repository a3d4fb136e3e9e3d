"""Factory for creating chunk store instances."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from ..config import default_database_url
from .base import ChunkStore
from .sql import SqlChunkStore


def create_store(cfg: Dict, repo_path: Optional[Path] = None) -> ChunkStore:
    url = (cfg.get("database") or {}).get("url")
    if not url:
        url = default_database_url(repo_path.resolve()) if repo_path else "sqlite://"
    return SqlChunkStore(url=url)
