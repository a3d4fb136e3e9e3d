"""Indexer Interface."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, Iterable, Optional


class Indexer:
    """Abstract base class for code indexing."""

    def index(
        self,
        repo: Path,
        cfg: Dict,
        reindex: bool = False,
        prune: bool = True,
        extra_excludes: Iterable[str] = (),
        cancel: Optional[threading.Event] = None,
    ):
        raise NotImplementedError
