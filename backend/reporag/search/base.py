"""Searcher Interface."""

from __future__ import annotations

import threading
from typing import Optional, Sequence

from ..core import SearchContext


class Searcher:
    """Abstract base class for semantic search."""

    def retrieve(
        self,
        question: str,
        top_k: int = 7,
        repository_ids: Optional[Sequence[int]] = None,
        memory_embedding: Optional[Sequence[float]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SearchContext:
        """Rank stored chunks against a question.

        Args:
            question: Natural-language question (must not be blank)
            top_k: Number of results to return
            repository_ids: Restrict candidates to these repositories
            memory_embedding: Conversation vector blended into the query
            cancel: Event that aborts the scan when set

        Returns:
            SearchContext with chunks sorted by descending score
        """
        raise NotImplementedError
