"""Bounded conversation history with a cached combined embedding."""

from __future__ import annotations

import collections
import logging
import threading
from typing import Dict, List, Optional, Tuple

from ..core import ConversationTurn, Embedder, raise_if_cancelled
from ..core.vectors import mean, normalize

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 8


class ConversationMemory:
    """Last ``max_turns`` question/answer pairs of one chat session.

    ``get_combined_embedding`` averages the turn embeddings and L2-normalizes
    the mean. The result is cached until the next ``add_turn`` or ``clear``.
    Instances are not shared between sessions.
    """

    def __init__(self, embedder: Embedder, max_turns: int = DEFAULT_MAX_TURNS):
        if max_turns <= 0:
            raise ValueError(f"max_turns must be positive, got {max_turns}")
        self.embedder = embedder
        self.max_turns = max_turns
        self._turns: collections.deque[ConversationTurn] = collections.deque(maxlen=max_turns)
        self._cached: Optional[List[float]] = None

    @classmethod
    def from_config(cls, cfg: Dict, embedder: Embedder) -> "ConversationMemory":
        return cls(embedder, max_turns=int(cfg.get("chat", {}).get("max_turns", DEFAULT_MAX_TURNS)))

    def __len__(self) -> int:
        return len(self._turns)

    def add_turn(self, question: str, answer: str) -> None:
        self._turns.append(ConversationTurn(question, answer))
        self._cached = None

    def clear(self) -> None:
        self._turns.clear()
        self._cached = None

    def get_recent(self, count: int) -> List[Tuple[str, str]]:
        """Most recent turns first."""
        if count <= 0:
            return []
        recent = list(self._turns)[::-1][:count]
        return [(t.question, t.answer) for t in recent]

    def summary(self, max_turns: Optional[int] = None) -> str:
        """Recent turns, oldest first, as plain text for the answer prompt."""
        turns = self.get_recent(max_turns or self.max_turns)[::-1]
        parts = [f"Q: {q}\nA: {a}" for q, a in turns]
        return "\n\n".join(parts)

    def get_combined_embedding(self, cancel: Optional[threading.Event] = None) -> Optional[List[float]]:
        """Normalized mean of the turn embeddings, or None when there is no memory."""
        if self._cached is not None:
            return list(self._cached)

        if not self._turns:
            return None

        dim: Optional[int] = None
        accepted: List[List[float]] = []

        for turn in self._turns:
            raise_if_cancelled(cancel)
            embedding = self.embedder.embed_one(f"{turn.question} {turn.answer}")
            if dim is None:
                # The first turn fixes the dimensionality.
                if not embedding:
                    return None
                dim = len(embedding)
            if len(embedding) != dim:
                logger.debug(f"Skipping turn embedding of dimension {len(embedding)} (expected {dim})")
                continue
            accepted.append(embedding)

        if not accepted:
            return None

        self._cached = normalize(mean(accepted))
        return list(self._cached)
