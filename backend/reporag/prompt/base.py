"""PromptBuilder Interface."""

from __future__ import annotations

from typing import List, Optional

from ..core import ChunkRecord


class PromptBuilder:
    """Abstract base class for prompt building."""

    def build_prompt(
        self,
        question: str,
        chunks: List[ChunkRecord],
        memory: Optional[str] = None,
    ) -> str:
        """Build the answer prompt from ranked chunks.

        Args:
            question: User question
            chunks: Retrieved chunks, best first
            memory: Optional conversation summary

        Returns:
            Prompt text that fits the builder's token budget
        """
        raise NotImplementedError
