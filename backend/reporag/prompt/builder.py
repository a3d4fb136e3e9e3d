"""LLM prompt building."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Optional

from ..core import ChunkRecord
from .base import PromptBuilder


# ----------------------------
# Token estimation
# ----------------------------

def estimate_tokens(text: str) -> int:
    """Cheap upper-bound style estimate (~4 chars per token)."""
    return (len(text) + 3) // 4


# ----------------------------
# Prompt building
# ----------------------------

DEFAULT_SYSTEM_PROMPT = """
## SYSTEM
You are a senior software engineer helping a teammate understand a codebase.
Rules:
- Do not invent symbols, files, or behavior not present in CONTEXT.
- If something is missing, say what is missing and what file/symbol would be needed.
- Prefer pointing to exact file paths and symbol names from CONTEXT.
- When unsure, ask for the next most relevant file or chunk.
"""

SEPARATOR = "---"


@dataclass(frozen=True)
class FitPlan:
    memory_tail_chars: int
    take_chunks: int
    snippet_chars: int


@dataclass(frozen=True)
class PromptConfig:
    max_tokens: int = 120_000
    snippet_chars: int = 2000
    memory_tail_chars: int = 24_000


def _trim_snippet(content: str, max_chars: int) -> str:
    if not content or max_chars <= 0:
        return ""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + "\n…(truncated)…"


def _candidates(start: FitPlan, context_count: int) -> Iterator[FitPlan]:
    """Progressively smaller plans: less memory, fewer chunks, shorter snippets."""
    yield start

    for mem in (12_000, 8_000, 4_000, 2_000, 0):
        yield replace(start, memory_tail_chars=mem)

    k = min(start.take_chunks, context_count)
    while k > 1:
        k = max(1, k // 2)
        yield replace(start, take_chunks=k)

    for snip in (1200, 800, 400, 200):
        yield FitPlan(memory_tail_chars=0, take_chunks=min(1, context_count), snippet_chars=snip)


class DefaultPromptBuilder(PromptBuilder):
    """Renders SYSTEM / MEMORY / CONTEXT / QUESTION sections under a token budget."""

    def __init__(
        self,
        config: Optional[PromptConfig] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        count_tokens: Callable[[str], int] = estimate_tokens,
    ):
        self.config = config or PromptConfig()
        self.system_prompt = system_prompt
        self.count_tokens = count_tokens

    def build_prompt(
        self,
        question: str,
        chunks: List[ChunkRecord],
        memory: Optional[str] = None,
    ) -> str:
        start = FitPlan(
            memory_tail_chars=self.config.memory_tail_chars,
            take_chunks=len(chunks),
            snippet_chars=self.config.snippet_chars,
        )
        for plan in _candidates(start, len(chunks)):
            prompt = self._render(question, chunks, memory, plan)
            if self.count_tokens(prompt) <= self.config.max_tokens:
                return prompt

        fallback = FitPlan(memory_tail_chars=0, take_chunks=min(1, len(chunks)), snippet_chars=200)
        return self._render(question, chunks, memory, fallback)

    def _render(
        self,
        question: str,
        chunks: List[ChunkRecord],
        memory: Optional[str],
        plan: FitPlan,
    ) -> str:
        lines: List[str] = [self.system_prompt.strip(), "", SEPARATOR, ""]
        lines.extend(self._memory_section(memory, plan.memory_tail_chars))
        lines.extend(self._context_section(chunks, plan.take_chunks, plan.snippet_chars))
        lines.extend([SEPARATOR, "", "## QUESTION", question.strip()])
        return "\n".join(lines).rstrip()

    @staticmethod
    def _memory_section(memory: Optional[str], tail_chars: int) -> List[str]:
        trimmed = (memory or "").strip()
        if tail_chars <= 0 or not trimmed:
            return []
        if len(trimmed) > tail_chars:
            # Keep the most recent part
            trimmed = trimmed[-tail_chars:]
        return ["## MEMORY", trimmed, "", SEPARATOR, ""]

    @staticmethod
    def _context_section(chunks: List[ChunkRecord], take: int, snippet_chars: int) -> List[str]:
        lines = ["## CONTEXT (top matched code chunks)", ""]
        if not chunks or take <= 0:
            lines.extend(["_No relevant code snippets were found in the local index._", ""])
            return lines

        for rank, chunk in enumerate(chunks[:take], start=1):
            lines.extend([
                f"### {rank}. `{chunk.path}`",
                "",
                f"- Language: `{chunk.language}`",
                f"- Extension: `{chunk.extension}`",
                f"- ChunkIndex: `{chunk.chunk_index}`",
                "",
                f"```{chunk.language}",
                _trim_snippet(chunk.content, snippet_chars),
                "```",
                "",
            ])
        return lines


def build_prompt(
    question: str,
    chunks: List[ChunkRecord],
    memory: Optional[str] = None,
) -> str:
    """Wrapper for DefaultPromptBuilder."""
    builder = DefaultPromptBuilder()
    return builder.build_prompt(question, chunks, memory)
