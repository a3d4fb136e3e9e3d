"""Token-aware chunking of file content."""

from __future__ import annotations

import dataclasses
import functools
import logging
import threading
from typing import Callable, Iterable, Iterator, List, Optional

import tiktoken

from .errors import raise_if_cancelled
from .models import ChunkPolicy, SplitMode

logger = logging.getLogger(__name__)

TokenCounter = Callable[[str], int]

# Characters that end a unit in separator mode.
SEPARATORS = frozenset("\n\r \t,;:|=.{}()[]-")


@functools.lru_cache(maxsize=1)
def _encoder() -> tiktoken.Encoding:
    # cl100k_base is compatible with most modern models
    return tiktoken.get_encoding("cl100k_base")


def count_tokens(text: str) -> int:
    """Count tokens in text using tiktoken.

    Args:
        text: Text to count tokens for

    Returns:
        Number of tokens
    """
    if not text:
        return 0
    return len(_encoder().encode(text, disallowed_special=()))


@dataclasses.dataclass(frozen=True)
class ChunkPiece:
    """One emitted chunk.

    ``overlap_chars`` is the length of the prefix repeated from the
    previous chunk, so ``text[overlap_chars:]`` is the new content.
    """

    text: str
    overlap_chars: int = 0

    @property
    def new_text(self) -> str:
        return self.text[self.overlap_chars:]


def normalize_newlines(content: str) -> str:
    return content.replace("\r\n", "\n")


def split_lines(text: str) -> Iterator[str]:
    """Yield newline-terminated lines; the last line keeps no newline if the text had none."""
    start = 0
    while True:
        end = text.find("\n", start)
        if end == -1:
            if start < len(text):
                yield text[start:]
            return
        yield text[start:end + 1]
        start = end + 1


def split_by_separators(text: str) -> Iterator[str]:
    """Yield runs of text, each ending right after a structural punctuation char."""
    buf: List[str] = []
    for ch in text:
        buf.append(ch)
        if ch in SEPARATORS:
            yield "".join(buf)
            buf = []
    if buf:
        yield "".join(buf)


def split_aggressively(
    text: str,
    max_tokens: int,
    hard_max_chars: int,
    token_counter: TokenCounter,
) -> Iterator[str]:
    """Cut an oversized unit character by character under both ceilings."""
    buf: List[str] = []
    for ch in text:
        buf.append(ch)
        if len(buf) >= hard_max_chars or token_counter("".join(buf)) >= max_tokens:
            yield "".join(buf)
            buf = []
    if buf:
        yield "".join(buf)


class TokenAwareChunker:
    """Splits content into chunks bounded by a ChunkPolicy.

    Chunks are produced lazily; the generator can be consumed once.
    """

    def __init__(self, token_counter: TokenCounter = count_tokens):
        self.count_tokens = token_counter

    def chunk(
        self,
        content: str,
        policy: ChunkPolicy,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[str]:
        for piece in self.iter_pieces(content, policy, cancel=cancel):
            yield piece.text

    def iter_pieces(
        self,
        content: str,
        policy: ChunkPolicy,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[ChunkPiece]:
        if not content or content.isspace():
            return

        content = normalize_newlines(content)
        units: Iterable[str]
        if policy.mode is SplitMode.SEPARATORS:
            units = split_by_separators(content)
        else:
            units = split_lines(content)

        max_tokens = policy.max_tokens
        hard_max_chars = policy.hard_max_chars

        current: List[str] = []
        current_tokens: List[int] = []
        token_total = 0
        char_total = 0
        carried = 0

        for unit in units:
            raise_if_cancelled(cancel)
            if not unit:
                continue

            unit_tokens = self.count_tokens(unit)

            # One unit alone is over budget: flush, then cut it apart.
            if unit_tokens > max_tokens or len(unit) > hard_max_chars:
                if current:
                    yield self._piece(current, carried)
                    current, current_tokens, carried = [], [], 0
                    token_total = char_total = 0
                for part in split_aggressively(unit, max_tokens, hard_max_chars, self.count_tokens):
                    yield ChunkPiece(part)
                continue

            if current and (
                token_total + unit_tokens > max_tokens
                or char_total + len(unit) > hard_max_chars
            ):
                yield self._piece(current, carried)
                current, current_tokens = self._overlap_tail(
                    current, current_tokens, policy, unit, unit_tokens
                )
                carried = len(current)
                token_total = sum(current_tokens)
                char_total = sum(len(u) for u in current)

            current.append(unit)
            current_tokens.append(unit_tokens)
            token_total += unit_tokens
            char_total += len(unit)

        if current:
            yield self._piece(current, carried)

    @staticmethod
    def _piece(units: List[str], carried: int) -> ChunkPiece:
        return ChunkPiece("".join(units), sum(len(u) for u in units[:carried]))

    @staticmethod
    def _overlap_tail(
        units: List[str],
        unit_tokens: List[int],
        policy: ChunkPolicy,
        next_unit: str,
        next_tokens: int,
    ):
        """Suffix of ``units`` within ``overlap_tokens`` that still leaves room for ``next_unit``."""
        if policy.overlap_tokens <= 0:
            return [], []

        start = len(units)
        total = 0
        for i in range(len(units) - 1, -1, -1):
            if total + unit_tokens[i] > policy.overlap_tokens:
                break
            total += unit_tokens[i]
            start = i

        tail = units[start:]
        tail_tokens = unit_tokens[start:]
        # Drop leading overlap units until the next unit fits both budgets.
        # Carrying the tail unchanged could push a chunk past max_tokens or
        # hard_max_chars; here the budgets win over a full overlap.
        while tail and (
            sum(tail_tokens) + next_tokens > policy.max_tokens
            or sum(len(u) for u in tail) + len(next_unit) > policy.hard_max_chars
        ):
            tail = tail[1:]
            tail_tokens = tail_tokens[1:]
        return list(tail), list(tail_tokens)


def chunk_text(
    content: str,
    policy: ChunkPolicy,
    token_counter: TokenCounter = count_tokens,
) -> List[str]:
    """Chunk content eagerly (Functional Wrapper)."""
    chunker = TokenAwareChunker(token_counter=token_counter)
    return list(chunker.chunk(content, policy))
