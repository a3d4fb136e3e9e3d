"""Data models for reporag."""

from __future__ import annotations

import dataclasses
import enum
from typing import List, Optional, Tuple


class SplitMode(enum.Enum):
    """How content is cut into units before budgeting."""

    LINES = "lines"
    SEPARATORS = "separators"


@dataclasses.dataclass(frozen=True)
class ChunkPolicy:
    """Token/char budget chosen for one file."""

    max_tokens: int
    overlap_tokens: int
    hard_max_chars: int
    mode: SplitMode = SplitMode.LINES


@dataclasses.dataclass
class ChunkRecord:
    """Represents a code chunk with metadata and embedding."""

    repository_id: int
    path: str
    chunk_index: int
    content: str
    file_hash: str
    extension: str = ""
    language: str = "text"
    embedding: List[float] = dataclasses.field(default_factory=list)
    id: Optional[int] = None


@dataclasses.dataclass
class FileRecord:
    repository_id: int
    path: str
    content_hash: str
    language: str
    content: str


@dataclasses.dataclass
class RepositoryRecord:
    id: int
    root_path: str
    name: str


@dataclasses.dataclass(frozen=True)
class ScoredChunk:
    chunk: ChunkRecord
    score: float


@dataclasses.dataclass(frozen=True)
class SearchContext:
    """Ranked retrieval output for a single question."""

    question: str
    chunks: Tuple[ScoredChunk, ...] = ()

    @property
    def has_results(self) -> bool:
        return len(self.chunks) > 0


@dataclasses.dataclass(frozen=True)
class SearchResult:
    question: str
    chunks: Tuple[ScoredChunk, ...]
    answer: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class ConversationTurn:
    question: str
    answer: str
