"""Core functionality for reporag."""

from .models import (
    ChunkPolicy,
    ChunkRecord,
    ConversationTurn,
    FileRecord,
    RepositoryRecord,
    ScoredChunk,
    SearchContext,
    SearchResult,
    SplitMode,
)
from .errors import EmbeddingError, InvalidQuestionError, OperationCancelled, raise_if_cancelled
from .chunking import ChunkPiece, TokenAwareChunker, chunk_text, count_tokens
from .policy import ChunkSpecSelector
from .languages import get_extension, guess_language, is_file_with_no_extension
from .embeddings import Embedder, OllamaEmbedder, SentenceTransformersEmbedder, make_embedder

__all__ = [
    "ChunkPolicy",
    "ChunkRecord",
    "ConversationTurn",
    "FileRecord",
    "RepositoryRecord",
    "ScoredChunk",
    "SearchContext",
    "SearchResult",
    "SplitMode",
    "EmbeddingError",
    "InvalidQuestionError",
    "OperationCancelled",
    "raise_if_cancelled",
    "ChunkPiece",
    "TokenAwareChunker",
    "chunk_text",
    "count_tokens",
    "ChunkSpecSelector",
    "get_extension",
    "guess_language",
    "is_file_with_no_extension",
    "Embedder",
    "OllamaEmbedder",
    "SentenceTransformersEmbedder",
    "make_embedder",
]
