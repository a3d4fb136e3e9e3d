"""Indexing functionality for reporag."""

from .files import iter_files, validate_exclude_patterns
from .indexer import UNCHANGED, Indexer, IndexSummary, build_index

__all__ = [
    "UNCHANGED",
    "Indexer",
    "IndexSummary",
    "build_index",
    "iter_files",
    "validate_exclude_patterns",
]
