"""Semantic search for reporag."""

from .hints import extract_path_hint, looks_like_path
from .searcher import Searcher, search

__all__ = [
    "Searcher",
    "extract_path_hint",
    "looks_like_path",
    "search",
]
