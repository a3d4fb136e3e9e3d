"""Incremental code indexing and embedding retrieval for local repositories."""

__version__ = "0.1.0"
