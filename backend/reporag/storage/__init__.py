"""Chunk storage backends (SQLAlchemy)."""

from .base import ChunkStore, FileWriter
from .factory import create_store
from .sql import SqlChunkStore, SqlFileWriter

__all__ = [
    "ChunkStore",
    "FileWriter",
    "SqlChunkStore",
    "SqlFileWriter",
    "create_store",
]
