"""Abstract chunk storage interface."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from ..core.models import ChunkRecord, FileRecord, RepositoryRecord


class FileWriter(ABC):
    """Write operations for one (repository, path), applied as a single unit."""

    @abstractmethod
    def delete_chunks_for_file(self) -> int:
        """Delete every stored chunk of the file; returns the number removed."""

    @abstractmethod
    def insert_chunk(self, chunk: ChunkRecord) -> None:
        pass

    @abstractmethod
    def set_stored_hash(self, content_hash: str, language: str = "text", content: str = "") -> None:
        pass


class ChunkStore(ABC):
    """Abstract base class for chunk storage backends."""

    @abstractmethod
    def get_or_create_repository(self, root: Path) -> RepositoryRecord:
        pass

    @abstractmethod
    def list_repositories(self) -> List[RepositoryRecord]:
        pass

    @abstractmethod
    def get_stored_hash(self, repository_id: int, path: str) -> Optional[str]:
        pass

    @abstractmethod
    def get_file_hashes(self, repository_id: int) -> Dict[str, str]:
        pass

    @abstractmethod
    def get_file(self, repository_id: int, path: str) -> Optional[FileRecord]:
        pass

    @abstractmethod
    def iter_chunks(
        self,
        repository_ids: Optional[Sequence[int]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[ChunkRecord]:
        """Lazily stream stored chunks, optionally scoped to repositories."""

    @abstractmethod
    def file_transaction(self, repository_id: int, path: str) -> AbstractContextManager[FileWriter]:
        """Commit all writes made through the yielded writer, or none of them."""

    @abstractmethod
    def delete_file(self, repository_id: int, path: str) -> None:
        pass

    @abstractmethod
    def mark_indexed(self, repository_id: int) -> None:
        pass

    def get_chunks_for_file(self, repository_id: int, path: str) -> List[ChunkRecord]:
        """Chunks of one file ordered by index (default implementation)."""
        chunks = [
            c for c in self.iter_chunks([repository_id])
            if c.path == path
        ]
        return sorted(chunks, key=lambda c: c.chunk_index)

    def count(self, repository_id: Optional[int] = None) -> int:
        """Count chunks (default implementation)."""
        ids = [repository_id] if repository_id is not None else None
        return sum(1 for _ in self.iter_chunks(ids))
