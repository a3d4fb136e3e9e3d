"""SQLAlchemy chunk store (SQLite by default)."""

from __future__ import annotations

import datetime as _dt
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..core.errors import raise_if_cancelled
from ..core.models import ChunkRecord, FileRecord, RepositoryRecord
from ..core.vectors import from_bytes, to_bytes
from .base import ChunkStore, FileWriter
from .models import Base, CodeChunk, Repository, SourceFile

logger = logging.getLogger(__name__)

STREAM_BATCH_SIZE = 256


def make_engine(url: str) -> Engine:
    if url in ("sqlite://", "sqlite:///:memory:"):
        # Single shared connection so every session sees the same database.
        return create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite:///"):
        Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url)


def _to_repository(row: Repository) -> RepositoryRecord:
    return RepositoryRecord(id=row.id, root_path=row.root_path, name=row.name)


def _to_chunk(row: CodeChunk) -> ChunkRecord:
    return ChunkRecord(
        id=row.id,
        repository_id=row.repository_id,
        path=row.path,
        chunk_index=row.chunk_index,
        content=row.content,
        file_hash=row.file_hash,
        extension=row.extension,
        language=row.language,
        embedding=from_bytes(row.embedding),
    )


class SqlFileWriter(FileWriter):

    def __init__(self, session: Session, repository_id: int, path: str):
        self.session = session
        self.repository_id = repository_id
        self.path = path
        self._file: Optional[SourceFile] = None

    def _get_file(self) -> SourceFile:
        if self._file is None:
            self._file = (
                self.session.query(SourceFile)
                .filter(SourceFile.repository_id == self.repository_id, SourceFile.path == self.path)
                .one_or_none()
            )
        if self._file is None:
            self._file = SourceFile(repository_id=self.repository_id, path=self.path)
            self.session.add(self._file)
            self.session.flush()
        return self._file

    def delete_chunks_for_file(self) -> int:
        return (
            self.session.query(CodeChunk)
            .filter(CodeChunk.repository_id == self.repository_id, CodeChunk.path == self.path)
            .delete(synchronize_session=False)
        )

    def insert_chunk(self, chunk: ChunkRecord) -> None:
        file_row = self._get_file()
        self.session.add(
            CodeChunk(
                file_id=file_row.id,
                repository_id=self.repository_id,
                path=self.path,
                chunk_index=chunk.chunk_index,
                extension=chunk.extension,
                language=chunk.language,
                content=chunk.content,
                file_hash=chunk.file_hash,
                embedding=to_bytes(chunk.embedding),
            )
        )

    def set_stored_hash(self, content_hash: str, language: str = "text", content: str = "") -> None:
        file_row = self._get_file()
        file_row.content_hash = content_hash
        file_row.language = language
        file_row.content = content


class SqlChunkStore(ChunkStore):

    def __init__(self, url: str = "sqlite://", engine: Optional[Engine] = None):
        self.url = url
        self.engine = engine or make_engine(url)
        Base.metadata.create_all(bind=self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def get_or_create_repository(self, root: Path) -> RepositoryRecord:
        root_path = str(Path(root).resolve())
        with self.SessionLocal() as db:
            repo = db.query(Repository).filter(Repository.root_path == root_path).first()
            if repo is None:
                repo = Repository(root_path=root_path, name=Path(root_path).name)
                db.add(repo)
                db.commit()
                db.refresh(repo)
            return _to_repository(repo)

    def list_repositories(self) -> List[RepositoryRecord]:
        with self.SessionLocal() as db:
            return [_to_repository(r) for r in db.query(Repository).order_by(Repository.id)]

    def get_stored_hash(self, repository_id: int, path: str) -> Optional[str]:
        with self.SessionLocal() as db:
            row = (
                db.query(SourceFile.content_hash)
                .filter(SourceFile.repository_id == repository_id, SourceFile.path == path)
                .first()
            )
            return row[0] if row else None

    def get_file_hashes(self, repository_id: int) -> Dict[str, str]:
        with self.SessionLocal() as db:
            rows = (
                db.query(SourceFile.path, SourceFile.content_hash)
                .filter(SourceFile.repository_id == repository_id)
                .all()
            )
            return {path: content_hash for path, content_hash in rows}

    def get_file(self, repository_id: int, path: str) -> Optional[FileRecord]:
        with self.SessionLocal() as db:
            row = (
                db.query(SourceFile)
                .filter(SourceFile.repository_id == repository_id, SourceFile.path == path)
                .first()
            )
            if row is None:
                return None
            return FileRecord(
                repository_id=row.repository_id,
                path=row.path,
                content_hash=row.content_hash,
                language=row.language,
                content=row.content,
            )

    def iter_chunks(
        self,
        repository_ids: Optional[Sequence[int]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[ChunkRecord]:
        raise_if_cancelled(cancel)
        with self.SessionLocal() as db:
            query = db.query(CodeChunk)
            if repository_ids:
                query = query.filter(CodeChunk.repository_id.in_(list(repository_ids)))
            query = query.order_by(CodeChunk.id).yield_per(STREAM_BATCH_SIZE)
            for row in query:
                raise_if_cancelled(cancel)
                yield _to_chunk(row)

    @contextmanager
    def file_transaction(self, repository_id: int, path: str) -> Iterator[SqlFileWriter]:
        db = self.SessionLocal()
        try:
            yield SqlFileWriter(db, repository_id, path)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def delete_file(self, repository_id: int, path: str) -> None:
        with self.SessionLocal() as db:
            db.query(CodeChunk).filter(
                CodeChunk.repository_id == repository_id, CodeChunk.path == path
            ).delete(synchronize_session=False)
            db.query(SourceFile).filter(
                SourceFile.repository_id == repository_id, SourceFile.path == path
            ).delete(synchronize_session=False)
            db.commit()

    def mark_indexed(self, repository_id: int) -> None:
        with self.SessionLocal() as db:
            repo = db.get(Repository, repository_id)
            if repo is not None:
                repo.last_indexed_at = _dt.datetime.now(_dt.timezone.utc)
                db.commit()

    def get_chunks_for_file(self, repository_id: int, path: str) -> List[ChunkRecord]:
        with self.SessionLocal() as db:
            rows = (
                db.query(CodeChunk)
                .filter(CodeChunk.repository_id == repository_id, CodeChunk.path == path)
                .order_by(CodeChunk.chunk_index)
                .all()
            )
            return [_to_chunk(r) for r in rows]

    def count(self, repository_id: Optional[int] = None) -> int:
        with self.SessionLocal() as db:
            query = db.query(CodeChunk)
            if repository_id is not None:
                query = query.filter(CodeChunk.repository_id == repository_id)
            return query.count()
