"""Incremental code indexing logic."""

from __future__ import annotations

import dataclasses
import logging
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..core import (
    ChunkRecord,
    ChunkSpecSelector,
    Embedder,
    OperationCancelled,
    TokenAwareChunker,
    get_extension,
    guess_language,
    make_embedder,
    raise_if_cancelled,
)
from ..storage import ChunkStore, create_store
from ..utils import content_sha256, read_text
from .base import Indexer as BaseIndexer
from .files import iter_files

logger = logging.getLogger(__name__)

UNCHANGED = -1


@dataclasses.dataclass
class IndexSummary:
    repository_id: int
    files_seen: int = 0
    files_indexed: int = 0
    files_unchanged: int = 0
    chunks_written: int = 0
    embedding_failures: int = 0
    files_pruned: int = 0


class Indexer(BaseIndexer):
    """Hash-gated indexer: unchanged files are never re-chunked or re-embedded.

    Files are processed one at a time. For a changed file the delete, the
    inserts and the new hash are committed together, so a failure or a
    cancellation mid-file leaves its previous chunks in place.
    """

    def __init__(
        self,
        store: ChunkStore,
        embedder: Embedder,
        selector: Optional[ChunkSpecSelector] = None,
        chunker: Optional[TokenAwareChunker] = None,
    ):
        self.store = store
        self.embedder = embedder
        self.selector = selector or ChunkSpecSelector()
        self.chunker = chunker or TokenAwareChunker(self.selector.count_tokens)
        self.embedding_failures = 0

    def index(
        self,
        repo: Path,
        cfg: Dict,
        reindex: bool = False,
        prune: bool = True,
        extra_excludes: Iterable[str] = (),
        cancel: Optional[threading.Event] = None,
    ) -> IndexSummary:
        repo = Path(repo).resolve()
        repository = self.store.get_or_create_repository(repo)
        summary = IndexSummary(repository_id=repository.id)
        failures_before = self.embedding_failures

        logger.info(f"Indexing {repo} (repository id {repository.id}, reindex={reindex})")
        existing = self.store.get_file_hashes(repository.id) if prune else {}
        seen: set[str] = set()

        for fp in iter_files(repo, cfg, extra_excludes=extra_excludes):
            raise_if_cancelled(cancel)
            rel = fp.relative_to(repo).as_posix()
            seen.add(rel)
            summary.files_seen += 1

            try:
                content = read_text(fp)
            except OSError as e:
                logger.warning(f"Could not read {rel}: {e}")
                continue

            written = self.index_file(repository.id, rel, content, reindex=reindex, cancel=cancel)
            if written == UNCHANGED:
                summary.files_unchanged += 1
            else:
                summary.files_indexed += 1
                summary.chunks_written += written

        if prune:
            for rel in sorted(set(existing) - seen):
                raise_if_cancelled(cancel)
                logger.info(f"Removing deleted file from index: {rel}")
                self.store.delete_file(repository.id, rel)
                summary.files_pruned += 1

        self.store.mark_indexed(repository.id)
        summary.embedding_failures = self.embedding_failures - failures_before
        logger.info(
            f"Indexing completed: {summary.files_indexed} indexed, "
            f"{summary.files_unchanged} unchanged, {summary.chunks_written} chunks, "
            f"{summary.embedding_failures} embedding failures, {summary.files_pruned} pruned"
        )
        return summary

    def index_file(
        self,
        repository_id: int,
        rel_path: str,
        content: str,
        reindex: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> int:
        """Index one file's content.

        Returns:
            Number of chunks written, or ``UNCHANGED`` when the stored hash matches.
        """
        file_hash = content_sha256(content)
        old_hash = self.store.get_stored_hash(repository_id, rel_path)

        if not reindex and old_hash is not None and old_hash == file_hash:
            logger.debug(f"Unchanged, skipping: {rel_path}")
            return UNCHANGED

        if old_hash is None:
            logger.info(f"New file, indexing: {rel_path}")
        else:
            logger.info(f"Changed file, re-indexing: {rel_path}")

        ext = get_extension(rel_path)
        language = guess_language(ext)
        policy = self.selector.choose(rel_path, ext, content)

        records: List[ChunkRecord] = []
        for text in self.chunker.chunk(content, policy, cancel=cancel):
            raise_if_cancelled(cancel)
            try:
                embedding = self.embedder.embed_one(text)
            except OperationCancelled:
                raise
            except Exception as e:
                self.embedding_failures += 1
                logger.warning(f"Failed to embed chunk of {rel_path}: {e}")
                continue
            records.append(
                ChunkRecord(
                    repository_id=repository_id,
                    path=rel_path,
                    chunk_index=len(records),
                    content=text,
                    file_hash=file_hash,
                    extension=ext,
                    language=language,
                    embedding=list(embedding),
                )
            )

        raise_if_cancelled(cancel)
        with self.store.file_transaction(repository_id, rel_path) as tx:
            tx.delete_chunks_for_file()
            for record in records:
                raise_if_cancelled(cancel)
                tx.insert_chunk(record)
            tx.set_stored_hash(file_hash, language=language, content=content)

        logger.debug(f"{rel_path}: {len(records)} chunks ({policy.mode.value})")
        return len(records)


def build_index(
    repo: Path,
    cfg: Dict,
    reindex: bool = False,
    extra_excludes: Iterable[str] = (),
    cancel: Optional[threading.Event] = None,
) -> IndexSummary:
    """Build or update code index (Wrapper)."""
    indexer = Indexer(
        store=create_store(cfg, repo),
        embedder=make_embedder(cfg),
        selector=ChunkSpecSelector.from_config(cfg),
    )
    return indexer.index(repo, cfg, reindex=reindex, extra_excludes=extra_excludes, cancel=cancel)
