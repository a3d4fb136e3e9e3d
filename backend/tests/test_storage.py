"""Tests for the SQLAlchemy chunk store."""

import threading
from pathlib import Path

import pytest

from reporag.config import default_database_url
from reporag.core import ChunkRecord, OperationCancelled
from reporag.storage import SqlChunkStore, create_store


def _chunk(repository_id, path, index, embedding=(1.0, 0.0), content=None):
    return ChunkRecord(
        repository_id=repository_id,
        path=path,
        chunk_index=index,
        content=content or f"{path}#{index}",
        file_hash="h1",
        extension="py",
        language="python",
        embedding=list(embedding),
    )


def _write(store, repository_id, path, count, content_hash="h1"):
    with store.file_transaction(repository_id, path) as tx:
        tx.delete_chunks_for_file()
        for i in range(count):
            tx.insert_chunk(_chunk(repository_id, path, i))
        tx.set_stored_hash(content_hash, language="python", content="body")


class TestRepositories:

    def test_get_or_create_is_idempotent(self, store, tmp_path):
        first = store.get_or_create_repository(tmp_path)
        second = store.get_or_create_repository(tmp_path)
        assert first.id == second.id
        assert first.name == tmp_path.resolve().name
        assert [r.id for r in store.list_repositories()] == [first.id]

    def test_mark_indexed(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        store.mark_indexed(repo.id)


class TestFileTransaction:

    def test_commit_writes_chunks_and_hash(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "a.py", 3)

        assert store.get_stored_hash(repo.id, "a.py") == "h1"
        chunks = store.get_chunks_for_file(repo.id, "a.py")
        assert [c.chunk_index for c in chunks] == [0, 1, 2]
        assert chunks[0].embedding == pytest.approx([1.0, 0.0])
        assert chunks[0].language == "python"

        record = store.get_file(repo.id, "a.py")
        assert record.content == "body"
        assert record.content_hash == "h1"

    def test_failure_rolls_back_whole_file(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "a.py", 2)

        with pytest.raises(RuntimeError):
            with store.file_transaction(repo.id, "a.py") as tx:
                assert tx.delete_chunks_for_file() == 2
                tx.insert_chunk(_chunk(repo.id, "a.py", 0, content="new"))
                raise RuntimeError("boom")

        assert store.get_stored_hash(repo.id, "a.py") == "h1"
        assert [c.content for c in store.get_chunks_for_file(repo.id, "a.py")] == ["a.py#0", "a.py#1"]

    def test_empty_file_persists_hash(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "empty.py", 0, content_hash="e0")
        assert store.get_file_hashes(repo.id) == {"empty.py": "e0"}
        assert store.count(repo.id) == 0

    def test_delete_file(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "a.py", 2)
        _write(store, repo.id, "b.py", 1)

        store.delete_file(repo.id, "a.py")

        assert store.get_stored_hash(repo.id, "a.py") is None
        assert store.get_file_hashes(repo.id) == {"b.py": "h1"}
        assert store.count(repo.id) == 1


class TestIterChunks:

    def test_scoped_to_repositories(self, store, tmp_path):
        (tmp_path / "one").mkdir()
        (tmp_path / "two").mkdir()
        one = store.get_or_create_repository(tmp_path / "one")
        two = store.get_or_create_repository(tmp_path / "two")
        _write(store, one.id, "a.py", 2)
        _write(store, two.id, "b.py", 3)

        assert len(list(store.iter_chunks())) == 5
        assert {c.path for c in store.iter_chunks([two.id])} == {"b.py"}

    def test_enumeration_order_is_insertion_order(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "b.py", 1)
        _write(store, repo.id, "a.py", 1)
        assert [c.path for c in store.iter_chunks()] == ["b.py", "a.py"]

    def test_cancellation(self, store, tmp_path):
        repo = store.get_or_create_repository(tmp_path)
        _write(store, repo.id, "a.py", 3)
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(OperationCancelled):
            list(store.iter_chunks(cancel=cancel))


class TestCreateStore:

    def test_explicit_url(self):
        store = create_store({"database": {"url": "sqlite://"}})
        assert isinstance(store, SqlChunkStore)
        assert store.url == "sqlite://"

    def test_default_url_under_repository(self, tmp_path):
        store = create_store({}, tmp_path)
        assert store.url == default_database_url(tmp_path.resolve())
        assert (tmp_path / ".reporag").is_dir()

    def test_file_database_persists(self, tmp_path):
        url = f"sqlite:///{Path(tmp_path, 'db', 'index.db').as_posix()}"
        repo = SqlChunkStore(url).get_or_create_repository(tmp_path)
        assert SqlChunkStore(url).list_repositories()[0].id == repo.id
