"""Pytest fixtures for reporag tests."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest

from reporag.core import ChunkSpecSelector, Embedder, EmbeddingError, TokenAwareChunker
from reporag.storage import SqlChunkStore


def whitespace_tokens(text: str) -> int:
    """Deterministic token counter: one token per whitespace-separated word."""
    return len(text.split())


class FakeEmbedder(Embedder):
    """Scripted embedder.

    Texts listed in ``vectors`` get that vector; texts containing any
    substring in ``fail_on`` raise EmbeddingError; everything else gets
    ``default``.
    """

    def __init__(
        self,
        vectors: Optional[Dict[str, List[float]]] = None,
        default: Optional[List[float]] = None,
        fail_on: tuple = (),
    ):
        self.vectors = dict(vectors or {})
        self.default = list(default) if default is not None else [1.0, 0.0, 0.0]
        self.fail_on = tuple(fail_on)
        self.calls: List[str] = []

    def embed(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_one(t) for t in texts]

    def embed_one(self, text: str) -> List[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingError(f"scripted failure for {text!r}")
        return list(self.vectors.get(text, self.default))


@pytest.fixture
def token_counter():
    return whitespace_tokens


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> SqlChunkStore:
    """Fresh in-memory SQLite store."""
    return SqlChunkStore("sqlite://")


@pytest.fixture
def selector() -> ChunkSpecSelector:
    return ChunkSpecSelector(
        max_tokens=64,
        overlap_tokens=8,
        hard_max_chars=2000,
        token_counter=whitespace_tokens,
    )


@pytest.fixture
def chunker() -> TokenAwareChunker:
    return TokenAwareChunker(token_counter=whitespace_tokens)


@pytest.fixture
def sample_repo(tmp_path: Path) -> Path:
    """Small repository tree on disk."""
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text(
        "def main():\n    return 42\n", encoding="utf-8"
    )
    (tmp_path / "src" / "util.py").write_text(
        "def helper(x):\n    return x * 2\n", encoding="utf-8"
    )
    (tmp_path / "README").write_text("Sample project\n", encoding="utf-8")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "dep.js").write_text("module.exports = 1;\n", encoding="utf-8")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
    return tmp_path


@pytest.fixture
def cfg() -> Dict:
    return {
        "max_file_size_kb": 512,
        "chunk_max_tokens": 64,
        "chunk_overlap_tokens": 8,
        "chunk_max_chars": 2000,
    }
