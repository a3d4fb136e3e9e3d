"""Embedding models for semantic search."""

from __future__ import annotations

import logging
from typing import Dict, List

import requests

from .errors import EmbeddingError

logger = logging.getLogger(__name__)


class Embedder:
    """Embedding gateway: text in, fixed-length vector out.

    Implementations raise EmbeddingError when the backend cannot answer.
    """

    def embed(self, texts: List[str]) -> List[List[float]]:
        raise NotImplementedError

    def embed_one(self, text: str) -> List[float]:
        return self.embed([text])[0]


class SentenceTransformersEmbedder(Embedder):
    """Local sentence-transformers model; vectors come back L2-normalized."""

    def __init__(self, model_name: str, batch_size: int = 32) -> None:
        from sentence_transformers import SentenceTransformer  # type: ignore
        self.model_name = model_name
        self.batch_size = batch_size
        self.model = SentenceTransformer(model_name)

    def embed(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            arr = self.model.encode(
                texts,
                batch_size=self.batch_size,
                normalize_embeddings=True,
                show_progress_bar=False,
            )
        except Exception as e:
            raise EmbeddingError(f"{self.model_name} failed to encode {len(texts)} texts: {e}") from e
        return [row.tolist() for row in arr]


class OllamaEmbedder(Embedder):
    """Embedder calling a local Ollama server."""

    def __init__(self, host: str, model: str, timeout: float = 60) -> None:
        self.host = host.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.session = requests.Session()

    def embed(self, texts: List[str]) -> List[List[float]]:
        return [self.embed_one(t) for t in texts]

    def embed_one(self, text: str) -> List[float]:
        url = f"{self.host}/api/embeddings"
        payload = {"model": self.model, "prompt": text or ""}
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise EmbeddingError(f"Ollama embedding request failed: {e}") from e

        embedding = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(embedding, list):
            raise EmbeddingError(f"Unexpected response format: {data}")
        try:
            return [float(x) for x in embedding]
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"Non-numeric value in embedding: {e}") from e


def make_embedder(cfg: Dict) -> Embedder:
    """Create embedder from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        Embedder instance

    Raises:
        SystemExit: If backend is invalid or dependencies are missing
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()

    if backend == "ollama":
        ollama_cfg = cfg.get("ollama", {})
        model = emb_cfg.get("ollama_model", "mxbai-embed-large")
        logger.debug(f"Using Ollama embedding model {model}")
        return OllamaEmbedder(
            host=ollama_cfg.get("host", "http://127.0.0.1:11434"),
            model=model,
            timeout=float(ollama_cfg.get("timeout", 60)),
        )

    if backend != "sentence_transformers":
        raise SystemExit(f"Invalid embedding.backend: {backend!r}")

    model_name = emb_cfg.get("sentence_transformers_model", "all-MiniLM-L6-v2")
    logger.debug(f"Loading sentence-transformers model {model_name}")
    try:
        return SentenceTransformersEmbedder(model_name)
    except Exception as e:
        raise SystemExit(
            f"Could not load sentence-transformers model {model_name!r}. "
            "Run: pip install -U sentence-transformers"
        ) from e
