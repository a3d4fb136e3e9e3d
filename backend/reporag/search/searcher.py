"""Semantic search functionality."""

from __future__ import annotations

import logging
import threading
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from ..core import (
    ChunkRecord,
    Embedder,
    InvalidQuestionError,
    ScoredChunk,
    SearchContext,
    SearchResult,
    make_embedder,
)
from ..core.vectors import blend, cosine_similarity
from ..prompt import DefaultPromptBuilder, LlmClient, PromptBuilder
from ..storage import ChunkStore
from .base import Searcher as BaseSearcher
from .hints import extract_path_hint

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_WEIGHT = 0.7
DEFAULT_PATH_BOOST = 0.05


class Searcher(BaseSearcher):
    """Exact linear-scan retriever over stored chunk embeddings."""

    def __init__(
        self,
        store: ChunkStore,
        embedder: Embedder,
        llm_client: Optional[LlmClient] = None,
        prompt_builder: Optional[PromptBuilder] = None,
        memory_weight: float = DEFAULT_MEMORY_WEIGHT,
        path_boost: float = DEFAULT_PATH_BOOST,
    ):
        self.store = store
        self.embedder = embedder
        self.llm_client = llm_client
        self.prompt_builder = prompt_builder
        self.memory_weight = memory_weight
        self.path_boost = path_boost

    @classmethod
    def from_config(
        cls,
        cfg: Dict,
        store: ChunkStore,
        embedder: Optional[Embedder] = None,
        llm_client: Optional[LlmClient] = None,
    ) -> "Searcher":
        search_cfg = cfg.get("search", {})
        return cls(
            store=store,
            embedder=embedder or make_embedder(cfg),
            llm_client=llm_client,
            memory_weight=float(search_cfg.get("memory_weight", DEFAULT_MEMORY_WEIGHT)),
            path_boost=float(search_cfg.get("path_boost", DEFAULT_PATH_BOOST)),
        )

    def retrieve(
        self,
        question: str,
        top_k: int = 7,
        repository_ids: Optional[Sequence[int]] = None,
        memory_embedding: Optional[Sequence[float]] = None,
        cancel: Optional[threading.Event] = None,
    ) -> SearchContext:
        if not question or not question.strip():
            raise InvalidQuestionError("Question is empty.")
        if top_k <= 0:
            raise ValueError(f"top_k must be positive, got {top_k}")

        query_vector = self.embedder.embed_one(question.strip())
        path_hint = extract_path_hint(question)
        query_vector = blend(query_vector, memory_embedding, self.memory_weight)

        scored = self._score(query_vector, path_hint, repository_ids, cancel)
        if not scored:
            return SearchContext(question, ())

        # list.sort is stable, so equal scores keep enumeration order
        scored.sort(key=lambda s: s[0], reverse=True)
        top = tuple(ScoredChunk(chunk, score) for score, chunk in scored[:top_k])
        return SearchContext(question, top)

    def _score(
        self,
        query_vector: List[float],
        path_hint: Optional[str],
        repository_ids: Optional[Sequence[int]],
        cancel: Optional[threading.Event],
    ) -> List[Tuple[float, ChunkRecord]]:
        hint = path_hint.lower() if path_hint else None
        dim = len(query_vector)
        scored: List[Tuple[float, ChunkRecord]] = []
        skipped = 0

        for chunk in self.store.iter_chunks(repository_ids, cancel=cancel):
            if not chunk.embedding or len(chunk.embedding) != dim:
                skipped += 1
                continue
            score = cosine_similarity(query_vector, chunk.embedding)
            if hint and hint in chunk.path.lower():
                score += self.path_boost
            if score <= 0:
                continue
            scored.append((score, chunk))

        if skipped:
            logger.debug(f"Skipped {skipped} chunks without a {dim}-dimensional embedding")
        return scored

    def answer(
        self,
        context: SearchContext,
        use_llm: bool = True,
        memory_summary: Optional[str] = None,
        advanced: bool = False,
    ) -> SearchResult:
        if not context.has_results or not use_llm or self.llm_client is None:
            return SearchResult(context.question, context.chunks, None)

        prompt = self._build_prompt(context, memory_summary)
        response = self.llm_client.ask(prompt, advanced=advanced)
        if response.error:
            logger.error(f"Answer generation failed: {response.error}")
            raise RuntimeError(response.error)
        return SearchResult(context.question, context.chunks, response.content)

    def stream_answer(
        self,
        context: SearchContext,
        memory_summary: Optional[str] = None,
        advanced: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> Iterator[str]:
        if self.llm_client is None:
            raise RuntimeError("No LLM client configured")
        prompt = self._build_prompt(context, memory_summary)
        yield from self.llm_client.stream(prompt, advanced=advanced, cancel=cancel)

    def _build_prompt(self, context: SearchContext, memory_summary: Optional[str]) -> str:
        builder = self.prompt_builder or DefaultPromptBuilder()
        return builder.build_prompt(
            context.question,
            [sc.chunk for sc in context.chunks],
            memory=memory_summary,
        )


def search(
    cfg: Dict,
    store: ChunkStore,
    question: str,
    top_k: Optional[int] = None,
    repository_ids: Optional[Sequence[int]] = None,
) -> SearchContext:
    searcher = Searcher.from_config(cfg, store)
    k = top_k or int(cfg.get("search", {}).get("top_k", 7))
    return searcher.retrieve(question, top_k=k, repository_ids=repository_ids)
