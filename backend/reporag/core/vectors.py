"""Vector helpers used by retrieval and conversation memory."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between a and b; 0.0 for empty, mismatched or zero vectors."""
    if len(a) == 0 or len(a) != len(b):
        return 0.0
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def normalize(vector: Sequence[float]) -> List[float]:
    """L2-normalized copy; an all-zero vector stays all-zero."""
    v = np.asarray(vector, dtype=np.float64)
    norm = float(np.linalg.norm(v))
    if norm == 0.0:
        return [0.0] * len(v)
    return (v / norm).tolist()


def blend(
    query: Sequence[float],
    memory: Optional[Sequence[float]],
    weight: float = 0.7,
) -> List[float]:
    """normalize(weight * query + (1 - weight) * memory) as a new list.

    Returns a copy of ``query`` when memory is missing or of another length.
    """
    if memory is None or len(memory) == 0 or len(memory) != len(query):
        return list(query)
    q = np.asarray(query, dtype=np.float64)
    m = np.asarray(memory, dtype=np.float64)
    return normalize(weight * q + (1.0 - weight) * m)


def mean(vectors: Sequence[Sequence[float]]) -> List[float]:
    return np.mean(np.asarray(vectors, dtype=np.float64), axis=0).tolist()


def to_bytes(vector: Sequence[float]) -> bytes:
    return np.asarray(vector, dtype="<f4").tobytes()


def from_bytes(data: Optional[bytes]) -> List[float]:
    if not data:
        return []
    return np.frombuffer(data, dtype="<f4").astype(np.float64).tolist()
