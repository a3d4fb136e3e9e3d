"""Exceptions and cooperative cancellation."""

from __future__ import annotations

import threading
from typing import Optional


class InvalidQuestionError(ValueError):
    """Raised when a retrieval question is empty or whitespace."""


class EmbeddingError(RuntimeError):
    """Raised when the embedding backend cannot produce a vector."""


class OperationCancelled(Exception):
    """Raised when a cancel event is observed at a checkpoint."""


def raise_if_cancelled(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelled("Operation cancelled")
