"""Per-file chunk policy selection."""

from __future__ import annotations

import logging
import os
import unicodedata
from typing import Dict, Optional

from .chunking import TokenCounter, count_tokens
from .languages import STRUCTURED_EXTENSIONS
from .models import ChunkPolicy, SplitMode

logger = logging.getLogger(__name__)

SAMPLE_CHARS = 8000

GUID_DENSE_COUNT = 3
PUNCTUATION_RATIO_THRESHOLD = 0.18
TOKENS_PER_CHAR_THRESHOLD = 0.55

LICENSE_NAMES = {"license", "notice"}
LICENSE_EXTENSIONS = {"", ".txt", ".md"}

# (max_tokens, overlap_tokens, hard_max_chars) ceilings per file shape.
LICENSE_CEILING = (256, 16, 2000)
DENSE_CEILING = (128, 8, 1400)

MIN_MAX_TOKENS = 32
MIN_HARD_MAX_CHARS = 256

_HEX = frozenset("0123456789abcdefABCDEF")
_GUID_GROUPS = ((0, 8), (9, 4), (14, 4), (19, 4), (24, 12))
_GUID_DASHES = (8, 13, 18, 23)


def count_guids(text: str) -> int:
    """Count non-overlapping 8-4-4-4-12 hex groups."""
    count = 0
    i = 0
    limit = len(text) - 36
    while i <= limit:
        if all(text[i + d] == "-" for d in _GUID_DASHES) and all(
            all(c in _HEX for c in text[i + start:i + start + length])
            for start, length in _GUID_GROUPS
        ):
            count += 1
            i += 36
            continue
        i += 1
    return count


def punctuation_ratio(text: str) -> float:
    if not text:
        return 0.0
    punct = 0
    for ch in text:
        if ch.isspace():
            continue
        if unicodedata.category(ch)[0] in ("P", "S"):
            punct += 1
    return punct / len(text)


def is_license_like(rel_path: str) -> bool:
    name = os.path.basename(rel_path).lower()
    stem, ext = os.path.splitext(name)
    return stem in LICENSE_NAMES and ext in LICENSE_EXTENSIONS


class ChunkSpecSelector:
    """Chooses a ChunkPolicy from a file's name and the shape of its content.

    Dense formats (solution files, JSON, GUID-laden manifests) tokenize far
    worse than prose or code, so they get small separator-based chunks.
    """

    def __init__(
        self,
        max_tokens: int = 512,
        overlap_tokens: int = 64,
        hard_max_chars: int = 2000,
        token_counter: TokenCounter = count_tokens,
    ):
        self.max_tokens = max_tokens
        self.overlap_tokens = overlap_tokens
        self.hard_max_chars = hard_max_chars
        self.count_tokens = token_counter

    @classmethod
    def from_config(cls, cfg: Dict, token_counter: Optional[TokenCounter] = None) -> "ChunkSpecSelector":
        return cls(
            max_tokens=int(cfg.get("chunk_max_tokens", 512)),
            overlap_tokens=int(cfg.get("chunk_overlap_tokens", 64)),
            hard_max_chars=int(cfg.get("chunk_max_chars", 2000)),
            token_counter=token_counter or count_tokens,
        )

    def is_dense(self, ext: str, sample: str) -> bool:
        if ext.lower() in STRUCTURED_EXTENSIONS:
            return True
        if count_guids(sample) >= GUID_DENSE_COUNT:
            return True
        if punctuation_ratio(sample) >= PUNCTUATION_RATIO_THRESHOLD:
            return True
        if sample:
            tokens_per_char = self.count_tokens(sample) / len(sample)
            if tokens_per_char >= TOKENS_PER_CHAR_THRESHOLD:
                return True
        return False

    def choose(self, rel_path: str, ext: str, content: str) -> ChunkPolicy:
        max_tokens = self.max_tokens
        overlap = self.overlap_tokens
        hard_max_chars = self.hard_max_chars

        sample = content[:SAMPLE_CHARS]

        if is_license_like(rel_path):
            mode = SplitMode.LINES
            ceiling = LICENSE_CEILING
        elif self.is_dense(ext, sample):
            mode = SplitMode.SEPARATORS
            ceiling = DENSE_CEILING
        else:
            mode = SplitMode.LINES
            ceiling = None

        if ceiling is not None:
            max_tokens = min(max_tokens, ceiling[0])
            overlap = min(overlap, ceiling[1])
            hard_max_chars = min(hard_max_chars, ceiling[2])

        max_tokens = max(MIN_MAX_TOKENS, max_tokens)
        overlap = min(max(overlap, 0), max_tokens // 3)
        hard_max_chars = max(MIN_HARD_MAX_CHARS, hard_max_chars)

        policy = ChunkPolicy(max_tokens, overlap, hard_max_chars, mode)
        logger.debug(f"{rel_path}: {policy}")
        return policy
