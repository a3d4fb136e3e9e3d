"""Lexical path hints extracted from a question."""

from __future__ import annotations

import os
import re
from typing import Optional

from ..core.languages import EXT_TO_LANG, NO_EXTENSION_FILES

CODE_EXTENSIONS = set(EXT_TO_LANG) | {
    "tsx", "jsx", "cjs", "java", "kt", "kts", "rb", "php", "rs", "c", "h",
    "cpp", "cc", "hpp", "swift", "scala", "sql", "xml", "ini", "cfg", "conf",
    "env", "gradle", "razor", "cshtml", "vue", "svelte", "scss", "less", "txt",
    "ps1", "zsh", "proto", "graphql",
}

WELL_KNOWN_FILES = set(NO_EXTENSION_FILES) | {"notice", "gemfile", "procfile", "jenkinsfile"}

_STRIP_CHARS = "\"'`()[]{}<>,;:!?*"

# Quotes, parentheses and list punctuation separate tokens just like whitespace.
_TOKEN_SPLIT = re.compile(r"[\s\"'(),;:]+")


def _clean(token: str) -> str:
    token = token.strip(_STRIP_CHARS)
    token = token.lstrip("@")
    return token.rstrip(".")


def looks_like_path(token: str) -> bool:
    if not token:
        return False
    if "/" in token or "\\" in token:
        return len(token.strip("/\\")) > 0
    name = token.lower()
    if name in WELL_KNOWN_FILES:
        return True
    stem, ext = os.path.splitext(name)
    return bool(stem) and ext.lstrip(".") in CODE_EXTENSIONS


def extract_path_hint(question: str) -> Optional[str]:
    """First question token that looks like a file path or file name, else None."""
    for raw in _TOKEN_SPLIT.split(question or ""):
        token = _clean(raw)
        if looks_like_path(token):
            return token
    return None
