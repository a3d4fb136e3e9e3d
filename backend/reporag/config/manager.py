"""Configuration management for reporag."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

INDEX_DIR_NAME = ".reporag"
IGNORE_FILE_NAME = ".reporagignore"

# Everything is a candidate; the enumerator's name/extension rules do the filtering.
DEFAULT_INCLUDE_PATTERNS: List[str] = ["*"]

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    ".git/**",
    ".svn/**",
    ".hg/**",
    f"{INDEX_DIR_NAME}/**",
    "node_modules/**",
    "bower_components/**",
    ".venv/**",
    "venv/**",
    "*.min.js",
    "*.min.css",
    "*.map",
    ".env",
    ".env.*",
]

ENV_OVERRIDES = {
    "REPORAG_DATABASE_URL": ("database", "url"),
    "OLLAMA_HOST": ("ollama", "host"),
    "REPORAG_EMBEDDING_BACKEND": ("embedding", "backend"),
}

DEFAULT_CONFIG: Dict = {
    "max_file_size_kb": 512,
    "chunk_max_tokens": 512,
    "chunk_overlap_tokens": 64,
    "chunk_max_chars": 2000,
    "embedding": {
        "backend": "sentence_transformers",
        "sentence_transformers_model": "sentence-transformers/all-MiniLM-L6-v2",
        "ollama_model": "mxbai-embed-large",
    },
    "ollama": {
        "host": "http://127.0.0.1:11434",
        "chat_model": "gpt-oss:20b",
        "advanced_chat_model": "gemma3:27b",
        "temperature": 0.1,
        "timeout": 120,
    },
    "search": {
        "top_k": 7,
        "memory_weight": 0.7,
        "path_boost": 0.05,
    },
    "chat": {"max_turns": 8},
    "database": {"url": None},
}


def expand_pattern(pattern: str) -> List[str]:
    """Root and nested forms of one glob.

    Examples:
        '*.py' -> ['*.py', '**/*.py']
        'venv/**' -> ['venv/**', '**/venv/**']
        '/build/**' -> ['build/**']   (anchored to the repository root)
    """
    pattern = pattern.strip()
    if not pattern or pattern[0] == "#":
        return []
    if pattern[0] == "/":
        return [pattern.lstrip("/")]
    nestable = pattern.startswith("*.") or "/**" in pattern
    if pattern.startswith("**/") or not nestable:
        return [pattern]
    return [pattern, f"**/{pattern}"]


def expand_patterns(patterns: Iterable[str]) -> List[str]:
    """Expand, dropping duplicates but keeping first-seen order."""
    expanded = (ep for p in patterns for ep in expand_pattern(p))
    return list(dict.fromkeys(expanded))


def default_database_url(repo: Path) -> str:
    return f"sqlite:///{(repo / INDEX_DIR_NAME / 'index.db').as_posix()}"


def _merge(base: Dict, overrides: Dict) -> None:
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value


def load_config(repo: Path, overrides: Optional[Dict] = None) -> Dict:
    """Build the configuration for one repository.

    Precedence, lowest first: DEFAULT_CONFIG, ``overrides``, environment.
    ``database.url`` falls back to an SQLite file under ``<repo>/.reporag``.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        _merge(config, copy.deepcopy(overrides))

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            config[section][key] = value

    if not config["database"]["url"]:
        config["database"]["url"] = default_database_url(Path(repo).resolve())

    config.setdefault("include_globs", expand_patterns(DEFAULT_INCLUDE_PATTERNS))
    config.setdefault("exclude_globs", expand_patterns(DEFAULT_EXCLUDE_PATTERNS))
    return config
