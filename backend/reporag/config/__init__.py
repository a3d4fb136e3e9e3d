"""Configuration management for reporag."""

from .manager import (
    DEFAULT_CONFIG,
    DEFAULT_INCLUDE_PATTERNS,
    DEFAULT_EXCLUDE_PATTERNS,
    IGNORE_FILE_NAME,
    INDEX_DIR_NAME,
    load_config,
    expand_pattern,
    expand_patterns,
    default_database_url,
)

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_INCLUDE_PATTERNS",
    "DEFAULT_EXCLUDE_PATTERNS",
    "IGNORE_FILE_NAME",
    "INDEX_DIR_NAME",
    "load_config",
    "expand_pattern",
    "expand_patterns",
    "default_database_url",
]
