"""Utility functions for reporag."""

from .file_utils import content_sha256, is_binary_file, read_text

__all__ = ["content_sha256", "is_binary_file", "read_text"]
