"""Repository file enumeration."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import pathspec

from ..config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    IGNORE_FILE_NAME,
    INDEX_DIR_NAME,
    expand_patterns,
)
from ..core.languages import is_file_with_no_extension
from ..utils import is_binary_file

logger = logging.getLogger(__name__)

EXCLUDED_FILES = {
    # OS / IDE noise
    ".ds_store",
    "thumbs.db",
    # Lockfiles
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "pnpm-lock.yml",
    "poetry.lock",
    "pipfile.lock",
    "composer.lock",
    "cargo.lock",
    # Local config / secrets
    ".env",
    ".env.local",
    ".env.development",
    ".env.production",
    "appsettings.local.json",
    "appsettings.development.local.json",
    IGNORE_FILE_NAME,
}

EXCLUDED_DIRS = {
    "bin", "obj", "node_modules", ".git", ".vs", ".idea", ".venv",
    "__pycache__", ".mypy_cache", ".pytest_cache",
    ".gradle", "build", "out", "target",
    "dist", "coverage", ".next", ".angular", ".nuxt", "storybook-static",
    "vendor", "logs", "tmp", "temp", ".cache",
    "cmake-build-debug", "cmake-build-release", "cmakefiles",
    INDEX_DIR_NAME,
}

BINARY_EXTENSIONS = {
    "png", "ico", "jar", "woff", "woff2", "dll", "exe", "pdb", "snap",
    "gif", "jpg", "jpeg", "so",
    # Images
    "bmp", "tiff", "webp", "svgz",
    # Design
    "ai", "eps", "psd", "sketch",
    # Documents
    "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx",
    # Audio + video
    "mp3", "wav", "ogg", "mp4", "mov", "mkv", "avi",
    # Archives
    "zip", "rar", "7z", "tar", "gz", "bz2",
    # Binary artifacts
    "class", "wasm", "sqlite", "db", "bak",
    # Fonts
    "ttf", "otf", "eot", "ttc",
    # Misc
    "lock", "bin",
}


def _match_any(path: str, globs: List[str]) -> bool:
    return any(fnmatch.fnmatch(path, g) for g in globs)


def _is_balanced(pattern: str) -> bool:
    return ("[" in pattern) == ("]" in pattern)


def validate_exclude_patterns(patterns: Optional[Sequence[str]]) -> List[str]:
    """Strip and check user-supplied exclude patterns.

    Raises:
        ValueError: If a pattern has an unbalanced '[' / ']'.
    """
    valid: List[str] = []
    for raw in patterns or ():
        pattern = (raw or "").strip()
        if not pattern:
            continue
        if not _is_balanced(pattern):
            raise ValueError(f"Invalid exclude pattern: {pattern!r}. Unbalanced '[' / ']'.")
        valid.append(pattern)
    return valid


def load_ignore_patterns(repo: Path) -> List[str]:
    """Read gitignore-style patterns from the repository's ignore file."""
    ignore_path = repo / IGNORE_FILE_NAME
    if not ignore_path.is_file():
        return []

    patterns: List[str] = []
    invalid: List[str] = []
    for raw in ignore_path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if not _is_balanced(line):
            invalid.append(line)
            continue
        patterns.append(line)

    for rule in invalid:
        logger.warning(f"Invalid ignore pattern {rule!r} in {IGNORE_FILE_NAME}, ignoring.")
    return patterns


def build_ignore_spec(repo: Path, extra_excludes: Iterable[str] = ()) -> pathspec.PathSpec:
    lines = load_ignore_patterns(repo) + validate_exclude_patterns(list(extra_excludes))
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def _has_indexable_name(file_name: str) -> bool:
    lower = file_name.lower()
    if lower in EXCLUDED_FILES:
        return False
    ext = os.path.splitext(lower)[1].lstrip(".")
    if not ext:
        return is_file_with_no_extension(file_name)
    return ext not in BINARY_EXTENSIONS


def iter_files(repo: Path, cfg: Dict, extra_excludes: Iterable[str] = ()) -> Iterator[Path]:
    """Yield indexable files under ``repo`` in a stable, sorted order."""
    include_globs = cfg.get("include_globs", expand_patterns(DEFAULT_INCLUDE_PATTERNS))
    exclude_globs = cfg.get("exclude_globs", expand_patterns(DEFAULT_EXCLUDE_PATTERNS))
    max_kb = int(cfg.get("max_file_size_kb", 512))
    spec = build_ignore_spec(repo, extra_excludes)

    for root, dirs, files in os.walk(repo):
        root_path = Path(root)
        kept_dirs = []
        for d in sorted(dirs):
            rel_dir = (root_path / d).relative_to(repo).as_posix()
            if d.lower() in EXCLUDED_DIRS or spec.match_file(rel_dir + "/"):
                logger.debug(f"Skipping ignored directory: {rel_dir}")
                continue
            kept_dirs.append(d)
        dirs[:] = kept_dirs

        for name in sorted(files):
            p = root_path / name
            rel = p.relative_to(repo).as_posix()
            if not _has_indexable_name(name):
                continue
            if spec.match_file(rel):
                logger.debug(f"Skipping ignored file: {rel}")
                continue
            if _match_any(rel, exclude_globs):
                continue
            if not _match_any(rel, include_globs):
                continue
            try:
                if (p.stat().st_size / 1024.0) > max_kb:
                    continue
            except OSError:
                continue
            if is_binary_file(p):
                continue
            yield p
