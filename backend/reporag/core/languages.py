"""Extension and language lookup tables."""

from __future__ import annotations

import os

DOCKER_FILE = "dockerfile"
MAKE_FILE = "makefile"
README_FILE = "readme"
LICENSE_FILE = "license"

# Files that are indexed even though they carry no extension.
NO_EXTENSION_FILES = {
    DOCKER_FILE: DOCKER_FILE,
    MAKE_FILE: MAKE_FILE,
    LICENSE_FILE: "txt",
    README_FILE: "md",
}

EXT_TO_LANG = {
    "cs": "csharp",
    "csproj": "csharp",
    "sln": "csharp",
    "props": "csharp",
    "targets": "csharp",
    "ruleset": "csharp",
    "js": "javascript",
    "mjs": "javascript",
    "ts": "typescript",
    "py": "python",
    "go": "go",
    "html": "html",
    "css": "css",
    "tf": "terraform",
    "hcl": "terraform",
    "yaml": "yaml",
    "yml": "yaml",
    "json": "json",
    "md": "markdown",
    "toml": "toml",
    "sh": "shell",
    "bat": "shell",
    DOCKER_FILE: DOCKER_FILE,
    MAKE_FILE: "make",
}

# Manifest/solution/config formats that tokenize far denser than prose.
STRUCTURED_EXTENSIONS = {
    "sln", "csproj", "props", "targets", "json", "yaml", "yml", "xml", "toml",
}


def is_file_with_no_extension(file_name: str) -> bool:
    return file_name.lower() in NO_EXTENSION_FILES


def get_extension(path: str) -> str:
    """Lower-case extension without the dot.

    Well-known extension-less names map to a pseudo extension
    (``Dockerfile`` -> ``dockerfile``, ``README`` -> ``md``).
    """
    file_name = os.path.basename(path)
    ext = os.path.splitext(file_name)[1].lstrip(".").lower()
    if not ext:
        ext = NO_EXTENSION_FILES.get(file_name.lower(), "")
    return ext


def guess_language(ext: str) -> str:
    return EXT_TO_LANG.get(ext.lower(), "text")
