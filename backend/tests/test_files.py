"""Tests for repository file enumeration."""

import logging

import pytest

from reporag.indexing import iter_files, validate_exclude_patterns


def _rel(repo, files):
    return [p.relative_to(repo).as_posix() for p in files]


class TestIterFiles:

    def test_skips_excluded_dirs_and_binaries(self, sample_repo):
        assert _rel(sample_repo, iter_files(sample_repo, {})) == ["README", "src/app.py", "src/util.py"]

    def test_order_is_stable(self, sample_repo):
        (sample_repo / "b.md").write_text("b\n", encoding="utf-8")
        (sample_repo / "a.md").write_text("a\n", encoding="utf-8")
        assert _rel(sample_repo, iter_files(sample_repo, {}))[:3] == ["README", "a.md", "b.md"]

    def test_ignore_file(self, sample_repo):
        (sample_repo / ".reporagignore").write_text("# generated\nsrc/util.py\n", encoding="utf-8")
        assert _rel(sample_repo, iter_files(sample_repo, {})) == ["README", "src/app.py"]

    def test_invalid_ignore_line_is_skipped(self, sample_repo, caplog):
        (sample_repo / ".reporagignore").write_text("[broken\nREADME\n", encoding="utf-8")
        with caplog.at_level(logging.WARNING):
            files = _rel(sample_repo, iter_files(sample_repo, {}))
        assert files == ["src/app.py", "src/util.py"]
        assert "[broken" in caplog.text

    def test_extra_excludes(self, sample_repo):
        assert _rel(sample_repo, iter_files(sample_repo, {}, extra_excludes=["*.py"])) == ["README"]

    def test_lockfiles_and_env_are_skipped(self, sample_repo):
        (sample_repo / "package-lock.json").write_text("{}", encoding="utf-8")
        (sample_repo / ".env").write_text("SECRET=1\n", encoding="utf-8")
        assert "package-lock.json" not in _rel(sample_repo, iter_files(sample_repo, {}))
        assert ".env" not in _rel(sample_repo, iter_files(sample_repo, {}))

    def test_unknown_extensionless_files_are_skipped(self, sample_repo):
        (sample_repo / "run").write_text("#!/bin/sh\n", encoding="utf-8")
        assert "run" not in _rel(sample_repo, iter_files(sample_repo, {}))

    def test_null_bytes_mark_binary(self, sample_repo):
        (sample_repo / "src" / "blob.py").write_bytes(b"abc\x00def")
        assert "src/blob.py" not in _rel(sample_repo, iter_files(sample_repo, {}))

    def test_size_limit(self, sample_repo):
        (sample_repo / "big.txt").write_text("x" * 4096, encoding="utf-8")
        files = _rel(sample_repo, iter_files(sample_repo, {"max_file_size_kb": 2}))
        assert "big.txt" not in files
        assert "src/app.py" in files

    def test_include_globs(self, sample_repo):
        files = _rel(sample_repo, iter_files(sample_repo, {"include_globs": ["src/*"]}))
        assert files == ["src/app.py", "src/util.py"]


class TestValidateExcludePatterns:

    def test_strips_and_drops_blanks(self):
        assert validate_exclude_patterns([" *.log ", "", None, "build/"]) == ["*.log", "build/"]

    def test_none(self):
        assert validate_exclude_patterns(None) == []

    @pytest.mark.parametrize("pattern", ["[abc", "abc]"])
    def test_unbalanced_brackets_raise(self, pattern):
        with pytest.raises(ValueError):
            validate_exclude_patterns([pattern])
