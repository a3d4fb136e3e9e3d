"""Tests for answer prompt building."""

from reporag.core import ChunkRecord
from reporag.prompt import DefaultPromptBuilder, PromptConfig, build_prompt, estimate_tokens


def _chunk(path, content, index=0):
    return ChunkRecord(
        repository_id=1,
        path=path,
        chunk_index=index,
        content=content,
        file_hash="h",
        extension="py",
        language="python",
    )


def test_estimate_tokens():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


class TestDefaultPromptBuilder:

    def test_sections(self):
        prompt = build_prompt("What does main do?", [_chunk("src/app.py", "def main(): ...")], memory="Q: hi\nA: hello")

        assert prompt.index("## SYSTEM") < prompt.index("## MEMORY") < prompt.index("## CONTEXT")
        assert prompt.index("## CONTEXT") < prompt.index("## QUESTION")
        assert "### 1. `src/app.py`" in prompt
        assert "- ChunkIndex: `0`" in prompt
        assert "```python\ndef main(): ...\n```" in prompt
        assert prompt.endswith("What does main do?")

    def test_no_chunks(self):
        prompt = build_prompt("anything?", [])
        assert "_No relevant code snippets were found in the local index._" in prompt
        assert "## MEMORY" not in prompt

    def test_snippets_are_truncated(self):
        builder = DefaultPromptBuilder(PromptConfig(snippet_chars=10))
        prompt = builder.build_prompt("q", [_chunk("a.py", "x" * 50)])
        assert "x" * 10 + "\n…(truncated)…" in prompt
        assert "x" * 11 not in prompt

    def test_memory_keeps_most_recent_tail(self):
        builder = DefaultPromptBuilder(PromptConfig(memory_tail_chars=5))
        prompt = builder.build_prompt("q", [], memory="old stuff NEWER")
        assert "NEWER" in prompt
        assert "old" not in prompt.split("## MEMORY")[1].split("---")[0]

    def test_shrinks_to_fit_budget(self):
        chunks = [_chunk(f"f{i}.py", "y" * 2000, i) for i in range(5)]
        builder = DefaultPromptBuilder(PromptConfig(max_tokens=400))

        prompt = builder.build_prompt("question", chunks, memory="m" * 5000)

        assert estimate_tokens(prompt) <= 400
        assert "### 1. `f0.py`" in prompt
        assert "### 2." not in prompt
        assert "## MEMORY" not in prompt

    def test_custom_counter(self):
        builder = DefaultPromptBuilder(count_tokens=lambda text: 0)
        prompt = builder.build_prompt("q", [_chunk(f"f{i}.py", "z", i) for i in range(3)])
        assert "### 3. `f2.py`" in prompt
