"""Tests for vector helpers."""

import math

import pytest

from reporag.core.vectors import blend, cosine_similarity, from_bytes, mean, normalize, to_bytes


class TestCosineSimilarity:

    def test_self_similarity_is_one(self):
        assert cosine_similarity([0.3, -1.2, 4.0], [0.3, -1.2, 4.0]) == pytest.approx(1.0)

    def test_orthogonal_is_zero(self):
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_is_minus_one(self):
        assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)

    @pytest.mark.parametrize(
        "a, b",
        [
            ([], []),
            ([1.0, 0.0], [1.0, 0.0, 0.0]),
            ([0.0, 0.0], [1.0, 0.0]),
        ],
    )
    def test_degenerate_inputs_return_zero(self, a, b):
        assert cosine_similarity(a, b) == 0.0


class TestBlend:

    def test_weighted_and_normalized(self):
        result = blend([1.0, 0.0], [0.0, 1.0], 0.7)
        norm = math.hypot(0.7, 0.3)
        assert result == pytest.approx([0.7 / norm, 0.3 / norm])

    def test_returns_new_list(self):
        query = [1.0, 0.0]
        result = blend(query, [0.0, 1.0])
        assert result is not query
        assert query == [1.0, 0.0]

    @pytest.mark.parametrize("memory", [None, [], [1.0, 0.0, 0.0]])
    def test_skips_missing_or_mismatched_memory(self, memory):
        query = [0.6, 0.8]
        result = blend(query, memory)
        assert result == query
        assert result is not query


def test_normalize_zero_vector():
    assert normalize([0.0, 0.0, 0.0]) == [0.0, 0.0, 0.0]


def test_normalize_unit_length():
    assert normalize([3.0, 4.0]) == pytest.approx([0.6, 0.8])


def test_mean():
    assert mean([[1.0, 0.0], [0.0, 1.0]]) == pytest.approx([0.5, 0.5])


def test_float32_bytes():
    data = to_bytes([0.5, -1.25, 3.0])
    assert len(data) == 12
    assert from_bytes(data) == pytest.approx([0.5, -1.25, 3.0])


@pytest.mark.parametrize("data", [None, b""])
def test_from_bytes_empty(data):
    assert from_bytes(data) == []
