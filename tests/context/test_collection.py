"""Tests for docctx.context.collection."""

from __future__ import annotations

import pytest

from docctx.context import ContextCollection
from docctx.models import BoundaryTransitionType, SourceRange


@pytest.mark.parametrize("count", [1, 2, 3, 6])
def test_alternating_languages_produce_n_minus_one_boundaries(make_context, count: int) -> None:
    languages = ["Python", "JavaScript"]
    collection = ContextCollection(
        make_context(languages[index % 2], line=index * 5) for index in range(count)
    )

    assert len(collection.get_boundaries()) == count - 1


def test_same_language_neighbours_have_no_boundary(make_context) -> None:
    collection = ContextCollection(
        [make_context("Python", line=0), make_context("Python", line=3), make_context("Go", line=6)]
    )

    [boundary] = collection.get_boundaries()

    assert boundary.before_context.language == "Python"
    assert boundary.after_context.language == "Go"
    assert boundary.location == SourceRange(6, 6, 0, 0)
    assert boundary.transition_type is BoundaryTransitionType.LANGUAGE_CHANGE


def test_source_order_ignores_insertion_order(make_context) -> None:
    late = make_context("Go", line=9)
    early = make_context("Rust", line=1)
    collection = ContextCollection([late, early])

    assert collection.get_contexts_in_source_order() == [early, late]


def test_get_all_contexts_sorted_by_confidence(make_context) -> None:
    low = make_context("Go", confidence=0.3)
    high = make_context("Rust", confidence=0.9, line=2)
    collection = ContextCollection([low, high])

    assert collection.get_all_contexts() == [high, low]
    assert len(collection) == 2


def test_context_at_prefers_highest_confidence(make_context) -> None:
    wide = make_context("Python", confidence=0.6, line=0, end_line=10)
    narrow = make_context("Shell", confidence=0.9, line=4, column=0, end_column=20)
    collection = ContextCollection([wide, narrow])

    assert collection.get_context_at(4, 3) is narrow
    assert collection.get_context_at(8, 0) is wide
    assert collection.get_context_at(20, 0) is None


def test_contexts_for_language_is_case_insensitive(make_context) -> None:
    collection = ContextCollection([make_context("Python"), make_context("Go", line=2)])

    assert [ctx.language for ctx in collection.get_contexts_for_language("python")] == ["Python"]


def test_overall_confidence_penalises_boundaries(make_context) -> None:
    single = ContextCollection([make_context("Python", confidence=0.8)])
    mixed = ContextCollection(
        [make_context("Python", confidence=0.8), make_context("Go", confidence=0.8, line=3)]
    )

    assert single.overall_confidence() == pytest.approx(0.8)
    assert mixed.overall_confidence() == pytest.approx(0.75)
    assert ContextCollection().overall_confidence() == 0.0


def test_clear_and_add(make_context) -> None:
    collection = ContextCollection()
    collection.add_contexts([make_context("Python"), make_context("Go", line=1)])
    collection.add_context(make_context("Rust", line=2))
    assert len(collection) == 3

    collection.clear()

    assert collection.get_boundaries() == []
