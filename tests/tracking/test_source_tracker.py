"""Tests for docctx.tracking.source_tracker."""

from __future__ import annotations

import re

import pytest

from docctx.models import Evidence, EvidenceType, SourceRange
from docctx.tracking import (
    MINIMAL_TRACKING,
    PERFORMANCE_TRACKING,
    SourceTracker,
    SourceTrackingConfig,
    build_search_pattern,
)


def test_track_evidence_returns_one_item_per_match(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("Install python first.\nThen run python app.py")

    found = tracker.track_evidence(EvidenceType.KEYWORD, "python", 0.5)

    assert [item.location for item in found] == [
        SourceRange(0, 0, 8, 13),
        SourceRange(1, 1, 9, 14),
    ]
    assert all(item.value == "python" and item.confidence == 0.5 for item in found)


def test_keyword_pattern_is_whole_word_and_case_insensitive(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("Python and pythonic and CPython")

    found = tracker.track_evidence(EvidenceType.KEYWORD, "python", 0.5)

    assert len(found) == 1
    assert found[0].location == SourceRange(0, 0, 0, 5)


def test_extension_pattern_requires_word_boundary_after(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("edit main.py and main.pyc")

    found = tracker.track_evidence(EvidenceType.EXTENSION, ".py", 0.8)

    assert len(found) == 1
    assert found[0].location.start_column == 9


def test_keyword_pattern_handles_symbols() -> None:
    pattern = build_search_pattern("c#", EvidenceType.KEYWORD)

    assert pattern.search("written in C# today")
    assert not pattern.search("abc#")


def test_dependency_pattern_requires_quotes() -> None:
    pattern = build_search_pattern("flask", EvidenceType.DEPENDENCY)

    assert pattern.search('requires "flask" to run')
    assert not pattern.search("requires flask to run")


def test_zero_length_matches_do_not_loop(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("abc")

    found = tracker.track_evidence(EvidenceType.PATTERN, "", 0.3, pattern=re.compile(r"x*"))

    assert len(found) == 4


def test_snippets_attached_when_enabled(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("one\ntwo rust\nthree")

    [item] = tracker.track_evidence(EvidenceType.KEYWORD, "rust", 0.5)

    assert item.snippet == "two rust"


def test_snippets_skipped_when_disabled() -> None:
    tracker = SourceTracker(PERFORMANCE_TRACKING)
    tracker.initialize_tracking("use rust")

    [item] = tracker.track_evidence(EvidenceType.KEYWORD, "rust", 0.5)

    assert item.snippet is None


def test_column_tracking_off_reports_whole_line() -> None:
    tracker = SourceTracker(MINIMAL_TRACKING)
    tracker.initialize_tracking("we use rust here")

    [item] = tracker.track_evidence(EvidenceType.KEYWORD, "rust", 0.5)

    assert item.location == SourceRange(0, 0, 0, 15)


def test_extract_snippet_context_window_is_clamped() -> None:
    tracker = SourceTracker.from_preset("default")
    tracker.initialize_tracking("a\nb\nc\nd\ne")

    snippet = tracker.extract_snippet(SourceRange(1, 1, 0, 0))

    assert snippet.content == "b"
    assert snippet.context_before == ["a"]
    assert snippet.context_after == ["c", "d"]
    assert snippet.evidence_id == "1_0"


def test_extract_snippet_truncates_long_content(tracker: SourceTracker) -> None:
    tracker.update_config(max_snippet_length=5)
    tracker.initialize_tracking("abcdefghij")

    snippet = tracker.extract_snippet(SourceRange(0, 0, 0, 9))

    assert snippet.content == "abcde..."


def test_add_line_number_tracking_locates_and_drops(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("uses golang\n")
    located = Evidence(EvidenceType.KEYWORD, "rust", 0.5, SourceRange(3, 3, 0, 3))
    missing = Evidence(EvidenceType.KEYWORD, "golang", 0.5, None)
    absent = Evidence(EvidenceType.KEYWORD, "ruby", 0.5, None)

    tracked = tracker.add_line_number_tracking([located, missing, absent])

    assert tracked[0] is located
    assert tracked[1].location == SourceRange(0, 0, 5, 10)
    assert len(tracked) == 2


def test_create_source_tracking_bundles_evidence(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("python\nrust", source_path="README.md")
    evidence = tracker.track_evidence(EvidenceType.KEYWORD, "python", 0.5)
    evidence.append(Evidence(EvidenceType.KEYWORD, "go", 0.5, None))

    tracking = tracker.create_source_tracking(evidence)

    assert tracking.source_path == "README.md"
    assert tracking.metadata.total_lines == 2
    assert tracking.metadata.total_characters == len("python\nrust")
    assert tracking.metadata.evidence_count == 2
    assert tracking.metadata.accuracy == pytest.approx(0.5)
    assert len(tracking.detection_ranges) == 1
    assert [snippet.evidence_id for snippet in tracking.snippets] == ["evidence_0", "evidence_1"]


def test_tracking_statistics(tracker: SourceTracker) -> None:
    tracker.initialize_tracking("abc\n\nabcdef")

    stats = tracker.get_tracking_statistics()

    assert stats.total_lines == 3
    assert stats.longest_line == 6
    assert stats.empty_lines == 1
    assert stats.average_line_length == pytest.approx(11 / 3)
    assert stats.configured_context_lines == 2


def test_invalid_config_values_raise() -> None:
    with pytest.raises(ValueError):
        SourceTrackingConfig(
            context_lines=-1,
            max_snippet_length=10,
            extract_snippets=True,
            track_line_numbers=True,
            track_column_positions=True,
        )
    with pytest.raises(ValueError):
        SourceTracker.from_preset("verbose")
