"""Tests for source tracking merge/filter/summary helpers."""

from __future__ import annotations

import pytest

from docctx.models import Evidence, EvidenceType
from docctx.tracking import (
    SourceTracker,
    filter_by_evidence_type,
    get_evidence_summary,
    merge_source_tracking,
)

CONTENT = "Built with django.\nSee manage.py and app.py"


def _evidence(tracker: SourceTracker) -> list[Evidence]:
    tracker.initialize_tracking(CONTENT)
    found = tracker.track_evidence(EvidenceType.FRAMEWORK, "django", 0.7)
    found += tracker.track_evidence(EvidenceType.EXTENSION, ".py", 0.8)
    return found


def test_summary_counts_every_tracked_evidence(tracker: SourceTracker) -> None:
    evidence = _evidence(tracker)

    summary = get_evidence_summary(tracker.create_source_tracking(evidence))

    assert summary.total_evidence == len(evidence) == 3
    assert len(summary.evidence_by_type[EvidenceType.EXTENSION]) == 2
    assert summary.average_confidence == pytest.approx((0.7 + 0.8 + 0.8) / 3)
    assert summary.location_coverage == pytest.approx(1.0)
    assert summary.snippet_coverage == pytest.approx(1.0)


def test_summary_of_empty_tracking(tracker: SourceTracker) -> None:
    tracker.initialize_tracking(CONTENT)

    summary = get_evidence_summary(tracker.create_source_tracking([]))

    assert summary.total_evidence == 0
    assert summary.average_confidence == 0.0


def test_filter_keeps_only_requested_type(tracker: SourceTracker) -> None:
    tracking = tracker.create_source_tracking(_evidence(tracker))

    filtered = filter_by_evidence_type(tracking, EvidenceType.EXTENSION)

    assert [item.value for item in filtered.evidence] == [".py", ".py"]
    assert filtered.metadata.evidence_count == 2
    assert len(filtered.detection_ranges) == 2
    assert [snippet.evidence_id for snippet in filtered.snippets] == ["evidence_0", "evidence_1"]
    assert [snippet.location for snippet in filtered.snippets] == [item.location for item in filtered.evidence]


def test_merge_concatenates_and_averages_accuracy(tracker: SourceTracker) -> None:
    evidence = _evidence(tracker)
    located = tracker.create_source_tracking(evidence)
    partial = tracker.create_source_tracking([Evidence(EvidenceType.KEYWORD, "python", 0.5, None)])

    merged = merge_source_tracking([located, partial])

    assert merged.metadata.evidence_count == 4
    assert len(merged.snippets) == 4
    assert len(merged.detection_ranges) == 3
    assert merged.metadata.accuracy == pytest.approx(0.5)


def test_merged_snippets_follow_their_evidence_through_filters(tracker: SourceTracker) -> None:
    located = tracker.create_source_tracking(_evidence(tracker))
    partial = tracker.create_source_tracking([Evidence(EvidenceType.KEYWORD, "python", 0.5, None)])

    merged = merge_source_tracking([located, partial])

    assert [snippet.evidence_id for snippet in merged.snippets] == [
        "evidence_0",
        "evidence_1",
        "evidence_2",
        "evidence_3",
    ]

    keywords = filter_by_evidence_type(merged, EvidenceType.KEYWORD)
    assert [item.value for item in keywords.evidence] == ["python"]
    assert [(snippet.evidence_id, snippet.content) for snippet in keywords.snippets] == [("evidence_0", "python")]

    extensions = filter_by_evidence_type(merged, EvidenceType.EXTENSION)
    assert [snippet.evidence_id for snippet in extensions.snippets] == ["evidence_0", "evidence_1"]
    assert [snippet.location for snippet in extensions.snippets] == [item.location for item in extensions.evidence]

    again = filter_by_evidence_type(extensions, EvidenceType.EXTENSION)
    assert [snippet.location for snippet in again.snippets] == [item.location for item in again.evidence]
    assert len(again.snippets) == 2


def test_merge_requires_input() -> None:
    with pytest.raises(ValueError):
        merge_source_tracking([])
