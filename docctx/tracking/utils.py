"""Helpers for combining and summarising source tracking bundles."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional, Sequence

from ..models import Evidence, EvidenceType
from .source_tracker import SourceSnippet, SourceTracking, SourceTrackingMetadata

_EVIDENCE_ID_PREFIX = "evidence_"


@dataclass
class EvidenceSummary:
    total_evidence: int
    evidence_by_type: Dict[EvidenceType, List[Evidence]]
    average_confidence: float
    location_coverage: float
    snippet_coverage: float


def merge_source_tracking(trackings: Sequence[SourceTracking]) -> SourceTracking:
    """Concatenate several bundles that describe the same source."""
    if not trackings:
        raise ValueError("Cannot merge an empty sequence of source trackings")
    if len(trackings) == 1:
        return trackings[0]

    first = trackings[0]
    evidence = [item for tracking in trackings for item in tracking.evidence]
    return SourceTracking(
        source_content=first.source_content,
        source_path=first.source_path,
        evidence=evidence,
        detection_ranges=[rng for tracking in trackings for rng in tracking.detection_ranges],
        snippets=_renumber_merged_snippets(trackings),
        metadata=SourceTrackingMetadata(
            total_lines=first.metadata.total_lines,
            total_characters=first.metadata.total_characters,
            evidence_count=len(evidence),
            accuracy=sum(t.metadata.accuracy for t in trackings) / len(trackings),
        ),
    )


def filter_by_evidence_type(tracking: SourceTracking, evidence_type: EvidenceType) -> SourceTracking:
    """Keep only evidence (and its ranges/snippets) of one type."""
    keep = [index for index, item in enumerate(tracking.evidence) if item.type is evidence_type]
    evidence = [tracking.evidence[index] for index in keep]
    return SourceTracking(
        source_content=tracking.source_content,
        source_path=tracking.source_path,
        evidence=evidence,
        detection_ranges=[item.location for item in evidence if item.location is not None],
        snippets=_renumber_snippets(tracking.snippets, {old: new for new, old in enumerate(keep)}),
        metadata=replace(tracking.metadata, evidence_count=len(evidence)),
    )


def _evidence_index(evidence_id: str) -> Optional[int]:
    suffix = evidence_id.removeprefix(_EVIDENCE_ID_PREFIX)
    if suffix == evidence_id or not suffix.isdigit():
        return None
    return int(suffix)


def _renumber_snippets(snippets: Sequence[SourceSnippet], mapping: Mapping[int, int]) -> List[SourceSnippet]:
    """Keep snippets whose evidence index is mapped, re-keyed to the new index."""
    renumbered = []
    for snippet in snippets:
        index = _evidence_index(snippet.evidence_id)
        if index in mapping:
            renumbered.append(replace(snippet, evidence_id=f"{_EVIDENCE_ID_PREFIX}{mapping[index]}"))
    return renumbered


def _renumber_merged_snippets(trackings: Sequence[SourceTracking]) -> List[SourceSnippet]:
    snippets: List[SourceSnippet] = []
    offset = 0
    for tracking in trackings:
        count = len(tracking.evidence)
        snippets.extend(_renumber_snippets(tracking.snippets, {index: offset + index for index in range(count)}))
        offset += count
    return snippets


def get_evidence_summary(tracking: SourceTracking) -> EvidenceSummary:
    by_type: Dict[EvidenceType, List[Evidence]] = {}
    for item in tracking.evidence:
        by_type.setdefault(item.type, []).append(item)

    total = len(tracking.evidence)
    denominator = max(total, 1)
    return EvidenceSummary(
        total_evidence=total,
        evidence_by_type=by_type,
        average_confidence=(sum(item.confidence for item in tracking.evidence) / total) if total else 0.0,
        location_coverage=len(tracking.detection_ranges) / denominator,
        snippet_coverage=len(tracking.snippets) / denominator,
    )


__all__ = [
    "EvidenceSummary",
    "filter_by_evidence_type",
    "get_evidence_summary",
    "merge_source_tracking",
]
