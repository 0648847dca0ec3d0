"""Locates evidence in raw text and extracts snippets around it."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Dict, List, Optional, Pattern, Sequence, Union

from ..models import Evidence, EvidenceType, SourceRange

SearchPattern = Union[str, Pattern[str]]

_ELLIPSIS = "..."


@dataclass(frozen=True)
class SourceTrackingConfig:
    """Knobs controlling location tracking and snippet extraction."""

    context_lines: int
    max_snippet_length: int
    extract_snippets: bool
    track_line_numbers: bool
    track_column_positions: bool

    def __post_init__(self) -> None:
        if self.context_lines < 0:
            raise ValueError("context_lines must be >= 0")
        if self.max_snippet_length <= 0:
            raise ValueError("max_snippet_length must be > 0")


DEFAULT_TRACKING = SourceTrackingConfig(
    context_lines=2,
    max_snippet_length=200,
    extract_snippets=True,
    track_line_numbers=True,
    track_column_positions=True,
)
DETAILED_TRACKING = SourceTrackingConfig(
    context_lines=5,
    max_snippet_length=500,
    extract_snippets=True,
    track_line_numbers=True,
    track_column_positions=True,
)
MINIMAL_TRACKING = SourceTrackingConfig(
    context_lines=1,
    max_snippet_length=100,
    extract_snippets=True,
    track_line_numbers=True,
    track_column_positions=False,
)
PERFORMANCE_TRACKING = SourceTrackingConfig(
    context_lines=0,
    max_snippet_length=50,
    extract_snippets=False,
    track_line_numbers=True,
    track_column_positions=False,
)

TRACKING_PRESETS: Dict[str, SourceTrackingConfig] = {
    "default": DEFAULT_TRACKING,
    "detailed": DETAILED_TRACKING,
    "minimal": MINIMAL_TRACKING,
    "performance": PERFORMANCE_TRACKING,
}


@dataclass
class SourceSnippet:
    """Snippet text for one evidence item plus surrounding lines."""

    evidence_id: str
    content: str
    location: SourceRange
    context_before: List[str] = field(default_factory=list)
    context_after: List[str] = field(default_factory=list)
    highlight: Optional[SourceRange] = None


@dataclass
class SourceTrackingMetadata:
    """Summary statistics for a tracking bundle."""

    total_lines: int
    total_characters: int
    evidence_count: int
    accuracy: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class SourceTracking:
    """Diagnostic bundle of evidence, ranges and snippets."""

    source_content: str
    evidence: List[Evidence]
    detection_ranges: List[SourceRange]
    snippets: List[SourceSnippet]
    metadata: SourceTrackingMetadata
    source_path: Optional[str] = None


@dataclass
class SourceTrackingStatistics:
    total_lines: int
    total_characters: int
    average_line_length: float
    longest_line: int
    empty_lines: int
    configured_context_lines: int
    max_snippet_length: int


class SourceTracker:
    """Finds evidence locations in a document and builds snippets.

    A tracker is scoped to one document: call ``initialize_tracking`` before
    tracking evidence.
    """

    def __init__(self, config: SourceTrackingConfig | None = None) -> None:
        self._config = config or DEFAULT_TRACKING
        self._lines: List[str] = []
        self._content = ""
        self._source_path: Optional[str] = None

    @classmethod
    def from_preset(cls, name: str) -> "SourceTracker":
        try:
            return cls(TRACKING_PRESETS[name])
        except KeyError:
            raise ValueError(f"Unknown tracking preset '{name}'") from None

    @property
    def config(self) -> SourceTrackingConfig:
        return self._config

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def update_config(self, **changes: object) -> None:
        self._config = replace(self._config, **changes)

    def initialize_tracking(self, content: str, source_path: str | None = None) -> None:
        """Reset internal state for a new document."""
        self._content = content
        self._lines = content.split("\n")
        self._source_path = source_path

    def track_evidence(
        self,
        evidence_type: EvidenceType,
        value: str,
        confidence: float,
        pattern: SearchPattern | None = None,
    ) -> List[Evidence]:
        """Return one evidence item per match of ``value`` (or ``pattern``)."""
        search = pattern if pattern is not None else build_search_pattern(value, evidence_type)
        return [
            self.evidence_at(evidence_type, value, confidence, location)
            for location in self.find_locations(search)
        ]

    def evidence_at(
        self,
        evidence_type: EvidenceType,
        value: str,
        confidence: float,
        location: SourceRange,
    ) -> Evidence:
        snippet = self.extract_snippet(location).content if self._config.extract_snippets else None
        return Evidence(
            type=evidence_type,
            value=value,
            confidence=confidence,
            location=location,
            snippet=snippet,
        )

    def find_locations(self, pattern: SearchPattern, lines: Sequence[int] | None = None) -> List[SourceRange]:
        """Scan every line (or the given line indexes) for matches."""
        regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
        indexes = range(len(self._lines)) if lines is None else lines
        locations: List[SourceRange] = []
        for line_index in indexes:
            if line_index < 0 or line_index >= len(self._lines):
                continue
            line = self._lines[line_index]
            position = 0
            while position <= len(line):
                match = regex.search(line, position)
                if match is None:
                    break
                locations.append(self._range_for_match(line_index, line, match.start(), match.end()))
                # zero-length matches would otherwise never advance
                position = match.end() if match.end() > match.start() else match.end() + 1
        return locations

    def _range_for_match(self, line_index: int, line: str, start: int, end: int) -> SourceRange:
        if not self._config.track_column_positions:
            return SourceRange(line_index, line_index, 0, max(len(line) - 1, 0))
        end_column = max(end - 1, start)
        return SourceRange(line_index, line_index, start, end_column)

    def extract_snippet(self, location: SourceRange, context_lines: int | None = None) -> SourceSnippet:
        """Return the evidence lines plus a clamped window of context lines."""
        window = self._config.context_lines if context_lines is None else context_lines
        last_line = max(len(self._lines) - 1, 0)
        start_line = max(0, location.start_line - window)
        end_line = min(last_line, location.end_line + window)

        content = "\n".join(self._lines[location.start_line : location.end_line + 1])
        if len(content) > self._config.max_snippet_length:
            content = content[: self._config.max_snippet_length] + _ELLIPSIS

        return SourceSnippet(
            evidence_id=f"{location.start_line}_{location.start_column}",
            content=content,
            location=location,
            context_before=self._lines[start_line : location.start_line],
            context_after=self._lines[location.end_line + 1 : end_line + 1],
            highlight=_highlight_range(location, content),
        )

    def add_line_number_tracking(self, evidence: Sequence[Evidence]) -> List[Evidence]:
        """Locate evidence missing a location; drop what cannot be located."""
        if not self._config.track_line_numbers:
            return list(evidence)
        tracked: List[Evidence] = []
        for item in evidence:
            if item.location is not None:
                tracked.append(item)
                continue
            found = self.find_locations(build_search_pattern(item.value, item.type))
            if found:
                tracked.append(replace(item, location=found[0]))
        return tracked

    def create_source_tracking(self, evidence: Sequence[Evidence]) -> SourceTracking:
        items = list(evidence)
        metadata = SourceTrackingMetadata(
            total_lines=len(self._lines),
            total_characters=len(self._content),
            evidence_count=len(items),
            accuracy=_tracking_accuracy(items),
        )
        return SourceTracking(
            source_content=self._content,
            evidence=items,
            detection_ranges=[item.location for item in items if item.location is not None],
            snippets=[self._snippet_for(item, f"evidence_{index}") for index, item in enumerate(items)],
            metadata=metadata,
            source_path=self._source_path,
        )

    def get_tracking_statistics(self) -> SourceTrackingStatistics:
        line_count = len(self._lines)
        return SourceTrackingStatistics(
            total_lines=line_count,
            total_characters=len(self._content),
            average_line_length=len(self._content) / line_count if line_count else 0.0,
            longest_line=max((len(line) for line in self._lines), default=0),
            empty_lines=sum(1 for line in self._lines if not line.strip()),
            configured_context_lines=self._config.context_lines,
            max_snippet_length=self._config.max_snippet_length,
        )

    def _snippet_for(self, evidence: Evidence, evidence_id: str) -> SourceSnippet:
        if evidence.location is None:
            return SourceSnippet(
                evidence_id=evidence_id,
                content=evidence.value,
                location=SourceRange.empty(),
            )
        snippet = self.extract_snippet(evidence.location)
        snippet.evidence_id = evidence_id
        return snippet


def build_search_pattern(value: str, evidence_type: EvidenceType) -> Pattern[str]:
    """Build the default search regex for an evidence value."""
    escaped = re.escape(value)
    if evidence_type is EvidenceType.EXTENSION:
        return re.compile(rf"{escaped}\b", re.IGNORECASE)
    if evidence_type in (EvidenceType.KEYWORD, EvidenceType.FRAMEWORK):
        return re.compile(rf"(?<!\w){escaped}(?!\w)", re.IGNORECASE)
    if evidence_type is EvidenceType.DEPENDENCY:
        return re.compile(rf"[\"']{escaped}[\"']", re.IGNORECASE)
    return re.compile(escaped, re.IGNORECASE)


def _highlight_range(location: SourceRange, content: str) -> SourceRange:
    line_count = len(content.split("\n"))
    end_line = 0 if line_count == 1 else min(line_count - 1, location.end_line - location.start_line)
    end_column = location.end_column
    if end_line == 0:
        end_column = max(end_column, location.start_column)
    return SourceRange(0, end_line, location.start_column, end_column)


def _tracking_accuracy(evidence: Sequence[Evidence]) -> float:
    if not evidence:
        return 0.0
    located = [item.location for item in evidence if item.location is not None]
    if not located:
        return 0.0
    ratio = len(located) / len(evidence)
    quality = sum(1 for loc in located if loc.end_line >= loc.start_line) / len(located)
    return ratio * quality


__all__ = [
    "DEFAULT_TRACKING",
    "DETAILED_TRACKING",
    "MINIMAL_TRACKING",
    "PERFORMANCE_TRACKING",
    "SourceSnippet",
    "SourceTracker",
    "SourceTracking",
    "SourceTrackingConfig",
    "SourceTrackingMetadata",
    "SourceTrackingStatistics",
    "TRACKING_PRESETS",
    "build_search_pattern",
]
