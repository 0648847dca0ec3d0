"""Source location tracking for detection evidence."""

from .source_tracker import (
    DEFAULT_TRACKING,
    DETAILED_TRACKING,
    MINIMAL_TRACKING,
    PERFORMANCE_TRACKING,
    TRACKING_PRESETS,
    SourceSnippet,
    SourceTracker,
    SourceTracking,
    SourceTrackingConfig,
    SourceTrackingMetadata,
    SourceTrackingStatistics,
    build_search_pattern,
)
from .utils import EvidenceSummary, filter_by_evidence_type, get_evidence_summary, merge_source_tracking

__all__ = [
    "DEFAULT_TRACKING",
    "DETAILED_TRACKING",
    "EvidenceSummary",
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
    "filter_by_evidence_type",
    "get_evidence_summary",
    "merge_source_tracking",
]
