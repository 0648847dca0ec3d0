"""Language detection with evidence collection and context generation."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence

from .base import Analyzer
from ..patterns import EVIDENCE_CONFIDENCE, LANGUAGE_PATTERNS, LanguagePatterns
from ..context import ContextCollection
from ..document import DocumentNode, walk
from ..logging import component_logger
from ..models import (
    AnalyzerResult,
    ContextBoundary,
    ContextMetadata,
    Evidence,
    EvidenceType,
    LanguageContext,
    SourceRange,
)
from ..scoring import ConfidenceCalculator
from ..tracking import SourceTracker, SourceTracking

FALLBACK_THRESHOLD = 0.6
DIVERSITY_TYPES = 3
DIVERSITY_MULTIPLIER = 1.2
FRAMEWORK_MULTIPLIER = 1.1
KNOWN_LANGUAGE_FLOOR = 0.3

EVIDENCE_SOURCE_LABELS: Dict[EvidenceType, str] = {
    EvidenceType.KEYWORD: "text-mention",
    EvidenceType.EXTENSION: "file-reference",
    EvidenceType.SYNTAX: "code-block",
    EvidenceType.DEPENDENCY: "text-mention",
    EvidenceType.FRAMEWORK: "text-mention",
    EvidenceType.TOOL: "text-mention",
    EvidenceType.PATTERN: "pattern-match",
    EvidenceType.DECLARATION: "code-block",
}


@dataclass
class LanguageDetection:
    language: str
    confidence: float
    evidence: List[Evidence]
    source_tracking: SourceTracking


@dataclass
class DetectionResult:
    """Everything a detection run produced for one document."""

    languages: List[LanguageDetection]
    contexts: List[LanguageContext]
    boundaries: List[ContextBoundary]
    overall_confidence: float
    source_tracking: SourceTracking


class LanguageDetector(Analyzer):
    """Infers languages from fenced blocks, keywords, extensions and frameworks."""

    name = "LanguageDetector"

    def __init__(
        self,
        source_tracker: SourceTracker | None = None,
        confidence_calculator: ConfidenceCalculator | None = None,
        context_collection: ContextCollection | None = None,
        patterns: Mapping[str, LanguagePatterns] | None = None,
    ) -> None:
        self.source_tracker = source_tracker or SourceTracker()
        self.confidence_calculator = confidence_calculator or ConfidenceCalculator()
        self.context_collection = context_collection or ContextCollection()
        self.patterns: Mapping[str, LanguagePatterns] = patterns or LANGUAGE_PATTERNS
        self.logger = component_logger("analyzers.language", self.name)
        self._content = ""

    def analyze(
        self,
        document: Sequence[DocumentNode],
        content: str,
        context: Optional[Sequence[LanguageContext]] = None,
    ) -> AnalyzerResult[DetectionResult]:
        try:
            result = self.detect_with_context(document, content)
        except Exception as exc:
            self.logger.exception("Language detection failed")
            return AnalyzerResult.failure(
                code="LANGUAGE_DETECTION_ERROR",
                message=f"Failed to detect languages: {exc}",
                component=self.name,
            )
        sources = sorted(
            {EVIDENCE_SOURCE_LABELS.get(item.type, "text-mention") for ctx in result.contexts for item in ctx.evidence}
        )
        return AnalyzerResult.ok(result, result.overall_confidence, sources)

    def detect_with_context(self, document: Sequence[DocumentNode], content: str) -> DetectionResult:
        self._content = content
        self.source_tracker.initialize_tracking(content)
        self.context_collection.clear()

        evidence_by_language = self.collect_language_evidence(document)
        contexts = self.generate_language_contexts(evidence_by_language)
        boundaries = self.context_collection.get_boundaries()
        overall = self.context_collection.overall_confidence()

        self.logger.debug(
            "Detected %d contexts, %d boundaries, overall confidence %.2f",
            len(contexts),
            len(boundaries),
            overall,
        )
        return DetectionResult(
            languages=[
                LanguageDetection(
                    language=ctx.language,
                    confidence=ctx.confidence,
                    evidence=list(ctx.evidence),
                    source_tracking=self.source_tracker.create_source_tracking(ctx.evidence),
                )
                for ctx in contexts
            ],
            contexts=contexts,
            boundaries=boundaries,
            overall_confidence=overall,
            source_tracking=self.source_tracker.create_source_tracking(
                [item for ctx in contexts for item in ctx.evidence]
            ),
        )

    def get_context(self, position: int) -> Optional[LanguageContext]:
        """Return the context covering a character offset of the last document."""
        line, column = _offset_to_point(self._content, position)
        return self.context_collection.get_context_at(line, column)

    def get_all_contexts(self) -> List[LanguageContext]:
        return self.context_collection.get_all_contexts()

    def get_context_boundaries(self) -> List[ContextBoundary]:
        return self.context_collection.get_boundaries()

    # Evidence collection

    def collect_language_evidence(self, document: Sequence[DocumentNode]) -> Dict[str, List[Evidence]]:
        evidence: Dict[str, List[Evidence]] = {}
        self._collect_code_block_evidence(document, evidence)
        self._collect_text_evidence(
            evidence, EvidenceType.KEYWORD, lambda p: p.keywords, EVIDENCE_CONFIDENCE["keyword"]
        )
        self._collect_text_evidence(
            evidence, EvidenceType.EXTENSION, lambda p: p.file_extensions, EVIDENCE_CONFIDENCE["extension"]
        )
        self._collect_text_evidence(
            evidence, EvidenceType.FRAMEWORK, lambda p: p.frameworks, EVIDENCE_CONFIDENCE["framework"]
        )
        return evidence

    def _collect_code_block_evidence(
        self, document: Sequence[DocumentNode], evidence: Dict[str, List[Evidence]]
    ) -> None:
        seen_per_tag: Dict[str, int] = {}
        for node in walk(document):
            if node.type != "code" or not node.lang:
                continue
            tag = node.lang.lower()
            language = self._language_for_tag(tag)
            if language is None:
                continue
            occurrence = seen_per_tag.get(tag, 0)
            seen_per_tag[tag] = occurrence + 1
            location = self._locate_fence(tag, node.line, occurrence)
            item = self.source_tracker.evidence_at(
                EvidenceType.SYNTAX, f"```{tag}", EVIDENCE_CONFIDENCE["syntax"], location
            )
            evidence.setdefault(language, []).append(item)

    def _language_for_tag(self, tag: str) -> Optional[str]:
        for language, patterns in self.patterns.items():
            if tag in patterns.code_block_tags:
                return language
        return None

    def _locate_fence(self, tag: str, line: Optional[int], occurrence: int) -> SourceRange:
        fence = re.compile(rf"(?:```|~~~)\s*{re.escape(tag)}(?![\w+#-])", re.IGNORECASE)
        if line is not None:
            found = self.source_tracker.find_locations(fence, lines=[line])
            if found:
                return found[0]
            return SourceRange(line, line, 0, 0)
        found = self.source_tracker.find_locations(fence)
        if occurrence < len(found):
            return found[occurrence]
        return SourceRange.empty()

    def _collect_text_evidence(
        self,
        evidence: Dict[str, List[Evidence]],
        evidence_type: EvidenceType,
        values_for,
        confidence: float,
    ) -> None:
        for language, patterns in self.patterns.items():
            for value in values_for(patterns):
                found = self.source_tracker.track_evidence(evidence_type, value, confidence)
                if found:
                    evidence.setdefault(language, []).extend(found)

    # Context generation

    def generate_language_contexts(self, evidence_by_language: Mapping[str, List[Evidence]]) -> List[LanguageContext]:
        contexts: List[LanguageContext] = []
        for language, evidence in evidence_by_language.items():
            if not evidence:
                continue
            boosted = self.confidence_calculator.calculate_with_boosts(evidence)
            confidence = self.apply_fallback_strategies(language, boosted, evidence)
            context = LanguageContext(
                language=language,
                confidence=confidence,
                source_range=bounding_range(evidence),
                evidence=tuple(evidence),
                metadata=ContextMetadata(
                    source=self.name,
                    framework=self.detect_primary_framework(language, evidence),
                ),
            )
            contexts.append(context)
            self.context_collection.add_context(context)
            self.logger.debug(
                "%s: %d evidence items, confidence %.2f (boosted %.2f)",
                language,
                len(evidence),
                confidence,
                boosted,
            )
        return sorted(contexts, key=lambda ctx: ctx.confidence, reverse=True)

    def apply_fallback_strategies(self, language: str, confidence: float, evidence: Sequence[Evidence]) -> float:
        """Nudge low scores for languages with broad or framework-backed support."""
        if confidence >= FALLBACK_THRESHOLD:
            return confidence
        if len({item.type for item in evidence}) >= DIVERSITY_TYPES:
            confidence = min(confidence * DIVERSITY_MULTIPLIER, 1.0)
        if self._has_framework_support(language, evidence):
            confidence = min(confidence * FRAMEWORK_MULTIPLIER, 1.0)
        if language in self.patterns and confidence < KNOWN_LANGUAGE_FLOOR:
            confidence = KNOWN_LANGUAGE_FLOOR
        return confidence

    def _has_framework_support(self, language: str, evidence: Sequence[Evidence]) -> bool:
        patterns = self.patterns.get(language)
        if patterns is None:
            return False
        return any(
            framework.lower() in item.value.lower()
            for item in evidence
            if item.type is EvidenceType.FRAMEWORK
            for framework in patterns.frameworks
        )

    def detect_primary_framework(self, language: str, evidence: Sequence[Evidence]) -> Optional[str]:
        framework_evidence = [item for item in evidence if item.type is EvidenceType.FRAMEWORK]
        if framework_evidence:
            best = framework_evidence[0]
            for item in framework_evidence[1:]:
                if item.confidence > best.confidence:
                    best = item
            return best.value
        patterns = self.patterns.get(language)
        if patterns is None:
            return None
        for framework in patterns.frameworks:
            if any(framework.lower() in item.value.lower() for item in evidence):
                return framework
        return None


def bounding_range(evidence: Sequence[Evidence]) -> SourceRange:
    """Smallest range covering every located evidence item."""
    locations = [item.location for item in evidence if item.location is not None]
    if not locations:
        return SourceRange.empty()
    start_line = min(loc.start_line for loc in locations)
    end_line = max(loc.end_line for loc in locations)
    start_column = min(loc.start_column for loc in locations if loc.start_line == start_line)
    end_column = max(loc.end_column for loc in locations if loc.end_line == end_line)
    return SourceRange(start_line, end_line, start_column, end_column)


def _offset_to_point(content: str, position: int) -> tuple[int, int]:
    lines = content.split("\n")
    offset = 0
    for index, line in enumerate(lines):
        if offset + len(line) >= position:
            return index, max(position - offset, 0)
        offset += len(line) + 1
    last = max(len(lines) - 1, 0)
    return last, len(lines[last]) if lines else 0


__all__ = ["DetectionResult", "LanguageDetection", "LanguageDetector", "bounding_range"]
