"""Confidence scoring for collected evidence.

Scores start as a weighted average of evidence confidence (weighted by how
diagnostic each evidence type is), then strong indicators apply a
multiplicative boost. Every output is clamped to the calculator's
``[min_confidence, max_confidence]`` band.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Sequence

from ..models import Evidence, EvidenceType

UNKNOWN_TYPE_WEIGHT = 0.3


class AggregationMethod(str, Enum):
    WEIGHTED_AVERAGE = "weighted_average"
    MAX_BOOST = "max_boost"
    HARMONIC_MEAN = "harmonic_mean"


@dataclass(frozen=True)
class IndicatorSetting:
    weight: float
    boost_factor: float


@dataclass(frozen=True)
class StrongIndicator:
    type: EvidenceType
    weight: float
    boost_factor: float


@dataclass(frozen=True)
class ConfidenceScore:
    """Intermediate score used only within a single aggregation call."""

    value: float
    weight: float = 1.0
    source: str = ""
    evidence_count: int = 0


DEFAULT_TYPE_WEIGHTS: Dict[EvidenceType, float] = {
    EvidenceType.EXTENSION: 0.9,
    EvidenceType.SYNTAX: 0.8,
    EvidenceType.DECLARATION: 0.9,
    EvidenceType.FRAMEWORK: 0.7,
    EvidenceType.DEPENDENCY: 0.6,
    EvidenceType.PATTERN: 0.6,
    EvidenceType.KEYWORD: 0.5,
    EvidenceType.TOOL: 0.4,
}

DEFAULT_STRONG_INDICATORS: Dict[EvidenceType, IndicatorSetting] = {
    EvidenceType.EXTENSION: IndicatorSetting(weight=0.8, boost_factor=1.2),
    EvidenceType.FRAMEWORK: IndicatorSetting(weight=0.7, boost_factor=1.15),
    EvidenceType.SYNTAX: IndicatorSetting(weight=0.9, boost_factor=1.3),
    EvidenceType.DECLARATION: IndicatorSetting(weight=0.9, boost_factor=1.25),
}


@dataclass(frozen=True)
class ConfidenceConfig:
    min_confidence: float = 0.0
    max_confidence: float = 1.0
    strong_indicator_threshold: float = 0.6
    aggregation_method: AggregationMethod = AggregationMethod.WEIGHTED_AVERAGE
    type_weights: Mapping[EvidenceType, float] = field(default_factory=lambda: dict(DEFAULT_TYPE_WEIGHTS))
    strong_indicators: Mapping[EvidenceType, IndicatorSetting] = field(
        default_factory=lambda: dict(DEFAULT_STRONG_INDICATORS)
    )

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_confidence <= self.max_confidence <= 1.0:
            raise ValueError("Expected 0 <= min_confidence <= max_confidence <= 1")


CONFIDENCE_PROFILES: Dict[str, ConfidenceConfig] = {
    "default": ConfidenceConfig(),
    "conservative": ConfidenceConfig(
        max_confidence=0.85,
        strong_indicator_threshold=0.7,
        strong_indicators={
            EvidenceType.EXTENSION: IndicatorSetting(weight=0.8, boost_factor=1.1),
            EvidenceType.FRAMEWORK: IndicatorSetting(weight=0.7, boost_factor=1.05),
            EvidenceType.SYNTAX: IndicatorSetting(weight=0.9, boost_factor=1.15),
            EvidenceType.DECLARATION: IndicatorSetting(weight=0.9, boost_factor=1.1),
        },
    ),
    "aggressive": ConfidenceConfig(
        min_confidence=0.1,
        strong_indicator_threshold=0.5,
        aggregation_method=AggregationMethod.MAX_BOOST,
        strong_indicators={
            EvidenceType.EXTENSION: IndicatorSetting(weight=0.8, boost_factor=1.35),
            EvidenceType.FRAMEWORK: IndicatorSetting(weight=0.7, boost_factor=1.25),
            EvidenceType.SYNTAX: IndicatorSetting(weight=0.9, boost_factor=1.45),
            EvidenceType.DECLARATION: IndicatorSetting(weight=0.9, boost_factor=1.4),
        },
    ),
}


class ConfidenceCalculator:
    """Turns evidence into a clamped confidence value."""

    def __init__(self, config: ConfidenceConfig | None = None) -> None:
        self.config = config or ConfidenceConfig()

    @classmethod
    def from_profile(cls, name: str) -> "ConfidenceCalculator":
        try:
            return cls(CONFIDENCE_PROFILES[name])
        except KeyError:
            raise ValueError(f"Unknown confidence profile '{name}'") from None

    def clamp(self, value: float) -> float:
        return max(self.config.min_confidence, min(self.config.max_confidence, value))

    def type_weight(self, evidence_type: EvidenceType) -> float:
        return self.config.type_weights.get(evidence_type, UNKNOWN_TYPE_WEIGHT)

    def calculate_base_confidence(self, evidence: Sequence[Evidence]) -> float:
        if not evidence:
            return self.config.min_confidence
        total_weight = 0.0
        weighted = 0.0
        for item in evidence:
            weight = self.type_weight(item.type)
            weighted += item.confidence * weight
            total_weight += weight
        if total_weight <= 0:
            return self.config.min_confidence
        return self.clamp(weighted / total_weight)

    def detect_strong_indicators(self, evidence: Sequence[Evidence]) -> List[StrongIndicator]:
        indicators: List[StrongIndicator] = []
        for item in evidence:
            setting = self.config.strong_indicators.get(item.type)
            if setting is None or item.confidence < self.config.strong_indicator_threshold:
                continue
            indicators.append(
                StrongIndicator(
                    type=item.type,
                    weight=setting.weight * item.confidence,
                    boost_factor=setting.boost_factor,
                )
            )
        return indicators

    def apply_boost_factors(self, base: float, indicators: Sequence[StrongIndicator]) -> float:
        total_weight = sum(indicator.weight for indicator in indicators)
        if not indicators or total_weight <= 0:
            return base
        average_boost = (
            sum((indicator.boost_factor - 1) * indicator.weight for indicator in indicators) / total_weight
        )
        return self.clamp(base * (1 + average_boost))

    def calculate_with_boosts(self, evidence: Sequence[Evidence]) -> float:
        base = self.calculate_base_confidence(evidence)
        return self.apply_boost_factors(base, self.detect_strong_indicators(evidence))

    def aggregate_multiple_scores(
        self,
        scores: Sequence[ConfidenceScore],
        method: AggregationMethod | str | None = None,
    ) -> float:
        """Combine several scores with the configured (or given) strategy."""
        if not scores:
            return self.config.min_confidence
        if len(scores) == 1:
            return self.clamp(scores[0].value)

        strategy = AggregationMethod(method) if method is not None else self.config.aggregation_method
        if strategy is AggregationMethod.MAX_BOOST:
            return self.clamp(_max_boost(scores))
        if strategy is AggregationMethod.HARMONIC_MEAN:
            return self.clamp(_harmonic_mean(scores, self.config.min_confidence))
        return self.clamp(_weighted_average(scores, self.config.min_confidence))


def _weighted_average(scores: Sequence[ConfidenceScore], fallback: float) -> float:
    total_weight = sum(score.weight for score in scores)
    if total_weight <= 0:
        return fallback
    return sum(score.value * score.weight for score in scores) / total_weight


def _max_boost(scores: Sequence[ConfidenceScore]) -> float:
    best = max(score.value for score in scores)
    diversity = min(0.05 * len(scores), 0.2)
    volume = min(0.02 * sum(score.evidence_count for score in scores), 0.15)
    return best + diversity + volume


def _harmonic_mean(scores: Sequence[ConfidenceScore], fallback: float) -> float:
    positive = [score for score in scores if score.value > 0]
    denominator = sum(score.weight / score.value for score in positive)
    if not positive or denominator <= 0:
        return fallback
    return sum(score.weight for score in positive) / denominator


__all__ = [
    "AggregationMethod",
    "CONFIDENCE_PROFILES",
    "ConfidenceCalculator",
    "ConfidenceConfig",
    "ConfidenceScore",
    "DEFAULT_STRONG_INDICATORS",
    "DEFAULT_TYPE_WEIGHTS",
    "IndicatorSetting",
    "StrongIndicator",
]
