"""Confidence scoring strategies."""

from .confidence import (
    CONFIDENCE_PROFILES,
    DEFAULT_STRONG_INDICATORS,
    DEFAULT_TYPE_WEIGHTS,
    AggregationMethod,
    ConfidenceCalculator,
    ConfidenceConfig,
    ConfidenceScore,
    IndicatorSetting,
    StrongIndicator,
)

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
