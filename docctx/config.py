"""Configuration loading for docctx (.docctx.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .context import InheritanceAction, InheritanceRule, RuleCondition
from .scoring import CONFIDENCE_PROFILES, AggregationMethod, ConfidenceConfig
from .tracking import TRACKING_PRESETS, SourceTrackingConfig

CONFIG_FILENAME = ".docctx.yml"

_TRACKING_INT_KEYS = ("context_lines", "max_snippet_length")
_TRACKING_BOOL_KEYS = ("extract_snippets", "track_line_numbers", "track_column_positions")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class TrackingSettings:
    """Source tracking preset plus per-knob overrides."""

    preset: str = "default"
    overrides: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ConfidenceSettings:
    profile: str = "default"
    aggregation: Optional[str] = None
    min_confidence: Optional[float] = None
    max_confidence: Optional[float] = None


@dataclass
class AnalyzerConfig:
    """Analyzer enablement; an empty list means every available analyzer."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class DocCtxConfig:
    """Represents the settings defined in .docctx.yml."""

    root: Optional[Path] = None
    tracking: TrackingSettings = field(default_factory=TrackingSettings)
    confidence: ConfidenceSettings = field(default_factory=ConfidenceSettings)
    analyzers: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    inheritance_rules: List[InheritanceRule] = field(default_factory=list)

    def tracking_config(self) -> SourceTrackingConfig:
        base = TRACKING_PRESETS[self.tracking.preset]
        return replace(base, **self.tracking.overrides)

    def confidence_config(self) -> ConfidenceConfig:
        base = CONFIDENCE_PROFILES[self.confidence.profile]
        changes: Dict[str, Any] = {}
        if self.confidence.aggregation is not None:
            changes["aggregation_method"] = AggregationMethod(self.confidence.aggregation)
        if self.confidence.min_confidence is not None:
            changes["min_confidence"] = self.confidence.min_confidence
        if self.confidence.max_confidence is not None:
            changes["max_confidence"] = self.confidence.max_confidence
        return replace(base, **changes) if changes else base


def load_config(config_path: Path) -> DocCtxConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DocCtxConfig(root=root)

    data = _read_config(config_file)
    config = config_from_mapping(data)
    config.root = root
    return config


def config_from_mapping(data: Any) -> DocCtxConfig:
    """Build a config from an already-parsed mapping."""
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    return DocCtxConfig(
        tracking=_tracking_settings(_as_dict(data.get("tracking"))),
        confidence=_confidence_settings(_as_dict(data.get("confidence"))),
        analyzers=AnalyzerConfig(enabled=_as_str_list(_as_dict(data.get("analyzers")).get("enabled"))),
        inheritance_rules=_inheritance_rules(_as_dict(data.get("inheritance")).get("rules")),
    )


def _tracking_settings(data: Mapping[str, Any]) -> TrackingSettings:
    settings = TrackingSettings()
    preset = _as_str(data.get("preset"))
    if preset is not None:
        if preset not in TRACKING_PRESETS:
            raise ConfigError(f"Unknown tracking preset '{preset}'")
        settings.preset = preset
    for key in _TRACKING_INT_KEYS:
        value = _as_int(data.get(key))
        if value is not None:
            settings.overrides[key] = value
    for key in _TRACKING_BOOL_KEYS:
        value = _as_bool(data.get(key))
        if value is not None:
            settings.overrides[key] = value
    try:
        replace(TRACKING_PRESETS[settings.preset], **settings.overrides)
    except ValueError as exc:
        raise ConfigError(f"Invalid tracking settings: {exc}") from exc
    return settings


def _confidence_settings(data: Mapping[str, Any]) -> ConfidenceSettings:
    settings = ConfidenceSettings(
        aggregation=_as_str(data.get("aggregation")),
        min_confidence=_as_float(data.get("min_confidence")),
        max_confidence=_as_float(data.get("max_confidence")),
    )
    profile = _as_str(data.get("profile"))
    if profile is not None:
        if profile not in CONFIDENCE_PROFILES:
            raise ConfigError(f"Unknown confidence profile '{profile}'")
        settings.profile = profile
    if settings.aggregation is not None:
        valid = {method.value for method in AggregationMethod}
        if settings.aggregation not in valid:
            raise ConfigError(f"Unknown aggregation method '{settings.aggregation}'")
    try:
        DocCtxConfig(confidence=settings).confidence_config()
    except ValueError as exc:
        raise ConfigError(f"Invalid confidence settings: {exc}") from exc
    return settings


def _inheritance_rules(value: Any) -> List[InheritanceRule]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError("inheritance.rules must be a list")
    rules = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ConfigError(f"inheritance.rules[{index}] must be a mapping")
        condition = _as_str(item.get("condition"))
        action = _as_str(item.get("action"))
        if condition is None or action is None:
            raise ConfigError(f"inheritance.rules[{index}] needs a condition and an action")
        try:
            parsed_action = InheritanceAction(action)
        except ValueError:
            raise ConfigError(f"Unknown inheritance action '{action}'") from None
        rules.append(
            InheritanceRule(
                # unrecognised conditions are kept and never match
                condition=RuleCondition.parse(condition) or condition,
                action=parsed_action,
                priority=_as_int(item.get("priority")) or 0,
                description=_as_str(item.get("description")),
            )
        )
    return rules


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "AnalyzerConfig",
    "ConfidenceSettings",
    "ConfigError",
    "DocCtxConfig",
    "TrackingSettings",
    "config_from_mapping",
    "load_config",
]
