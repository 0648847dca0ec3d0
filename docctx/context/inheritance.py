"""Rule-based combination of a parent context with a local child context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from ..logging import get_logger
from ..models import ContextMetadata, LanguageContext

LOW_CONFIDENCE_THRESHOLD = 0.5
HIGH_CONFIDENCE_THRESHOLD = 0.8
MERGED_SOURCE = "merged-context"


class RuleCondition(str, Enum):
    ALWAYS = "always"
    NO_CHILD_CONTEXT = "no-child-context"
    HAS_CHILD_CONTEXT = "has-child-context"
    LOW_CONFIDENCE = "low-confidence"
    HIGH_CONFIDENCE = "high-confidence"

    @classmethod
    def parse(cls, value: Union["RuleCondition", str]) -> Optional["RuleCondition"]:
        """Return the matching member, or None for unrecognised strings."""
        try:
            return cls(value)
        except ValueError:
            return None


class InheritanceAction(str, Enum):
    INHERIT = "inherit"
    OVERRIDE = "override"
    MERGE = "merge"
    IGNORE = "ignore"


ConditionEvaluator = Callable[[Optional[LanguageContext]], bool]


def _always(child: Optional[LanguageContext]) -> bool:
    return True


def _no_child(child: Optional[LanguageContext]) -> bool:
    return child is None


def _has_child(child: Optional[LanguageContext]) -> bool:
    return child is not None


def _low_confidence(child: Optional[LanguageContext]) -> bool:
    return child is None or child.confidence < LOW_CONFIDENCE_THRESHOLD


def _high_confidence(child: Optional[LanguageContext]) -> bool:
    return child is not None and child.confidence >= HIGH_CONFIDENCE_THRESHOLD


CONDITION_EVALUATORS: Dict[RuleCondition, ConditionEvaluator] = {
    RuleCondition.ALWAYS: _always,
    RuleCondition.NO_CHILD_CONTEXT: _no_child,
    RuleCondition.HAS_CHILD_CONTEXT: _has_child,
    RuleCondition.LOW_CONFIDENCE: _low_confidence,
    RuleCondition.HIGH_CONFIDENCE: _high_confidence,
}

_missing = set(RuleCondition) - set(CONDITION_EVALUATORS)
if _missing:  # pragma: no cover - import-time guard
    raise RuntimeError(f"Missing condition evaluators: {sorted(c.value for c in _missing)}")


def evaluate_condition(
    condition: Union[RuleCondition, str], child: Optional[LanguageContext]
) -> bool:
    parsed = RuleCondition.parse(condition)
    if parsed is None:
        return False
    return CONDITION_EVALUATORS[parsed](child)


@dataclass(frozen=True)
class InheritanceRule:
    """Condition → action pair; higher priority rules are evaluated first."""

    condition: Union[RuleCondition, str]
    action: InheritanceAction
    priority: int = 0
    description: Optional[str] = None


class ContextInheritanceEngine:
    """Per-consumer rule interpreter over a parent and an optional child context."""

    def __init__(
        self,
        rules: List[InheritanceRule] | None = None,
        parent_context: LanguageContext | None = None,
    ) -> None:
        self._rules: List[InheritanceRule] = []
        self.parent_context = parent_context
        self.logger = get_logger("context.inheritance")
        for rule in rules or []:
            self.add_inheritance_rule(rule)

    @property
    def rules(self) -> List[InheritanceRule]:
        return list(self._rules)

    def set_parent_context(self, context: LanguageContext | None) -> None:
        self.parent_context = context

    def add_inheritance_rule(self, rule: InheritanceRule) -> None:
        self._rules.append(rule)
        # stable sort keeps insertion order among equal priorities
        self._rules.sort(key=lambda item: item.priority, reverse=True)

    def clear_rules(self) -> None:
        self._rules.clear()

    def apply_inheritance_rules(
        self, child_context: LanguageContext | None = None
    ) -> Optional[LanguageContext]:
        parent = self.parent_context
        if parent is None:
            return child_context

        for rule in self._rules:
            if not evaluate_condition(rule.condition, child_context):
                continue
            self.logger.debug(
                "Inheritance rule matched: condition=%s action=%s",
                getattr(rule.condition, "value", rule.condition),
                rule.action.value,
            )
            return self._apply_action(rule.action, parent, child_context)

        return child_context if child_context is not None else parent

    def _apply_action(
        self,
        action: InheritanceAction,
        parent: LanguageContext,
        child: Optional[LanguageContext],
    ) -> Optional[LanguageContext]:
        if action is InheritanceAction.INHERIT:
            return parent
        if action is InheritanceAction.MERGE:
            if child is None:
                return parent
            return merge_contexts(parent, child)
        return child


def merge_contexts(parent: LanguageContext, child: LanguageContext) -> LanguageContext:
    """Build a new context combining parent and child; neither is modified."""
    language = child.language if child.confidence > parent.confidence else parent.language
    parent_meta = parent.metadata
    child_meta = child.metadata
    properties = dict(parent_meta.properties) if parent_meta else {}
    if child_meta:
        properties.update(child_meta.properties)

    metadata = ContextMetadata(
        source=MERGED_SOURCE,
        framework=_prefer(child_meta.framework if child_meta else None, parent_meta.framework if parent_meta else None),
        version=_prefer(child_meta.version if child_meta else None, parent_meta.version if parent_meta else None),
        properties=properties,
    )
    return LanguageContext(
        language=language,
        confidence=(parent.confidence + child.confidence) / 2,
        source_range=child.source_range,
        evidence=tuple(parent.evidence) + tuple(child.evidence),
        parent_context=parent,
        metadata=metadata,
    )


def _prefer(primary: Optional[str], fallback: Optional[str]) -> Optional[str]:
    return primary if primary is not None else fallback


__all__ = [
    "CONDITION_EVALUATORS",
    "ContextInheritanceEngine",
    "InheritanceAction",
    "InheritanceRule",
    "RuleCondition",
    "evaluate_condition",
    "merge_contexts",
]
