"""Language context storage, boundaries and inheritance."""

from .collection import ContextCollection
from .inheritance import (
    ContextInheritanceEngine,
    InheritanceAction,
    InheritanceRule,
    RuleCondition,
    evaluate_condition,
    merge_contexts,
)

__all__ = [
    "ContextCollection",
    "ContextInheritanceEngine",
    "InheritanceAction",
    "InheritanceRule",
    "RuleCondition",
    "evaluate_condition",
    "merge_contexts",
]
