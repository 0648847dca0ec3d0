"""Per-run component construction.

Each analysis run owns its own bundle; nothing here is cached or shared
between documents.
"""

from __future__ import annotations

from dataclasses import dataclass

from .association import CommandContextAssociator
from .config import DocCtxConfig
from .context import ContextCollection, ContextInheritanceEngine
from .scoring import ConfidenceCalculator
from .tracking import SourceTracker


@dataclass
class ComponentBundle:
    source_tracker: SourceTracker
    confidence_calculator: ConfidenceCalculator
    context_collection: ContextCollection
    inheritance_engine: ContextInheritanceEngine
    associator: CommandContextAssociator


def build_components(config: DocCtxConfig | None = None) -> ComponentBundle:
    """Construct a fresh, independent component set from ``config``."""
    config = config or DocCtxConfig()
    engine = ContextInheritanceEngine(rules=list(config.inheritance_rules))
    return ComponentBundle(
        source_tracker=SourceTracker(config.tracking_config()),
        confidence_calculator=ConfidenceCalculator(config.confidence_config()),
        context_collection=ContextCollection(),
        inheritance_engine=engine,
        associator=CommandContextAssociator(engine),
    )


__all__ = ["ComponentBundle", "build_components"]
