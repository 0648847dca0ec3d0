"""Analyzer implementations and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Dict, Iterable, List, Sequence, Set

from ..components import ComponentBundle, build_components
from .base import Analyzer, run_analyzer
from .commands import CommandExtractionResult, CommandExtractor, CommandInfo, categorize_command, looks_like_command
from .language import DetectionResult, LanguageDetection, LanguageDetector

_ENTRY_POINT_GROUP = "docctx.analyzers"

_BUILTIN_FACTORIES: Dict[str, Callable[[ComponentBundle], Analyzer]] = {
    "language": lambda bundle: LanguageDetector(
        source_tracker=bundle.source_tracker,
        confidence_calculator=bundle.confidence_calculator,
        context_collection=bundle.context_collection,
    ),
    "commands": lambda bundle: CommandExtractor(associator=bundle.associator),
}


def discover_analyzers(
    enabled: Sequence[str] | None = None, components: ComponentBundle | None = None
) -> List[Analyzer]:
    """Return instantiated analyzers, honoring optional enabled names.

    Built-ins share ``components`` (a fresh bundle when omitted); plugins
    registered under the ``docctx.analyzers`` entry point group are
    constructed without arguments.
    """
    bundle = components or build_components()
    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    analyzers: List[Analyzer] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Analyzer]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Analyzer):
            raise TypeError(f"Analyzer factory for '{name}' did not return an Analyzer instance")
        analyzers.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, builtin in _BUILTIN_FACTORIES.items():
        _add(name, lambda builtin=builtin: builtin(bundle))

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load analyzer entry point '{entry.name}': {exc}") from exc
        _add(entry.name, lambda obj=loaded: _coerce_analyzer(obj))

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown analyzers requested: {missing}")

    return analyzers


def _coerce_analyzer(obj: object) -> Analyzer:
    if isinstance(obj, Analyzer):
        return obj
    if isinstance(obj, type) and issubclass(obj, Analyzer):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Analyzer):
            return instance
    raise TypeError("Analyzer entry point must be an Analyzer subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Analyzer",
    "CommandExtractionResult",
    "CommandExtractor",
    "CommandInfo",
    "DetectionResult",
    "LanguageDetection",
    "LanguageDetector",
    "categorize_command",
    "discover_analyzers",
    "looks_like_command",
    "run_analyzer",
]
