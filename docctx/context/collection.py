"""Storage, point lookup and boundary detection for language contexts."""

from __future__ import annotations

from typing import Iterable, List, Optional

from ..models import BoundaryTransitionType, ContextBoundary, LanguageContext, SourceRange

BOUNDARY_PENALTY_STEP = 0.05
MAX_BOUNDARY_PENALTY = 0.2


class ContextCollection:
    """Holds the contexts detected for one document."""

    def __init__(self, contexts: Iterable[LanguageContext] = ()) -> None:
        self._contexts: List[LanguageContext] = list(contexts)

    def __len__(self) -> int:
        return len(self._contexts)

    def add_context(self, context: LanguageContext) -> None:
        self._contexts.append(context)

    def add_contexts(self, contexts: Iterable[LanguageContext]) -> None:
        self._contexts.extend(contexts)

    def clear(self) -> None:
        self._contexts.clear()

    def get_all_contexts(self) -> List[LanguageContext]:
        """Contexts sorted by descending confidence."""
        return sorted(self._contexts, key=lambda ctx: ctx.confidence, reverse=True)

    def get_contexts_in_source_order(self) -> List[LanguageContext]:
        return sorted(
            self._contexts,
            key=lambda ctx: (
                ctx.source_range.start_line,
                ctx.source_range.start_column,
                -ctx.confidence,
            ),
        )

    def get_contexts_for_language(self, language: str) -> List[LanguageContext]:
        wanted = language.lower()
        return [ctx for ctx in self.get_all_contexts() if ctx.language.lower() == wanted]

    def get_context_at(self, line: int, column: int) -> Optional[LanguageContext]:
        """Return the highest-confidence context whose range contains the point."""
        for context in self.get_all_contexts():
            if context.source_range.contains(line, column):
                return context
        return None

    def get_boundaries(self) -> List[ContextBoundary]:
        ordered = self.get_contexts_in_source_order()
        boundaries: List[ContextBoundary] = []
        for before, after in zip(ordered, ordered[1:]):
            if before.language == after.language:
                continue
            start = after.source_range
            boundaries.append(
                ContextBoundary(
                    location=SourceRange(
                        start.start_line,
                        start.start_line,
                        start.start_column,
                        start.start_column,
                    ),
                    before_context=before,
                    after_context=after,
                    transition_type=BoundaryTransitionType.LANGUAGE_CHANGE,
                )
            )
        return boundaries

    def overall_confidence(self) -> float:
        """Document confidence: dominant context weighted, minus a boundary penalty."""
        if not self._contexts:
            return 0.0
        values = [ctx.confidence for ctx in self._contexts]
        base = 0.7 * max(values) + 0.3 * (sum(values) / len(values))
        penalty = min(BOUNDARY_PENALTY_STEP * len(self.get_boundaries()), MAX_BOUNDARY_PENALTY)
        return max(0.0, base - penalty)


__all__ = ["ContextCollection"]
