"""Analyzer contract shared by every document analyzer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from ..document import DocumentNode, normalize_document
from ..models import AnalyzerResult, LanguageContext


class Analyzer(ABC):
    """Contract for analyzers that inspect a document tree and its raw text."""

    name: str = "Analyzer"

    def supports(self, document: Sequence[DocumentNode], content: str) -> bool:
        """Return True when this analyzer should run for the document."""
        return bool(content.strip())

    @abstractmethod
    def analyze(
        self,
        document: Sequence[DocumentNode],
        content: str,
        context: Optional[Sequence[LanguageContext]] = None,
    ) -> AnalyzerResult[Any]:
        """Produce a result; failures are reported in the result, not raised."""


def run_analyzer(
    analyzer: Analyzer,
    document: Any,
    content: str,
    context: Optional[Sequence[LanguageContext]] = None,
) -> AnalyzerResult[Any]:
    """Invoke ``analyzer`` with a normalised document tree.

    Older callers hand over ``{"ast": [...]}`` wrappers, single root nodes or
    plain mappings; they all funnel through here.
    """
    nodes: List[DocumentNode] = normalize_document(document)
    return analyzer.analyze(nodes, content, context)


__all__ = ["Analyzer", "run_analyzer"]
