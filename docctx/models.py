"""Core data models shared across docctx components."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class EvidenceType(str, Enum):
    """Kinds of clues that can support a language inference."""

    KEYWORD = "keyword"
    EXTENSION = "extension"
    SYNTAX = "syntax"
    DEPENDENCY = "dependency"
    FRAMEWORK = "framework"
    TOOL = "tool"
    PATTERN = "pattern"
    DECLARATION = "declaration"


class BoundaryTransitionType(str, Enum):
    """Why two adjacent contexts are considered separate regions."""

    LANGUAGE_CHANGE = "language-change"
    EXPLICIT_MARKER = "explicit-marker"
    FRAMEWORK_CHANGE = "framework-change"


@dataclass(frozen=True)
class SourceRange:
    """Zero-based line/column span inside the analysed document."""

    start_line: int
    end_line: int
    start_column: int
    end_column: int

    def __post_init__(self) -> None:
        if min(self.start_line, self.end_line, self.start_column, self.end_column) < 0:
            raise ValueError("SourceRange values must be non-negative")
        if self.end_line < self.start_line:
            raise ValueError("SourceRange end_line must be >= start_line")
        if self.start_line == self.end_line and self.end_column < self.start_column:
            raise ValueError("SourceRange end_column must be >= start_column on a single line")

    @classmethod
    def empty(cls) -> "SourceRange":
        return cls(0, 0, 0, 0)

    def contains(self, line: int, column: int) -> bool:
        """Return True when (line, column) falls inside the range."""
        if line < self.start_line or line > self.end_line:
            return False
        if line == self.start_line and column < self.start_column:
            return False
        if line == self.end_line and column > self.end_column:
            return False
        return True


@dataclass(frozen=True)
class Evidence:
    """A single located clue supporting a language inference."""

    type: EvidenceType
    value: str
    confidence: float
    location: Optional[SourceRange]
    snippet: Optional[str] = None


@dataclass
class ContextMetadata:
    """Bookkeeping attached to a language context."""

    source: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    framework: Optional[str] = None
    version: Optional[str] = None
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class LanguageContext:
    """A scored, evidenced claim that a source range is about a language.

    ``parent_context`` is a non-owning back reference used for inheritance
    lookups only; it is excluded from equality and repr.
    """

    language: str
    confidence: float
    source_range: SourceRange
    evidence: Tuple[Evidence, ...] = ()
    parent_context: Optional["LanguageContext"] = field(default=None, compare=False, repr=False)
    metadata: Optional[ContextMetadata] = field(default=None, compare=False)


@dataclass(frozen=True)
class ContextBoundary:
    """Transition point between two adjacent contexts of differing language."""

    location: SourceRange
    before_context: LanguageContext
    after_context: LanguageContext
    transition_type: BoundaryTransitionType = BoundaryTransitionType.LANGUAGE_CHANGE


@dataclass
class Command:
    """A shell-like command string found in documentation."""

    command: str
    language: str
    confidence: float
    source: str = "text-mention"
    category: Optional[str] = None


@dataclass
class AssociatedCommand(Command):
    """A command paired with the language context it was assigned to."""

    language_context: Optional[LanguageContext] = None
    context_confidence: float = 0.0


@dataclass
class AnalysisError:
    """Structured error reported by an analyzer instead of raising."""

    code: str
    message: str
    component: str
    severity: str = "error"


@dataclass
class AnalyzerResult(Generic[T]):
    """Discriminated success/failure result returned by every entry point."""

    success: bool
    confidence: float
    data: Optional[T] = None
    sources: List[str] = field(default_factory=list)
    errors: List[AnalysisError] = field(default_factory=list)

    @classmethod
    def ok(
        cls, data: T, confidence: float, sources: Sequence[str] | None = None
    ) -> "AnalyzerResult[T]":
        return cls(success=True, confidence=confidence, data=data, sources=list(sources or []))

    @classmethod
    def failure(
        cls, code: str, message: str, component: str, severity: str = "error"
    ) -> "AnalyzerResult[T]":
        return cls(
            success=False,
            confidence=0.0,
            errors=[AnalysisError(code=code, message=message, component=component, severity=severity)],
        )


__all__ = [
    "AnalysisError",
    "AnalyzerResult",
    "AssociatedCommand",
    "BoundaryTransitionType",
    "Command",
    "ContextBoundary",
    "ContextMetadata",
    "Evidence",
    "EvidenceType",
    "LanguageContext",
    "SourceRange",
]
