"""Assigns language contexts to extracted commands.

Association confidence comes in three tiers so callers can tell a verified
assignment from an inherited one:

* exact: the command's own language matches the chosen context; the
  context's confidence passes through almost unchanged.
* inherited: no context matched, the dominant context was borrowed; the
  score is capped at 0.75, below the "confident" band.
* partial: the context matches the language the command was declared in
  (e.g. the fence tag) but not the language inferred from its text.

Commands whose leading token is unrecognised and looks like a placeholder
are labelled ``unknown`` and capped at 0.4 regardless of context.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from .patterns import (
    COMMAND_HINTS,
    COMMAND_PREFIXES,
    LANGUAGE_COMMAND_MARKERS,
    PLACEHOLDER_WORDS,
    SHELL_LIKE_TOKENS,
)
from .context import ContextInheritanceEngine
from .logging import get_logger
from .models import AssociatedCommand, Command, ContextMetadata, LanguageContext, SourceRange

UNKNOWN_LANGUAGE = "unknown"
SHELL_LANGUAGE = "Shell"
DEFAULT_CONTEXT_CONFIDENCE = 0.5
UNKNOWN_CONFIDENCE_CAP = 0.4
SHORT_TOKEN_LENGTH = 3

_GENERIC_LANGUAGES = {"shell", "sh", "bash", "zsh", "console", "terminal", "text", UNKNOWN_LANGUAGE}
_KNOWN_TOKENS = frozenset(COMMAND_PREFIXES) | SHELL_LIKE_TOKENS


class MatchKind(str, Enum):
    EXACT = "exact"
    INHERITED = "inherited"
    PARTIAL = "partial"


def infer_language_from_command(command: str) -> str:
    """Map a command string to a language name, ``Shell`` or ``unknown``."""
    lowered = command.strip().lower()
    if not lowered:
        return UNKNOWN_LANGUAGE
    token = lowered.split()[0]
    prefixed = COMMAND_PREFIXES.get(token)
    if prefixed is not None and prefixed != SHELL_LANGUAGE:
        return prefixed

    padded = f"{lowered} "
    for language, hints in COMMAND_HINTS:
        if any(hint in padded for hint in hints):
            return language

    if token not in _KNOWN_TOKENS and (len(token) <= SHORT_TOKEN_LENGTH or token in PLACEHOLDER_WORDS):
        return UNKNOWN_LANGUAGE
    return SHELL_LANGUAGE


def default_context(language: str, confidence: float = DEFAULT_CONTEXT_CONFIDENCE) -> LanguageContext:
    """Synthesised context used when no detected context applies."""
    return LanguageContext(
        language=language,
        confidence=confidence,
        source_range=SourceRange.empty(),
        evidence=(),
        metadata=ContextMetadata(source="default-context"),
    )


class CommandContextAssociator:
    """Matches commands against detected contexts through an inheritance engine."""

    def __init__(self, inheritance_engine: ContextInheritanceEngine | None = None) -> None:
        self.inheritance_engine = inheritance_engine or ContextInheritanceEngine()
        self.logger = get_logger("association")

    def infer_language_from_command(self, command: str) -> str:
        return infer_language_from_command(command)

    def associate_all(
        self, commands: Sequence[Command], contexts: Sequence[LanguageContext]
    ) -> List[AssociatedCommand]:
        return [self.associate(command, contexts) for command in commands]

    def associate(self, command: Command, contexts: Sequence[LanguageContext]) -> AssociatedCommand:
        inferred = self.infer_language_from_command(command.command)
        if inferred == UNKNOWN_LANGUAGE:
            return _associated(
                command,
                UNKNOWN_LANGUAGE,
                default_context(UNKNOWN_LANGUAGE),
                min(UNKNOWN_CONFIDENCE_CAP, command.confidence),
            )

        declared = _declared_language(command)
        child = _find_context(contexts, inferred)
        if child is None and inferred == SHELL_LANGUAGE and declared is not None:
            child = _find_context(contexts, declared)

        self.inheritance_engine.set_parent_context(_dominant(contexts))
        chosen = self.inheritance_engine.apply_inheritance_rules(child)
        if chosen is None:
            fallback = declared if inferred == SHELL_LANGUAGE and declared else inferred
            chosen = default_context(fallback)

        kind = _match_kind(chosen, inferred, declared)
        score = calculate_context_confidence(command.command, chosen, kind)
        self.logger.debug(
            "Associated %r with %s (%s, %.2f)", command.command, chosen.language, kind.value, score
        )
        return _associated(command, chosen.language, chosen, score)

    def associate_command_with_context(self, command: Command, context: LanguageContext) -> AssociatedCommand:
        inferred = self.infer_language_from_command(command.command)
        kind = _match_kind(context, inferred, _declared_language(command))
        score = calculate_context_confidence(command.command, context, kind)
        return _associated(command, command.language, context, score)


def calculate_context_confidence(command: str, context: LanguageContext, kind: MatchKind) -> float:
    if kind is MatchKind.EXACT:
        return min(context.confidence + 0.01, 1.0)
    if kind is MatchKind.INHERITED:
        return min(0.4 + context.confidence * 0.15, 0.75)
    confidence = 0.5 + context.confidence * 0.2
    if context.confidence > 0.8:
        confidence += 0.1
    if command_matches_language(command, context.language):
        confidence += 0.1
    return min(confidence, 1.0)


def command_matches_language(command: str, language: str) -> bool:
    markers = LANGUAGE_COMMAND_MARKERS.get(language.lower(), ())
    lowered = command.lower()
    return any(marker in lowered for marker in markers)


def _match_kind(context: LanguageContext, inferred: str, declared: Optional[str]) -> MatchKind:
    language = context.language.lower()
    if language == inferred.lower():
        return MatchKind.EXACT
    if declared is not None and language == declared.lower():
        return MatchKind.PARTIAL
    return MatchKind.INHERITED


def _declared_language(command: Command) -> Optional[str]:
    if not command.language or command.language.lower() in _GENERIC_LANGUAGES:
        return None
    return command.language


def _find_context(contexts: Sequence[LanguageContext], language: str) -> Optional[LanguageContext]:
    wanted = language.lower()
    for context in contexts:
        if context.language.lower() == wanted:
            return context
    return None


def _dominant(contexts: Sequence[LanguageContext]) -> Optional[LanguageContext]:
    if not contexts:
        return None
    best = contexts[0]
    for context in contexts[1:]:
        if context.confidence > best.confidence:
            best = context
    return best


def _associated(
    command: Command, language: str, context: LanguageContext, score: float
) -> AssociatedCommand:
    return AssociatedCommand(
        command=command.command,
        language=language,
        confidence=command.confidence,
        source=command.source,
        category=command.category,
        language_context=context,
        context_confidence=score,
    )


__all__ = [
    "CommandContextAssociator",
    "MatchKind",
    "UNKNOWN_LANGUAGE",
    "calculate_context_confidence",
    "command_matches_language",
    "default_context",
    "infer_language_from_command",
]
