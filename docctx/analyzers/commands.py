"""Command extraction and categorisation with language context association."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from .base import Analyzer
from ..association import UNKNOWN_LANGUAGE, CommandContextAssociator, infer_language_from_command
from ..context import InheritanceRule
from ..document import DocumentNode, walk
from ..logging import component_logger
from ..models import AnalyzerResult, AssociatedCommand, Command, LanguageContext, SourceRange
from ..patterns import (
    CATEGORY_KEYWORDS,
    COMMAND_CATEGORIES,
    LANGUAGE_PATTERNS,
    LOOKS_LIKE_COMMAND,
    LanguagePatterns,
)

CODE_BLOCK_CONFIDENCE = 0.9
MENTION_CONFIDENCE = 0.7
CATEGORIES = ("build", "test", "run", "install", "other")

_COMMAND_PATTERNS = tuple(re.compile(pattern, re.IGNORECASE) for pattern in LOOKS_LIKE_COMMAND)
# the trailing "word word" form matches ordinary prose, so plain text lines skip it
_STRICT_COMMAND_PATTERNS = _COMMAND_PATTERNS[:-1]
_CATEGORY_PATTERNS: Dict[str, List[re.Pattern[str]]] = {
    category: [re.compile(pattern, re.IGNORECASE) for patterns in tools.values() for pattern in patterns]
    for category, tools in COMMAND_CATEGORIES.items()
}
_INLINE_CODE = re.compile(r"`([^`\n]+)`")
_FENCE = re.compile(r"^\s*(`{3,}|~{3,})")


@dataclass
class CommandInfo:
    """Commands grouped by what they are used for."""

    build: List[Command] = field(default_factory=list)
    test: List[Command] = field(default_factory=list)
    run: List[Command] = field(default_factory=list)
    install: List[Command] = field(default_factory=list)
    other: List[Command] = field(default_factory=list)

    def add(self, command: Command) -> None:
        getattr(self, command.category or "other").append(command)

    def all_commands(self) -> List[Command]:
        return [command for category in CATEGORIES for command in getattr(self, category)]

    def __len__(self) -> int:
        return sum(len(getattr(self, category)) for category in CATEGORIES)


@dataclass
class ContextMapping:
    context: LanguageContext
    commands: List[AssociatedCommand]
    source_range: SourceRange


@dataclass
class ExtractionMetadata:
    total_commands: int
    languages_detected: int
    context_boundaries: int
    extraction_timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


@dataclass
class CommandExtractionResult:
    commands: List[AssociatedCommand]
    context_mappings: List[ContextMapping]
    metadata: ExtractionMetadata


def looks_like_command(text: str, *, strict: bool = False) -> bool:
    """Return True when ``text`` reads like a shell invocation.

    ``strict`` drops the generic two-word form, which is what prose lines
    need to avoid every sentence becoming a command.
    """
    candidate = text.strip()
    if not candidate or candidate.startswith(("#", "//")):
        return False
    patterns = _STRICT_COMMAND_PATTERNS if strict else _COMMAND_PATTERNS
    return any(pattern.search(candidate) for pattern in patterns)


def categorize_command(command: str) -> str:
    lowered = command.strip().lower()
    if lowered.startswith("docker"):
        return "other"
    for category, patterns in _CATEGORY_PATTERNS.items():
        if any(pattern.search(lowered) for pattern in patterns):
            return category
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "other"


class CommandExtractor(Analyzer):
    """Finds build, test, run and install commands and assigns them a language."""

    name = "CommandExtractor"

    def __init__(
        self,
        associator: CommandContextAssociator | None = None,
        patterns: Mapping[str, LanguagePatterns] | None = None,
    ) -> None:
        self.associator = associator or CommandContextAssociator()
        self.patterns: Mapping[str, LanguagePatterns] = patterns or LANGUAGE_PATTERNS
        self.language_contexts: List[LanguageContext] = []
        self.logger = component_logger("analyzers.commands", self.name)
        self._last_info: Optional[CommandInfo] = None

    def set_language_contexts(self, contexts: Sequence[LanguageContext]) -> None:
        self.language_contexts = list(contexts)

    def add_inheritance_rule(self, rule: InheritanceRule) -> None:
        self.associator.inheritance_engine.add_inheritance_rule(rule)

    def analyze(
        self,
        document: Sequence[DocumentNode],
        content: str,
        context: Optional[Sequence[LanguageContext]] = None,
    ) -> AnalyzerResult[CommandInfo]:
        if context is not None:
            self.set_language_contexts(context)
        try:
            commands = self.extract_commands(document, content)
            if self.language_contexts:
                associated = self.associator.associate_all(commands, self.language_contexts)
                info = self._group(associated)
                confidence = self._context_confidence(commands, associated)
            else:
                self.logger.info("No language contexts available; using inferred languages")
                info = self._group(self._without_context(commands))
                confidence = 0.6 if commands else 0.0
        except Exception as exc:
            self.logger.exception("Command extraction failed")
            return AnalyzerResult.failure(
                code="COMMAND_EXTRACTION_ERROR",
                message=f"Failed to extract commands: {exc}",
                component=self.name,
            )

        self._last_info = info
        sources = sorted({command.source for command in commands})
        self.logger.debug("Extracted %d commands (confidence %.2f)", len(info), confidence)
        return AnalyzerResult.ok(info, confidence, sources)

    def extract_with_context(self, document: Sequence[DocumentNode], content: str) -> CommandExtractionResult:
        commands = self.extract_commands(document, content)
        associated = self.associator.associate_all(commands, self.language_contexts)

        groups: Dict[str, List[AssociatedCommand]] = {}
        for command in associated:
            key = command.language_context.language if command.language_context else command.language
            groups.setdefault(key, []).append(command)

        mappings = []
        for group in groups.values():
            context = group[0].language_context
            if context is None:
                continue
            mappings.append(ContextMapping(context=context, commands=group, source_range=context.source_range))

        self._last_info = self._group(associated)
        return CommandExtractionResult(
            commands=associated,
            context_mappings=mappings,
            metadata=ExtractionMetadata(
                total_commands=len(associated),
                languages_detected=len(groups),
                context_boundaries=len(mappings),
            ),
        )

    def get_commands_for_language(self, language: str) -> List[Command]:
        if self._last_info is None:
            return []
        return [command for command in self._last_info.all_commands() if command.language == language]

    # Extraction

    def extract_commands(self, document: Sequence[DocumentNode], content: str) -> List[Command]:
        found: List[Command] = []
        found.extend(self._from_code_blocks(document))
        found.extend(self._from_inline_code(content))
        found.extend(self._from_text_lines(content))
        return dedupe_commands(found)

    def _from_code_blocks(self, document: Sequence[DocumentNode]) -> Iterator[Command]:
        for node in walk(document):
            if node.type != "code":
                continue
            language = self._language_for_tag(node.lang)
            for line in node.text.split("\n"):
                if looks_like_command(line):
                    yield self._command(line.strip(), language, CODE_BLOCK_CONFIDENCE, "code-block")

    def _from_inline_code(self, content: str) -> Iterator[Command]:
        for line in _outside_fences(content):
            for match in _INLINE_CODE.finditer(line):
                span = match.group(1).strip()
                if looks_like_command(span):
                    yield self._command(span, "Shell", MENTION_CONFIDENCE, "inline-code")

    def _from_text_lines(self, content: str) -> Iterator[Command]:
        for line in _outside_fences(content):
            if "`" in line:
                continue
            candidate = line.strip().removeprefix("$ ").strip()
            if looks_like_command(candidate, strict=True):
                yield self._command(candidate, "Shell", MENTION_CONFIDENCE, "text-mention")

    def _command(self, text: str, language: str, confidence: float, source: str) -> Command:
        return Command(
            command=text,
            language=language,
            confidence=confidence,
            source=source,
            category=categorize_command(text),
        )

    def _language_for_tag(self, tag: Optional[str]) -> str:
        if tag:
            lowered = tag.lower()
            for language, patterns in self.patterns.items():
                if lowered in patterns.code_block_tags:
                    return language
        return "Shell"

    # Grouping and scoring

    def _without_context(self, commands: Sequence[Command]) -> List[Command]:
        resolved = []
        for command in commands:
            language = command.language
            if language == "Shell":
                language = infer_language_from_command(command.command)
            resolved.append(
                Command(
                    command=command.command,
                    language=language,
                    confidence=command.confidence,
                    source=command.source,
                    category=command.category,
                )
            )
        return resolved

    def _group(self, commands: Sequence[Command]) -> CommandInfo:
        info = CommandInfo()
        for command in commands:
            info.add(command)
        return info

    def _context_confidence(self, commands: Sequence[Command], associated: Sequence[AssociatedCommand]) -> float:
        if not commands:
            return 0.0
        linked = [
            command
            for command in associated
            if command.language not in {"Shell", UNKNOWN_LANGUAGE} and command.language_context is not None
        ]
        confidence = 0.85 + 0.1
        confidence += min(0.05 * len(linked), 0.15)
        if any(command.source == "code-block" for command in commands):
            confidence += 0.1
        return min(confidence, 1.0)


def dedupe_commands(commands: Sequence[Command]) -> List[Command]:
    """Drop repeated (command, language) pairs, keeping the first."""
    seen = set()
    unique = []
    for command in commands:
        key = (command.command, command.language)
        if key in seen:
            continue
        seen.add(key)
        unique.append(command)
    return unique


def _outside_fences(content: str) -> Iterator[str]:
    fence: Optional[str] = None
    for line in content.split("\n"):
        marker = _FENCE.match(line)
        if marker:
            token = marker.group(1)
            if fence is None:
                fence = token[0]
            elif token[0] == fence:
                fence = None
            continue
        if fence is None:
            yield line


__all__ = [
    "CommandExtractionResult",
    "CommandExtractor",
    "CommandInfo",
    "ContextMapping",
    "ExtractionMetadata",
    "categorize_command",
    "dedupe_commands",
    "looks_like_command",
]
