"""Staged analysis of a single document.

Stages run in a fixed order and share one component bundle built for the
run. A stage that raises, or an analyzer that reports failure, stops the
run; no partial report is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .analyzers import Analyzer, discover_analyzers, run_analyzer
from .analyzers.commands import CommandExtractor, CommandInfo
from .analyzers.language import DetectionResult, LanguageDetector
from .components import build_components
from .config import DocCtxConfig
from .document import DocumentNode, normalize_document, parse_markdown
from .logging import get_logger
from .models import AnalysisError, AnalyzerResult, ContextBoundary, LanguageContext


class PipelineStage(str, Enum):
    INITIALIZATION = "initialization"
    CONTENT_PARSING = "content-parsing"
    LANGUAGE_DETECTION = "language-detection"
    CONTEXT_INHERITANCE = "context-inheritance"
    COMMAND_EXTRACTION = "command-extraction"
    RESULT_AGGREGATION = "result-aggregation"


class StageFailure(RuntimeError):
    """An analyzer inside a stage returned a failed result."""

    def __init__(self, stage: PipelineStage, errors: Sequence[AnalysisError]) -> None:
        detail = "; ".join(error.message for error in errors) or "analyzer reported failure"
        super().__init__(detail)
        self.stage = stage
        self.errors = list(errors)


@dataclass
class PipelineReport:
    """Aggregated output of a successful run."""

    contexts: List[LanguageContext]
    boundaries: List[ContextBoundary]
    commands: CommandInfo
    language_confidence: float
    command_confidence: float
    completed_stages: List[str] = field(default_factory=list)
    failed_stages: List[str] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    plugin_results: Dict[str, AnalyzerResult[Any]] = field(default_factory=dict)
    detection: Optional[DetectionResult] = None


@dataclass
class _RunState:
    content: str
    document: Any
    detector: Optional[LanguageDetector] = None
    extractor: Optional[CommandExtractor] = None
    plugins: List[Analyzer] = field(default_factory=list)
    nodes: List[DocumentNode] = field(default_factory=list)
    detection: Optional[AnalyzerResult[DetectionResult]] = None
    extraction: Optional[AnalyzerResult[CommandInfo]] = None
    report: Optional[PipelineReport] = None
    completed: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class AnalysisPipeline:
    """Runs detection, inheritance and command extraction over one document."""

    name = "AnalysisPipeline"

    def __init__(
        self,
        config: DocCtxConfig | None = None,
        parser: Callable[[str], List[DocumentNode]] = parse_markdown,
    ) -> None:
        self.config = config or DocCtxConfig()
        self.parser = parser
        self.logger = get_logger("pipeline")
        self._stages: List[tuple[PipelineStage, Callable[[_RunState], None]]] = [
            (PipelineStage.INITIALIZATION, self._initialize),
            (PipelineStage.CONTENT_PARSING, self._parse),
            (PipelineStage.LANGUAGE_DETECTION, self._detect),
            (PipelineStage.CONTEXT_INHERITANCE, self._inherit),
            (PipelineStage.COMMAND_EXTRACTION, self._extract),
            (PipelineStage.RESULT_AGGREGATION, self._aggregate),
        ]

    def run(self, content: str, document: Any = None) -> AnalyzerResult[PipelineReport]:
        if not content or not content.strip():
            self.logger.warning("Refusing to analyse empty content")
            return AnalyzerResult.failure(
                code="EMPTY_CONTENT",
                message="Content is empty",
                component=self.name,
            )

        state = _RunState(content=content, document=document)
        for stage, handler in self._stages:
            self.logger.debug("Stage %s started", stage.value)
            try:
                handler(state)
            except Exception as exc:
                state.failed.append(stage.value)
                self.logger.exception("Stage %s failed", stage.value)
                result: AnalyzerResult[PipelineReport] = AnalyzerResult.failure(
                    code="PIPELINE_STAGE_ERROR",
                    message=f"Stage '{stage.value}' failed: {exc}",
                    component=self.name,
                )
                if isinstance(exc, StageFailure):
                    result.errors.extend(exc.errors)
                return result
            state.completed.append(stage.value)

        report = state.report
        if report is None:
            return AnalyzerResult.failure(
                code="PIPELINE_STAGE_ERROR",
                message="Result aggregation produced no report",
                component=self.name,
            )
        report.completed_stages = list(state.completed)
        report.failed_stages = list(state.failed)
        confidence = (report.language_confidence + report.command_confidence) / 2
        self.logger.info(
            "Analysis finished: %d contexts, %d commands, confidence %.2f",
            len(report.contexts),
            len(report.commands),
            confidence,
        )
        return AnalyzerResult.ok(report, confidence, report.sources)

    # Stages

    def _initialize(self, state: _RunState) -> None:
        components = build_components(self.config)
        enabled = self.config.analyzers.enabled or None
        for analyzer in discover_analyzers(enabled, components):
            if isinstance(analyzer, LanguageDetector):
                state.detector = analyzer
            elif isinstance(analyzer, CommandExtractor):
                state.extractor = analyzer
            else:
                state.plugins.append(analyzer)

    def _parse(self, state: _RunState) -> None:
        if state.document is not None:
            state.nodes = normalize_document(state.document)
        else:
            state.nodes = self.parser(state.content)
        self.logger.debug("Document has %d top-level nodes", len(state.nodes))

    def _detect(self, state: _RunState) -> None:
        if state.detector is None:
            self.logger.info("Language detection disabled")
            return
        state.detection = run_analyzer(state.detector, state.nodes, state.content)
        if not state.detection.success:
            raise StageFailure(PipelineStage.LANGUAGE_DETECTION, state.detection.errors)

    def _inherit(self, state: _RunState) -> None:
        # The associator picks the dominant context as parent for each command.
        contexts = self._contexts(state)
        if not contexts:
            self.logger.warning("No language contexts detected; commands will use defaults")
        if state.extractor is not None:
            state.extractor.set_language_contexts(contexts)

    def _extract(self, state: _RunState) -> None:
        if state.extractor is None:
            self.logger.info("Command extraction disabled")
            return
        state.extraction = run_analyzer(state.extractor, state.nodes, state.content, self._contexts(state))
        if not state.extraction.success:
            raise StageFailure(PipelineStage.COMMAND_EXTRACTION, state.extraction.errors)

    def _aggregate(self, state: _RunState) -> None:
        contexts = self._contexts(state)
        plugin_results = {
            plugin.name: run_analyzer(plugin, state.nodes, state.content, contexts)
            for plugin in state.plugins
            if plugin.supports(state.nodes, state.content)
        }
        detection = state.detection
        extraction = state.extraction
        sources = sorted(
            set(detection.sources if detection else []) | set(extraction.sources if extraction else [])
        )
        state.report = PipelineReport(
            contexts=contexts,
            boundaries=detection.data.boundaries if detection and detection.data else [],
            commands=extraction.data if extraction and extraction.data else CommandInfo(),
            language_confidence=detection.confidence if detection else 0.0,
            command_confidence=extraction.confidence if extraction else 0.0,
            sources=sources,
            plugin_results=plugin_results,
            detection=detection.data if detection else None,
        )

    @staticmethod
    def _contexts(state: _RunState) -> List[LanguageContext]:
        if state.detection is None or state.detection.data is None:
            return []
        return list(state.detection.data.contexts)


def analyze_document(
    content: str, document: Any = None, config: DocCtxConfig | None = None
) -> AnalyzerResult[PipelineReport]:
    """Convenience wrapper running a fresh pipeline once."""
    return AnalysisPipeline(config).run(content, document)


__all__ = ["AnalysisPipeline", "PipelineReport", "PipelineStage", "StageFailure", "analyze_document"]
