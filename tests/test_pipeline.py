"""Tests for the staged analysis pipeline."""

from __future__ import annotations

import logging

import pytest

from docctx.analyzers import LanguageDetector
from docctx.config import config_from_mapping
from docctx.document import DocumentNode
from docctx.pipeline import AnalysisPipeline, PipelineStage, analyze_document

ALL_STAGES = [stage.value for stage in PipelineStage]


def test_run_produces_report(sample_readme: str) -> None:
    result = AnalysisPipeline().run(sample_readme)

    assert result.success
    report = result.data
    assert report.completed_stages == ALL_STAGES
    assert report.failed_stages == []
    assert {ctx.language for ctx in report.contexts} == {"Python", "JavaScript"}
    assert len(report.commands) == 3
    assert result.confidence == pytest.approx((report.language_confidence + report.command_confidence) / 2)
    assert "code-block" in result.sources


def test_commands_inherit_detected_contexts(sample_readme: str) -> None:
    report = AnalysisPipeline().run(sample_readme).data

    languages = {cmd.command: cmd.language for cmd in report.commands.all_commands()}
    assert languages["pip install -r requirements.txt"] == "Python"
    assert languages["npm run build"] == "JavaScript"


def test_empty_content_fails() -> None:
    result = AnalysisPipeline().run("   \n")

    assert not result.success
    assert result.errors[0].code == "EMPTY_CONTENT"


def test_explicit_document_skips_parser(sample_readme: str) -> None:
    def _parser(content: str):
        raise AssertionError("parser should not be used")

    document = {"ast": [{"type": "code", "lang": "go", "text": "go test ./...", "line": 0}]}

    result = AnalysisPipeline(parser=_parser).run("```go\ngo test ./...\n```\n", document)

    assert result.success
    assert [ctx.language for ctx in result.data.contexts] == ["Go"]
    [command] = result.data.commands.test
    assert command.language == "Go"


def test_stage_exception_becomes_structured_error(sample_readme: str, caplog) -> None:
    def _parser(content: str):
        raise RuntimeError("parser exploded")

    with caplog.at_level(logging.ERROR, logger="docctx"):
        result = AnalysisPipeline(parser=_parser).run(sample_readme)

    assert not result.success
    assert result.data is None
    [error] = result.errors
    assert error.code == "PIPELINE_STAGE_ERROR"
    assert "content-parsing" in error.message
    assert "parser exploded" in error.message


def test_analyzer_failure_stops_run(sample_readme: str, monkeypatch) -> None:
    def _boom(self, document):
        raise RuntimeError("no patterns")

    monkeypatch.setattr(LanguageDetector, "collect_language_evidence", _boom)

    result = AnalysisPipeline().run(sample_readme)

    assert not result.success
    codes = [error.code for error in result.errors]
    assert codes == ["PIPELINE_STAGE_ERROR", "LANGUAGE_DETECTION_ERROR"]


def test_disabled_detection_still_extracts(sample_readme: str) -> None:
    config = config_from_mapping({"analyzers": {"enabled": ["commands"]}})

    result = AnalysisPipeline(config).run(sample_readme)

    assert result.success
    assert result.data.contexts == []
    assert result.data.language_confidence == 0.0
    assert result.data.command_confidence == pytest.approx(0.6)


def test_runs_are_independent(sample_readme: str) -> None:
    pipeline = AnalysisPipeline()

    first = pipeline.run(sample_readme)
    second = pipeline.run("```rust\ncargo build\n```\n")

    assert {ctx.language for ctx in first.data.contexts} == {"Python", "JavaScript"}
    assert [ctx.language for ctx in second.data.contexts] == ["Rust"]


def test_analyze_document_helper() -> None:
    nodes = [DocumentNode(type="code", lang="ruby", text="bundle install", line=0)]

    result = analyze_document("```ruby\nbundle install\n```\n", nodes)

    assert result.success
    [command] = result.data.commands.install
    assert command.language == "Ruby"


def test_unmatched_commands_inherit_the_dominant_context(sample_readme: str) -> None:
    content = sample_readme + "\n```bash\ngit clone repo\n```\n"

    report = AnalysisPipeline().run(content).data

    dominant = max(report.contexts, key=lambda ctx: ctx.confidence)
    languages = {cmd.command: cmd.language for cmd in report.commands.all_commands()}
    assert dominant.language == "JavaScript"
    assert languages["git clone repo"] == "JavaScript"


def test_missing_report_fails_instead_of_raising(sample_readme: str, monkeypatch) -> None:
    monkeypatch.setattr(AnalysisPipeline, "_aggregate", lambda self, state: None)

    result = AnalysisPipeline().run(sample_readme)

    assert not result.success
    assert result.data is None
    assert result.errors[0].code == "PIPELINE_STAGE_ERROR"
