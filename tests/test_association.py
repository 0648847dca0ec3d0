"""Tests for command-to-context association."""

from __future__ import annotations

import pytest

from docctx.association import (
    CommandContextAssociator,
    MatchKind,
    calculate_context_confidence,
    default_context,
    infer_language_from_command,
)
from docctx.context import ContextInheritanceEngine, InheritanceAction, InheritanceRule, RuleCondition
from docctx.models import Command


@pytest.mark.parametrize(
    ("command", "language"),
    [
        ("cargo build", "Rust"),
        ("npm install", "JavaScript"),
        ("python3 -m venv .venv", "Python"),
        ("./gradlew test", "Java"),
        ("dotnet restore", "C#"),
        ("sudo npm i -g pnpm", "JavaScript"),
        ("git clone https://example.com/repo.git", "Shell"),
        ("cd app && npm install", "JavaScript"),
        ("mkdir build && cargo build --release", "Rust"),
        ("export PYTHONPATH=. && pytest", "Python"),
        ("cd docs", "Shell"),
        ("echo hi", "Shell"),
        ("terraform apply", "Shell"),
        ("xyz", "unknown"),
        ("foo --bar", "unknown"),
        ("placeholder run", "unknown"),
        ("", "unknown"),
    ],
)
def test_infer_language_from_command(command: str, language: str) -> None:
    assert infer_language_from_command(command) == language


def test_exact_match_passes_context_confidence_through(make_context) -> None:
    associator = CommandContextAssociator()

    result = associator.associate(Command("cargo build", "Shell", 0.9), [make_context("Rust", 0.9)])

    assert result.language == "Rust"
    assert 0.9 <= result.context_confidence <= 0.91


def test_unknown_commands_are_capped(make_context) -> None:
    associator = CommandContextAssociator()

    result = associator.associate(Command("xyz", "Shell", 0.9), [make_context("Python", 0.95)])

    assert result.language == "unknown"
    assert result.context_confidence <= 0.4
    assert result.language_context is not None
    assert result.language_context.language == "unknown"


def test_inherited_association_stays_below_confident_band(make_context) -> None:
    associator = CommandContextAssociator()
    python = make_context("Python", 0.8)

    result = associator.associate(Command("git clone repo", "Shell", 0.7), [make_context("Go", 0.4), python])

    assert result.language == "Python"
    assert result.language_context is python
    assert result.context_confidence == pytest.approx(0.4 + 0.8 * 0.15)


def test_inherited_confidence_is_capped() -> None:
    assert calculate_context_confidence("ls", default_context("Python", 1.0), MatchKind.INHERITED) == pytest.approx(0.55)
    assert calculate_context_confidence("ls", default_context("Python", 2.5), MatchKind.INHERITED) == pytest.approx(0.75)


def test_partial_match_uses_declared_language(make_context) -> None:
    associator = CommandContextAssociator()

    result = associator.associate(Command("make install", "Python", 0.9), [make_context("Python", 0.9)])

    assert result.language == "Python"
    assert result.context_confidence == pytest.approx(0.5 + 0.9 * 0.2 + 0.1)


def test_partial_match_bonus_for_language_markers(make_context) -> None:
    context = make_context("Python", 0.5)

    plain = calculate_context_confidence("make install", context, MatchKind.PARTIAL)
    marked = calculate_context_confidence("make python-install", context, MatchKind.PARTIAL)

    assert plain == pytest.approx(0.6)
    assert marked == pytest.approx(0.7)


def test_no_contexts_synthesises_default(make_context) -> None:
    associator = CommandContextAssociator()

    result = associator.associate(Command("pip install flask", "Shell", 0.9), [])

    assert result.language == "Python"
    assert result.language_context.confidence == 0.5
    assert result.language_context.metadata.source == "default-context"
    assert result.context_confidence == pytest.approx(0.51)


def test_shell_command_in_declared_block_uses_declared_default() -> None:
    associator = CommandContextAssociator()

    result = associator.associate(Command("curl -O https://x", "Ruby", 0.9), [])

    assert result.language == "Ruby"
    assert result.context_confidence == pytest.approx(0.5 + 0.5 * 0.2)


def test_configured_rules_drive_the_choice(make_context) -> None:
    engine = ContextInheritanceEngine(
        rules=[InheritanceRule(RuleCondition.HAS_CHILD_CONTEXT, InheritanceAction.INHERIT, priority=1)]
    )
    associator = CommandContextAssociator(engine)
    javascript = make_context("JavaScript", 0.95)

    result = associator.associate(
        Command("cargo build", "Shell", 0.9), [javascript, make_context("Rust", 0.6, line=3)]
    )

    assert result.language_context is javascript
    assert result.context_confidence == pytest.approx(min(0.4 + 0.95 * 0.15, 0.75))


def test_associate_command_with_explicit_context(make_context) -> None:
    associator = CommandContextAssociator()
    rust = make_context("Rust", 0.7)

    result = associator.associate_command_with_context(Command("cargo run", "Rust", 0.9), rust)

    assert result.language_context is rust
    assert result.context_confidence == pytest.approx(0.71)
    assert result.confidence == 0.9


def test_associate_all_preserves_order(make_context) -> None:
    associator = CommandContextAssociator()
    commands = [Command("npm test", "Shell", 0.9), Command("cargo test", "Shell", 0.9)]

    results = associator.associate_all(commands, [make_context("Rust", 0.8)])

    assert [result.command for result in results] == ["npm test", "cargo test"]
