"""Pytest configuration and fixtures for pva tests."""

from __future__ import annotations

import os

# Set a fixed terminal width to prevent line wrapping issues in CI
# This must be set before any Rich imports
os.environ.setdefault("COLUMNS", "200")
os.environ.setdefault("LINES", "50")
# Disable Rich's terminal detection to ensure consistent output
os.environ.setdefault("TERM", "dumb")

from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from pva.config import PvaConfig  # noqa: E402
from pva.engines import BuiltSpec, RuleEngine, SpecBuilder, Violation  # noqa: E402
from pva.loader import LoadedDocument  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class StaticRuleEngine(RuleEngine):
    """Rule engine returning a fixed list of violations."""

    def __init__(self, violations: list[Violation] | None = None) -> None:
        super().__init__()
        self.violations = violations or []
        self.calls: list[Path] = []

    def run(self, document: LoadedDocument, config: PvaConfig) -> list[Violation]:
        self.calls.append(document.path)
        return list(self.violations)


class StaticSpecBuilder(SpecBuilder):
    """Spec builder returning a fixed list of violations."""

    def __init__(self, violations: list[Violation] | None = None) -> None:
        self.violations = violations or []

    def build(self, document: LoadedDocument, config: PvaConfig) -> BuiltSpec:
        return BuiltSpec(version=document.version, document=document.data, violations=list(self.violations))


@pytest.fixture
def fixtures_dir() -> Path:
    """Directory holding sample API descriptions."""
    return FIXTURES_DIR


@pytest.fixture
def default_config() -> PvaConfig:
    """Built-in default configuration."""
    return PvaConfig()


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's environment out of the tests."""
    monkeypatch.delenv("PVA_CONFIG", raising=False)
    monkeypatch.delenv("PVA_SPECTRAL_BIN", raising=False)
    monkeypatch.delenv("PVA_SPECTRAL_TIMEOUT", raising=False)
    monkeypatch.delenv("CI", raising=False)
