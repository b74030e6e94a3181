"""Tests for file discovery and the concurrent lint runner."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any

import pytest
from conftest import StaticRuleEngine, StaticSpecBuilder

from pva import runner
from pva.config import PvaConfig
from pva.engines import Violation
from pva.errors import ParseError
from pva.runner import LintRunner, discover_files, expand_patterns


def touch(path: Path, text: str = "{}\n") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)


class TestDiscoverFiles:
    """Tests for discover_files."""

    def test_walk_outside_git(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test ignored directories are skipped when git is unavailable."""
        monkeypatch.setattr(runner, "_git_candidate_files", lambda root: None)
        touch(tmp_path / "api.yaml")
        touch(tmp_path / "specs" / "v2.json")
        touch(tmp_path / "specs" / "v3.yml")
        touch(tmp_path / "README.md")
        touch(tmp_path / "node_modules" / "pkg" / "package.json")
        touch(tmp_path / ".venv" / "lib" / "data.yaml")

        assert discover_files(tmp_path) == ["api.yaml", "specs/v2.json", "specs/v3.yml"]

    def test_git_listing_used(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the git listing decides which files are candidates."""
        touch(tmp_path / "api.yaml")
        touch(tmp_path / "ignored.yaml")

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            assert cmd[:2] == ["git", "ls-files"]
            assert kwargs["cwd"] == tmp_path
            return subprocess.CompletedProcess(cmd, 0, stdout="api.yaml\ndeleted.yaml\nnotes.txt\n", stderr="")

        monkeypatch.setattr("pva.runner.subprocess.run", fake_run)
        assert discover_files(tmp_path) == ["api.yaml"]

    def test_git_failure_falls_back_to_walk(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        touch(tmp_path / "api.json")

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            return subprocess.CompletedProcess(cmd, 128, stdout="", stderr="fatal: not a git repository")

        monkeypatch.setattr("pva.runner.subprocess.run", fake_run)
        assert discover_files(tmp_path) == ["api.json"]

    def test_git_missing_falls_back_to_walk(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        touch(tmp_path / "api.json")

        def fake_run(cmd: list[str], **kwargs: Any) -> None:
            raise FileNotFoundError("git")

        monkeypatch.setattr("pva.runner.subprocess.run", fake_run)
        assert discover_files(tmp_path) == ["api.json"]


class TestExpandPatterns:
    """Tests for expand_patterns."""

    def test_plain_paths_kept(self) -> None:
        assert expand_patterns(["missing.yaml", "api.json"]) == ["missing.yaml", "api.json"]

    def test_glob_expanded(self, tmp_path: Path) -> None:
        touch(tmp_path / "a.yaml")
        touch(tmp_path / "b.yaml")
        touch(tmp_path / "c.json")
        assert expand_patterns([str(tmp_path / "*.yaml")]) == [str(tmp_path / "a.yaml"), str(tmp_path / "b.yaml")]

    def test_recursive_glob(self, tmp_path: Path) -> None:
        touch(tmp_path / "nested" / "deep" / "api.yml")
        assert expand_patterns([str(tmp_path / "**" / "*.yml")]) == [str(tmp_path / "nested" / "deep" / "api.yml")]

    def test_duplicates_removed(self, tmp_path: Path) -> None:
        touch(tmp_path / "a.yaml")
        a = str(tmp_path / "a.yaml")
        assert expand_patterns([a, str(tmp_path / "*.yaml"), a]) == [a]


class TestLintRunner:
    """Tests for LintRunner."""

    def test_results_in_input_order(self, fixtures_dir: Path, default_config: PvaConfig) -> None:
        engine = StaticRuleEngine([Violation(path=["info"], message="m", rule="r", severity="warning")])
        files = [str(fixtures_dir / name) for name in ("swagger.json", "basic.yaml", "circular.yaml")]

        outcome = LintRunner(default_config, StaticSpecBuilder(), engine, max_workers=3).run(files)

        assert [file for file, _ in outcome.results] == files
        assert [result.version for _, result in outcome.results] == ["2.0", "3.0.3", "3.0.3"]
        assert outcome.failures == []
        assert sorted(engine.calls) == sorted(Path(f) for f in files)

    def test_failures_isolated(self, fixtures_dir: Path, tmp_path: Path, default_config: PvaConfig) -> None:
        """Test one failing file does not stop the others."""
        broken = tmp_path / "broken.yaml"
        broken.write_text("openapi: [3.0.0\n")
        files = [
            str(fixtures_dir / "basic.yaml"),
            str(broken),
            str(fixtures_dir / "not_openapi.yaml"),
            str(tmp_path / "missing.yaml"),
            str(fixtures_dir / "swagger.json"),
        ]

        outcome = LintRunner(default_config, StaticSpecBuilder(), StaticRuleEngine()).run(files)

        assert [file for file, _ in outcome.results] == [files[0], files[4]]
        assert [failure.file for failure in outcome.failures] == [files[1], files[2], files[3]]
        assert isinstance(outcome.failures[0].error, ParseError)
        assert outcome.failures[1].is_descriptor_missing
        assert isinstance(outcome.failures[2].error, OSError)
        assert not outcome.failures[2].is_descriptor_missing

    def test_no_files(self, default_config: PvaConfig) -> None:
        outcome = LintRunner(default_config, StaticSpecBuilder(), StaticRuleEngine()).run([])
        assert outcome.results == []
        assert outcome.failures == []

    def test_single_worker(self, fixtures_dir: Path, default_config: PvaConfig) -> None:
        files = [str(fixtures_dir / "basic.yaml")] * 3
        outcome = LintRunner(default_config, StaticSpecBuilder(), StaticRuleEngine(), max_workers=1).run(files)
        assert len(outcome.results) == 3
