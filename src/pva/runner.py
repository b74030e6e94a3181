"""File discovery and the concurrent lint runner.

Files are linted in a bounded thread pool; each file succeeds or fails on its
own, and failures are collected instead of aborting the run.
"""

from __future__ import annotations

import concurrent.futures
import glob
import logging
import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from pva.config import PvaConfig
from pva.engines import OpenApiSpecBuilder, RuleEngine, SpecBuilder, SpectralEngine
from pva.errors import DescriptorMissingError
from pva.lint import lint_file
from pva.merger import LintResult

logger = logging.getLogger(__name__)

MAX_CONCURRENCY = 8
LINTABLE_SUFFIXES = frozenset({".yaml", ".yml", ".json"})
GLOB_CHARS = frozenset("*?[")

# Directories skipped when discovering files outside a git work tree
IGNORED_DIRS = frozenset(
    {
        ".venv",
        "venv",
        "node_modules",
        "__pycache__",
        ".git",
        "dist",
        "build",
        ".tox",
        ".nox",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        "site-packages",
    }
)


@dataclass
class LintFailure:
    """A file that could not be linted.

    Attributes:
        file: File name as given or discovered.
        error: The exception raised while linting it.
    """

    file: str
    error: Exception

    @property
    def is_descriptor_missing(self) -> bool:
        return isinstance(self.error, DescriptorMissingError)


@dataclass
class RunOutcome:
    """Outcome of linting a set of files.

    Attributes:
        results: (file, result) pairs for files that were linted, in input order.
        failures: Files that could not be linted, in input order.
    """

    results: list[tuple[str, LintResult]] = field(default_factory=list)
    failures: list[LintFailure] = field(default_factory=list)


# -----------------------------------------------------------------------------
# Discovery
# -----------------------------------------------------------------------------


def _git_candidate_files(root: Path) -> list[str] | None:
    """List files git does not ignore, or None when git is unavailable."""
    try:
        result = subprocess.run(
            ["git", "ls-files", "--cached", "--others", "--exclude-standard"],
            cwd=root,
            capture_output=True,
            text=True,
            check=False,
        )
    except (subprocess.SubprocessError, OSError):
        return None

    if result.returncode != 0:
        # Not a git work tree
        return None
    return [line for line in result.stdout.splitlines() if line]


def _walk_candidate_files(root: Path) -> list[str]:
    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRS]
        rel_dir = Path(dirpath).relative_to(root)
        files.extend((rel_dir / name).as_posix() for name in filenames)
    return files


def discover_files(root: Path | None = None) -> list[str]:
    """Find every YAML and JSON file below a directory, honoring ignore rules.

    Inside a git work tree, .gitignore rules apply; elsewhere well-known
    vendored and cache directories are skipped.

    Args:
        root: Directory to search. Defaults to current directory.

    Returns:
        Sorted file names relative to root.
    """
    root = root or Path.cwd()
    candidates = _git_candidate_files(root)
    if candidates is None:
        candidates = _walk_candidate_files(root)

    return sorted(
        name for name in candidates if Path(name).suffix in LINTABLE_SUFFIXES and (root / name).is_file()
    )


def expand_patterns(patterns: Sequence[str]) -> list[str]:
    """Expand glob patterns given on the command line.

    Plain paths are kept as given, whether or not they exist, so that a
    missing file is reported instead of silently dropped. Duplicates are
    removed, keeping the first occurrence.
    """
    files: list[str] = []
    for pattern in patterns:
        if GLOB_CHARS & set(pattern):
            files.extend(sorted(p for p in glob.glob(pattern, recursive=True) if Path(p).is_file()))
        else:
            files.append(pattern)
    return list(dict.fromkeys(files))


# -----------------------------------------------------------------------------
# Runner
# -----------------------------------------------------------------------------


class LintRunner:
    """Lints files concurrently with a bounded worker pool.

    Both engines are shared by all workers; they keep no per-file state and
    resolve references from the file's directory without changing the
    process working directory.
    """

    def __init__(
        self,
        config: PvaConfig,
        spec_builder: SpecBuilder | None = None,
        rule_engine: RuleEngine | None = None,
        max_workers: int = MAX_CONCURRENCY,
    ) -> None:
        """Initialize lint runner.

        Args:
            config: Resolved configuration for the run.
            spec_builder: Spec builder engine. Defaults to OpenApiSpecBuilder.
            rule_engine: Rule engine. Defaults to SpectralEngine.
            max_workers: Maximum number of files linted at once.
        """
        self.config = config
        self.spec_builder = spec_builder or OpenApiSpecBuilder()
        self.rule_engine = rule_engine or SpectralEngine()
        self.max_workers = max_workers

    def lint_one(self, file: str) -> LintResult:
        return lint_file(
            file,
            self.config,
            spec_builder=self.spec_builder,
            rule_engine=self.rule_engine,
        )

    def run(self, files: Sequence[str]) -> RunOutcome:
        """Lint every file and collect the outcome.

        Nothing is returned until every file has settled.

        Args:
            files: Files to lint.

        Returns:
            RunOutcome with results and failures in input order.
        """
        outcome = RunOutcome()
        if not files:
            return outcome

        workers = max(1, min(self.max_workers, len(files)))
        with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [(file, executor.submit(self.lint_one, file)) for file in files]

            for file, future in futures:
                try:
                    outcome.results.append((file, future.result()))
                except Exception as e:
                    logger.debug("Linting %s failed", file, exc_info=True)
                    outcome.failures.append(LintFailure(file=file, error=e))

        return outcome
