"""Result models and the merge of both engines' output into one result."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from pva.engines.base import PathSegment, Violation
from pva.locate import LineLocator
from pva.rules import Severity


@dataclass
class LintMessage:
    """A single normalized lint finding.

    Attributes:
        path: Keys and indices from the document root to the offending node.
        message: Human-readable description.
        rule: Identifier of the rule that produced the finding.
        line: 1-based line in the file, or 0 for the document as a whole.
    """

    path: list[PathSegment]
    message: str
    rule: str
    line: int


@dataclass
class LintResult:
    """Lint outcome for one file, bucketed by severity."""

    version: str
    errors: list[LintMessage] = field(default_factory=list)
    warnings: list[LintMessage] = field(default_factory=list)
    infos: list[LintMessage] = field(default_factory=list)
    hints: list[LintMessage] = field(default_factory=list)

    def bucket(self, severity: Severity) -> list[LintMessage]:
        """Return the message list for a severity."""
        return {
            "error": self.errors,
            "warning": self.warnings,
            "info": self.infos,
            "hint": self.hints,
        }[severity]

    @property
    def total(self) -> int:
        return len(self.errors) + len(self.warnings) + len(self.infos) + len(self.hints)

    def counts(self) -> tuple[int, int, int, int]:
        """Return (errors, warnings, infos, hints)."""
        return len(self.errors), len(self.warnings), len(self.infos), len(self.hints)


def merge_results(
    version: str,
    builder_violations: Iterable[Violation],
    engine_violations: Iterable[Violation],
    locator: LineLocator,
) -> LintResult:
    """Combine spec builder and rule engine violations into one result.

    Messages keep the order the engines reported them in, spec builder first.
    Rules configured as ``off`` are already filtered out by the engines.

    Args:
        version: Declared version of the document.
        builder_violations: Violations from the spec builder.
        engine_violations: Violations from the rule engine.
        locator: Line locator for the document text.

    Returns:
        The merged LintResult.
    """
    result = LintResult(version=version)
    for source in (builder_violations, engine_violations):
        for violation in source:
            result.bucket(violation.severity).append(
                LintMessage(
                    path=list(violation.path),
                    message=violation.message,
                    rule=violation.rule,
                    line=locator.line_for(violation.path),
                )
            )
    return result
