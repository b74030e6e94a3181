"""Exception hierarchy for pva.

Per-file failures derive from LintError so the runner can isolate them;
configuration problems derive from ConfigError and abort the whole run.
"""

from __future__ import annotations

from pathlib import Path

DESCRIPTOR_MISSING_MESSAGE = (
    'Neither a `openapi` property nor a `swagger` property with the value of "2.0" was found'
)


class PvaError(Exception):
    """Base class for all pva errors."""


class LintError(PvaError):
    """Raised when a single file cannot be linted."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class ParseError(LintError):
    """Raised when a file's contents cannot be parsed as JSON or YAML."""


class UnsupportedFormatError(ParseError):
    """Raised when a file extension is not one of json, yaml or yml."""

    def __init__(self, path: Path | str) -> None:
        super().__init__("Unable to parse file", path)


class DescriptorMissingError(LintError):
    """Raised when a parsed document declares neither openapi nor swagger 2.0."""

    def __init__(self, path: Path | str | None = None) -> None:
        super().__init__(DESCRIPTOR_MISSING_MESSAGE, path)


class EngineError(LintError):
    """Raised when a delegated validation engine fails for a file."""


class ConfigError(PvaError, ValueError):
    """Raised when a configuration object does not match the rule schema.

    Attributes:
        problems: Human-readable description of every schema violation.
    """

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("Invalid configuration:\n" + "\n".join(f"  - {p}" for p in problems))
