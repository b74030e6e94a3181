"""Base engine classes and models for pva.

The spec builder and the rule engine are external collaborators; the classes
here define the seam between them and the lint pipeline.
"""

from __future__ import annotations

import hashlib
import json
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pva.config import PvaConfig
from pva.loader import LoadedDocument
from pva.rules import Severity

PathSegment = str | int


@dataclass
class Violation:
    """A single rule violation reported by an engine.

    Attributes:
        path: Keys and indices from the document root to the offending node.
        message: Human-readable description of the violation.
        rule: Identifier of the rule that was violated.
        severity: Severity the rule is configured at.
    """

    path: list[PathSegment]
    message: str
    rule: str
    severity: Severity


@dataclass
class BuiltSpec:
    """Output of the spec builder for one document.

    Attributes:
        version: Declared API description version.
        document: Document tree the engine validated.
        circular: Whether the document contains circular references.
        violations: Violations found while building.
    """

    version: str
    document: dict[str, Any]
    circular: bool = False
    violations: list[Violation] = field(default_factory=list)


Fingerprint = Callable[[Violation], str]


def compute_fingerprint(violation: Violation) -> str:
    """Compute the deduplication key of a violation.

    Two violations at the same location with the same message share a key
    even when different rules reported them.
    """
    payload = json.dumps([[str(p) for p in violation.path], violation.message])
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


class SpecBuilder(ABC):
    """Builds and structurally validates an API description document."""

    @abstractmethod
    def build(self, document: LoadedDocument, config: PvaConfig) -> BuiltSpec:
        """Validate the document and collect engine-level findings.

        Implementations resolve relative references against the directory of
        ``document.path``.

        Raises:
            EngineError: If the engine cannot process the document.
        """


class RuleEngine(ABC):
    """Evaluates declarative lint rules against a document."""

    def __init__(self, fingerprint: Fingerprint = compute_fingerprint) -> None:
        self.fingerprint = fingerprint

    @abstractmethod
    def run(self, document: LoadedDocument, config: PvaConfig) -> list[Violation]:
        """Lint the document with the configured rules.

        Implementations resolve relative references against the directory of
        ``document.path`` and must not report rules configured as ``off``.

        Raises:
            EngineError: If the engine cannot process the document.
        """

    def deduplicate(self, violations: list[Violation]) -> list[Violation]:
        """Drop violations whose fingerprint was already seen, keeping order."""
        seen: set[str] = set()
        unique: list[Violation] = []
        for violation in violations:
            key = self.fingerprint(violation)
            if key in seen:
                continue
            seen.add(key)
            unique.append(violation)
        return unique
