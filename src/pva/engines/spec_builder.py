"""Spec builder backed by openapi-spec-validator.

Validates a document against the Swagger 2.0 / OpenAPI 3.x meta-schemas with
relative references resolved against the document's own URI, and flags
circular local references.
"""

from __future__ import annotations

import logging
from typing import Any

from openapi_spec_validator import (
    OpenAPIV2SpecValidator,
    OpenAPIV30SpecValidator,
    OpenAPIV31SpecValidator,
)

from pva.config import PvaConfig
from pva.engines.base import BuiltSpec, SpecBuilder, Violation
from pva.errors import EngineError
from pva.loader import LoadedDocument

logger = logging.getLogger(__name__)

STRUCTURE_RULE = "openapi-structure"
CIRCULAR_RULE = "has_circular_references"
CIRCULAR_MESSAGE = "API definition contains circular references."


def _validator_class(document: LoadedDocument) -> type:
    if document.is_swagger2:
        return OpenAPIV2SpecValidator
    if document.version.startswith("3.1"):
        return OpenAPIV31SpecValidator
    return OpenAPIV30SpecValidator


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def _resolve_pointer(document: Any, ref: str) -> Any:
    """Resolve a local ``#/...`` reference, returning None if it dangles."""
    node = document
    for token in ref[2:].split("/"):
        token = _unescape(token)
        if isinstance(node, dict) and token in node:
            node = node[token]
        elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
            node = node[int(token)]
        else:
            return None
    return node


def has_circular_references(document: Any) -> bool:
    """Check whether local references in the document form a cycle.

    Only ``#/`` references are followed; references into other files are
    left to the validator.
    """
    in_progress: set[str] = set()
    finished: set[str] = set()

    def visit(node: Any) -> bool:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str) and ref.startswith("#/"):
                if ref in in_progress:
                    return True
                if ref not in finished:
                    in_progress.add(ref)
                    target = _resolve_pointer(document, ref)
                    if target is not None and visit(target):
                        return True
                    in_progress.discard(ref)
                    finished.add(ref)
            return any(visit(value) for key, value in node.items() if key != "$ref")
        if isinstance(node, list):
            return any(visit(item) for item in node)
        return False

    return visit(document)


class OpenApiSpecBuilder(SpecBuilder):
    """Spec builder using the official meta-schemas."""

    def build(self, document: LoadedDocument, config: PvaConfig) -> BuiltSpec:
        validator_class = _validator_class(document)
        base_uri = document.path.resolve().as_uri()
        logger.debug("Validating %s with %s", document.path, validator_class.__name__)

        violations: list[Violation] = []
        try:
            validator = validator_class(document.data, base_uri=base_uri)
            for err in validator.iter_errors():
                violations.append(
                    Violation(
                        path=list(err.absolute_path),
                        message=err.message,
                        rule=STRUCTURE_RULE,
                        severity="error",
                    )
                )
        except RecursionError as e:
            logger.debug("Reference resolution failed for %s", document.path, exc_info=True)
            raise EngineError(f"Reference resolution did not terminate for {document.path}", document.path) from e
        except Exception as e:
            logger.debug("Validation engine failed for %s", document.path, exc_info=True)
            raise EngineError(f"Validation engine failed for {document.path}: {e}", document.path) from e

        circular = has_circular_references(document.data)
        status = config.status("shared", "walker", CIRCULAR_RULE)
        if circular and status != "off":
            violations.append(Violation(path=[], message=CIRCULAR_MESSAGE, rule=CIRCULAR_RULE, severity=status))

        return BuiltSpec(
            version=document.version,
            document=document.data,
            circular=circular,
            violations=violations,
        )
