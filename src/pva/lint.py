"""Single-file lint pipeline: load, run both engines, merge."""

from __future__ import annotations

import logging
from pathlib import Path

from pva.config import PvaConfig
from pva.engines import OpenApiSpecBuilder, RuleEngine, SpecBuilder, SpectralEngine
from pva.loader import load_document
from pva.locate import LineLocator
from pva.merger import LintResult, merge_results

logger = logging.getLogger(__name__)


def lint_file(
    filepath: Path | str,
    config: PvaConfig | None = None,
    *,
    spec_builder: SpecBuilder | None = None,
    rule_engine: RuleEngine | None = None,
) -> LintResult:
    """Lint one API description file.

    Args:
        filepath: File to lint.
        config: Resolved configuration. Defaults to the built-in defaults.
        spec_builder: Spec builder engine. Defaults to OpenApiSpecBuilder.
        rule_engine: Rule engine. Defaults to SpectralEngine.

    Returns:
        The merged LintResult.

    Raises:
        LintError: If the file cannot be parsed, is not an API description,
            or an engine fails.
        OSError: If the file cannot be read.
    """
    config = config or PvaConfig()
    spec_builder = spec_builder or OpenApiSpecBuilder()
    rule_engine = rule_engine or SpectralEngine()

    document = load_document(filepath)
    built = spec_builder.build(document, config)
    violations = rule_engine.run(document, config)

    logger.debug(
        "%s: %d spec builder and %d rule engine violations",
        document.path,
        len(built.violations),
        len(violations),
    )
    return merge_results(built.version, built.violations, violations, LineLocator(document.contents))
