"""pva - OpenAPI linter."""

from __future__ import annotations

from pva.config import PvaConfig, load_config
from pva.formatter import format_results
from pva.lint import lint_file
from pva.merger import LintMessage, LintResult

__version__ = "0.2.1"

__all__ = [
    "LintMessage",
    "LintResult",
    "PvaConfig",
    "__version__",
    "format_results",
    "lint_file",
    "load_config",
]
