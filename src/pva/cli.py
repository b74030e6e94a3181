"""pva CLI - Main entry point."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from pva import __version__
from pva.cli_utils import (
    EXIT_INVALID,
    EXIT_LINT_ERRORS,
    config_option,
    configure_logging,
    ruleset_option,
    set_terminal_cwd,
    wire_config,
)
from pva.engines import SpectralEngine
from pva.formatter import format_results, has_errors
from pva.rules import SPECTRAL_OAS
from pva.runner import LintRunner, discover_files, expand_patterns

app = typer.Typer(
    name="pva",
    help="OpenAPI linter.",
    add_completion=False,
)

# Rich consoles for output
console = Console()
err_console = Console(stderr=True)

EPILOG = """\
Examples:

  $ pva api.yaml

  api.yaml
  ⚠ 0 Major version segment not present in either server URLs or paths major-version-in-path
  ⚠ 0 OpenAPI object should have non-empty `tags` array.                openapi-tags
  ✖ 0 Object should have the required property `info`.                  oas3-schema

  2 warnings
  1 error
"""


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pva version {__version__}")
        raise typer.Exit()


@app.command(epilog=EPILOG)
def main(
    files: list[str] | None = typer.Argument(
        None,
        help="Files or glob patterns to lint. Defaults to every YAML/JSON file not ignored by git.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug information.",
    ),
    config_path: Path | None = config_option(),
    rulesets: list[str] | None = ruleset_option(),
    version: bool | None = typer.Option(
        None,
        "--version",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Lint OpenAPI and Swagger documents.

    Exits with code 1 if any file has an error, and with code 2 if the
    configuration is invalid or there was nothing to lint.
    """
    configure_logging(verbose)
    config = wire_config(config_path=config_path)

    is_auto_detected = not files
    targets = discover_files() if is_auto_detected else expand_patterns(files or [])

    rule_engine = SpectralEngine(rulesets=list(dict.fromkeys([SPECTRAL_OAS, *(rulesets or [])])))
    outcome = LintRunner(config, rule_engine=rule_engine).run(targets)

    for failure in outcome.failures:
        # Discovered YAML/JSON files are often not API descriptions at all.
        if is_auto_detected and failure.is_descriptor_missing:
            continue
        err_console.print(Text(f"{failure.file}: {failure.error}", style="red"))

    if verbose:
        console.print(outcome.results)

    if not outcome.results:
        console.print("No files to lint")
        raise typer.Exit(code=EXIT_INVALID)

    report = format_results(outcome.results)
    if report:
        set_terminal_cwd(console)
        console.print(report, soft_wrap=True)

    if has_errors(outcome.results):
        raise typer.Exit(code=EXIT_LINT_ERRORS)
