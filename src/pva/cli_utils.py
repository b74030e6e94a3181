"""CLI utility functions for pva.

Provides helper functions for:
- Config wiring: Loading configuration and exiting on invalid configuration
- Error formatting: Consistent user-friendly error messages with exit codes
- Logging setup for --verbose
- Terminal integration
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler

from pva.config import CONFIG_ENV_VAR, PvaConfig, load_config
from pva.errors import ConfigError
from pva.rules import IBM_RULESET, SPECTRAL_OAS

# Exit code conventions
EXIT_LINT_ERRORS = 1  # At least one file has an error-severity message
EXIT_INVALID = 2  # Invalid configuration, or nothing was linted

# iTerm2 proprietary escape: lets the terminal resolve relative file names.
ITERM_SET_CWD = "\x1b]50;CurrentDir={cwd}\x07"


# -----------------------------------------------------------------------------
# Error Formatting Helpers
# -----------------------------------------------------------------------------


def error(msg: str, *, exit_code: int = EXIT_INVALID) -> NoReturn:
    """Print an error message and exit with the given exit code.

    Args:
        msg: The error message to display.
        exit_code: Exit code to use (default: EXIT_INVALID=2).

    Raises:
        typer.Exit: Always raises to exit the program.
    """
    styled_prefix = typer.style("Error:", fg=typer.colors.RED, bold=True)
    typer.echo(f"{styled_prefix} {msg}", err=True)
    raise typer.Exit(code=exit_code)


def format_error_details(errors: list[str]) -> str:
    """Format a list of error messages for display.

    Args:
        errors: List of error messages.

    Returns:
        Formatted string with bullet points.
    """
    if not errors:
        return ""
    return "\n".join(f"  - {e}" for e in errors)


# -----------------------------------------------------------------------------
# Config Wiring Helper
# -----------------------------------------------------------------------------


def wire_config(config_path: Path | None = None, start_dir: Path | None = None) -> PvaConfig:
    """Load configuration for a CLI run.

    Args:
        config_path: Explicit configuration file from --config.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved PvaConfig instance.

    Raises:
        typer.Exit: With EXIT_INVALID if the configuration is invalid.
    """
    try:
        return load_config(config_path=config_path, start_dir=start_dir)
    except ConfigError as e:
        error(f"Invalid configuration:\n{format_error_details(e.problems)}")


def config_option() -> Any:
    """Create a Typer Option for --config / -c.

    Returns:
        Typer Option with default None and appropriate help text.
    """
    return typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use instead of searching for one.",
        envvar=CONFIG_ENV_VAR,
        dir_okay=False,
    )


def ruleset_option() -> Any:
    """Create a Typer Option for --ruleset / -r.

    Returns:
        Typer Option collecting extra Spectral rulesets to extend.
    """
    return typer.Option(
        None,
        "--ruleset",
        "-r",
        help=f"Extra Spectral ruleset to extend besides {SPECTRAL_OAS}, e.g. {IBM_RULESET}. Repeatable.",
    )


# -----------------------------------------------------------------------------
# Logging and Terminal Helpers
# -----------------------------------------------------------------------------


def configure_logging(verbose: bool) -> None:
    """Send pva debug logging to stderr when verbose output is requested."""
    if not verbose:
        return
    logger = logging.getLogger("pva")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))


def set_terminal_cwd(console: Console) -> None:
    """Tell an interactive, non-CI terminal the current directory."""
    if console.is_terminal and not os.environ.get("CI"):
        console.file.write(ITERM_SET_CWD.format(cwd=Path.cwd()))
