"""Terminal report rendering for lint results.

The report lists one block per file, worst file first, with the messages of
each file sorted by line and the columns aligned across the whole run,
followed by run-wide statistics.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from rich.cells import cell_len
from rich.text import Text

from pva.merger import LintMessage, LintResult

FileResult = tuple[str, LintResult]

SYMBOLS = {
    "error": ("✖", "red"),
    "warning": ("⚠", "yellow"),
    "info": ("ℹ", "blue"),
}
DIM_STYLE = "grey50"


@dataclass
class RunTotals:
    """Message counts across all files of a run."""

    errors: int = 0
    warnings: int = 0
    infos: int = 0
    hints: int = 0

    @property
    def total(self) -> int:
        return self.errors + self.warnings + self.infos + self.hints


def count_totals(results: Sequence[FileResult]) -> RunTotals:
    """Sum the message counts of every file."""
    totals = RunTotals()
    for _, result in results:
        totals.errors += len(result.errors)
        totals.warnings += len(result.warnings)
        totals.infos += len(result.infos)
        totals.hints += len(result.hints)
    return totals


def has_errors(results: Sequence[FileResult]) -> bool:
    """Check whether any file has at least one error."""
    return any(result.errors for _, result in results)


def sort_by_line(result: LintResult) -> LintResult:
    """Return a copy of the result with every bucket stable-sorted by line."""

    def by_line(messages: list[LintMessage]) -> list[LintMessage]:
        return sorted(messages, key=lambda m: m.line)

    return LintResult(
        version=result.version,
        errors=by_line(result.errors),
        warnings=by_line(result.warnings),
        infos=by_line(result.infos),
        hints=by_line(result.hints),
    )


def order_files(results: Sequence[FileResult]) -> list[FileResult]:
    """Order files by descending (errors, warnings, infos, hints).

    Files with identical counts keep their relative order.
    """
    return sorted(results, key=lambda item: item[1].counts(), reverse=True)


def _plural(word: str, count: int) -> str:
    return f"{count} {word if count == 1 else word + 's'}"


def format_line(
    kind: str,
    message: LintMessage,
    max_line_width: int,
    max_message_width: int,
) -> Text:
    """Render a single message line.

    Args:
        kind: Symbol to use: "error", "warning" or "info".
        message: The message to render.
        max_line_width: Width the line number is right-aligned to.
        max_message_width: Width the message is left-aligned to.

    Returns:
        The rendered line.
    """
    symbol, style = SYMBOLS[kind]
    line = str(message.line)
    return Text.assemble(
        (symbol, style),
        " ",
        " " * (max_line_width - cell_len(line)),
        (line, DIM_STYLE),
        " ",
        message.message,
        " " * (max_message_width - cell_len(message.message)),
        " ",
        (message.rule, DIM_STYLE),
    )


def format_results(results: Sequence[FileResult]) -> Text:
    """Render the report for a run.

    Args:
        results: (file name, result) pairs in discovery order.

    Returns:
        The rendered report. Empty when no file has any message.
    """
    sorted_results = [(file, sort_by_line(result)) for file, result in results]
    totals = count_totals(sorted_results)
    if totals.total == 0:
        return Text()

    max_line_width = 0
    max_message_width = 0
    for _, result in sorted_results:
        for bucket in (result.errors, result.warnings, result.infos, result.hints):
            for message in bucket:
                max_line_width = max(max_line_width, cell_len(str(message.line)))
        # Info and hint messages do not widen the message column.
        for message in [*result.errors, *result.warnings]:
            max_message_width = max(max_message_width, cell_len(message.message))

    blocks: list[Text] = []
    for file, result in order_files(sorted_results):
        lines = [
            *(format_line("info", m, max_line_width, max_message_width) for m in result.hints),
            *(format_line("info", m, max_line_width, max_message_width) for m in result.infos),
            *(format_line("warning", m, max_line_width, max_message_width) for m in result.warnings),
            *(format_line("error", m, max_line_width, max_message_width) for m in result.errors),
        ]
        blocks.append(Text(file, style="underline") + "\n" + Text("\n").join(lines) + "\n")

    output = Text("\n") + Text("\n").join(blocks)

    statistics: list[Text] = []
    if totals.hints > 0:
        statistics.append(Text(_plural("hint", totals.hints), style="cyan"))
    if totals.infos > 0:
        statistics.append(Text(_plural("info", totals.infos), style="cyan"))
    if totals.warnings > 0:
        statistics.append(Text(_plural("warning", totals.warnings), style="yellow"))
    if totals.errors > 0:
        statistics.append(Text(_plural("error", totals.errors), style="red"))

    output.append("\n")
    output.append_text(Text("\n").join(statistics))
    return output
