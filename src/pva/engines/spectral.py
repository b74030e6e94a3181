"""Rule engine backed by the Spectral CLI.

Install: npm install -g @stoplight/spectral-cli

Env vars:
  PVA_SPECTRAL_BIN     - path to the spectral binary (default: spectral)
  PVA_SPECTRAL_TIMEOUT - seconds before a lint run is abandoned (default: 60)
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pva.config import PvaConfig
from pva.engines.base import Fingerprint, RuleEngine, Violation, compute_fingerprint
from pva.errors import EngineError
from pva.loader import LoadedDocument
from pva.rules import SPECTRAL_OAS, Severity, Status, get_rule

logger = logging.getLogger(__name__)

BIN_ENV_VAR = "PVA_SPECTRAL_BIN"
TIMEOUT_ENV_VAR = "PVA_SPECTRAL_TIMEOUT"
DEFAULT_BIN = "spectral"
DEFAULT_TIMEOUT = 60.0

# Spectral exits 1 when it found results at the fail severity; both are successful runs.
OK_RETURN_CODES = (0, 1)

SEVERITY_BY_LEVEL: dict[int, Severity] = {0: "error", 1: "warning", 2: "info", 3: "hint"}
SPECTRAL_SEVERITY: dict[Status, str] = {
    "error": "error",
    "warning": "warn",
    "info": "info",
    "hint": "hint",
    "off": "off",
}


def build_ruleset(rule_statuses: dict[str, Status], rulesets: Sequence[str]) -> dict[str, Any]:
    """Build a Spectral ruleset document from configured rule statuses.

    Args:
        rule_statuses: Rule name -> configured status.
        rulesets: Rulesets to extend. Rules defined by any other ruleset are
            left out, since Spectral rejects overrides of unknown rules.

    Returns:
        Ruleset as a JSON-serializable dictionary.
    """
    extends: list[Any] = []
    for ruleset in rulesets:
        extends.append([ruleset, "recommended"] if ruleset == SPECTRAL_OAS else ruleset)

    rules: dict[str, str] = {}
    for name, status in rule_statuses.items():
        definition = get_rule("spectral", "rules", name)
        if definition is None or definition.ruleset not in rulesets:
            logger.debug("Skipping rule %s: not provided by %s", name, ", ".join(rulesets))
            continue
        rules[name] = SPECTRAL_SEVERITY[status]

    return {"extends": extends, "rules": rules}


def parse_output(output: str) -> list[Violation]:
    """Convert Spectral's JSON output into violations.

    Raises:
        EngineError: If the output is not a JSON list.
    """
    if not output.strip():
        return []
    try:
        raw = json.loads(output)
    except json.JSONDecodeError as e:
        raise EngineError(f"Failed to parse Spectral output: {output[:200]}") from e
    if not isinstance(raw, list):
        raise EngineError(f"Unexpected Spectral output: {output[:200]}")

    return [
        Violation(
            path=list(item.get("path", [])),
            message=item.get("message", ""),
            rule=str(item.get("code", "")),
            severity=SEVERITY_BY_LEVEL.get(item.get("severity", 1), "warning"),
        )
        for item in raw
    ]


class SpectralEngine(RuleEngine):
    """Runs ``spectral lint`` on the preprocessed text, next to the linted file.

    Attributes:
        binary: Spectral executable.
        timeout: Seconds before a run is abandoned.
        rulesets: Rulesets the generated ruleset extends.
    """

    def __init__(
        self,
        fingerprint: Fingerprint = compute_fingerprint,
        binary: str | None = None,
        timeout: float | None = None,
        rulesets: Sequence[str] = (SPECTRAL_OAS,),
    ) -> None:
        super().__init__(fingerprint)
        self.binary = binary or os.environ.get(BIN_ENV_VAR, DEFAULT_BIN)
        self.timeout = timeout if timeout is not None else float(os.environ.get(TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT))
        self.rulesets = tuple(rulesets)

    def run(self, document: LoadedDocument, config: PvaConfig) -> list[Violation]:
        ruleset = build_ruleset(config.spectral_rules(), self.rulesets)
        target = document.path.resolve()

        # Preprocessed text goes to a sibling file; relative refs resolve from the original directory.
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=target.parent,
            prefix=f".{target.stem}.pva-",
            suffix=target.suffix,
            delete=False,
        ) as f:
            f.write(document.contents)
        source = Path(f.name)

        try:
            result = self._lint(source, ruleset, document)
        finally:
            source.unlink(missing_ok=True)

        if result.returncode not in OK_RETURN_CODES:
            detail = result.stderr.strip() or result.stdout.strip()
            raise EngineError(f"Spectral failed on {document.path}: {detail}", document.path)

        violations = self.deduplicate(parse_output(result.stdout))
        logger.debug("spectral lint: %s - %d violations", document.path, len(violations))
        return violations

    def _lint(
        self, source: Path, ruleset: dict[str, Any], document: LoadedDocument
    ) -> subprocess.CompletedProcess[str]:
        with tempfile.TemporaryDirectory(prefix="pva-spectral-") as tmp:
            ruleset_path = Path(tmp) / ".spectral.json"
            ruleset_path.write_text(json.dumps(ruleset), encoding="utf-8")
            cmd = [
                self.binary,
                "lint",
                str(source),
                "--format",
                "json",
                "--ruleset",
                str(ruleset_path),
                "--quiet",
            ]
            logger.debug("Running %s in %s", " ".join(cmd), source.parent)

            try:
                return subprocess.run(
                    cmd,
                    cwd=source.parent,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except FileNotFoundError as e:
                raise EngineError(
                    f"{self.binary} not found - install: npm install -g @stoplight/spectral-cli",
                    document.path,
                ) from e
            except subprocess.TimeoutExpired as e:
                raise EngineError(
                    f"Spectral timed out after {self.timeout:g}s on {document.path}", document.path
                ) from e
