"""Tests for the rule taxonomy."""

from __future__ import annotations

from collections import Counter

from pva.rules import IBM_RULESET, SPECTRAL_OAS, TAXONOMY, get_rule, iter_rules, status_of


def test_rule_names_unique_per_category() -> None:
    counts = Counter((scope, category, rule.name) for scope, category, rule in iter_rules())
    assert [key for key, count in counts.items() if count > 1] == []


def test_scopes() -> None:
    assert set(TAXONOMY) == {"shared", "swagger2", "oas3", "spectral"}
    assert set(TAXONOMY["spectral"]) == {"rules"}


def test_get_rule() -> None:
    rule = get_rule("shared", "operations", "operation_id_case_convention")
    assert rule is not None
    assert rule.kind == "case"
    assert get_rule("shared", "operations", "no_such_rule") is None
    assert get_rule("oas4", "operations", "no_summary") is None


def test_rule_engine_rules_name_their_ruleset() -> None:
    """Test only rule engine rules carry a ruleset."""
    for scope, _, rule in iter_rules():
        if scope == "spectral":
            assert rule.ruleset is not None
        else:
            assert rule.ruleset is None
    assert get_rule("spectral", "rules", "openapi-tags").ruleset == SPECTRAL_OAS  # type: ignore[union-attr]
    assert get_rule("spectral", "rules", "request-body-object").ruleset == IBM_RULESET  # type: ignore[union-attr]


def test_status_of() -> None:
    assert status_of("warning") == "warning"
    assert status_of(["error", "lower_snake_case"]) == "error"
    assert status_of(["off"]) == "off"
