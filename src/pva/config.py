"""Configuration management for pva.

Handles configuration loading with precedence:
explicit file (--config / PVA_CONFIG) > discovered file > built-in defaults

Discovered files are searched for in the current directory and then in each
parent directory; in every directory the candidates are tried in the order of
CONFIG_FILENAMES and the first match wins. A user configuration is validated
against the schema generated from ``pva.rules`` and deep-merged over the
defaults, so unspecified rules keep their default value.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

import jsonschema
import yaml

from pva.errors import ConfigError
from pva.rules import (
    CASES,
    INCONSISTENT_TYPE_EXCLUSIONS,
    OPEN_SCOPES,
    STATUSES,
    TAXONOMY,
    RuleDefinition,
    Status,
    status_of,
)

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PVA_CONFIG"
PACKAGE_JSON_KEY = "pva"

# Candidate files, in search order within a directory.
CONFIG_FILENAMES = (
    "package.json",
    ".pvarc",
    ".pvarc.json",
    ".pvarc.yaml",
    ".pvarc.yml",
    ".pvarc.toml",
    "pva.config.json",
    "pva.config.yaml",
    "pyproject.toml",
)

DEFAULT_CONFIG: dict[str, Any] = {
    "shared": {
        "operations": {
            "no_operation_id": "warning",
            "operation_id_case_convention": ["off", "lower_camel_case"],
            "no_summary": "warning",
            "parameter_order": "error",
            "undefined_tag": "error",
            "unused_tag": "error",
            "operation_id_naming_convention": "off",
            "no_array_responses": "off",
        },
        "pagination": {
            "pagination_style": "error",
        },
        "parameters": {
            "no_parameter_description": "hint",
            "param_name_case_convention": ["off"],
            "invalid_type_format_pair": "error",
            "content_type_parameter": "error",
            "accept_type_parameter": "error",
            "authorization_parameter": "error",
            "required_param_has_default": "error",
        },
        "paths": {
            "missing_path_parameter": "error",
            "duplicate_path_parameter": "error",
            "paths_case_convention": ["off"],
        },
        "responses": {
            "inline_response_schema": "off",
        },
        "security_definitions": {
            "unused_security_schemes": "error",
            "unused_security_scopes": "error",
        },
        "security": {
            "invalid_non_empty_security_array": "error",
        },
        "schemas": {
            "invalid_type_format_pair": "off",
            "snake_case_only": "off",
            "no_schema_description": "hint",
            "no_property_description": "hint",
            "description_mentions_json": "off",
            "array_of_arrays": "off",
            "property_case_convention": ["off"],
            "property_case_collision": "warning",
            "enum_case_convention": ["off"],
            "undefined_required_properties": "error",
            "inconsistent_property_type": ["off"],
        },
        "walker": {
            "no_empty_descriptions": "error",
            "has_circular_references": "warning",
            "$ref_siblings": "off",
            "duplicate_sibling_description": "error",
            "incorrect_ref_pattern": "error",
        },
    },
    "swagger2": {
        "operations": {
            "no_consumes_for_put_or_post": "error",
            "get_op_has_consumes": "warning",
            "no_produces": "warning",
        },
    },
    "oas3": {
        "operations": {
            "no_request_body_name": "off",
        },
        "responses": {
            "no_success_response_codes": "warning",
            "protocol_switching_and_success_code": "error",
            "no_response_body": "error",
            "ibm_status_code_guidelines": "off",
        },
        "schemas": {
            "json_or_param_binary_string": "error",
        },
    },
    "spectral": {
        "rules": {
            "no-eval-in-markdown": "error",
            "no-script-tags-in-markdown": "error",
            "openapi-tags": "warning",
            "operation-description": "hint",
            "operation-tags": "warning",
            "operation-tag-defined": "warning",
            "path-keys-no-trailing-slash": "error",
            "typed-enum": "error",
            "request-body-object": "off",
            "oas2-api-host": "error",
            "oas2-api-schemes": "error",
            "oas2-host-trailing-slash": "error",
            "oas2-anyOf": "error",
            "oas2-oneOf": "error",
            "oas3-api-servers": "off",
            "oas3-examples-value-or-externalValue": "error",
            "oas3-server-trailing-slash": "error",
            "oas3-valid-schema-example": "off",
            "response-example-provided": "hint",
            "response-error-response-schema": "off",
            "content-entry-contains-schema": "error",
            # Conflicts with oas3.responses.no_response_body
            "content-entry-provided": "off",
        },
    },
}


# -----------------------------------------------------------------------------
# Schema
# -----------------------------------------------------------------------------


def _off_only() -> dict[str, Any]:
    return {"const": ["off"]}


def _rule_value_schema(rule: RuleDefinition) -> dict[str, Any]:
    """Build the JSON Schema for a single rule's configured value."""
    if rule.kind == "case":
        return {
            "anyOf": [
                _off_only(),
                {
                    "type": "array",
                    "items": [{"enum": list(STATUSES)}, {"enum": list(CASES)}],
                    "minItems": 2,
                    "maxItems": 2,
                },
            ]
        }
    if rule.kind == "property_type":
        return {
            "anyOf": [
                _off_only(),
                {
                    "type": "array",
                    "items": [
                        {"enum": list(STATUSES)},
                        {"type": "array", "items": {"enum": list(INCONSISTENT_TYPE_EXCLUSIONS)}},
                    ],
                    "minItems": 2,
                    "maxItems": 2,
                },
            ]
        }
    return {"enum": list(STATUSES)}


def config_schema() -> dict[str, Any]:
    """Generate the JSON Schema (Draft 7) that user configuration must match.

    Returns:
        Schema dictionary. Scopes, categories and rule names outside the
        taxonomy are rejected, except in open scopes where any rule name is
        accepted as long as its value is a status.
    """
    scopes: dict[str, Any] = {}
    for scope, categories in TAXONOMY.items():
        category_schemas: dict[str, Any] = {}
        for category, rules in categories.items():
            category_schemas[category] = {
                "type": "object",
                "properties": {rule.name: _rule_value_schema(rule) for rule in rules},
                "additionalProperties": (
                    {"enum": list(STATUSES)} if scope in OPEN_SCOPES else False
                ),
            }
        scopes[scope] = {
            "type": "object",
            "properties": category_schemas,
            "additionalProperties": False,
        }

    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "pva configuration",
        "type": "object",
        "properties": scopes,
        "additionalProperties": False,
    }


def validate_config(data: Any) -> list[str]:
    """Validate a configuration object against the rule schema.

    Args:
        data: Parsed configuration (typically a user override).

    Returns:
        List of problems, each prefixed with its dotted location. Empty if valid.
    """
    validator = jsonschema.Draft7Validator(config_schema())
    problems: list[str] = []
    for err in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path]):
        location = ".".join(str(p) for p in err.absolute_path) or "<root>"
        problems.append(f"{location}: {err.message}")
    return problems


# -----------------------------------------------------------------------------
# Merge
# -----------------------------------------------------------------------------


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep merge two configuration mappings.

    Nested mappings are merged key by key; any other override value (lists
    included) replaces the base value wholesale. Neither input is modified.

    Args:
        base: Mapping providing defaults.
        override: Mapping whose leaves take precedence.

    Returns:
        A new merged dictionary.
    """
    result: dict[str, Any] = copy.deepcopy(dict(base))
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(result.get(key), Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class PvaConfig:
    """Resolved, read-only rule configuration for a run.

    Attributes:
        rules: Scope -> category -> rule -> value, frozen.
        source: File the user override came from, or None for pure defaults.
    """

    rules: Mapping[str, Any] = field(default_factory=lambda: _freeze(DEFAULT_CONFIG))
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Path | None = None) -> PvaConfig:
        """Create a config from a full (already merged) configuration mapping."""
        return cls(rules=_freeze(data), source=source)

    def value(self, scope: str, category: str, rule: str) -> Any:
        """Return the configured value of a rule, or None if it is not configured."""
        return self.rules.get(scope, {}).get(category, {}).get(rule)

    def status(self, scope: str, category: str, rule: str) -> Status:
        """Return the status of a rule; unconfigured rules are ``off``."""
        value = self.value(scope, category, rule)
        if value is None:
            return "off"
        return status_of(value)

    def spectral_rules(self) -> dict[str, Status]:
        """Return the rule engine's rule name -> status mapping."""
        rules = self.rules.get("spectral", {}).get("rules", {})
        return {name: status_of(value) for name, value in rules.items()}

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable deep copy of the configuration."""
        result: dict[str, Any] = _thaw(self.rules)
        return result


# -----------------------------------------------------------------------------
# Discovery
# -----------------------------------------------------------------------------


def _load_toml_file(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_yaml_file(path: Path) -> Any:
    # YAML is a superset of JSON, so extensionless rc files may hold either.
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f)


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Read pva configuration from a candidate file.

    Args:
        path: Path to a file named like one of CONFIG_FILENAMES (or any
            explicit .json/.yaml/.yml/.toml file).

    Returns:
        The configuration mapping, or None when the file exists but holds no
        pva section (package.json without a "pva" key, pyproject.toml without
        [tool.pva]).

    Raises:
        OSError: If the file cannot be read.
        json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError: If the
            file cannot be parsed.
    """
    name = path.name
    if name == "package.json":
        data = json.loads(path.read_text(encoding="utf-8"))
        return data.get(PACKAGE_JSON_KEY) if isinstance(data, dict) else None
    if name == "pyproject.toml":
        tool_section = _load_toml_file(path).get("tool", {})
        return tool_section.get("pva")
    if path.suffix == ".toml":
        return _load_toml_file(path)
    if path.suffix == ".json":
        loaded = json.loads(path.read_text(encoding="utf-8"))
    else:
        loaded = _load_yaml_file(path)
    return loaded if loaded is not None else {}


def discover_config(start_dir: Path | None = None) -> tuple[Path | None, dict[str, Any] | None]:
    """Search for the nearest configuration.

    Args:
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Tuple of (path, configuration). Both are None when nothing is found.

    Raises:
        OSError, json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError:
            If the first matching file cannot be read or parsed.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            candidate = current / filename
            if not candidate.is_file():
                continue
            data = read_config_file(candidate)
            if data is not None:
                return candidate, data

        parent = current.parent
        if parent == current:
            return None, None
        current = parent


def _load_explicit(path: Path) -> dict[str, Any]:
    try:
        data = read_config_file(path)
    except (OSError, json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigError([f"Could not read {path}: {e}"]) from e
    return data or {}


def load_config(
    config_path: Path | None = None,
    start_dir: Path | None = None,
) -> PvaConfig:
    """Load configuration with the full precedence chain.

    Args:
        config_path: Explicit configuration file. Falls back to the
            PVA_CONFIG environment variable, then to discovery.
        start_dir: Directory to start discovery from.

    Returns:
        Fully resolved PvaConfig instance.

    Raises:
        ConfigError: If the user configuration does not match the schema, or
            an explicit configuration file cannot be read.
    """
    explicit = config_path or (Path(os.environ[CONFIG_ENV_VAR]) if os.environ.get(CONFIG_ENV_VAR) else None)

    source: Path | None
    if explicit is not None:
        source, override = explicit, _load_explicit(explicit)
    else:
        try:
            source, found = discover_config(start_dir)
        except (OSError, json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            logger.debug("Ignoring unreadable configuration: %s", e)
            source, found = None, None
        override = found or {}

    problems = validate_config(override)
    if problems:
        raise ConfigError(problems)

    if source is not None:
        logger.debug("Using configuration from %s", source)
    return PvaConfig.from_dict(deep_merge(DEFAULT_CONFIG, override), source=source)
