"""Rule taxonomy for pva configuration.

Every rule that a configuration file may mention is declared here, grouped by
scope (which engine and which API description version it applies to) and
category. The configuration schema in ``pva.config`` is generated from this
table, so a rule that is not listed cannot be configured.

Scopes:
- ``shared``, ``swagger2``, ``oas3``: rules of the spec builder engine.
- ``spectral``: rules of the declarative rule engine, in the single
  category ``rules``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Literal

Severity = Literal["error", "warning", "info", "hint"]
Status = Literal["error", "warning", "info", "hint", "off"]
Case = Literal[
    "lower_snake_case",
    "upper_snake_case",
    "upper_camel_case",
    "lower_camel_case",
    "k8s_camel_case",
    "lower_dash_case",
    "upper_dash_case",
]

# Value kinds:
#   status         - a single Status
#   case           - [Status, Case] or ["off"]
#   property_type  - [Status, [excluded property names]] or ["off"]
RuleKind = Literal["status", "case", "property_type"]

SEVERITIES: tuple[Severity, ...] = ("error", "warning", "info", "hint")
STATUSES: tuple[Status, ...] = ("error", "warning", "info", "hint", "off")
CASES: tuple[Case, ...] = (
    "lower_snake_case",
    "upper_snake_case",
    "upper_camel_case",
    "lower_camel_case",
    "k8s_camel_case",
    "lower_dash_case",
    "upper_dash_case",
)
INCONSISTENT_TYPE_EXCLUSIONS = ("code", "default", "type", "value")

SPECTRAL_OAS = "spectral:oas"
IBM_RULESET = "@ibm-cloud/openapi-ruleset"


@dataclass(frozen=True)
class RuleDefinition:
    """A configurable rule.

    Attributes:
        name: Rule identifier as it appears in configuration files.
        description: One-line summary of what the rule flags.
        kind: Shape of the configured value.
        ruleset: For rule engine rules, the ruleset that defines the rule.
    """

    name: str
    description: str
    kind: RuleKind = "status"
    ruleset: str | None = None


def _status(name: str, description: str) -> RuleDefinition:
    return RuleDefinition(name, description)


def _case(name: str, description: str) -> RuleDefinition:
    return RuleDefinition(name, description, kind="case")


def _spectral(name: str, description: str, ruleset: str = SPECTRAL_OAS) -> RuleDefinition:
    return RuleDefinition(name, description, ruleset=ruleset)


SHARED_RULES: dict[str, tuple[RuleDefinition, ...]] = {
    "operations": (
        _status("undefined_tag", "Flag a tag used in operations but not listed in top-level `tags`."),
        _status("unused_tag", "Flag a tag listed in top-level `tags` that is never used."),
        _status("no_operation_id", "Flag operations without an `operationId`."),
        _case("operation_id_case_convention", "Flag an `operationId` not in the given case."),
        _status("no_summary", "Flag operations without a `summary`."),
        _status("no_array_responses", "Flag operations with a top-level array response."),
        _status("parameter_order", "Flag optional parameters declared before a required one."),
        _status("operation_id_naming_convention", "Flag an `operationId` that breaks naming convention."),
    ),
    "pagination": (
        _status("pagination_style", "Flag parameters or responses that break pagination requirements."),
    ),
    "parameters": (
        _status("required_param_has_default", "Flag a required parameter with a default value."),
        _status("no_parameter_description", "Flag parameters without a `description`."),
        _case("param_name_case_convention", "Flag a parameter name not in the given case."),
        _status("invalid_type_format_pair", "Flag parameters with an invalid type/format pair."),
        _status("content_type_parameter", "Flag parameters that define `Content-Type` explicitly."),
        _status("accept_type_parameter", "Flag parameters that define `Accept` explicitly."),
        _status("authorization_parameter", "Flag parameters that define `Authorization` explicitly."),
    ),
    "paths": (
        _status("missing_path_parameter", "Flag operations that do not define a templated path parameter."),
        _status("snake_case_only", "Flag path segments that are not snake case."),
        _case("paths_case_convention", "Flag path segments not in the given case."),
        _status("duplicate_path_parameter", "Flag path parameters defined identically in every operation."),
    ),
    "responses": (
        _status("inline_response_schema", "Flag response schemas that do not reference a named model."),
    ),
    "schemas": (
        _status("invalid_type_format_pair", "Flag schemas with an invalid type/format pair."),
        _status("snake_case_only", "Flag property names that are not lower snake case."),
        _status("no_schema_description", "Flag schemas without a `description`."),
        _status("no_property_description", "Flag properties without a `description`."),
        _status("description_mentions_json", "Flag property descriptions that mention JSON."),
        _status("array_of_arrays", "Flag array properties whose items are arrays."),
        RuleDefinition(
            "inconsistent_property_type",
            "Flag properties that share a name but not a type.",
            kind="property_type",
        ),
        _case("property_case_convention", "Flag property names not in the given case."),
        _status("property_case_collision", "Flag property names that differ only in case convention."),
        _case("enum_case_convention", "Flag enum values not in the given case."),
        _status("undefined_required_properties", "Flag required properties that are not defined."),
    ),
    "security_definitions": (
        _status("unused_security_schemes", "Flag security schemes that are never used."),
        _status("unused_security_scopes", "Flag security scopes that are never used."),
    ),
    "security": (
        _status("invalid_non_empty_security_array", "Flag non-empty security arrays that are not OAuth2."),
    ),
    "walker": (
        _status("no_empty_descriptions", "Flag empty or whitespace-only `description` fields."),
        _status("has_circular_references", "Flag circular references in the document."),
        _status("$ref_siblings", "Flag properties that are siblings of a `$ref`."),
        _status("duplicate_sibling_description", "Flag `$ref` sibling descriptions equal to the target's."),
        _status("incorrect_ref_pattern", "Flag internal `$ref`s pointing at the wrong section."),
    ),
}

SWAGGER2_RULES: dict[str, tuple[RuleDefinition, ...]] = {
    "operations": (
        _status("no_consumes_for_put_or_post", "Flag put or post operations without `consumes`."),
        _status("get_op_has_consumes", "Flag get operations that declare `consumes`."),
        _status("no_produces", "Flag operations without `produces` (except head and 204)."),
    ),
}

OAS3_RULES: dict[str, tuple[RuleDefinition, ...]] = {
    "operations": (
        _status("no_request_body_name", "Flag non-form request bodies without `x-codegen-request-body-name`."),
    ),
    "responses": (
        _status("no_success_response_codes", "Flag responses objects without a success code."),
        _status("protocol_switching_and_success_code", "Flag responses with both 101 and a success code."),
        _status("no_response_body", "Flag non-204 success responses without a body."),
        _status("ibm_status_code_guidelines", "Flag status codes that break the IBM API Handbook."),
    ),
    "schemas": (
        _status("json_or_param_binary_string", "Flag JSON bodies or parameters typed string/binary."),
    ),
}

SPECTRAL_RULES: dict[str, tuple[RuleDefinition, ...]] = {
    "rules": (
        _spectral("operation-2xx-response", "Operation must have at least one 2xx response."),
        _spectral("operation-operationId-unique", "Every operation must have a unique operationId."),
        _spectral("operation-parameters", "Operation parameters are unique and non-repeating."),
        _spectral("path-params", "Path parameters are correct and valid."),
        _spectral("contact-properties", "Contact object should have name, url and email."),
        _spectral("info-contact", "Info object should contain a contact object."),
        _spectral("info-description", "Info description must be a non-empty string."),
        _spectral("info-license", "Info object should have a license."),
        _spectral("license-url", "License object should include a url."),
        _spectral("no-$ref-siblings", "A $ref cannot be extended with sibling properties."),
        _spectral("no-eval-in-markdown", "Markdown descriptions must not contain eval()."),
        _spectral("no-script-tags-in-markdown", "Markdown descriptions must not contain <script> tags."),
        _spectral("openapi-tags-alphabetical", "Top-level tags should be sorted by name."),
        _spectral("openapi-tags", "Top-level tags should be a non-empty array."),
        _spectral("operation-description", "Operation should have a description."),
        _spectral("operation-operationId", "Operation should have an operationId."),
        _spectral("operation-operationId-valid-in-url", "operationId must only use URL-safe characters."),
        _spectral("operation-singular-tag", "Operation should have at most one tag."),
        _spectral("operation-tags", "Operation should have a non-empty tags array."),
        _spectral("operation-tag-defined", "Operation tags should be defined in global tags."),
        _spectral("path-declarations-must-exist", "Path parameter declarations cannot be empty."),
        _spectral("path-keys-no-trailing-slash", "Paths should not end with a slash."),
        _spectral("path-not-include-query", "Paths should not include a query string."),
        _spectral("tag-description", "Tags should have a description."),
        _spectral("typed-enum", "Enum values should respect the type specifier."),
        _spectral("duplicated-entry-in-enum", "Enum values must be unique."),
        _spectral(
            "oas2-operation-formData-consume-check",
            "formData parameters need a form or multipart consumes entry.",
        ),
        _spectral("oas2-api-host", "Swagger host must be a non-empty string."),
        _spectral("oas2-api-schemes", "Swagger schemes must be a non-empty array."),
        _spectral("oas2-host-not-example", "Host should not point at example.com."),
        _spectral("oas2-host-trailing-slash", "Host should not have a trailing slash."),
        _spectral("oas2-operation-security-defined", "Operation security must match securityDefinitions."),
        _spectral("oas2-unused-definition", "Definition entry is never referenced."),
        _spectral("oas2-anyOf", "anyOf is an OpenAPI v3 keyword."),
        _spectral("oas2-oneOf", "oneOf is an OpenAPI v3 keyword."),
        _spectral("oas2-schema", "Validate the structure of a Swagger 2.0 document."),
        _spectral("oas2-parameter-description", "Parameter objects should have a description."),
        _spectral("oas3-api-servers", "Servers must be a non-empty array."),
        _spectral(
            "oas3-examples-value-or-externalValue",
            "Examples have either value or externalValue, not both.",
        ),
        _spectral("oas3-operation-security-defined", "Operation security must match securitySchemes."),
        _spectral("oas3-server-not-example.com", "Server URL should not point at example.com."),
        _spectral("oas3-server-trailing-slash", "Server URL should not have a trailing slash."),
        _spectral("oas3-unused-component", "Component entry is never referenced."),
        _spectral("oas3-schema", "Validate the structure of an OpenAPI 3 document."),
        _spectral("oas3-parameter-description", "Parameter objects should have a description."),
        _spectral("oas3-valid-media-example", "Media examples must be valid against their schema."),
        _spectral("oas3-valid-schema-example", "Schema examples must be valid against their schema."),
        _spectral("content-entry-provided", "Request and non-204 response bodies need content.", IBM_RULESET),
        _spectral("content-entry-contains-schema", "Content entries should contain a schema.", IBM_RULESET),
        _spectral("ibm-content-type-is-specific", "Avoid the */* content type.", IBM_RULESET),
        _spectral("ibm-error-content-type-is-json", "Error responses should be application/json.", IBM_RULESET),
        _spectral("ibm-sdk-operations", "Validate the structure of x-sdk-operations.", IBM_RULESET),
        _spectral("major-version-in-path", "Paths should carry a single major version segment.", IBM_RULESET),
        _spectral(
            "response-error-response-schema",
            "4xx and 5xx responses should describe the error.",
            IBM_RULESET,
        ),
        _spectral("parameter-schema-or-content", "Parameters need a schema or content.", IBM_RULESET),
        _spectral("request-body-object", "Request bodies should be objects.", IBM_RULESET),
        _spectral("response-example-provided", "Responses should provide an example.", IBM_RULESET),
    ),
}

TAXONOMY: dict[str, dict[str, tuple[RuleDefinition, ...]]] = {
    "shared": SHARED_RULES,
    "swagger2": SWAGGER2_RULES,
    "oas3": OAS3_RULES,
    "spectral": SPECTRAL_RULES,
}

# Scopes whose rule names are open: custom rules may be defined by rulesets.
OPEN_SCOPES = frozenset({"spectral"})


def iter_rules() -> Iterator[tuple[str, str, RuleDefinition]]:
    """Yield ``(scope, category, rule)`` for every declared rule."""
    for scope, categories in TAXONOMY.items():
        for category, rules in categories.items():
            for rule in rules:
                yield scope, category, rule


def get_rule(scope: str, category: str, name: str) -> RuleDefinition | None:
    """Look up a rule definition, returning None when it is not declared."""
    for rule in TAXONOMY.get(scope, {}).get(category, ()):
        if rule.name == name:
            return rule
    return None


def status_of(value: object) -> Status:
    """Extract the status from a configured rule value.

    Case-convention and property-type rules are configured as lists whose
    first item is the status.
    """
    if isinstance(value, (list, tuple)):
        return value[0]  # type: ignore[no-any-return]
    return value  # type: ignore[return-value]
