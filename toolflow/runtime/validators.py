"""
validators.py - Reusable output validators.

An output validator takes a TypedOutput and returns the Issues it finds.
The factories here cover the common cases:

- required_fields(): named fields must be present and non-empty
- schema_validator(): the output payload must satisfy a JSON Schema

Issues are created without a step name; the engine stamps them with the
step they were produced for.

Usage:
    registry.add_validator("generate_image", required_fields("data"))
    registry.add_validator("chat_completion", schema_validator(CHAT_SCHEMA))
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping

from jsonschema import Draft7Validator

from .stepwise.steps import OutputValidator
from .types import Issue, IssueSeverity, TypedOutput

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or (hasattr(value, "__len__") and len(value) == 0)


def required_fields(*names: str, severity: IssueSeverity = IssueSeverity.ERROR) -> OutputValidator:
    """Report an issue for each named field that is missing or empty."""

    def validate_required_fields(output: TypedOutput) -> List[Issue]:
        payload = output.model_dump()
        return [
            Issue(
                step_name="",
                severity=severity,
                message=f"required field '{name}' is missing or empty",
                detail={"field": name},
            )
            for name in names
            if _is_empty(payload.get(name))
        ]

    return validate_required_fields


def schema_validator(
    schema: Mapping[str, Any],
    severity: IssueSeverity = IssueSeverity.ERROR,
) -> OutputValidator:
    """Validate the output's payload against a JSON Schema (draft 7).

    Raises:
        jsonschema.SchemaError: If the schema itself is invalid. This is
            checked once, when the validator is created.
    """
    schema_dict: Dict[str, Any] = dict(schema)
    Draft7Validator.check_schema(schema_dict)
    checker = Draft7Validator(schema_dict)

    def validate_schema(output: TypedOutput) -> List[Issue]:
        issues = []
        for error in sorted(checker.iter_errors(output.to_payload()), key=lambda e: e.json_path):
            location = "/".join(str(part) for part in error.absolute_path) or "<root>"
            issues.append(
                Issue(
                    step_name="",
                    severity=severity,
                    message=f"schema violation at {location}: {error.message}",
                    detail={"path": list(error.absolute_path), "validator": error.validator},
                )
            )
        if issues:
            logger.debug("Schema validation found %d issue(s)", len(issues))
        return issues

    return validate_schema


__all__ = ["required_fields", "schema_validator"]
