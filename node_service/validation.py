"""Schema-driven validation of inbound node payloads."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from pydantic import ValidationError

from node_service.models.schema import FieldDescriptor

_JSON_TYPE_NAMES = {
    str: "string",
    bool: "boolean",
    int: "number",
    float: "number",
    list: "array",
    dict: "object",
    type(None): "null",
}


@dataclass(frozen=True)
class FieldIssue:
    """One offending field in a request body."""

    field: str
    problem: str

    def to_dict(self) -> dict:
        return {"field": self.field, "problem": self.problem}


class PayloadValidationError(Exception):
    """Request body is malformed or misses/mistypes declared fields."""

    def __init__(self, issues: Sequence[FieldIssue], message: str = ""):
        self.issues = list(issues)
        self.message = message or "; ".join(f"{i.field}: {i.problem}" for i in self.issues)
        super().__init__(self.message)

    def to_detail(self) -> dict:
        return {"detail": self.message, "errors": [i.to_dict() for i in self.issues]}


def json_type_name(value: Any) -> str:
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def parse_json_object(raw: bytes) -> Dict[str, Any]:
    """Decode a request body that must be a JSON object.

    Raises:
        PayloadValidationError: empty body, invalid JSON, or non-object JSON
    """
    if not raw or not raw.strip():
        raise PayloadValidationError([FieldIssue("body", "request body is empty")])
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadValidationError([FieldIssue("body", f"invalid JSON: {e}")]) from e
    if not isinstance(data, dict):
        raise PayloadValidationError(
            [FieldIssue("body", f"expected a JSON object, got {json_type_name(data)}")]
        )
    return data


def validate_fields(payload: Dict[str, Any], fields: Sequence[FieldDescriptor]) -> List[Any]:
    """Check every declared field and return the values in declaration order.

    All offending fields are collected before raising, so one response can
    report everything the caller got wrong.
    """
    values = []
    issues = []
    for descriptor in fields:
        if descriptor.name not in payload:
            issues.append(FieldIssue(descriptor.name, "missing required field"))
            continue
        value = payload[descriptor.name]
        # bool is a subclass of int; compare exact types
        if type(value) is not descriptor.python_type:
            issues.append(
                FieldIssue(
                    descriptor.name,
                    f"expected {descriptor.field_type}, got {json_type_name(value)}",
                )
            )
            continue
        values.append(value)

    if issues:
        raise PayloadValidationError(issues)
    return values


def issues_from_pydantic(error: ValidationError) -> List[FieldIssue]:
    """Flatten a pydantic ValidationError into FieldIssues."""
    issues = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ())) or "body"
        issues.append(FieldIssue(field, item.get("msg", "invalid value")))
    return issues
