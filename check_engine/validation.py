"""
Check Engine - Validation.

============================================================
PURPOSE
============================================================
Input validation applied before any backend call.

RULES:
- Identity parameters are required and non-empty
- The check name is required and non-empty
- Every set value matches its field's value kind
- Integer settings (interval, timeout, ...) are non-negative

Validation failures raise ValidationError immediately and are
never retried.

============================================================
"""

from typing import Any, List

from .errors import ValidationError
from .schema import CheckSchema, FieldSpec, ValueKind


def require_identity(identity: Any, operation: str = "") -> str:
    """
    Ensure an identity parameter is a non-empty string.

    Raises:
        ValidationError: If the identity is missing or empty
    """
    if not isinstance(identity, str) or not identity:
        suffix = f" for {operation}" if operation else ""
        raise ValidationError(
            f"check ID is required{suffix}",
            fields=["id"],
            code="VAL_MISSING_IDENTITY",
            context={"operation": operation} if operation else None,
        )
    return identity


def require_name(record, operation: str = "") -> str:
    """
    Ensure a record carries a non-empty name.

    Raises:
        ValidationError: If name is unset or empty
    """
    name = record.name.get()
    if not isinstance(name, str) or not name:
        suffix = f" for {operation}" if operation else ""
        raise ValidationError(
            f"check name is required{suffix}",
            fields=["name"],
            code="VAL_MISSING_NAME",
            context={"operation": operation} if operation else None,
        )
    return name


def _kind_problem(spec: FieldSpec, value: Any) -> str:
    kind = spec.kind
    if kind == ValueKind.STRING:
        if not isinstance(value, str):
            return f"{spec.name}: expected string, got {type(value).__name__}"
    elif kind == ValueKind.INTEGER:
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            return f"{spec.name}: expected integer, got {type(value).__name__}"
        if spec.non_negative and value < 0:
            return f"{spec.name}: must be non-negative, got {value}"
    elif kind == ValueKind.BOOLEAN:
        if not isinstance(value, bool):
            return f"{spec.name}: expected boolean, got {type(value).__name__}"
    elif kind == ValueKind.STRING_LIST:
        if not isinstance(value, (list, tuple)):
            return f"{spec.name}: expected list of strings, got {type(value).__name__}"
        if not all(isinstance(item, str) for item in value):
            return f"{spec.name}: list elements must be strings"
    elif kind == ValueKind.STRING_MAP:
        if not isinstance(value, dict):
            return f"{spec.name}: expected map of strings, got {type(value).__name__}"
        if not all(isinstance(k, str) and isinstance(v, str) for k, v in value.items()):
            return f"{spec.name}: map keys and values must be strings"
    return ""


def collect_problems(schema: CheckSchema, record) -> List[str]:
    """
    Check every set value against its field spec.

    Returns:
        List of problem descriptions; empty if the record is valid
    """
    problems: List[str] = []
    for spec in schema.fields:
        tv = getattr(record, spec.name)
        if tv.is_unset:
            continue
        problem = _kind_problem(spec, tv.value)
        if problem:
            problems.append(problem)
    return problems


def validate_record(schema: CheckSchema, record) -> None:
    """
    Validate value kinds of a record.

    Raises:
        ValidationError: Listing every problem found
    """
    if not isinstance(record, schema.record_type):
        raise ValidationError(
            f"expected {schema.record_type.__name__}, got {type(record).__name__}",
        )
    problems = collect_problems(schema, record)
    if problems:
        raise ValidationError(
            f"invalid {schema.type_name}: " + "; ".join(problems),
            fields=[p.split(":", 1)[0] for p in problems],
        )


def validate_plan(schema: CheckSchema, plan, operation: str) -> None:
    """Full plan validation: name present, value kinds correct."""
    if isinstance(plan, schema.record_type):
        require_name(plan, operation)
    validate_record(schema, plan)
