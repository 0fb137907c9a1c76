"""
Check Engine - Record Serialization.

Records become JSON objects where an unset field is an absent
key and an empty value ("", [], {}) is kept verbatim, so the
unset/empty distinction survives persistence.
"""

import json
from typing import Any, Dict

from .errors import StateStoreError
from .schema import CheckSchema
from .types import TriState


def record_to_dict(record) -> Dict[str, Any]:
    """Set fields only, unwrapped."""
    return record.set_values()


def record_from_dict(schema: CheckSchema, data: Dict[str, Any]):
    """
    Rebuild a record; absent keys become unset.

    Raises:
        StateStoreError: On unknown fields or explicit nulls
    """
    known = {spec.name for spec in schema.fields}
    unknown = sorted(set(data) - known)
    if unknown:
        raise StateStoreError(
            f"unknown fields for {schema.type_name}: {unknown}",
            code="STATE_CORRUPT",
        )

    values: Dict[str, TriState] = {}
    for name, value in data.items():
        if value is None:
            raise StateStoreError(
                f"{schema.type_name}.{name} is null; unset fields must be absent",
                code="STATE_CORRUPT",
            )
        values[name] = TriState.of(value)
    return schema.new_record(**values)


def dumps(record) -> str:
    return json.dumps(record_to_dict(record), sort_keys=True)


def loads(schema: CheckSchema, text: str):
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StateStoreError(
            f"stored {schema.type_name} is not valid JSON: {e}",
            code="STATE_CORRUPT",
            cause=e,
        ) from e
    if not isinstance(data, dict):
        raise StateStoreError(
            f"stored {schema.type_name} is not a JSON object",
            code="STATE_CORRUPT",
        )
    return record_from_dict(schema, data)
