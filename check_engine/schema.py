"""
Check Engine - Field Schema.

============================================================
PURPOSE
============================================================
Field-descriptor tables for each resource kind.

The merge engine, the sensitive field guard, validation and
serialization are all generic over these tables; nothing
downstream hard-codes per-kind field lists.

ROLES:
- IDENTITY: assigned by the backend once, at create
- DECLARED: supplied by the caller (required or optional)
- COMPUTED: never supplied by the caller

============================================================
"""

from dataclasses import dataclass, fields as dataclass_fields
from enum import Enum
from typing import Dict, Optional, Tuple, Type, Union

from .errors import ConfigurationError
from .types import APICheck, CheckKind, HTTPCheck, TriState


class FieldRole(Enum):
    """Role of a field in the reconciliation policy."""

    IDENTITY = "IDENTITY"
    DECLARED = "DECLARED"
    COMPUTED = "COMPUTED"


class ValueKind(Enum):
    """Value type of a field."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    STRING_LIST = "STRING_LIST"
    STRING_MAP = "STRING_MAP"


@dataclass(frozen=True)
class FieldSpec:
    """Descriptor for one field of a check record."""

    name: str
    kind: ValueKind
    role: FieldRole = FieldRole.DECLARED
    required: bool = False
    sensitive: bool = False
    non_negative: bool = False
    description: str = ""

    @property
    def is_declared(self) -> bool:
        return self.role == FieldRole.DECLARED

    @property
    def is_computed(self) -> bool:
        return self.role == FieldRole.COMPUTED


@dataclass(frozen=True)
class CheckSchema:
    """Field table and metadata for one resource kind."""

    kind: CheckKind
    id_prefix: str
    address_field: str
    record_type: Type
    description: str
    fields: Tuple[FieldSpec, ...]

    def __post_init__(self) -> None:
        record_names = [f.name for f in dataclass_fields(self.record_type)]
        spec_names = [f.name for f in self.fields]
        if record_names != spec_names:
            raise ConfigurationError(
                f"Schema for {self.kind.value} does not match {self.record_type.__name__}",
                config_key=self.kind.value,
            )

    @property
    def type_name(self) -> str:
        return self.kind.value

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def identity_field(self) -> FieldSpec:
        return next(f for f in self.fields if f.role == FieldRole.IDENTITY)

    def declared_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.is_declared)

    def computed_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.is_computed)

    def sensitive_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.sensitive)

    def required_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.required)

    def new_record(self, **values: TriState):
        """Build an empty record of this kind with the given attributes."""
        return self.record_type(**values)

    def record_from_values(self, **values):
        """Build a record from plain values; None means unset."""
        unknown = set(values) - {f.name for f in self.fields}
        if unknown:
            raise KeyError(f"unknown fields for {self.type_name}: {sorted(unknown)}")
        return self.record_type(**{
            name: TriState.from_optional(value) for name, value in values.items()
        })


def _common_head(address_field: str, address_description: str) -> Tuple[FieldSpec, ...]:
    return (
        FieldSpec("id", ValueKind.STRING, FieldRole.IDENTITY,
                  description="The unique identifier for this check."),
        FieldSpec("name", ValueKind.STRING, required=True,
                  description="The name of the check."),
        FieldSpec(address_field, ValueKind.STRING, required=True,
                  description=address_description),
        FieldSpec("method", ValueKind.STRING,
                  description="The HTTP method to use (GET, POST, etc.)."),
        FieldSpec("headers", ValueKind.STRING_MAP,
                  description="HTTP headers to include in the request."),
    )


_COMPUTED_TAIL: Tuple[FieldSpec, ...] = (
    FieldSpec("last_result", ValueKind.STRING, FieldRole.COMPUTED,
              description="The result of the last check (SUCCESS, FAILURE)."),
    FieldSpec("last_check_time", ValueKind.STRING, FieldRole.COMPUTED,
              description="The time of the last check."),
)


HTTP_CHECK_SCHEMA = CheckSchema(
    kind=CheckKind.HTTP_CHECK,
    id_prefix="hc",
    address_field="url",
    record_type=HTTPCheck,
    description="Manages an HTTP check for a website or endpoint.",
    fields=_common_head("url", "The URL to check.") + (
        FieldSpec("body", ValueKind.STRING,
                  description="HTTP request body for POST/PUT requests."),
        FieldSpec("expected_status", ValueKind.INTEGER, non_negative=True,
                  description="The expected HTTP status code."),
        FieldSpec("expected_response", ValueKind.STRING,
                  description="Text that should be present in the response body."),
        FieldSpec("interval", ValueKind.INTEGER, non_negative=True,
                  description="Check interval in seconds."),
        FieldSpec("timeout", ValueKind.INTEGER, non_negative=True,
                  description="Timeout in seconds."),
        FieldSpec("follow_redirects", ValueKind.BOOLEAN,
                  description="Whether to follow HTTP redirects."),
        FieldSpec("regions", ValueKind.STRING_LIST,
                  description="Regions to run the check from."),
        FieldSpec("retries", ValueKind.INTEGER, non_negative=True,
                  description="Number of retries before marking as failed."),
    ) + _COMPUTED_TAIL,
)


API_CHECK_SCHEMA = CheckSchema(
    kind=CheckKind.API_CHECK,
    id_prefix="ac",
    address_field="endpoint",
    record_type=APICheck,
    description="Manages an API check for a web API endpoint.",
    fields=_common_head("endpoint", "The API endpoint URL to check.") + (
        FieldSpec("body", ValueKind.STRING,
                  description="HTTP request body, typically JSON for API requests."),
        FieldSpec("expected_status", ValueKind.INTEGER, non_negative=True,
                  description="The expected HTTP status code."),
        FieldSpec("response_validation", ValueKind.STRING_LIST,
                  description="JSONPath validation expressions to validate the response."),
        FieldSpec("interval", ValueKind.INTEGER, non_negative=True,
                  description="Check interval in seconds."),
        FieldSpec("timeout", ValueKind.INTEGER, non_negative=True,
                  description="Timeout in seconds."),
        FieldSpec("auth_type", ValueKind.STRING,
                  description="Authentication type (none, basic, bearer, api_key)."),
        FieldSpec("auth_value", ValueKind.STRING, sensitive=True,
                  description="Authentication value (token, API key, etc.)."),
    ) + _COMPUTED_TAIL,
)


SCHEMAS: Dict[CheckKind, CheckSchema] = {
    CheckKind.HTTP_CHECK: HTTP_CHECK_SCHEMA,
    CheckKind.API_CHECK: API_CHECK_SCHEMA,
}


def get_schema(kind: Union[CheckKind, str]) -> CheckSchema:
    """
    Resolve a schema by kind or registry type name.

    Raises:
        ConfigurationError: If the kind is unknown
    """
    if isinstance(kind, str):
        try:
            kind = CheckKind(kind)
        except ValueError:
            raise ConfigurationError(
                f"Unsupported resource type: {kind}",
                config_key="type",
            ) from None
    return SCHEMAS[kind]


def schema_for_record(record) -> CheckSchema:
    """Find the schema whose record type matches the given record."""
    for schema in SCHEMAS.values():
        if isinstance(record, schema.record_type):
            return schema
    raise ConfigurationError(f"No schema for record type {type(record).__name__}")


def describe(schema: Optional[CheckSchema] = None) -> Dict[str, Dict[str, str]]:
    """Field descriptions keyed by type name then field name."""
    schemas = [schema] if schema else list(SCHEMAS.values())
    return {s.type_name: {f.name: f.description for f in s.fields} for s in schemas}
