"""
Check Engine - Types.

============================================================
PURPOSE
============================================================
All type definitions for the Check Engine.

CRITICAL PRINCIPLE:
    "A field the caller did not mention is not the same as a
     field the caller explicitly cleared."

Every optional attribute is a TriState: unset, set-to-empty,
or set-to-value. Python's None is never used to mean "unset"
inside a record.

============================================================
"""

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


T = TypeVar("T")


# ============================================================
# TRI-STATE VALUE
# ============================================================

@dataclass(frozen=True)
class TriState(Generic[T]):
    """
    Tagged optional value.

    present=False  -> unset
    present=True   -> set (possibly to an empty string/list/map)
    """

    present: bool = False
    value: Optional[T] = None

    def __post_init__(self) -> None:
        if not self.present and self.value is not None:
            raise ValueError("an unset TriState cannot carry a value")
        if self.present and self.value is None:
            raise ValueError("a set TriState requires a value; use TriState.unset()")

    @classmethod
    def unset(cls) -> "TriState[Any]":
        return UNSET

    @classmethod
    def of(cls, value: T) -> "TriState[T]":
        """Wrap a concrete value. Lists and maps are copied."""
        if isinstance(value, list):
            value = list(value)
        elif isinstance(value, dict):
            value = dict(value)
        return cls(present=True, value=value)

    @classmethod
    def from_optional(cls, value: Optional[T]) -> "TriState[T]":
        """Map None to unset, anything else to set."""
        if value is None:
            return UNSET
        return cls.of(value)

    @property
    def is_set(self) -> bool:
        return self.present

    @property
    def is_unset(self) -> bool:
        return not self.present

    @property
    def is_empty(self) -> bool:
        """Set, but to an empty string, list or map."""
        return self.present and isinstance(self.value, (str, list, dict, tuple)) and len(self.value) == 0

    def get(self, default: Any = None) -> Any:
        return self.value if self.present else default

    def __repr__(self) -> str:
        if not self.present:
            return "TriState(<unset>)"
        return f"TriState({self.value!r})"


UNSET: TriState[Any] = TriState()


def unset_field() -> Any:
    """Dataclass field defaulting to UNSET."""
    return field(default=UNSET)


# ============================================================
# ENUMERATIONS
# ============================================================

class CheckKind(Enum):
    """Resource kind."""

    HTTP_CHECK = "http_check"
    """Website / HTTP endpoint check."""

    API_CHECK = "api_check"
    """Web API endpoint check."""


class CheckStatus(Enum):
    """Value of a check's last_result computed field."""

    PENDING = "PENDING"
    """Created, not yet executed."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


class ResultStatus(Enum):
    """Status of a single result record."""

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


# ============================================================
# RECORD BASE
# ============================================================

class CheckRecordMixin:
    """Helpers shared by the check record dataclasses."""

    def values(self) -> Dict[str, TriState]:
        """All attributes as an ordered name -> TriState mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def set_values(self) -> Dict[str, Any]:
        """Only the attributes that are set, unwrapped."""
        return {name: tv.value for name, tv in self.values().items() if tv.present}

    def with_values(self, **changes: TriState):
        """Return a copy with the given attributes replaced."""
        return replace(self, **changes)


# ============================================================
# CHECK RECORDS
# ============================================================

@dataclass(frozen=True)
class HTTPCheck(CheckRecordMixin):
    """HTTP check configuration and computed status."""

    id: TriState[str] = unset_field()
    name: TriState[str] = unset_field()
    url: TriState[str] = unset_field()
    method: TriState[str] = unset_field()
    headers: TriState[Dict[str, str]] = unset_field()
    body: TriState[str] = unset_field()
    expected_status: TriState[int] = unset_field()
    expected_response: TriState[str] = unset_field()
    interval: TriState[int] = unset_field()
    timeout: TriState[int] = unset_field()
    follow_redirects: TriState[bool] = unset_field()
    regions: TriState[list] = unset_field()
    retries: TriState[int] = unset_field()
    last_result: TriState[str] = unset_field()
    last_check_time: TriState[str] = unset_field()


@dataclass(frozen=True)
class APICheck(CheckRecordMixin):
    """API check configuration and computed status."""

    id: TriState[str] = unset_field()
    name: TriState[str] = unset_field()
    endpoint: TriState[str] = unset_field()
    method: TriState[str] = unset_field()
    headers: TriState[Dict[str, str]] = unset_field()
    body: TriState[str] = unset_field()
    expected_status: TriState[int] = unset_field()
    response_validation: TriState[list] = unset_field()
    interval: TriState[int] = unset_field()
    timeout: TriState[int] = unset_field()
    auth_type: TriState[str] = unset_field()
    auth_value: TriState[str] = unset_field()
    last_result: TriState[str] = unset_field()
    last_check_time: TriState[str] = unset_field()

    def __repr__(self) -> str:
        # auth_value never appears in reprs
        shown = ", ".join(
            f"{name}={'TriState(***)' if name == 'auth_value' and tv.present else repr(tv)}"
            for name, tv in self.values().items()
        )
        return f"APICheck({shown})"


# ============================================================
# RESULT RECORDS
# ============================================================

@dataclass(frozen=True)
class CheckResult:
    """
    One historical execution of a check.

    check_id is a weak reference: a result never affects the
    check's lifecycle and is never written back to it.
    """

    id: str
    check_id: str
    status: ResultStatus
    response_time: int
    """Response time in milliseconds."""

    message: str
    timestamp: str
    """RFC 3339."""

    region: TriState[str] = unset_field()
    response_body: TriState[str] = unset_field()
    response_code: TriState[int] = unset_field()
    failure_reason: TriState[str] = unset_field()

    def __post_init__(self) -> None:
        if self.response_time < 0:
            raise ValueError("response_time must be non-negative")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "check_id": self.check_id,
            "status": self.status.value,
            "response_time": self.response_time,
            "message": self.message,
            "timestamp": self.timestamp,
        }
        for name in ("region", "response_body", "response_code", "failure_reason"):
            tv = getattr(self, name)
            if tv.present:
                out[name] = tv.value
        return out
