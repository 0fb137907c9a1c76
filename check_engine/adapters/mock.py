"""
Check Engine - Mock Backend Adapter.

============================================================
PURPOSE
============================================================
In-process backend for tests and local runs. No network.

FEATURES:
- Identity assignment through IdentityGenerator
- Remote-side record tracking (what the backend "has")
- Drift injection (change the remote record behind the
  engine's back)
- Canned read responses for unknown identities
- Error injection per operation
- Sensitive fields never echoed back unless configured

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..clock import ClockProtocol, get_clock
from ..config import ProviderConfig
from ..errors import BackendError, ConfigurationError
from ..identity import IdentityGenerator
from ..logging_utils import mask_record
from ..results import ResultSynthesizer
from ..schema import CheckSchema
from ..types import CheckKind, CheckResult, CheckStatus, TriState, UNSET
from ..validation import require_identity, require_name
from .base import CheckAdapter


logger = logging.getLogger(__name__)


def _detached(value: TriState) -> TriState:
    """Copy a set list/map value so the remote side never shares it with callers."""
    return TriState.of(value.value) if value.is_set else UNSET


# ============================================================
# MOCK CONFIGURATION
# ============================================================

@dataclass
class MockConfig:
    """Configuration for the mock adapter."""

    canned_reads: bool = True
    """Answer reads of unknown identities with a canned record."""

    echo_secrets: bool = False
    """Return sensitive fields on read (a real backend would not)."""

    reported_result: str = CheckStatus.SUCCESS.value
    """last_result reported on every read."""


# ============================================================
# CANNED RECORDS
# ============================================================

def _canned_http(identity: str) -> Dict[str, Any]:
    return {
        "name": f"Retrieved check {identity}",
        "url": "https://example.com",
        "method": "GET",
        "expected_status": 200,
        "interval": 60,
        "timeout": 5,
        "follow_redirects": True,
        "regions": ["us-east-1", "eu-west-1"],
        "retries": 2,
        "headers": {"User-Agent": "CloudCanary"},
    }


def _canned_api(identity: str) -> Dict[str, Any]:
    return {
        "name": f"Retrieved API check {identity}",
        "endpoint": "https://api.example.com/v1/status",
        "method": "POST",
        "headers": {"Content-Type": "application/json"},
        "expected_status": 200,
        "response_validation": ["$.status == 'up'", "$.version != null"],
        "interval": 300,
        "timeout": 10,
        "auth_type": "bearer",
    }


CANNED_RECORDS: Dict[CheckKind, Callable[[str], Dict[str, Any]]] = {
    CheckKind.HTTP_CHECK: _canned_http,
    CheckKind.API_CHECK: _canned_api,
}


# ============================================================
# MOCK ADAPTER
# ============================================================

class MockCheckAdapter(CheckAdapter):
    """
    Mock check backend.

    Tracks what the "remote" side holds per identity so reads,
    drift and deletes behave like a real service would.
    """

    def __init__(
        self,
        schema: CheckSchema,
        config: Optional[ProviderConfig] = None,
        mock_config: Optional[MockConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        super().__init__(schema, config or ProviderConfig())
        self._mock_config = mock_config or MockConfig()
        self._clock = clock or get_clock()
        self._identities = IdentityGenerator(schema, self._clock)
        self._synthesizer = ResultSynthesizer(self._clock)

        # Remote state: identity -> declared field values
        self._remote: Dict[str, Dict[str, TriState]] = {}

        # Error injection: operation -> message
        self._forced_errors: Dict[str, str] = {}

        # (operation, identity) for every call that reached the backend
        self.calls: List[Tuple[str, str]] = []

    @property
    def backend_id(self) -> str:
        return "mock"

    # --------------------------------------------------------
    # TEST HOOKS
    # --------------------------------------------------------

    def force_next_error(self, operation: str, message: str = "injected failure") -> None:
        """Make the next call of `operation` raise BackendError."""
        self._forced_errors[operation] = message

    def has_check(self, identity: str) -> bool:
        return identity in self._remote

    def remote_values(self, identity: str) -> Dict[str, TriState]:
        """Copy of what the backend holds for an identity."""
        return {name: _detached(v) for name, v in self._remote[identity].items()}

    def set_remote(self, identity: str, **values: Any) -> None:
        """
        Replace the remote record; fields not given are unset.

        Values are plain Python values; pass a TriState to be explicit.
        """
        self._remote[identity] = {
            spec.name: UNSET for spec in self._schema.declared_fields()
        }
        self.apply_drift(identity, **values)

    def apply_drift(self, identity: str, **values: Any) -> None:
        """Change individual remote fields behind the engine's back."""
        remote = self._remote.setdefault(
            identity, {spec.name: UNSET for spec in self._schema.declared_fields()}
        )
        for name, value in values.items():
            spec = self._schema.field(name)
            if not spec.is_declared:
                raise KeyError(f"{name} is not a declared field")
            remote[name] = _detached(value) if isinstance(value, TriState) else TriState.from_optional(value)

    def _maybe_fail(self, operation: str, identity: str = "") -> None:
        message = self._forced_errors.pop(operation, None)
        if message is not None:
            raise BackendError(
                f"{operation} failed: {message}",
                operation=operation,
                identity=identity or None,
            )

    # --------------------------------------------------------
    # AUTHENTICATION
    # --------------------------------------------------------

    def verify_auth(self) -> None:
        if not self._config.api_key:
            raise ConfigurationError(
                "API key is required",
                config_key="api_key",
                code="CFG_MISSING_API_KEY",
            )
        logger.debug("Successfully authenticated with mock check backend")

    # --------------------------------------------------------
    # CHECK OPERATIONS
    # --------------------------------------------------------

    def create(self, draft) -> str:
        require_name(draft, "create")
        self._maybe_fail("create")

        identity = self._identities.for_record(draft)
        self._remote[identity] = {
            spec.name: _detached(getattr(draft, spec.name))
            for spec in self._schema.declared_fields()
        }
        self.calls.append(("create", identity))

        logger.debug(
            f"Created {self._schema.type_name} {identity}: "
            f"{mask_record(self._schema, draft.set_values())}"
        )
        return identity

    def read(self, identity: str):
        require_identity(identity, "read")
        self._maybe_fail("read", identity)
        self.calls.append(("read", identity))

        if identity in self._remote:
            values = {name: _detached(v) for name, v in self._remote[identity].items()}
        elif self._mock_config.canned_reads:
            canned = CANNED_RECORDS[self._schema.kind](identity)
            values = {
                spec.name: TriState.from_optional(canned.get(spec.name))
                for spec in self._schema.declared_fields()
            }
        else:
            raise BackendError(
                f"check {identity} not found",
                operation="read",
                identity=identity,
                code="BACKEND_NOT_FOUND",
            )

        if not self._mock_config.echo_secrets:
            for spec in self._schema.sensitive_fields():
                values[spec.name] = UNSET

        values["id"] = TriState.of(identity)
        values["last_result"] = TriState.of(self._mock_config.reported_result)
        values["last_check_time"] = TriState.of(self._clock.format_rfc3339())

        logger.debug(f"Read {self._schema.type_name} {identity}")
        return self._schema.new_record(**values)

    def update(self, record) -> None:
        identity = require_identity(record.id.get(), "update")
        require_name(record, "update")
        self._maybe_fail("update", identity)
        self.calls.append(("update", identity))

        self._remote[identity] = {
            spec.name: _detached(getattr(record, spec.name))
            for spec in self._schema.declared_fields()
        }
        logger.debug(f"Updated {self._schema.type_name} {identity}")

    def delete(self, identity: str) -> None:
        require_identity(identity, "delete")
        self._maybe_fail("delete", identity)
        self.calls.append(("delete", identity))

        self._remote.pop(identity, None)
        logger.debug(f"Deleted {self._schema.type_name} {identity}")

    # --------------------------------------------------------
    # RESULTS
    # --------------------------------------------------------

    def list_results(self, check_identity: str, limit: int) -> List[CheckResult]:
        require_identity(check_identity, "list_results")
        self._maybe_fail("list_results", check_identity)
        self.calls.append(("list_results", check_identity))

        results = self._synthesizer.synthesize(check_identity, limit)
        logger.debug(f"Retrieved {len(results)} results for check {check_identity}")
        return results
