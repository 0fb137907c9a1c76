"""
Resource Service Tests.

============================================================
PURPOSE
============================================================
Lifecycle tests through CheckResourceService with the mock
backend.

TEST CATEGORIES:
- End-to-end: Create -> Read -> Update -> Delete
- Validation: rejected before the backend is called
- Backend failures: surfaced, state untouched
- Import

============================================================
"""

import logging
import re

import pytest

from check_engine.adapters import MockCheckAdapter
from check_engine.errors import BackendError, ConfigurationError, ValidationError
from check_engine.merge import DriftResolution
from check_engine.schema import API_CHECK_SCHEMA, HTTP_CHECK_SCHEMA
from check_engine.service import CheckResourceService
from check_engine.types import TriState, UNSET


class ExplodingReadAdapter(MockCheckAdapter):
    """Mock adapter whose reads fail with a transport error."""

    def read(self, identity):
        raise ConnectionError("connection reset by peer")


class NoIdentityAdapter(MockCheckAdapter):
    """Mock adapter whose creates report an empty identity."""

    def create(self, draft):
        super().create(draft)
        return ""


# ============================================================
# END-TO-END TESTS
# ============================================================

class TestLifecycle:
    """End-to-end lifecycle through the service."""

    def test_create_then_read_scenario(self, http_service, http_adapter, http_plan):
        """Test create persists the plan and read folds in backend drift."""
        state = http_service.create(http_plan)

        identity = state.id.get()
        assert re.match(r"^hc-[0-9a-f]{16}$", identity)
        assert state.last_result.get() == "PENDING"
        assert state.last_check_time.get() == "2026-01-15T12:00:00Z"
        assert state.method.get() == "POST"
        assert state.body == TriState.of("")

        http_adapter.set_remote(identity, method="GET", regions=["us-east-1"])
        outcome = http_service.read(state)
        refreshed = outcome.record

        assert refreshed.id.get() == identity
        assert refreshed.method.get() == "GET"
        assert refreshed.regions.get() == ["us-east-1"]
        assert refreshed.name.get() == "Homepage"
        assert refreshed.url.get() == "https://example.com"
        assert refreshed.body == TriState.of("")
        assert refreshed.expected_response is UNSET
        assert refreshed.last_result.get() == "SUCCESS"
        assert outcome.drifted_fields() == ["method", "regions"]

    def test_reread_is_idempotent(self, http_service, http_plan):
        """Test a second read with no backend change reports no drift."""
        state = http_service.create(http_plan)

        first = http_service.read(state)
        second = http_service.read(first.record)

        assert second.record == first.record
        assert not second.has_drift

    def test_update_keeps_identity(self, http_service, http_adapter, http_plan, clock):
        """Test update applies the plan under the prior identity."""
        state = http_service.create(http_plan)
        identity = state.id.get()
        clock.advance(hours=1)

        plan = http_plan.with_values(
            id=TriState.of("hc-ffffffffffffffff"),
            name=TriState.of("Homepage v2"),
            body=UNSET,
        )
        updated = http_service.update(plan, state)

        assert updated.id.get() == identity
        assert updated.name.get() == "Homepage v2"
        assert updated.body is UNSET
        assert updated.last_result.get() == "PENDING"
        assert updated.last_check_time.get() == "2026-01-15T13:00:00Z"
        assert http_adapter.remote_values(identity)["name"].get() == "Homepage v2"

    def test_update_logs_identity_mismatch_once(self, http_service, http_plan, caplog):
        """Test an ignored plan identity is warned about a single time."""
        state = http_service.create(http_plan)
        plan = http_plan.with_values(id=TriState.of("hc-ffffffffffffffff"))

        with caplog.at_level(logging.WARNING, logger="check_engine.merge"):
            http_service.update(plan, state)

        warnings = [r for r in caplog.records if "Ignoring plan identity" in r.getMessage()]
        assert len(warnings) == 1

    def test_state_detached_from_backend(self, http_service, http_adapter, http_plan):
        """Test mutating persisted state never changes what the backend reports."""
        state = http_service.create(http_plan.with_values(regions=TriState.of(["a"])))

        state.regions.value.append("b")

        assert http_adapter.remote_values(state.id.get())["regions"].get() == ["a"]
        assert http_service.read(state).record.regions.get() == ["a"]

    def test_delete(self, http_service, http_adapter, http_plan):
        """Test delete removes the check from the backend."""
        state = http_service.create(http_plan)

        http_service.delete(state)

        assert not http_adapter.has_check(state.id.get())

    def test_inputs_not_mutated(self, http_service, http_plan):
        """Test the service never changes the caller's objects."""
        before = http_plan.values()

        state = http_service.create(http_plan)
        http_service.read(state)

        assert http_plan.values() == before

    def test_adapter_kind_must_match(self, api_adapter, clock):
        """Test a service refuses an adapter for another kind."""
        with pytest.raises(ConfigurationError):
            CheckResourceService(HTTP_CHECK_SCHEMA, api_adapter, clock)


# ============================================================
# SENSITIVE FIELD TESTS
# ============================================================

class TestSensitiveLifecycle:
    """Secrets through create and read."""

    def test_hidden_secret_kept(self, api_service, api_plan):
        """Test a backend that hides the secret leaves state intact."""
        state = api_service.create(api_plan)

        outcome = api_service.read(state)

        assert outcome.record.auth_value.get() == "token-abc-123456789"
        assert not outcome.has_drift

    def test_changed_secret_guarded(self, echoing_api_adapter, api_plan, clock):
        """Test a changed backend secret never replaces the persisted one."""
        service = CheckResourceService(API_CHECK_SCHEMA, echoing_api_adapter, clock)
        state = service.create(api_plan)
        echoing_api_adapter.apply_drift(state.id.get(), auth_value="rotated-elsewhere")

        outcome = service.read(state)

        assert outcome.record.auth_value.get() == "token-abc-123456789"
        assert outcome.drift[0].field == "auth_value"
        assert outcome.drift[0].resolution == DriftResolution.GUARDED


# ============================================================
# VALIDATION TESTS
# ============================================================

class TestServiceValidation:
    """Validation happens before any backend call."""

    def test_create_without_name(self, http_service, http_adapter):
        """Test create rejects a plan without a name."""
        plan = HTTP_CHECK_SCHEMA.record_from_values(url="https://example.com")

        with pytest.raises(ValidationError) as exc_info:
            http_service.create(plan)

        assert exc_info.value.code == "VAL_MISSING_NAME"
        assert http_adapter.calls == []

    def test_create_with_bad_value(self, http_service, http_adapter):
        """Test create rejects wrongly typed values."""
        plan = HTTP_CHECK_SCHEMA.record_from_values(name="a", timeout="fast")

        with pytest.raises(ValidationError):
            http_service.create(plan)

        assert http_adapter.calls == []

    @pytest.mark.parametrize("operation", ["read", "delete"])
    def test_state_without_identity(self, http_service, operation):
        """Test operations on state without an identity are rejected."""
        state = HTTP_CHECK_SCHEMA.record_from_values(name="a")

        with pytest.raises(ValidationError) as exc_info:
            getattr(http_service, operation)(state)

        assert exc_info.value.code == "VAL_MISSING_IDENTITY"

    def test_update_without_name(self, http_service, http_plan):
        """Test update rejects a plan with an emptied name."""
        state = http_service.create(http_plan)

        with pytest.raises(ValidationError):
            http_service.update(http_plan.with_values(name=TriState.of("")), state)

    def test_import_empty_identity(self, http_service):
        with pytest.raises(ValidationError):
            http_service.import_state("")


# ============================================================
# BACKEND FAILURE TESTS
# ============================================================

class TestBackendFailures:
    """Backend failures surface with operation and identity."""

    def test_create_failure(self, http_service, http_adapter, http_plan):
        """Test a failed create raises and stores nothing."""
        http_adapter.force_next_error("create")

        with pytest.raises(BackendError) as exc_info:
            http_service.create(http_plan)

        assert exc_info.value.operation == "create"
        assert exc_info.value.code == "BACKEND_CREATE_FAILED"

    def test_update_failure_leaves_state(self, http_service, http_adapter, http_plan):
        """Test a failed update changes neither state nor backend."""
        state = http_service.create(http_plan)
        identity = state.id.get()
        before = state.values()
        http_adapter.force_next_error("update", "503 Service Unavailable")

        with pytest.raises(BackendError) as exc_info:
            http_service.update(http_plan.with_values(name=TriState.of("New")), state)

        assert exc_info.value.operation == "update"
        assert exc_info.value.identity == identity
        assert state.values() == before
        assert http_adapter.remote_values(identity)["name"].get() == "Homepage"

    def test_delete_failure_keeps_check(self, http_service, http_adapter, http_plan):
        state = http_service.create(http_plan)
        http_adapter.force_next_error("delete")

        with pytest.raises(BackendError):
            http_service.delete(state)

        assert http_adapter.has_check(state.id.get())

    def test_invalid_read_response(self, http_service, http_adapter, http_plan):
        """Test a malformed backend record is a backend failure, not a validation one."""
        state = http_service.create(http_plan)
        identity = state.id.get()
        http_adapter.apply_drift(identity, interval=-5)

        with pytest.raises(BackendError) as exc_info:
            http_service.read(state)

        error = exc_info.value
        assert error.operation == "read"
        assert error.identity == identity
        assert error.code == "BACKEND_READ_FAILED"
        assert isinstance(error.cause, ValidationError)
        assert "interval" in error.message

    def test_empty_identity_from_create(self, provider_config, clock, http_plan):
        """Test a create that returns no identity is a backend failure."""
        adapter = NoIdentityAdapter(HTTP_CHECK_SCHEMA, provider_config, clock=clock)
        service = CheckResourceService(HTTP_CHECK_SCHEMA, adapter, clock)

        with pytest.raises(BackendError) as exc_info:
            service.create(http_plan)

        assert exc_info.value.operation == "create"
        assert exc_info.value.code == "BACKEND_CREATE_FAILED"

    def test_unexpected_exception_wrapped(self, provider_config, clock, http_plan):
        """Test arbitrary adapter exceptions become BackendError."""
        adapter = ExplodingReadAdapter(HTTP_CHECK_SCHEMA, provider_config, clock=clock)
        service = CheckResourceService(HTTP_CHECK_SCHEMA, adapter, clock)
        state = service.create(http_plan)

        with pytest.raises(BackendError) as exc_info:
            service.read(state)

        error = exc_info.value
        assert error.operation == "read"
        assert error.identity == state.id.get()
        assert error.code == "BACKEND_READ_FAILED"
        assert isinstance(error.cause, ConnectionError)
        assert isinstance(error.__cause__, ConnectionError)


# ============================================================
# IMPORT TESTS
# ============================================================

class TestImport:
    """Tests for import by identity."""

    def test_import_tracked_check(self, http_service, http_plan):
        """Test importing an existing check yields its full state."""
        state = http_service.create(http_plan)

        imported = http_service.import_state(state.id.get())

        assert imported.record.id == state.id
        assert imported.record.name.get() == "Homepage"
        assert imported.record.body == TriState.of("")

    def test_import_canned_api_check(self, api_service):
        """Test importing an unknown API check leaves the secret unset."""
        imported = api_service.import_state("ac-0123456789abcdef")

        record = imported.record
        assert record.id.get() == "ac-0123456789abcdef"
        assert record.endpoint.get() == "https://api.example.com/v1/status"
        assert record.response_validation.get() == ["$.status == 'up'", "$.version != null"]
        assert record.auth_value is UNSET
