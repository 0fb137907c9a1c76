"""
Check Engine - Resource Service.

============================================================
PURPOSE
============================================================
Create / Read / Update / Delete / Import for one resource kind.

FLOW:
    validate -> backend adapter -> merge engine

ATOMICITY:
    The merge only runs after the adapter call succeeds. On any
    error the caller's prior state object is returned untouched
    (inputs are never mutated), so the persisted state stays
    exactly as it was.

ERRORS:
- ValidationError on caller input propagates as-is
- A malformed adapter response is a BackendError, not a
  ValidationError
- Any other adapter failure surfaces as BackendError carrying
  the operation and identity
- Nothing is retried

============================================================
"""

import logging
from typing import Callable, Optional, TypeVar

from .adapters.base import CheckAdapter
from .clock import ClockProtocol, get_clock
from .errors import BackendError, CheckEngineError, ConfigurationError, ValidationError
from .merge import MergeEngine, ReadMerge
from .schema import CheckSchema
from .validation import require_identity, validate_plan, validate_record


logger = logging.getLogger(__name__)


R = TypeVar("R")


class CheckResourceService:
    """
    Lifecycle operations for one check kind.

    Holds no per-resource state; every call takes its full input
    (plan and/or prior state) and returns a full output.
    """

    def __init__(
        self,
        schema: CheckSchema,
        adapter: CheckAdapter,
        clock: Optional[ClockProtocol] = None,
        merge_engine: Optional[MergeEngine] = None,
    ):
        if adapter.schema.kind != schema.kind:
            raise ConfigurationError(
                f"Adapter serves {adapter.schema.type_name}, not {schema.type_name}",
                config_key="adapter",
            )
        self._schema = schema
        self._adapter = adapter
        self._clock = clock or get_clock()
        self._merge = merge_engine or MergeEngine(self._schema, self._clock)

    @property
    def schema(self) -> CheckSchema:
        return self._schema

    @property
    def adapter(self) -> CheckAdapter:
        return self._adapter

    # --------------------------------------------------------
    # ADAPTER CALLS
    # --------------------------------------------------------

    def _call(self, operation: str, identity: Optional[str], fn: Callable[[], R]) -> R:
        """Run an adapter call, normalising failures to BackendError."""
        try:
            return fn()
        except ValidationError:
            raise
        except BackendError as e:
            if e.operation is None or e.identity is None:
                raise BackendError(
                    e.message,
                    operation=e.operation or operation,
                    identity=e.identity or identity,
                    code=e.code,
                    cause=e.cause,
                ) from e
            raise
        except CheckEngineError:
            raise
        except Exception as e:
            target = f" ID {identity}" if identity else ""
            logger.error(f"Backend {operation} failed for {self._schema.type_name}{target}: {e}")
            raise BackendError(
                f"Could not {operation} {self._schema.type_name}{target}: {e}",
                operation=operation,
                identity=identity,
                cause=e,
            ) from e

    def _check_backend_output(
        self,
        operation: str,
        identity: Optional[str],
        check: Callable[[], None],
    ) -> None:
        """Validate what the adapter returned; a bad response is a backend failure."""
        try:
            check()
        except ValidationError as e:
            target = f" ID {identity}" if identity else ""
            logger.error(f"Backend {operation} returned an invalid {self._schema.type_name}{target}: {e.message}")
            raise BackendError(
                f"Backend returned an invalid {self._schema.type_name}{target} on {operation}: {e.message}",
                operation=operation,
                identity=identity,
                cause=e,
            ) from e

    # --------------------------------------------------------
    # CREATE
    # --------------------------------------------------------

    def create(self, plan):
        """
        Create a check.

        Args:
            plan: Caller's plan (identity and computed fields ignored)

        Returns:
            Record to persist: declared fields as planned, new identity,
            last_result PENDING, last_check_time now
        """
        validate_plan(self._schema, plan, "create")

        draft = self._merge.build_draft(plan)
        identity = self._call("create", None, lambda: self._adapter.create(draft))
        self._check_backend_output("create", None, lambda: require_identity(identity, "create"))

        state = self._merge.merge_create(plan, identity)
        logger.info(f"Created {self._schema.type_name} {identity} ('{plan.name.get()}')")
        return state

    # --------------------------------------------------------
    # READ
    # --------------------------------------------------------

    def read(self, state) -> ReadMerge:
        """
        Refresh persisted state from the backend.

        Returns:
            ReadMerge holding the refreshed record and detected drift
        """
        validate_record(self._schema, state)
        identity = require_identity(state.id.get(), "read")

        fetched = self._call("read", identity, lambda: self._adapter.read(identity))
        self._check_backend_output("read", identity, lambda: validate_record(self._schema, fetched))

        outcome = self._merge.merge_read(state, fetched)
        logger.info(
            f"Read {self._schema.type_name} {identity}: "
            f"{len(outcome.drift)} drifted field(s)"
        )
        return outcome

    # --------------------------------------------------------
    # UPDATE
    # --------------------------------------------------------

    def update(self, plan, state):
        """
        Apply a complete new declaration to an existing check.

        Identity always comes from prior state.
        """
        validate_record(self._schema, state)
        identity = require_identity(state.id.get(), "update")
        validate_plan(self._schema, plan, "update")

        record = self._merge.build_update(plan, state)
        self._call("update", identity, lambda: self._adapter.update(record))

        new_state = self._merge.stamp_update(record)
        logger.info(f"Updated {self._schema.type_name} {identity}")
        return new_state

    # --------------------------------------------------------
    # DELETE
    # --------------------------------------------------------

    def delete(self, state) -> None:
        """
        Delete a check. On success the caller drops the state.
        """
        identity = require_identity(state.id.get(), "delete")
        self._call("delete", identity, lambda: self._adapter.delete(identity))
        logger.info(f"Deleted {self._schema.type_name} {identity}")

    # --------------------------------------------------------
    # IMPORT
    # --------------------------------------------------------

    def import_state(self, identity: str) -> ReadMerge:
        """
        Adopt an existing check by identity.

        Starts from a state holding only the identity and reads it.
        """
        require_identity(identity, "import")
        stub = self._merge.import_stub(identity)
        logger.info(f"Importing {self._schema.type_name} {identity}")
        return self.read(stub)
