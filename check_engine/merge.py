"""
Check Engine - Null-Preserving Merge Engine.

============================================================
PURPOSE
============================================================
Combines plan, prior state and backend read results into the
record to persist.

POLICY (per field role, see schema.py):

CREATE
    draft    = caller-declared fields only, no defaults
    persist  = declared fields exactly as declared
               + identity assigned by the backend
               + last_result = PENDING, last_check_time = now

READ
    identity       -> carried from prior state
    declared       -> fetched if set, else prior (drift overwrite)
    sensitive      -> SensitiveFieldGuard (only fills an unset prior)
    computed       -> fetched, unconditionally

UPDATE
    identity       -> prior state, never the plan
    declared       -> plan (full replace, unset stays unset)
    last_check_time-> now
    last_result    -> prior state

CRITICAL INVARIANT:
    "Unset and empty are different values at every layer."

Inputs are never mutated; every function returns a new record.

============================================================
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .clock import ClockProtocol, get_clock
from .guard import SensitiveFieldGuard
from .logging_utils import MASK
from .schema import CheckSchema
from .types import CheckStatus, TriState, UNSET


logger = logging.getLogger(__name__)


# ============================================================
# DRIFT TYPES
# ============================================================

class DriftResolution(Enum):
    """How a drifted field was resolved during Read."""

    OVERWRITTEN = "OVERWRITTEN"
    """Backend value replaced the persisted value."""

    GUARDED = "GUARDED"
    """Persisted sensitive value kept despite a different backend value."""


@dataclass(frozen=True)
class FieldDrift:
    """A declared field whose backend value differed from prior state."""

    field: str
    """Field name."""

    prior: TriState[Any]
    """Persisted value before the Read."""

    fetched: TriState[Any]
    """Value reported by the backend."""

    resolution: DriftResolution

    sensitive: bool = False

    def describe(self) -> str:
        prior = MASK if self.sensitive and self.prior.is_set else self.prior
        fetched = MASK if self.sensitive and self.fetched.is_set else self.fetched
        return f"{self.field}: {prior} -> {fetched} ({self.resolution.value})"


@dataclass
class ReadMerge:
    """Result of a Read merge."""

    record: Any
    """Record to persist."""

    drift: List[FieldDrift] = field(default_factory=list)

    @property
    def has_drift(self) -> bool:
        return bool(self.drift)

    def drifted_fields(self) -> List[str]:
        return [d.field for d in self.drift]


# ============================================================
# MERGE ENGINE
# ============================================================

class MergeEngine:
    """
    Field-by-field reconciliation, generic over a CheckSchema.

    Holds no state between calls.
    """

    def __init__(
        self,
        schema: CheckSchema,
        clock: Optional[ClockProtocol] = None,
        guard: Optional[SensitiveFieldGuard] = None,
    ):
        self._schema = schema
        self._clock = clock or get_clock()
        self._guard = guard or SensitiveFieldGuard()

    @property
    def schema(self) -> CheckSchema:
        return self._schema

    # --------------------------------------------------------
    # CREATE
    # --------------------------------------------------------

    def build_draft(self, plan):
        """
        Copy only the caller-declared fields into a fresh record.

        Identity and computed fields are left unset; no defaults
        are filled in.
        """
        values: Dict[str, TriState] = {
            spec.name: getattr(plan, spec.name)
            for spec in self._schema.declared_fields()
        }
        return self._schema.new_record(**values)

    def merge_create(self, plan, identity: str):
        """
        Build the record persisted after a successful create.

        Args:
            plan: Caller's plan
            identity: Identity assigned by the backend
        """
        values: Dict[str, TriState] = {
            spec.name: getattr(plan, spec.name)
            for spec in self._schema.declared_fields()
        }
        values[self._schema.identity_field().name] = TriState.of(identity)
        values["last_result"] = TriState.of(CheckStatus.PENDING.value)
        values["last_check_time"] = TriState.of(self._clock.format_rfc3339())
        return self._schema.new_record(**values)

    # --------------------------------------------------------
    # READ
    # --------------------------------------------------------

    def merge_read(self, prior, fetched) -> ReadMerge:
        """
        Reconcile prior state with a backend read.

        Args:
            prior: Persisted record
            fetched: Record returned by the backend

        Returns:
            ReadMerge with the record to persist and detected drift
        """
        values: Dict[str, TriState] = {}
        drift: List[FieldDrift] = []

        identity_name = self._schema.identity_field().name
        values[identity_name] = getattr(prior, identity_name)

        for spec in self._schema.declared_fields():
            old = getattr(prior, spec.name)
            new = getattr(fetched, spec.name)

            if spec.sensitive:
                admitted = self._guard.admit(old, new)
                values[spec.name] = self._guard.resolve(spec.name, old, new)
                if new.is_set and new != old:
                    resolution = DriftResolution.OVERWRITTEN if admitted else DriftResolution.GUARDED
                    drift.append(FieldDrift(spec.name, old, new, resolution, sensitive=True))
                continue

            if new.is_unset:
                values[spec.name] = old
                continue

            values[spec.name] = new
            if new != old:
                drift.append(FieldDrift(spec.name, old, new, DriftResolution.OVERWRITTEN))

        for spec in self._schema.computed_fields():
            values[spec.name] = getattr(fetched, spec.name)

        for d in drift:
            logger.info(f"Drift on {self._schema.type_name} {values[identity_name].get()}: {d.describe()}")

        return ReadMerge(record=self._schema.new_record(**values), drift=drift)

    # --------------------------------------------------------
    # UPDATE
    # --------------------------------------------------------

    def build_update(self, plan, prior):
        """
        Build the record sent to the backend for an update.

        Identity comes from prior state; everything declared comes
        from the plan; computed fields are carried from prior state.
        """
        identity_name = self._schema.identity_field().name
        plan_identity = getattr(plan, identity_name)
        prior_identity = getattr(prior, identity_name)
        if plan_identity.is_set and plan_identity != prior_identity:
            logger.warning(
                f"Ignoring plan identity {plan_identity.get()!r} for "
                f"{self._schema.type_name} {prior_identity.get()!r}"
            )

        values: Dict[str, TriState] = {identity_name: prior_identity}
        for spec in self._schema.declared_fields():
            values[spec.name] = getattr(plan, spec.name)
        for spec in self._schema.computed_fields():
            values[spec.name] = getattr(prior, spec.name)
        return self._schema.new_record(**values)

    def stamp_update(self, record):
        """Record to persist once the backend accepted `record` from build_update()."""
        return record.with_values(
            last_check_time=TriState.of(self._clock.format_rfc3339()),
        )

    # --------------------------------------------------------
    # IMPORT
    # --------------------------------------------------------

    def import_stub(self, identity: str):
        """State holding only an identity, used as prior state for an import read."""
        identity_name = self._schema.identity_field().name
        values: Dict[str, TriState] = {spec.name: UNSET for spec in self._schema.fields}
        values[identity_name] = TriState.of(identity)
        return self._schema.new_record(**values)
