"""
Check Engine - State Repository.

============================================================
PURPOSE
============================================================
Database operations for persisted check state.

RESPONSIBILITIES:
- Save/load check records
- Remove state after a delete
- List managed checks

Writes are flushed; the enclosing session_scope() commits.

============================================================
"""

import logging
from typing import List, Optional

from sqlalchemy import select

from .errors import StateStoreError
from .models import CheckStateModel
from .schema import get_schema, schema_for_record
from .serialization import dumps, loads
from .validation import require_identity


logger = logging.getLogger(__name__)


# ============================================================
# STATE REPOSITORY
# ============================================================

class StateRepository:
    """
    Repository for persisted check state.
    """

    def __init__(self, session):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy session
        """
        self._session = session

    # --------------------------------------------------------
    # WRITES
    # --------------------------------------------------------

    def save(self, record) -> CheckStateModel:
        """
        Save or replace the state of a check.

        Args:
            record: Check record holding an identity
        """
        schema = schema_for_record(record)
        identity = require_identity(record.id.get(), "save")
        name = record.name.get("")

        existing = self._session.get(CheckStateModel, identity)
        if existing:
            if existing.kind != schema.type_name:
                raise StateStoreError(
                    f"state {identity} is a {existing.kind}, not a {schema.type_name}",
                    code="STATE_CORRUPT",
                )
            existing.name = name
            existing.attributes = dumps(record)
            model = existing
        else:
            model = CheckStateModel(
                identity=identity,
                kind=schema.type_name,
                name=name,
                attributes=dumps(record),
            )
            self._session.add(model)

        self._session.flush()
        logger.debug(f"Saved state for {schema.type_name} {identity}")
        return model

    def delete(self, identity: str) -> bool:
        """
        Remove the state of a check.

        Returns:
            True if a row was removed
        """
        model = self._session.get(CheckStateModel, identity)
        if model is None:
            return False
        self._session.delete(model)
        self._session.flush()
        logger.debug(f"Removed state for {model.kind} {identity}")
        return True

    # --------------------------------------------------------
    # READS
    # --------------------------------------------------------

    def get(self, identity: str):
        """Load a check record, or None if no state exists."""
        model = self._session.get(CheckStateModel, identity)
        if model is None:
            return None
        return loads(get_schema(model.kind), model.attributes)

    def require(self, identity: str):
        """
        Load a check record.

        Raises:
            StateStoreError: If no state exists for the identity
        """
        record = self.get(identity)
        if record is None:
            raise StateStoreError(
                f"no state for check {identity}",
                context={"identity": identity},
            )
        return record

    def list(self, kind: Optional[str] = None) -> List:
        """List records, optionally of one type name, ordered by identity."""
        stmt = select(CheckStateModel).order_by(CheckStateModel.identity)
        if kind:
            stmt = stmt.where(CheckStateModel.kind == kind)
        return [
            loads(get_schema(model.kind), model.attributes)
            for model in self._session.scalars(stmt)
        ]
