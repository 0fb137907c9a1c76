"""
Check Engine - ORM Models.

============================================================
PURPOSE
============================================================
SQLAlchemy ORM model for persisted check state.

TABLES:
- check_states: One row per managed check

The attributes column holds the serialized record (see
serialization.py); unset fields are absent from it.

============================================================
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================
# BASE
# ============================================================

class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass


# ============================================================
# CHECK STATE MODEL
# ============================================================

class CheckStateModel(Base):
    """
    Persisted state of one check.
    """

    __tablename__ = "check_states"

    identity: Mapped[str] = mapped_column(String(64), primary_key=True)
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Serialized record
    attributes: Mapped[str] = mapped_column(Text, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("ix_check_states_kind_name", "kind", "name"),
    )

    def __repr__(self) -> str:
        return f"<CheckStateModel {self.kind} {self.identity}>"
