"""
Check Engine - Sensitive Field Guard.

============================================================
PURPOSE
============================================================
Read-merge rule for credential fields.

RULE:
    A fetched value replaces the persisted value ONLY if the
    persisted value is unset. Once a secret has a value, reads
    never replace it.

The backend is not trusted to echo secrets back; a fetched
secret may be stale or synthetic.

============================================================
"""

import logging
from typing import Any

from .types import TriState


logger = logging.getLogger(__name__)


class SensitiveFieldGuard:
    """One-way overwrite protection for sensitive fields."""

    def admit(self, prior: TriState[Any], fetched: TriState[Any]) -> bool:
        """Whether the fetched value may replace the prior value."""
        return fetched.is_set and prior.is_unset

    def resolve(self, field_name: str, prior: TriState[Any], fetched: TriState[Any]) -> TriState[Any]:
        """
        Pick the value to persist for a sensitive field on Read.

        Args:
            field_name: Field being merged (for logging only)
            prior: Persisted value
            fetched: Value reported by the backend

        Returns:
            fetched if admitted, otherwise prior
        """
        if self.admit(prior, fetched):
            logger.debug(f"Sensitive field '{field_name}' populated from backend")
            return fetched
        if fetched.is_set and fetched != prior:
            logger.warning(
                f"Sensitive field '{field_name}' differs on backend; keeping persisted value"
            )
        return prior
