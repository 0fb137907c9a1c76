"""
Check Engine - Backend Adapter Base.

============================================================
PURPOSE
============================================================
Abstract interface for check backends.

CONTRACT (per resource kind):
    create(draft)                    -> identity
    read(identity)                   -> full record
    update(record)                   -> None
    delete(identity)                 -> None
    list_results(check_id, limit)    -> [CheckResult]

Every operation raises ValidationError for an empty identity
or an empty/unset name, and BackendError when the backend
itself fails.

DESIGN PRINCIPLES:
- Backend-agnostic interface
- Provider configuration passed to the constructor
- Fully testable with the mock adapter

============================================================
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from ..config import ProviderConfig
from ..schema import CheckSchema
from ..types import CheckResult


logger = logging.getLogger(__name__)


class CheckAdapter(ABC):
    """
    Abstract base class for check backends.

    One adapter instance serves one resource kind.
    """

    def __init__(self, schema: CheckSchema, config: ProviderConfig):
        self._schema = schema
        self._config = config

    @property
    def schema(self) -> CheckSchema:
        return self._schema

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    @abstractmethod
    def backend_id(self) -> str:
        """Backend identifier (e.g., 'mock')."""
        pass

    # --------------------------------------------------------
    # AUTHENTICATION
    # --------------------------------------------------------

    @abstractmethod
    def verify_auth(self) -> None:
        """
        Verify the configured credentials.

        Raises:
            ConfigurationError: If credentials are missing or rejected
        """
        pass

    # --------------------------------------------------------
    # CHECK OPERATIONS
    # --------------------------------------------------------

    @abstractmethod
    def create(self, draft) -> str:
        """
        Create a check from a draft holding only declared fields.

        Returns:
            Identity assigned by the backend
        """
        pass

    @abstractmethod
    def read(self, identity: str):
        """
        Read a check.

        Returns:
            Full record; fields the backend has no opinion on are unset
        """
        pass

    @abstractmethod
    def update(self, record) -> None:
        """Apply a complete declared record to an existing check."""
        pass

    @abstractmethod
    def delete(self, identity: str) -> None:
        """Delete a check."""
        pass

    # --------------------------------------------------------
    # RESULTS
    # --------------------------------------------------------

    @abstractmethod
    def list_results(self, check_identity: str, limit: int) -> List[CheckResult]:
        """
        List historical results for a check, newest first.
        """
        pass
