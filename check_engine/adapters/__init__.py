"""
Check Engine - Adapters Package.

============================================================
PURPOSE
============================================================
Backend adapter implementations.

AVAILABLE ADAPTERS:
- MockCheckAdapter: In-process backend for tests and local runs

UTILITIES:
- AdapterFactory: Factory for creating adapters

============================================================
"""

from .base import CheckAdapter
from .mock import MockCheckAdapter, MockConfig, CANNED_RECORDS
from .factory import AdapterFactory


__all__ = [
    "CheckAdapter",
    "MockCheckAdapter",
    "MockConfig",
    "CANNED_RECORDS",
    "AdapterFactory",
]
