"""
Check Engine Package.

============================================================
PURPOSE
============================================================
Reconciles declared monitoring checks (HTTP and API checks)
with a remote check service.

CRITICAL PRINCIPLE:
    "A field the caller did not mention is not the same as a
     field the caller explicitly cleared."

AUTHORITY BOUNDARIES:
    CAN:
        - Create, read, update, delete and import checks
        - Detect and report drift
        - List historical results for a check

    MUST NOT:
        - Invent defaults for fields the caller did not declare
        - Overwrite a persisted sensitive value with a backend value
        - Retry failed backend calls

============================================================
MODULES
============================================================
- types: TriState, check records, result records
- schema: Per-kind field tables
- errors: Error taxonomy and codes
- clock: Injectable clock
- identity: Identity generator
- validation: Input validation
- guard: Sensitive field guard
- merge: Null-preserving merge engine
- results: Result-set synthesizer
- adapters: Backend adapters (Mock)
- service: Resource lifecycle service
- datasource: check_results data source
- provider: Provider bootstrap
- models / repository / database / serialization: State store
- cli: Command-line orchestrator

============================================================
"""

# ============================================================
# TYPES
# ============================================================
from .types import (
    TriState,
    UNSET,
    CheckKind,
    CheckStatus,
    ResultStatus,
    HTTPCheck,
    APICheck,
    CheckResult,
)

# ============================================================
# SCHEMA
# ============================================================
from .schema import (
    FieldRole,
    ValueKind,
    FieldSpec,
    CheckSchema,
    HTTP_CHECK_SCHEMA,
    API_CHECK_SCHEMA,
    get_schema,
)

# ============================================================
# ERRORS
# ============================================================
from .errors import (
    CheckEngineError,
    ValidationError,
    BackendError,
    ConfigurationError,
    StateStoreError,
)

# ============================================================
# CONFIG
# ============================================================
from .config import (
    ProviderConfig,
    ResultsConfig,
    StateStoreConfig,
    LoggingConfig,
    EngineConfig,
)

# ============================================================
# CORE
# ============================================================
from .clock import ClockProtocol, SystemClock, MockClock
from .identity import IdentityGenerator
from .guard import SensitiveFieldGuard
from .merge import MergeEngine, ReadMerge, FieldDrift, DriftResolution
from .results import ResultSynthesizer

# ============================================================
# ADAPTERS
# ============================================================
from .adapters import CheckAdapter, MockCheckAdapter, MockConfig, AdapterFactory

# ============================================================
# SERVICES
# ============================================================
from .service import CheckResourceService
from .datasource import CheckResultsDataSource, CheckResultsData
from .provider import CheckProvider, ProviderContext


__all__ = [
    # Types
    "TriState",
    "UNSET",
    "CheckKind",
    "CheckStatus",
    "ResultStatus",
    "HTTPCheck",
    "APICheck",
    "CheckResult",
    # Schema
    "FieldRole",
    "ValueKind",
    "FieldSpec",
    "CheckSchema",
    "HTTP_CHECK_SCHEMA",
    "API_CHECK_SCHEMA",
    "get_schema",
    # Errors
    "CheckEngineError",
    "ValidationError",
    "BackendError",
    "ConfigurationError",
    "StateStoreError",
    # Config
    "ProviderConfig",
    "ResultsConfig",
    "StateStoreConfig",
    "LoggingConfig",
    "EngineConfig",
    # Core
    "ClockProtocol",
    "SystemClock",
    "MockClock",
    "IdentityGenerator",
    "SensitiveFieldGuard",
    "MergeEngine",
    "ReadMerge",
    "FieldDrift",
    "DriftResolution",
    "ResultSynthesizer",
    # Adapters
    "CheckAdapter",
    "MockCheckAdapter",
    "MockConfig",
    "AdapterFactory",
    # Services
    "CheckResourceService",
    "CheckResultsDataSource",
    "CheckResultsData",
    "CheckProvider",
    "ProviderContext",
]
