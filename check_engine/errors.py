"""
Check Engine - Error Taxonomy.

============================================================
PURPOSE
============================================================
Error classification for check lifecycle failures.

ERROR CATEGORIES:
1. Validation Errors - Caller supplied an empty required field
2. Backend Errors - The backend adapter failed
3. Configuration Errors - Provider configuration is unusable
4. State Store Errors - Persisted state could not be read/written

RETRY POLICY:
- Nothing is retried by the engine.
- Every error is returned to the immediate caller, which decides
  whether to abort the larger apply sequence.

============================================================
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================
# ERROR CATEGORIES
# ============================================================

class ErrorCategory(Enum):
    """Error category classification."""

    VALIDATION = "VALIDATION"
    """Caller input failed validation."""

    BACKEND = "BACKEND"
    """Backend adapter operation failed."""

    CONFIGURATION = "CONFIGURATION"
    """Provider configuration failed."""

    STATE = "STATE"
    """State store failure."""


class ErrorSeverity(Enum):
    """Error severity levels."""

    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ============================================================
# ERROR CODE REGISTRY
# ============================================================

@dataclass(frozen=True)
class ErrorCodeInfo:
    """Information about an error code."""

    code: str
    category: ErrorCategory
    severity: ErrorSeverity
    description: str


ERROR_CODES: Dict[str, ErrorCodeInfo] = {
    # ========== VALIDATION ERRORS ==========
    "VAL_MISSING_NAME": ErrorCodeInfo(
        code="VAL_MISSING_NAME",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.ERROR,
        description="Check name is required",
    ),
    "VAL_MISSING_IDENTITY": ErrorCodeInfo(
        code="VAL_MISSING_IDENTITY",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.ERROR,
        description="Check ID is required",
    ),
    "VAL_INVALID_FIELD": ErrorCodeInfo(
        code="VAL_INVALID_FIELD",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.ERROR,
        description="One or more fields hold a value of the wrong type",
    ),
    "VAL_INVALID_LIMIT": ErrorCodeInfo(
        code="VAL_INVALID_LIMIT",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.ERROR,
        description="Result limit must be a non-negative integer",
    ),
    "VAL_INVALID_TIMESTAMP": ErrorCodeInfo(
        code="VAL_INVALID_TIMESTAMP",
        category=ErrorCategory.VALIDATION,
        severity=ErrorSeverity.ERROR,
        description="Timestamp is not in RFC 3339 format",
    ),

    # ========== BACKEND ERRORS ==========
    "BACKEND_CREATE_FAILED": ErrorCodeInfo(
        code="BACKEND_CREATE_FAILED",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Backend could not create the check",
    ),
    "BACKEND_READ_FAILED": ErrorCodeInfo(
        code="BACKEND_READ_FAILED",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Backend could not read the check",
    ),
    "BACKEND_UPDATE_FAILED": ErrorCodeInfo(
        code="BACKEND_UPDATE_FAILED",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Backend could not update the check",
    ),
    "BACKEND_DELETE_FAILED": ErrorCodeInfo(
        code="BACKEND_DELETE_FAILED",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Backend could not delete the check",
    ),
    "BACKEND_LIST_RESULTS_FAILED": ErrorCodeInfo(
        code="BACKEND_LIST_RESULTS_FAILED",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Backend could not list check results",
    ),
    "BACKEND_NOT_FOUND": ErrorCodeInfo(
        code="BACKEND_NOT_FOUND",
        category=ErrorCategory.BACKEND,
        severity=ErrorSeverity.ERROR,
        description="Check does not exist on the backend",
    ),

    # ========== CONFIGURATION ERRORS ==========
    "CFG_MISSING_API_KEY": ErrorCodeInfo(
        code="CFG_MISSING_API_KEY",
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        description="The API key is required to authenticate",
    ),
    "CFG_UNSUPPORTED": ErrorCodeInfo(
        code="CFG_UNSUPPORTED",
        category=ErrorCategory.CONFIGURATION,
        severity=ErrorSeverity.CRITICAL,
        description="Unsupported resource type or backend",
    ),

    # ========== STATE ERRORS ==========
    "STATE_NOT_FOUND": ErrorCodeInfo(
        code="STATE_NOT_FOUND",
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.ERROR,
        description="No persisted state for this check",
    ),
    "STATE_CORRUPT": ErrorCodeInfo(
        code="STATE_CORRUPT",
        category=ErrorCategory.STATE,
        severity=ErrorSeverity.CRITICAL,
        description="Persisted state could not be decoded",
    ),
}


def get_error_info(code: str) -> Optional[ErrorCodeInfo]:
    """Look up an error code."""
    return ERROR_CODES.get(code)


# ============================================================
# EXCEPTIONS
# ============================================================

class CheckEngineError(Exception):
    """
    Base exception for all check engine errors.

    All exceptions carry:
    - code: registry code (see ERROR_CODES)
    - severity: for alerting
    - context: for debugging
    - timestamp: when the error occurred
    """

    default_code: str = ""
    default_severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)

        self.message = message
        self.code = code or self.default_code
        info = get_error_info(self.code)
        self.severity = severity or (info.severity if info else self.default_severity)
        self.context = context or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause is not None:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def category(self) -> Optional[ErrorCategory]:
        info = get_error_info(self.code)
        return info.category if info else None

    @property
    def is_retryable(self) -> bool:
        """The engine never retries; callers decide."""
        return False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/storage."""
        return {
            "type": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }


class ValidationError(CheckEngineError):
    """Caller supplied an empty or malformed required field."""

    default_code = "VAL_INVALID_FIELD"

    def __init__(
        self,
        message: str,
        fields: Optional[List[str]] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or {}
        self.fields = list(fields or [])
        if self.fields:
            context["fields"] = self.fields
        super().__init__(message, context=context, **kwargs)


class BackendError(CheckEngineError):
    """
    The backend adapter failed.

    Carries the operation and identity so the caller can report
    which resource was affected.
    """

    default_code = "BACKEND_READ_FAILED"

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        identity: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or {}
        self.operation = operation
        self.identity = identity
        if operation:
            context["operation"] = operation
        if identity:
            context["identity"] = identity
        if "code" not in kwargs and operation:
            code = f"BACKEND_{operation.upper()}_FAILED"
            if code in ERROR_CODES:
                kwargs["code"] = code
        super().__init__(message, context=context, **kwargs)


class ConfigurationError(CheckEngineError):
    """Provider configuration is missing or invalid."""

    default_code = "CFG_UNSUPPORTED"
    default_severity = ErrorSeverity.CRITICAL

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", None) or {}
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context, **kwargs)


class StateStoreError(CheckEngineError):
    """Persisted state could not be loaded or saved."""

    default_code = "STATE_NOT_FOUND"
