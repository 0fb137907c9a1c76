"""
Check Engine - Logging Utilities.

============================================================
PURPOSE
============================================================
Logging setup and secret masking for the engine.

SECURITY REQUIREMENTS
1. NEVER log raw credentials (auth_value, API keys)
2. Mask sensitive fields in any record dumped to a log
3. Mask sensitive headers (Authorization, X-API-KEY, ...)

============================================================
"""

import json
import logging
import sys
from typing import Any, Dict, Optional


logger = logging.getLogger(__name__)


SENSITIVE_HEADERS = {
    "authorization",
    "x-api-key",
    "api-key",
    "proxy-authorization",
    "cookie",
}

MASK = "***"


# ============================================================
# MASKING FUNCTIONS
# ============================================================

def mask_value(value: Any, show_chars: int = 4) -> str:
    """
    Mask a sensitive value, showing only the first few chars.

    Short values are fully masked.
    """
    if value is None:
        return MASK
    text = str(value)
    if len(text) <= show_chars * 2:
        return MASK
    return f"{text[:show_chars]}...{MASK}"


def mask_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Mask sensitive header values."""
    if not headers:
        return {}
    return {
        key: mask_value(value) if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def mask_record(schema, values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mask every sensitive field (and sensitive headers) of a record dict.

    Args:
        schema: CheckSchema of the record
        values: name -> plain value mapping (unset fields absent)
    """
    sensitive = {spec.name for spec in schema.sensitive_fields()}
    masked: Dict[str, Any] = {}
    for name, value in values.items():
        if name in sensitive:
            masked[name] = MASK
        elif name == "headers" and isinstance(value, dict):
            masked[name] = mask_headers(value)
        else:
            masked[name] = value
    return masked


# ============================================================
# LOGGING SETUP
# ============================================================

def setup_logging(level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name
        log_format: "text" or "json"

    Returns:
        The engine's package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if log_format == "json":
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "logger": "%(name)s",
                "message": "%(message)s",
            })
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    return logging.getLogger("check_engine")
