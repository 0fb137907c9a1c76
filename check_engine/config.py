"""
Check Engine - Configuration.

============================================================
PURPOSE
============================================================
All configuration for the Check Engine.

Configuration is passed explicitly into constructors; nothing
in the engine reads process-wide state on its own. The
from_env() constructors are for entry points (CLI) only.

ENVIRONMENT:
    CHECK_ENGINE_API_KEY       provider API key (required)
    CHECK_ENGINE_BASE_URL      provider base URL
    CHECK_ENGINE_BACKEND       backend adapter ("mock")
    CHECK_ENGINE_STATE_URL     SQLAlchemy URL of the state store
    CHECK_ENGINE_LOG_LEVEL     log level
    CHECK_ENGINE_LOG_FORMAT    "text" or "json"

A .env file in the working directory is loaded first.

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv


DEFAULT_BASE_URL = "https://api.cloudcanary.io/v1"
DEFAULT_RESULT_LIMIT = 10
DEFAULT_STATE_URL = "sqlite:///check_state.db"


def _load_env_file() -> None:
    """Load .env from the working directory (or a parent) without overriding."""
    load_dotenv(find_dotenv(usecwd=True))


# ============================================================
# PROVIDER CONFIGURATION
# ============================================================

@dataclass
class ProviderConfig:
    """
    Provider-level configuration handed to backend adapters.
    """

    api_key: str = ""
    """API key for the check service (sensitive)."""

    base_url: str = DEFAULT_BASE_URL
    """Base URL for the check service API."""

    timeout_seconds: float = 30.0
    """Transport timeout, owned by the adapter."""

    backend: str = "mock"
    """Backend adapter to use."""

    def __repr__(self) -> str:
        return (
            f"ProviderConfig(api_key='***', base_url={self.base_url!r}, "
            f"timeout_seconds={self.timeout_seconds}, backend={self.backend!r})"
        )

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        _load_env_file()
        return cls(
            api_key=os.getenv("CHECK_ENGINE_API_KEY", ""),
            base_url=os.getenv("CHECK_ENGINE_BASE_URL") or DEFAULT_BASE_URL,
            timeout_seconds=float(os.getenv("CHECK_ENGINE_TIMEOUT_SECONDS", "30")),
            backend=os.getenv("CHECK_ENGINE_BACKEND", "mock"),
        )


# ============================================================
# RESULTS CONFIGURATION
# ============================================================

@dataclass
class ResultsConfig:
    """Check-results data source configuration."""

    default_limit: int = DEFAULT_RESULT_LIMIT
    """Number of results returned when no limit is given."""


# ============================================================
# STATE STORE CONFIGURATION
# ============================================================

@dataclass
class StateStoreConfig:
    """Persisted-state store configuration (orchestrator side)."""

    database_url: str = DEFAULT_STATE_URL
    """SQLAlchemy database URL."""

    echo: bool = False
    """Log SQL statements."""

    @classmethod
    def from_env(cls) -> "StateStoreConfig":
        _load_env_file()
        return cls(database_url=os.getenv("CHECK_ENGINE_STATE_URL") or DEFAULT_STATE_URL)


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

@dataclass
class LoggingConfig:
    level: str = "INFO"
    log_format: str = "text"

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        _load_env_file()
        return cls(
            level=os.getenv("CHECK_ENGINE_LOG_LEVEL", "INFO"),
            log_format=os.getenv("CHECK_ENGINE_LOG_FORMAT", "text"),
        )


# ============================================================
# ENGINE CONFIGURATION
# ============================================================

@dataclass
class EngineConfig:
    """Top-level configuration bundle."""

    provider: ProviderConfig = field(default_factory=ProviderConfig)
    results: ResultsConfig = field(default_factory=ResultsConfig)
    state_store: StateStoreConfig = field(default_factory=StateStoreConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, state_url: Optional[str] = None) -> "EngineConfig":
        config = cls(
            provider=ProviderConfig.from_env(),
            state_store=StateStoreConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )
        if state_url:
            config.state_store.database_url = state_url
        return config
