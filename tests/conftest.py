"""
Shared fixtures for the check engine tests.
"""

from datetime import datetime, timezone

import pytest

from check_engine.adapters import MockCheckAdapter, MockConfig
from check_engine.clock import MockClock
from check_engine.config import ProviderConfig, StateStoreConfig
from check_engine.database import create_state_engine, get_session_factory, init_db
from check_engine.schema import API_CHECK_SCHEMA, HTTP_CHECK_SCHEMA
from check_engine.service import CheckResourceService


FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return MockClock(FIXED_NOW)


@pytest.fixture
def provider_config():
    return ProviderConfig(api_key="test-api-key-123456")


@pytest.fixture
def http_adapter(provider_config, clock):
    return MockCheckAdapter(HTTP_CHECK_SCHEMA, config=provider_config, clock=clock)


@pytest.fixture
def api_adapter(provider_config, clock):
    return MockCheckAdapter(API_CHECK_SCHEMA, config=provider_config, clock=clock)


@pytest.fixture
def echoing_api_adapter(provider_config, clock):
    """API adapter that returns sensitive fields on read."""
    return MockCheckAdapter(
        API_CHECK_SCHEMA,
        config=provider_config,
        mock_config=MockConfig(echo_secrets=True),
        clock=clock,
    )


@pytest.fixture
def http_service(http_adapter, clock):
    return CheckResourceService(HTTP_CHECK_SCHEMA, http_adapter, clock)


@pytest.fixture
def api_service(api_adapter, clock):
    return CheckResourceService(API_CHECK_SCHEMA, api_adapter, clock)


@pytest.fixture
def http_plan():
    return HTTP_CHECK_SCHEMA.record_from_values(
        name="Homepage",
        url="https://example.com",
        method="POST",
        body="",
        headers={},
        interval=60,
    )


@pytest.fixture
def api_plan():
    return API_CHECK_SCHEMA.record_from_values(
        name="Status API",
        endpoint="https://api.example.com/v1/status",
        method="GET",
        auth_type="bearer",
        auth_value="token-abc-123456789",
        response_validation=["$.status == 'up'"],
    )


@pytest.fixture
def db_session():
    """Session on a fresh in-memory SQLite state store."""
    engine = create_state_engine(StateStoreConfig(database_url="sqlite://"))
    init_db(engine)
    session = get_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
