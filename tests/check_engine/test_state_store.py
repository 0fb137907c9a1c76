"""
State Store Tests.

============================================================
PURPOSE
============================================================
Tests for serialization and the SQLAlchemy state repository.

CRITICAL:
    Unset and empty must survive a save/load cycle unchanged.

============================================================
"""

import json

import pytest

from check_engine.errors import StateStoreError, ValidationError
from check_engine.models import CheckStateModel
from check_engine.repository import StateRepository
from check_engine.schema import API_CHECK_SCHEMA, HTTP_CHECK_SCHEMA
from check_engine.serialization import dumps, loads, record_from_dict, record_to_dict
from check_engine.types import TriState, UNSET


IDENTITY = "hc-0123456789abcdef"


# ============================================================
# SERIALIZATION TESTS
# ============================================================

class TestSerialization:
    """Tests for record serialization."""

    def test_unset_absent_empty_kept(self):
        """Test unset fields are absent and empty values are kept."""
        record = HTTP_CHECK_SCHEMA.record_from_values(
            id=IDENTITY, name="a", body="", headers={}, regions=[],
        )

        data = record_to_dict(record)

        assert data == {"id": IDENTITY, "name": "a", "body": "", "headers": {}, "regions": []}
        assert "expected_response" not in data

    def test_load_restores_distinction(self):
        """Test loading keeps empty values set and absent fields unset."""
        record = loads(HTTP_CHECK_SCHEMA, '{"id": "hc-1", "body": ""}')

        assert record.body == TriState.of("")
        assert record.url is UNSET

    def test_dumps_is_json(self):
        record = HTTP_CHECK_SCHEMA.record_from_values(name="a", retries=0)

        assert json.loads(dumps(record)) == {"name": "a", "retries": 0}

    def test_null_rejected(self):
        """Test explicit nulls are treated as corruption."""
        with pytest.raises(StateStoreError) as exc_info:
            record_from_dict(HTTP_CHECK_SCHEMA, {"name": None})

        assert exc_info.value.code == "STATE_CORRUPT"

    def test_unknown_field_rejected(self):
        with pytest.raises(StateStoreError):
            record_from_dict(HTTP_CHECK_SCHEMA, {"auth_value": "x"})

    @pytest.mark.parametrize("text", ["not json", "[1, 2]"])
    def test_bad_payload(self, text):
        with pytest.raises(StateStoreError):
            loads(HTTP_CHECK_SCHEMA, text)


# ============================================================
# REPOSITORY TESTS
# ============================================================

class TestStateRepository:
    """Tests for StateRepository."""

    def test_save_and_get(self, db_session):
        """Test a saved record loads back identical."""
        repo = StateRepository(db_session)
        record = HTTP_CHECK_SCHEMA.record_from_values(
            id=IDENTITY, name="a", body="", regions=[], last_result="PENDING",
        )

        repo.save(record)

        assert repo.get(IDENTITY) == record
        assert db_session.get(CheckStateModel, IDENTITY).kind == "http_check"

    def test_save_replaces(self, db_session):
        """Test saving again overwrites the stored record."""
        repo = StateRepository(db_session)
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id=IDENTITY, name="a", body="x"))
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id=IDENTITY, name="b"))

        loaded = repo.get(IDENTITY)
        assert loaded.name.get() == "b"
        assert loaded.body is UNSET
        assert db_session.get(CheckStateModel, IDENTITY).name == "b"

    def test_save_requires_identity(self, db_session):
        with pytest.raises(ValidationError):
            StateRepository(db_session).save(HTTP_CHECK_SCHEMA.record_from_values(name="a"))

    def test_kind_conflict(self, db_session):
        """Test an identity cannot switch kinds."""
        repo = StateRepository(db_session)
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id=IDENTITY, name="a"))

        with pytest.raises(StateStoreError):
            repo.save(API_CHECK_SCHEMA.record_from_values(id=IDENTITY, name="a"))

    def test_missing(self, db_session):
        """Test missing state is None for get and an error for require."""
        repo = StateRepository(db_session)

        assert repo.get("hc-ffffffffffffffff") is None
        with pytest.raises(StateStoreError) as exc_info:
            repo.require("hc-ffffffffffffffff")
        assert exc_info.value.code == "STATE_NOT_FOUND"

    def test_delete(self, db_session):
        repo = StateRepository(db_session)
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id=IDENTITY, name="a"))

        assert repo.delete(IDENTITY) is True
        assert repo.get(IDENTITY) is None
        assert repo.delete(IDENTITY) is False

    def test_list(self, db_session):
        """Test listing all records or one kind."""
        repo = StateRepository(db_session)
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id="hc-2", name="b"))
        repo.save(HTTP_CHECK_SCHEMA.record_from_values(id="hc-1", name="a"))
        repo.save(API_CHECK_SCHEMA.record_from_values(id="ac-1", name="c", auth_value="s"))

        assert [r.id.get() for r in repo.list()] == ["ac-1", "hc-1", "hc-2"]
        assert [r.id.get() for r in repo.list("http_check")] == ["hc-1", "hc-2"]
        assert repo.list("api_check")[0].auth_value.get() == "s"
