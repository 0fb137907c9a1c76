"""
CLI Tests.

============================================================
PURPOSE
============================================================
End-to-end runs of the command-line orchestrator against a
file-backed SQLite state store and the mock backend.

Every invocation configures a fresh provider, so the mock
backend only knows checks created within that invocation;
reads of other identities get the canned records.

============================================================
"""

import json
import logging

import pytest

from check_engine.cli import create_parser, load_plan, main
from check_engine.errors import ValidationError
from check_engine.provider import CheckProvider
from check_engine.types import UNSET


def _json_from(output: str):
    # drift lines may precede the JSON document
    lines = output.splitlines()
    start = lines.index("{")
    return json.loads("\n".join(lines[start:]))


@pytest.fixture(autouse=True)
def cli_env(monkeypatch, tmp_path):
    """API key in the environment, no stray .env, root logger restored."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CHECK_ENGINE_API_KEY", "cli-test-key-123456")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def state_url(tmp_path):
    return f"sqlite:///{tmp_path / 'state.db'}"


@pytest.fixture
def run(state_url, clock, capsys):
    """Run the CLI and return (exit code, stdout, stderr)."""
    def _run(*argv):
        code = main(["--state-url", state_url, *argv], provider=CheckProvider(clock))
        captured = capsys.readouterr()
        return code, captured.out, captured.err
    return _run


@pytest.fixture
def write_plan(tmp_path):
    def _write(filename="plan.json", **plan):
        path = tmp_path / filename
        path.write_text(json.dumps(plan))
        return str(path)
    return _write


# ============================================================
# PARSER TESTS
# ============================================================

class TestParser:
    """Tests for argument parsing."""

    def test_results_options(self):
        args = create_parser().parse_args(
            ["results", "hc-1", "--limit", "5", "--start-time", "2026-01-15T00:00:00Z"],
        )

        assert args.command == "results"
        assert args.limit == 5
        assert args.start_time == "2026-01-15T00:00:00Z"
        assert args.end_time is None

    def test_import_type_choices(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["import", "dns_check", "x"])


class TestLoadPlan:
    """Tests for plan file loading."""

    def test_null_means_unset(self, write_plan):
        """Test JSON null leaves a field undeclared."""
        plan = load_plan(write_plan(type="http_check", name="a", body="", regions=None))

        assert plan.body.get() == ""
        assert plan.regions is UNSET

    def test_missing_type(self, write_plan):
        with pytest.raises(ValidationError):
            load_plan(write_plan(name="a"))

    def test_unknown_field(self, write_plan):
        with pytest.raises(ValidationError):
            load_plan(write_plan(type="http_check", name="a", colour="red"))

    def test_unreadable_file(self, tmp_path):
        with pytest.raises(ValidationError):
            load_plan(str(tmp_path / "missing.json"))


# ============================================================
# COMMAND TESTS
# ============================================================

class TestCommands:
    """End-to-end command runs."""

    def test_apply_creates(self, run, write_plan):
        """Test apply without state creates and persists the check."""
        path = write_plan(type="http_check", name="Homepage", url="https://example.com", body="")

        code, out, _ = run("apply", path)

        state = _json_from(out)
        assert code == 0
        assert state["type"] == "http_check"
        assert state["id"].startswith("hc-")
        assert state["last_result"] == "PENDING"
        assert state["body"] == ""
        assert "regions" not in state

        code, out, _ = run("show", state["id"])
        assert code == 0
        assert _json_from(out) == state

    def test_apply_updates_existing(self, run, write_plan):
        """Test apply with a known id updates under the same identity."""
        _, out, _ = run("apply", write_plan(type="http_check", name="a", url="https://a.example"))
        identity = _json_from(out)["id"]

        path = write_plan("update.json", type="http_check", id=identity, name="b",
                          url="https://a.example")
        code, out, _ = run("apply", path)

        state = _json_from(out)
        assert code == 0
        assert state["id"] == identity
        assert state["name"] == "b"
        assert state["last_result"] == "PENDING"

    def test_refresh_reports_drift(self, run, write_plan):
        """Test refresh folds backend values in and prints drift."""
        _, out, _ = run("apply", write_plan(type="http_check", name="a", url="https://a.example"))
        identity = _json_from(out)["id"]

        code, out, _ = run("refresh", identity)

        state = _json_from(out)
        assert code == 0
        assert "drift: name" in out
        assert state["name"] == f"Retrieved check {identity}"
        assert state["last_result"] == "SUCCESS"

    def test_secrets_masked(self, run, write_plan):
        """Test show never prints the secret."""
        path = write_plan(type="api_check", name="api", endpoint="https://api.example",
                          auth_value="very-secret-token")
        _, out, _ = run("apply", path)
        identity = _json_from(out)["id"]

        code, out, _ = run("show", identity)

        assert code == 0
        assert "very-secret-token" not in out
        assert _json_from(out)["auth_value"] == "***"

    def test_import(self, run):
        """Test import persists the backend record."""
        code, out, _ = run("import", "api_check", "ac-0123456789abcdef")

        state = _json_from(out)
        assert code == 0
        assert state["id"] == "ac-0123456789abcdef"
        assert "auth_value" not in state

        code, _, _ = run("show", "ac-0123456789abcdef")
        assert code == 0

    def test_destroy(self, run, write_plan):
        """Test destroy drops the persisted state."""
        _, out, _ = run("apply", write_plan(type="http_check", name="a", url="https://a.example"))
        identity = _json_from(out)["id"]

        code, out, _ = run("destroy", identity)
        assert code == 0
        assert f"Destroyed {identity}" in out

        code, _, err = run("show", identity)
        assert code == 1
        assert "no state" in err

    def test_results(self, run):
        code, out, _ = run("results", "hc-0123456789abcdef", "--limit", "3")

        data = _json_from(out)
        assert code == 0
        assert [r["id"] for r in data["results"]] == [
            f"res-hc-0123456789abcdef-{i}" for i in range(3)
        ]

    def test_results_negative_limit(self, run):
        code, _, err = run("results", "hc-0123456789abcdef", "--limit", "-1")

        assert code == 1
        assert "limit" in err

    def test_missing_api_key(self, run, monkeypatch):
        """Test a missing API key exits with status 1."""
        monkeypatch.delenv("CHECK_ENGINE_API_KEY")

        code, _, err = run("show", "hc-0123456789abcdef")

        assert code == 1
        assert "Missing API Key" in err

    def test_invalid_plan(self, run, write_plan):
        code, _, err = run("apply", write_plan(type="http_check", url="https://a.example"))

        assert code == 1
        assert "name is required" in err
