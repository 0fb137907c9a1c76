"""
Check Engine - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line orchestrator for managed checks.

- Provides argparse-based CLI
- Loads configuration from CLI and environment
- Owns the persisted-state store
- Prints state as JSON (sensitive fields masked)

============================================================
USAGE
============================================================
python -m check_engine apply plan.json
python -m check_engine refresh hc-0123456789abcdef
python -m check_engine show hc-0123456789abcdef
python -m check_engine results hc-0123456789abcdef --limit 5
python -m check_engine import api_check ac-0123456789abcdef
python -m check_engine destroy hc-0123456789abcdef

============================================================
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import EngineConfig
from .database import create_state_engine, get_session_factory, init_db, session_scope
from .errors import CheckEngineError, ValidationError
from .logging_utils import mask_record, setup_logging
from .provider import CheckProvider, ProviderContext
from .repository import StateRepository
from .schema import get_schema, schema_for_record
from .serialization import record_to_dict
from .types import CheckKind, TriState


logger = logging.getLogger(__name__)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="check-engine",
        description="Reconcile HTTP and API checks against the check service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  CHECK_ENGINE_API_KEY     API key (required)
  CHECK_ENGINE_BASE_URL    API base URL
  CHECK_ENGINE_STATE_URL   SQLAlchemy URL of the state store

Examples:
  %(prog)s apply plan.json
  %(prog)s results hc-0123456789abcdef --limit 5
        """
    )

    parser.add_argument(
        "--state-url",
        type=str,
        metavar="URL",
        help="State store database URL (default: CHECK_ENGINE_STATE_URL)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: CHECK_ENGINE_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=["json", "text"],
        help="Logging format (default: CHECK_ENGINE_LOG_FORMAT or text)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    apply_cmd = commands.add_parser("apply", help="Create or update a check from a JSON plan")
    apply_cmd.add_argument("file", help="Plan file: {\"type\": \"http_check\", ...}")

    refresh_cmd = commands.add_parser("refresh", help="Read a check and persist the result")
    refresh_cmd.add_argument("identity")

    destroy_cmd = commands.add_parser("destroy", help="Delete a check and drop its state")
    destroy_cmd.add_argument("identity")

    import_cmd = commands.add_parser("import", help="Adopt an existing check by ID")
    import_cmd.add_argument("type", choices=[kind.value for kind in CheckKind])
    import_cmd.add_argument("identity")

    show_cmd = commands.add_parser("show", help="Print persisted state")
    show_cmd.add_argument("identity")

    results_cmd = commands.add_parser("results", help="List historical results for a check")
    results_cmd.add_argument("identity")
    results_cmd.add_argument("--limit", type=int, help="Number of results (default: 10)")
    results_cmd.add_argument("--start-time", metavar="RFC3339", help="Earliest result time")
    results_cmd.add_argument("--end-time", metavar="RFC3339", help="Latest result time")

    return parser


# ============================================================
# PLAN LOADING
# ============================================================

def load_plan(path: str):
    """
    Read a JSON plan file.

    JSON null means "not declared".

    Raises:
        ValidationError: Unreadable file, bad JSON or unknown fields
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read plan {path}: {e}", cause=e) from e

    if not isinstance(data, dict) or "type" not in data:
        raise ValidationError(f"Plan {path} must be a JSON object with a \"type\"", fields=["type"])

    values = dict(data)
    schema = get_schema(values.pop("type"))
    try:
        return schema.record_from_values(**values)
    except KeyError as e:
        raise ValidationError(f"Plan {path}: {e.args[0]}") from e


def _print_record(record) -> None:
    schema = schema_for_record(record)
    out = {"type": schema.type_name}
    out.update(mask_record(schema, record_to_dict(record)))
    print(json.dumps(out, indent=2, sort_keys=True))


# ============================================================
# COMMANDS
# ============================================================

def cmd_apply(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    plan = load_plan(args.file)
    service = context.service(schema_for_record(plan).kind)

    identity = plan.id.get()
    state = repo.get(identity) if identity else None
    if state is None:
        new_state = service.create(plan)
    else:
        new_state = service.update(plan, state)

    repo.save(new_state)
    _print_record(new_state)


def cmd_refresh(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    state = repo.require(args.identity)
    outcome = context.service(schema_for_record(state).kind).read(state)
    repo.save(outcome.record)

    for drift in outcome.drift:
        print(f"drift: {drift.describe()}")
    _print_record(outcome.record)


def cmd_destroy(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    state = repo.require(args.identity)
    context.service(schema_for_record(state).kind).delete(state)
    repo.delete(args.identity)
    print(f"Destroyed {args.identity}")


def cmd_import(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    outcome = context.service(args.type).import_state(args.identity)
    repo.save(outcome.record)
    _print_record(outcome.record)


def cmd_show(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    _print_record(repo.require(args.identity))


def cmd_results(args: argparse.Namespace, context: ProviderContext, repo: StateRepository) -> None:
    data = context.results.read(
        args.identity,
        limit=TriState.from_optional(args.limit),
        start_time=TriState.from_optional(args.start_time),
        end_time=TriState.from_optional(args.end_time),
    )
    print(json.dumps(data.to_dict(), indent=2))


COMMANDS = {
    "apply": cmd_apply,
    "refresh": cmd_refresh,
    "destroy": cmd_destroy,
    "import": cmd_import,
    "show": cmd_show,
    "results": cmd_results,
}


# ============================================================
# MAIN ENTRY POINT
# ============================================================

def run(args: argparse.Namespace, config: EngineConfig, provider: Optional[CheckProvider] = None) -> None:
    """Configure the provider and state store, then run one command."""
    context = (provider or CheckProvider()).configure(config.provider, config.results)

    engine = create_state_engine(config.state_store)
    try:
        init_db(engine)
        with session_scope(get_session_factory(engine)) as session:
            COMMANDS[args.command](args, context, StateRepository(session))
    finally:
        engine.dispose()


def main(argv: Optional[List[str]] = None, provider: Optional[CheckProvider] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        provider: Provider to configure (default: CheckProvider())

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = EngineConfig.from_env(state_url=args.state_url)
    setup_logging(
        args.log_level or config.logging.level,
        args.log_format or config.logging.log_format,
    )

    try:
        run(args, config, provider)
    except CheckEngineError as e:
        logger.debug(f"Command failed: {e.to_dict()}")
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())
