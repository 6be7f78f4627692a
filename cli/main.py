#!/usr/bin/env python3
"""
Project Pulse CLI - administration of the health dashboard store.

Commands:
- init                      create the home directories and schema
- seed                      replace the store with demo data
- recompute PROJECT_ID      recompute one project's health
- recompute --all           recompute every project (heals stale scores)
- health PROJECT_ID         show the last persisted health
- create-key USER_ID        issue an API key for a user
- serve                     run the API server
"""

import argparse
import logging
import sys

from pulse import config, paths
from pulse.health import HealthScoreEngine, ProjectNotFoundError, load_weights
from pulse.observability import configure_logging
from pulse.security import KeyManager
from pulse.seed import seed
from pulse.store import StateStore, StoreError

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "ON_TRACK": "\033[92m",  # Green
    "AT_RISK": "\033[93m",  # Yellow
    "CRITICAL": "\033[91m",  # Red
}
RESET = "\033[0m"


def print_header(text: str):
    print(f"\n{'═' * 50}")
    print(f"  {text}")
    print(f"{'═' * 50}")


def _status(status: str) -> str:
    if not sys.stdout.isatty():
        return status
    return f"{STATUS_COLORS.get(status, '')}{status}{RESET}"


def cmd_init(store: StateStore, args) -> int:
    paths.config_dir()
    paths.log_dir()
    KeyManager(store)
    print(f"OK: initialized {store.db_path}")
    return 0


def cmd_seed(store: StateStore, args) -> int:
    result = seed(store, HealthScoreEngine(store, load_weights()))

    print_header("DEMO DATA")
    print(f"Project: {result.project.name} ({result.project.id})")
    if result.health:
        print(f"Health:  {result.health.health_score} {_status(result.health.status)}")
    print("\nAPI keys (shown once):")
    for name, user in result.users.items():
        print(f"  {name:<7} {user.role:<9} {result.api_keys[name]}")
    return 0


def cmd_recompute(store: StateStore, args) -> int:
    engine = HealthScoreEngine(store, load_weights())

    if args.all:
        results = engine.recompute_all()
        print_header(f"RECOMPUTED {len(results)} PROJECTS")
        for project_id, result in results.items():
            print(f"  {project_id}  {result.health_score:>3}  {_status(result.status)}")
        return 0

    if not args.project_id:
        print("Provide PROJECT_ID or --all", file=sys.stderr)
        return 2

    result = engine.recompute(args.project_id)
    print(f"{args.project_id}: {result.health_score} {_status(result.status)}")
    for key, value in result.breakdown.to_dict().items():
        print(f"  {key}: {value}")
    return 0


def cmd_health(store: StateStore, args) -> int:
    snapshot = HealthScoreEngine(store).get_health_score(args.project_id)
    print(f"{snapshot.project_id}: {snapshot.health_score} {_status(snapshot.status)}")
    if snapshot.computed_at:
        print(f"  computed at {snapshot.computed_at}")
    return 0


def cmd_create_key(store: StateStore, args) -> int:
    try:
        key, info = KeyManager(store).create_key(args.user_id, args.name, args.expires_in_days)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Key id: {info.id}")
    print(f"Key:    {key}")
    print("Store it now; it cannot be shown again.")
    return 0


def cmd_serve(args) -> int:
    import uvicorn

    uvicorn.run("api.server:app", host=args.host, port=args.port)
    return 0


COMMANDS = {
    "init": cmd_init,
    "seed": cmd_seed,
    "recompute": cmd_recompute,
    "health": cmd_health,
    "create-key": cmd_create_key,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pulse", description="Project Pulse administration")
    p.add_argument("--db", default=None, help="SQLite path (default: PULSE_DB or <home>/data/pulse.db)")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init", help="Create directories and schema")
    sub.add_parser("seed", help="Replace all data with the demo dataset")

    r = sub.add_parser("recompute", help="Recompute health scores")
    r.add_argument("project_id", nargs="?")
    r.add_argument("--all", action="store_true", help="Recompute every project")

    h = sub.add_parser("health", help="Show last persisted health")
    h.add_argument("project_id")

    k = sub.add_parser("create-key", help="Issue an API key")
    k.add_argument("user_id")
    k.add_argument("--name", default="cli", help="Label for the key")
    k.add_argument("--expires-in-days", type=int, default=None)

    s = sub.add_parser("serve", help="Run the API server")
    s.add_argument("--host", default="127.0.0.1")
    s.add_argument("--port", type=int, default=8420)

    return p


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(config.LOG_LEVEL, config.LOG_JSON, config.LOG_FILE)

    if args.cmd == "serve":
        return cmd_serve(args)

    try:
        with StateStore(args.db) as store:
            return COMMANDS[args.cmd](store, args)
    except ProjectNotFoundError as e:
        print(f"Error: project not found: {e.project_id}", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"Error: store unavailable: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
