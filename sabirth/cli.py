"""
SA:BIRTH CLI - Command-line interface for the engine.

Usage:
    sabirth serve [--host H] [--port P]      Run the HTTP API
    sabirth leaderboard <store_file>         Print the leaderboard
    sabirth session <store_file> <player>    Print a player's session
"""

import argparse
import sys
from pathlib import Path

from .config import Settings, configure_logging


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="SA:BIRTH - Maze Calibration Engine",
        prog="sabirth",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Bind port")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # Leaderboard command
    leaderboard_parser = subparsers.add_parser("leaderboard", help="Print the leaderboard")
    leaderboard_parser.add_argument("store_file", help="Path to the JSON store")
    leaderboard_parser.add_argument("--limit", type=int, default=20, help="Rows to show")

    # Session command
    session_parser = subparsers.add_parser("session", help="Print a player's session")
    session_parser.add_argument("store_file", help="Path to the JSON store")
    session_parser.add_argument("player", help="Player identity")

    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings)

    if args.command == "serve":
        cmd_serve(args)
    elif args.command == "leaderboard":
        cmd_leaderboard(args)
    elif args.command == "session":
        cmd_session(args)
    else:
        parser.print_help()
        sys.exit(1)


def _open_store(path: str):
    from .storage import JsonFileStore, SessionStore

    if not Path(path).exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)
    return SessionStore(JsonFileStore(path))


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "sabirth.api.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


def cmd_leaderboard(args):
    """Print the leaderboard, lowest score first."""
    from .engine_core.state import Character
    from .session import Leaderboard

    entries = Leaderboard(_open_store(args.store_file)).read()
    if not entries:
        print("Leaderboard is empty")
        return

    print(f"{'#':>3}  {'player':<24} {'character':<10} {'score':>12}")
    for rank, entry in enumerate(entries[:args.limit], start=1):
        print(
            f"{rank:>3}  {entry.player:<24} "
            f"{Character(entry.character).name:<10} {entry.total_score:>12}"
        )


def cmd_session(args):
    """Print one player's session."""
    from .engine_core.state import Character, Sense

    store = _open_store(args.store_file)
    session = store.get_session(args.player)
    if session is None:
        print(f"No session for {args.player}")
        sys.exit(1)

    print(f"Session:   {session.session_id}")
    print(f"Player:    {session.player} vs {session.opponent}")
    print(f"Character: {Character(session.character).name}")
    print(f"Active:    {session.active}")
    print(f"Score:     {session.total_score}")
    print("Senses:")
    for sense in Sense:
        result = store.get_sense_result(args.player, sense.value)
        mark = "x" if session.is_completed(sense.value) else " "
        detail = f"score={result.score}" if result and session.is_completed(sense.value) else ""
        print(f"  [{mark}] {sense.name.lower():<15} {detail}")


if __name__ == "__main__":
    main()
