"""
CLI subcommand implementations for the decision workshop.

Subcommands::

    workshop sessions list      [--db PATH]
    workshop sessions view ID   [--db PATH]
    workshop reconcile          [--db PATH]
"""

import argparse
import logging
import sys
from pathlib import Path

from workshop_platform.config import log_level
from workshop_platform.errors import WorkshopError
from workshop_platform.persistence import get_connection, get_db_path
from workshop_platform.services import get_session_snapshot, list_sessions, reconcile_finalizations
from workshop_platform.session_state_machine import next_phase


def _open(args):
    db_path = Path(args.db) if args.db else get_db_path()
    return get_connection(db_path)


# ---------------------------------------------------------------------------
# Subcommand: sessions
# ---------------------------------------------------------------------------

def cmd_sessions(args):
    """Inspect stored sessions."""
    conn = _open(args)
    try:
        action = args.sessions_action

        if action == 'list':
            sessions = list_sessions(conn)
            if not sessions:
                print("No sessions found.")
                return
            print(f"\n{'ID':<36}  {'Tool':<15}  {'Phase':<10}  {'People':>6}  {'Title'}")
            print("-" * 95)
            for s in sessions:
                title = s.get("title", "?")
                if len(title) > 30:
                    title = title[:27].rstrip() + "..."
                print(
                    f"{s['id']:<36}  {s.get('tool_kind', '?'):<15}  "
                    f"{s.get('phase', '?'):<10}  {s.get('participant_count', 0):>6}  {title}"
                )

        elif action == 'view':
            try:
                snapshot = get_session_snapshot(conn, args.id)
            except WorkshopError as e:
                print(f"Error: {e.message}")
                sys.exit(1)
            _print_session_detail(snapshot.to_dict())
    finally:
        conn.close()


def _print_session_detail(detail: dict):
    """Pretty-print a session snapshot."""
    session = detail["session"]
    print(f"\nSession {session['id']}")
    print(f"  Title:    {session.get('title', '?')}")
    print(f"  Tool:     {session.get('tool_kind', '?')}")
    phase = session.get("phase", "?")
    upcoming = next_phase(session["tool_kind"], phase)
    print(f"  Phase:    {phase}" + (f" (next: {upcoming})" if upcoming else ""))
    print(f"  Created:  {session.get('created_at', '?')}")
    if session.get('completed_at'):
        print(f"  Finished: {session['completed_at']}")

    participants = detail.get("participants", [])
    submitted = sum(1 for p in participants if p.get("has_submitted"))
    print(f"  People:   {len(participants)} ({submitted} submitted)")
    for p in participants:
        role = " (facilitator)" if p.get("is_facilitator") else ""
        print(f"    - {p.get('name', '?')}{role}")

    statements = detail.get("statements", [])
    if statements:
        print(f"\n  Statements ({len(statements)}):")
        for s in sorted(statements, key=lambda s: s.get("pin_count", 0), reverse=True):
            text = str(s.get("text", "")).replace("\n", " ").strip()
            if len(text) > 80:
                text = text[:77].rstrip() + "..."
            print(f"    [{s.get('pin_count', 0)} pins] {s.get('author_name', '?')}: {text}")

    final = detail.get("final_statement")
    if final:
        print(f"\n  Final statement by {final.get('author_name', '?')}:")
        print(f"    {final.get('text', '')}")

    results = detail.get("results", [])
    if results:
        print(f"\n  Results ({len(results)} items):")
        for r in results:
            print(
                f"    {r.get('total_points', 0):>4} pts  "
                f"{r.get('vote_count', 0):>3} voters  {r.get('title', '?')}"
            )


# ---------------------------------------------------------------------------
# Subcommand: reconcile
# ---------------------------------------------------------------------------

def cmd_reconcile(args):
    """Complete sessions left with a final statement but an open phase."""
    conn = _open(args)
    try:
        repaired = reconcile_finalizations(conn)
    finally:
        conn.close()

    if not repaired:
        print("Nothing to reconcile.")
        return
    for session_id in repaired:
        print(f"✓ Completed session {session_id}")


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="workshop",
        description="Maintenance commands for the decision workshop database",
    )
    parser.add_argument("--db", help="Path to the SQLite database (default: WORKSHOP_DB_PATH or ./workshop.db)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- sessions ---
    p_sessions = subparsers.add_parser("sessions", help="Inspect sessions")
    sp_sessions = p_sessions.add_subparsers(dest="sessions_action", required=True)

    sp_sessions.add_parser("list", help="List all sessions")

    sp_view = sp_sessions.add_parser("view", help="View session details")
    sp_view.add_argument("id", help="Session ID")

    # --- reconcile ---
    subparsers.add_parser(
        "reconcile",
        help="Complete sessions whose finalization was interrupted",
    )

    return parser


def main(argv=None):
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=log_level(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == 'sessions':
        cmd_sessions(args)
    elif args.command == 'reconcile':
        cmd_reconcile(args)
