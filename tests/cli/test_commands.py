"""Tests for the workshop CLI subcommands."""

import pytest

from cli.commands import build_parser, main
from workshop_platform.persistence import FinalStatementStore, SessionStore, get_connection
from workshop_platform.services import advance_phase, create_session, join_session, submit_statement


@pytest.fixture
def seeded_db(tmp_path):
    path = tmp_path / "cli.db"
    conn = get_connection(path)
    sid = create_session(conn, "Why do tickets stall?", "alice-id", "Alice")
    join_session(conn, sid, "bob-id", "Bob")
    advance_phase(conn, sid, "alice-id", "input")
    submit_statement(conn, sid, "bob-id", "Bob", "Handoffs lose context")
    conn.close()
    return path, sid


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_sessions_view():
    args = build_parser().parse_args(["--db", "x.db", "sessions", "view", "abc"])
    assert args.command == "sessions"
    assert args.sessions_action == "view"
    assert args.id == "abc"


def test_sessions_list(seeded_db, capsys):
    path, sid = seeded_db
    main(["--db", str(path), "sessions", "list"])
    out = capsys.readouterr().out
    assert sid in out
    assert "problem-framing" in out


def test_sessions_list_empty(tmp_path, capsys):
    main(["--db", str(tmp_path / "empty.db"), "sessions", "list"])
    assert "No sessions found." in capsys.readouterr().out


def test_sessions_view(seeded_db, capsys):
    path, sid = seeded_db
    main(["--db", str(path), "sessions", "view", sid])
    out = capsys.readouterr().out
    assert "Why do tickets stall?" in out
    assert "Alice (facilitator)" in out
    assert "input (next: review)" in out
    assert "Handoffs lose context" in out


def test_sessions_view_unknown_exits(seeded_db, capsys):
    path, _ = seeded_db
    with pytest.raises(SystemExit) as exc:
        main(["--db", str(path), "sessions", "view", "missing"])
    assert exc.value.code == 1
    assert "not found" in capsys.readouterr().out


def test_reconcile(seeded_db, capsys):
    path, sid = seeded_db
    conn = get_connection(path)
    FinalStatementStore.upsert(conn, sid, "Interrupted", "alice-id", "Alice")
    conn.close()

    main(["--db", str(path), "reconcile"])
    assert sid in capsys.readouterr().out

    conn = get_connection(path)
    assert SessionStore.get(conn, sid)["phase"] == "completed"
    conn.close()

    main(["--db", str(path), "reconcile"])
    assert "Nothing to reconcile." in capsys.readouterr().out
