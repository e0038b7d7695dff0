"""
Configuration constants for the decision workshop system.
"""

import os
from pathlib import Path

# Tool kinds (each one selects a workflow in the session state machine)
TOOL_PROBLEM_FRAMING = "problem-framing"
TOOL_VOTING_BOARD = "voting-board"
TOOL_KINDS = (TOOL_PROBLEM_FRAMING, TOOL_VOTING_BOARD)
DEFAULT_TOOL_KIND = TOOL_PROBLEM_FRAMING

# Fixed total every voting participant distributes across items
POINT_BUDGET = 100

# Most items a voting board may hold
MAX_ITEMS = 10

# Input limits
MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_NAME_LENGTH = 50
MAX_STATEMENT_LENGTH = 2000
MAX_IDENTITY_LENGTH = 200
MAX_NOTE_LENGTH = 280

# Database
DB_FILE = "workshop.db"

_DB_PATH_ENV = "WORKSHOP_DB_PATH"
_DB_TIMEOUT_SECONDS_ENV = "WORKSHOP_DB_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "WORKSHOP_LOG_LEVEL"

_DEFAULT_DB_TIMEOUT_SECONDS = 5
_DEFAULT_LOG_LEVEL = "INFO"


def _to_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def resolve_db_path() -> Path:
    """Return the database path, honouring ``WORKSHOP_DB_PATH``.

    Read on every call so tests and deployments can redirect the store
    without reloading the module.
    """
    override = os.environ.get(_DB_PATH_ENV, "").strip()
    if override:
        return Path(override)
    return Path.cwd() / DB_FILE


def db_timeout_seconds() -> int:
    return _to_int_env(_DB_TIMEOUT_SECONDS_ENV, _DEFAULT_DB_TIMEOUT_SECONDS)


def log_level() -> str:
    raw = os.environ.get(_LOG_LEVEL_ENV, "").strip().upper()
    if raw in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        return raw
    return _DEFAULT_LOG_LEVEL
