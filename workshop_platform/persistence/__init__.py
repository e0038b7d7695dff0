"""Platform-owned persistence layer (database and stores)."""

from .database import SCHEMA_VERSION, get_connection, get_db_path, init_db, transaction
from .final_statement_store import FinalStatementStore
from .participant_store import ParticipantStore
from .pin_store import PinStore
from .session_store import SessionStore
from .statement_store import StatementStore
from .vote_store import VoteItemStore, VoteStore
