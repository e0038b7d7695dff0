"""Platform-owned workflow services.

Each service takes an open connection and runs its writes as one
transaction. Clients (web routes, CLI) import from here.
"""

from .finalization_service import finalize, get_final_statement, reconcile_finalizations
from .participant_service import (
    is_facilitator,
    join_session,
    list_participants,
    mark_submitted,
    reconcile_identity,
    register_participant,
)
from .pin_service import toggle_pin
from .session_service import (
    advance_phase,
    create_session,
    get_session,
    get_session_snapshot,
    list_sessions,
)
from .statement_service import list_with_pin_counts, submit_statement
from .voting_service import (
    add_item,
    aggregate_votes,
    consensus_metrics,
    get_allocation,
    list_items,
    submit_vote_allocation,
    voting_results,
)
