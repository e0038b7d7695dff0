"""Tests for statements and the pin ledger."""

import pytest

from workshop_platform.errors import ParticipantNotFound, SessionClosed, StatementNotFound, ValidationFailed
from workshop_platform.persistence import PinStore
from workshop_platform.services import (
    advance_phase,
    create_session,
    finalize,
    join_session,
    list_participants,
    list_with_pin_counts,
    submit_statement,
    toggle_pin,
)

FAC = "alice-id"


def _by_author(db_conn, sid, identity):
    return [s for s in list_with_pin_counts(db_conn, sid) if s.author_identity == identity]


class TestSubmitStatement:

    def test_scenario_c_resubmission_replaces_text(self, db_conn, pf_input_session):
        sid = pf_input_session
        first = submit_statement(db_conn, sid, "bob-id", "Bob", "draft v1")
        second = submit_statement(db_conn, sid, "bob-id", "Bob", "draft v2")

        statements = _by_author(db_conn, sid, "bob-id")
        assert len(statements) == 1
        assert statements[0].text == "draft v2"
        assert second.id == first.id

    def test_marks_participant_submitted(self, db_conn, pf_input_session):
        submit_statement(db_conn, pf_input_session, "bob-id", "Bob", "We lose context at handoff")
        flags = {p.identity: p.has_submitted for p in list_participants(db_conn, pf_input_session)}
        assert flags == {FAC: False, "bob-id": True, "carol-id": False}

    def test_resubmission_keeps_pins(self, db_conn, pf_input_session):
        sid = pf_input_session
        st = submit_statement(db_conn, sid, "bob-id", "Bob", "draft v1")
        toggle_pin(db_conn, sid, st.id, "carol-id", "Carol")
        updated = submit_statement(db_conn, sid, "bob-id", "Bob", "draft v2")
        assert updated.pin_count == 1
        assert updated.pinned_by == {"carol-id"}

    def test_requires_participant(self, db_conn, pf_input_session):
        with pytest.raises(ParticipantNotFound):
            submit_statement(db_conn, pf_input_session, "stranger", "Eve", "hi")

    def test_rejects_voting_board(self, db_conn, vb_session):
        sid, _ = vb_session
        with pytest.raises(ValidationFailed):
            submit_statement(db_conn, sid, "bob-id", "Bob", "hi")

    def test_rejects_empty_text(self, db_conn, pf_input_session):
        with pytest.raises(ValidationFailed):
            submit_statement(db_conn, pf_input_session, "bob-id", "Bob", "   ")

    def test_rejected_once_completed(self, db_conn, pf_input_session):
        advance_phase(db_conn, pf_input_session, FAC, "finalize")
        finalize(db_conn, pf_input_session, FAC, "Alice", "We frame it as X")
        with pytest.raises(SessionClosed):
            submit_statement(db_conn, pf_input_session, "bob-id", "Bob", "late")

    def test_statements_ordered_by_submission(self, db_conn, pf_input_session):
        sid = pf_input_session
        submit_statement(db_conn, sid, "carol-id", "Carol", "first")
        submit_statement(db_conn, sid, "bob-id", "Bob", "second")
        submit_statement(db_conn, sid, "carol-id", "Carol", "first, edited")
        assert [s.author_identity for s in list_with_pin_counts(db_conn, sid)] == ["carol-id", "bob-id"]


class TestTogglePin:

    @pytest.fixture
    def statement_id(self, db_conn, pf_input_session):
        return submit_statement(db_conn, pf_input_session, "bob-id", "Bob", "Handoffs lose context").id

    def test_scenario_d_two_pins_then_unpin(self, db_conn, pf_input_session, statement_id):
        sid = pf_input_session
        assert toggle_pin(db_conn, sid, statement_id, "carol-id", "Carol") == "added"
        assert toggle_pin(db_conn, sid, statement_id, FAC, "Alice") == "added"
        st = _by_author(db_conn, sid, "bob-id")[0]
        assert st.pin_count == 2

        assert toggle_pin(db_conn, sid, statement_id, "carol-id", "Carol") == "removed"
        st = _by_author(db_conn, sid, "bob-id")[0]
        assert st.pin_count == 1
        assert "carol-id" not in st.pinned_by
        assert st.pinned_by == {FAC}

    def test_toggle_twice_restores_state(self, db_conn, pf_input_session, statement_id):
        sid = pf_input_session
        before = _by_author(db_conn, sid, "bob-id")[0].pinned_by
        toggle_pin(db_conn, sid, statement_id, "carol-id", "Carol")
        toggle_pin(db_conn, sid, statement_id, "carol-id", "Carol")
        assert _by_author(db_conn, sid, "bob-id")[0].pinned_by == before

    def test_author_may_pin_own_statement(self, db_conn, pf_input_session, statement_id):
        assert toggle_pin(db_conn, pf_input_session, statement_id, "bob-id", "Bob") == "added"

    def test_unknown_statement(self, db_conn, pf_input_session):
        with pytest.raises(StatementNotFound):
            toggle_pin(db_conn, pf_input_session, 9999, "carol-id", "Carol")

    def test_statement_from_other_session(self, db_conn, pf_input_session, statement_id):
        other = create_session(db_conn, "Other", "zed-id", "Zed")
        join_session(db_conn, other, "carol-id", "Carol")
        with pytest.raises(StatementNotFound):
            toggle_pin(db_conn, other, statement_id, "carol-id", "Carol")

    def test_requires_participant(self, db_conn, pf_input_session, statement_id):
        with pytest.raises(ParticipantNotFound):
            toggle_pin(db_conn, pf_input_session, statement_id, "stranger", "Eve")

    def test_rejected_once_completed(self, db_conn, pf_input_session, statement_id):
        advance_phase(db_conn, pf_input_session, FAC, "finalize")
        finalize(db_conn, pf_input_session, FAC, "Alice", "Final")
        with pytest.raises(SessionClosed):
            toggle_pin(db_conn, pf_input_session, statement_id, "carol-id", "Carol")

    def test_concurrent_insert_becomes_removal(self, db_conn, pf_input_session, statement_id, monkeypatch):
        # The pin exists, but this call's delete ran before the other request committed.
        PinStore.insert(db_conn, statement_id, "carol-id", "Carol")
        real_delete = PinStore.delete
        calls = []

        def stale_delete(conn, st_id, identity):
            calls.append(identity)
            if len(calls) == 1:
                return False
            return real_delete(conn, st_id, identity)

        monkeypatch.setattr(PinStore, "delete", stale_delete)

        assert toggle_pin(db_conn, pf_input_session, statement_id, "carol-id", "Carol") == "removed"
        assert PinStore.exists(db_conn, statement_id, "carol-id") is False
