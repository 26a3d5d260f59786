"""
Rejection Conformance Tests

INVARIANT: Transactions are all-or-nothing.

    ∀ state S, transaction T:
        evaluate(S, T) rejected ⟹ apply(S, T) == S

Equality is structural: the bill set AND next_serial are unchanged.
Rejection never raises.
"""

import pytest
from hypothesis import given, settings, assume
from hypothesis import strategies as st

from papercash import (
    Bill, LedgerState, Participant, RejectReason, Transfer, U64_MAX,
    apply, evaluate,
)

from .strategies import state_and_transaction, minted_states, transfers_for


ALICE = Participant.ALICE
BOB = Participant.BOB


class TestRejectionProperties:
    """Property-based rejection tests."""

    @given(state_and_transaction())
    @settings(max_examples=300)
    def test_rejection_returns_input_state(self, pair):
        """
        PROPERTY: A rejected transaction yields exactly the starting state.
        """
        state, tx = pair
        outcome = evaluate(state, tx)
        if not outcome.accepted:
            assert outcome.state == state
            assert outcome.state.next_serial == state.next_serial
            assert outcome.created == ()
            assert outcome.destroyed == ()

    @given(state_and_transaction())
    @settings(max_examples=200)
    def test_apply_agrees_with_evaluate(self, pair):
        state, tx = pair
        assert apply(state, tx) == evaluate(state, tx).state

    @given(st.data())
    @settings(max_examples=100)
    def test_input_state_never_mutated(self, data):
        """
        PROPERTY: The caller's state is identical before and after apply.
        """
        state = data.draw(minted_states())
        tx = data.draw(transfers_for(state))
        bills_before = set(state.bills)
        serial_before = state.next_serial
        apply(state, tx)
        assert set(state.bills) == bills_before
        assert state.next_serial == serial_before

    @given(st.data())
    @settings(max_examples=100)
    def test_empty_spends_always_rejected(self, data):
        state = data.draw(minted_states())
        tx = data.draw(transfers_for(state))
        assume(tx.receives)
        outcome = evaluate(state, Transfer(spends=(), receives=tx.receives))
        assert outcome.reason == RejectReason.EMPTY_SPENDS
        assert outcome.state == state


class TestRejectionExamples:
    """Every rejection reason leaves the same state behind."""

    @pytest.fixture
    def start(self):
        return LedgerState.from_bills([Bill(ALICE, 42, 0), Bill(BOB, 8, 1)])

    @pytest.mark.parametrize("spends, receives, reason", [
        ([], [Bill(ALICE, 1, 2)], RejectReason.EMPTY_SPENDS),
        ([Bill(ALICE, 42, 0)], [Bill(BOB, 0, 2)], RejectReason.ZERO_AMOUNT_RECEIVE),
        ([Bill(ALICE, 42, 0)], [Bill(ALICE, 42, 0)], RejectReason.RECEIVE_EQUALS_SPEND),
        ([Bill(ALICE, 42, 0)], [Bill(BOB, U64_MAX, 2), Bill(BOB, 1, 3)], RejectReason.RECEIVE_OVERFLOW),
        ([Bill(ALICE, 43, 0)], [Bill(BOB, 1, 2)], RejectReason.UNKNOWN_SPEND),
        ([Bill(BOB, 8, 1), Bill(BOB, 8, 1)], [Bill(ALICE, 16, 2)], RejectReason.DUPLICATE_SPEND),
        ([Bill(BOB, 8, 1)], [Bill(ALICE, 8, 1)], RejectReason.SERIAL_COLLISION),
        ([Bill(BOB, 8, 1)], [Bill(ALICE, 8, 3)], RejectReason.SERIAL_NOT_CONTIGUOUS),
        ([Bill(BOB, 8, 1)], [Bill(ALICE, 9, 2)], RejectReason.VALUE_CREATED),
    ])
    def test_reason_and_state(self, start, spends, receives, reason):
        outcome = evaluate(start, Transfer(spends=spends, receives=receives))
        assert outcome.reason == reason
        assert outcome.state == start
        assert outcome.state is start
