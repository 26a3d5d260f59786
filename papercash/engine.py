"""
engine.py - Transition Engine

Computes the next ledger state from a current state and a proposed
transaction. The engine is pure: it never mutates its input and performs
no I/O beyond optional verbose output.

Mint:
    Always succeeds. Creates one bill with serial ``next_serial``.

Transfer, checked in this order (first failure wins):
1. Empty spends                  -> rejected
2. Empty receives                -> burn the spends that exist, done
3. Per receive: zero amount, equal to a spend, u64 overflow of the total
4. Per spend: must be live, u64 overflow of the total
5. Duplicate spends
6. A spend serial reused by a receive
7. Receive serials must be next_serial, next_serial + 1, ...
8. Received value must not exceed spent value
9. Commit: insert receives, then remove spends

Each check is a predicate over the immutable input snapshot; the new state
is built only once every check has passed, so a rejection can never leak a
partially applied state.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .core import (
    Bill, LedgerState, Mint, RejectReason, Transaction, Transfer,
    U64_MAX, checked_add,
)


# A transfer check inspects the state and transfer and returns a reason to
# reject, or None to let the next check run.
TransferCheck = Callable[[LedgerState, Transfer], Optional[RejectReason]]


@dataclass(frozen=True, slots=True)
class TransitionOutcome:
    """
    Result of evaluating a transaction against a state.

    Attributes:
        state: The resulting state (the input state itself when rejected).
        reason: Why the transaction was rejected, or None if accepted.
        created: Bills inserted by the transition, in insertion order.
        destroyed: Bills removed by the transition.
    """
    state: LedgerState
    reason: Optional[RejectReason] = None
    created: Tuple[Bill, ...] = ()
    destroyed: Tuple[Bill, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.reason is None


# ============================================================================
# TRANSFER CHECKS
# ============================================================================

def check_receives(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    """Reject zero-value receives, receives equal to a spend, and overflow of the received total."""
    total_received = 0
    for bill in transfer.receives:
        if bill.amount == 0:
            return RejectReason.ZERO_AMOUNT_RECEIVE
        if bill in transfer.spends:
            return RejectReason.RECEIVE_EQUALS_SPEND
        total_received = checked_add(total_received, bill.amount)
        if total_received is None:
            return RejectReason.RECEIVE_OVERFLOW
    return None


def check_spends_exist(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    """Every spend must be a live bill; the spent total must fit in u64."""
    total_spent = 0
    for bill in transfer.spends:
        if bill not in state.bills:
            return RejectReason.UNKNOWN_SPEND
        total_spent = checked_add(total_spent, bill.amount)
        if total_spent is None:
            return RejectReason.SPEND_OVERFLOW
    return None


def check_duplicate_spends(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    spends = transfer.spends
    for i in range(len(spends)):
        for j in range(i + 1, len(spends)):
            if spends[i] == spends[j]:
                return RejectReason.DUPLICATE_SPEND
    return None


def check_serial_collision(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    """A serial being destroyed cannot be handed out again in the same transition."""
    for spent in transfer.spends:
        for received in transfer.receives:
            if spent.serial == received.serial:
                return RejectReason.SERIAL_COLLISION
    return None


def check_serial_contiguity(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    """Receive i must carry serial next_serial + i (positional, not sorted)."""
    for offset, bill in enumerate(transfer.receives):
        if bill.serial != state.next_serial + offset:
            return RejectReason.SERIAL_NOT_CONTIGUOUS
    if state.next_serial + len(transfer.receives) > U64_MAX:
        return RejectReason.SERIAL_EXHAUSTED
    return None


def check_value_conserved(state: LedgerState, transfer: Transfer) -> Optional[RejectReason]:
    """Received value may be less than spent value (implicit burn) but never more."""
    total_received = sum(b.amount for b in transfer.receives)
    total_spent = sum(b.amount for b in transfer.spends)
    if total_received > total_spent:
        return RejectReason.VALUE_CREATED
    return None


# Order matters: later checks assume earlier ones passed.
DEFAULT_TRANSFER_CHECKS: Tuple[TransferCheck, ...] = (
    check_receives,
    check_spends_exist,
    check_duplicate_spends,
    check_serial_collision,
    check_serial_contiguity,
    check_value_conserved,
)


# ============================================================================
# ENGINE
# ============================================================================

class TransitionEngine:
    """
    Pure state transition function for the paper cash ledger.

    The engine holds no ledger state of its own; the same instance can be
    used against any number of states.

    Example:
        engine = TransitionEngine()
        state = engine.apply(LedgerState.empty(), Mint(Participant.ALICE, 20))
        assert state.next_serial == 1
    """

    def __init__(
        self,
        verbose: bool = False,
        extra_checks: Tuple[TransferCheck, ...] = (),
    ):
        """
        Create an engine.

        Args:
            verbose: Print a line for each evaluated transaction
            extra_checks: Additional transfer checks. They run only after
                every check in DEFAULT_TRANSFER_CHECKS has passed and can
                tighten the rules, never relax them.
        """
        self.verbose = verbose
        self.extra_checks: Tuple[TransferCheck, ...] = tuple(extra_checks)

    @property
    def checks(self) -> Tuple[TransferCheck, ...]:
        """The full chain: the mandatory checks followed by any extras."""
        return DEFAULT_TRANSFER_CHECKS + self.extra_checks

    def apply(self, state: LedgerState, transaction: Transaction) -> LedgerState:
        """
        Compute the state that follows ``transaction``.

        Rejected transactions return ``state`` unchanged; nothing is raised.
        """
        return self.evaluate(state, transaction).state

    def evaluate(self, state: LedgerState, transaction: Transaction) -> TransitionOutcome:
        """
        Compute the next state and report why a transaction was rejected.

        Args:
            state: Current ledger state
            transaction: Mint or Transfer to apply

        Returns:
            TransitionOutcome; ``outcome.state`` is exactly what apply() returns.
        """
        if isinstance(transaction, Mint):
            outcome = self._mint(state, transaction)
        elif isinstance(transaction, Transfer):
            outcome = self._transfer(state, transaction)
        else:
            outcome = TransitionOutcome(state, RejectReason.UNSUPPORTED_TRANSACTION)

        if self.verbose:
            self._print_outcome(transaction, outcome)
        return outcome

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    @staticmethod
    def _mint(state: LedgerState, mint: Mint) -> TransitionOutcome:
        if state.next_serial >= U64_MAX:
            raise ValueError(
                f"Serial space exhausted: cannot mint at next_serial={state.next_serial}"
            )
        bill = Bill(owner=mint.minter, amount=mint.amount, serial=state.next_serial)
        return TransitionOutcome(state.with_bill(bill), created=(bill,))

    def _transfer(self, state: LedgerState, transfer: Transfer) -> TransitionOutcome:
        if not transfer.spends:
            return TransitionOutcome(state, RejectReason.EMPTY_SPENDS)

        if not transfer.receives:
            return self._burn(state, transfer)

        for check in self.checks:
            reason = check(state, transfer)
            if reason is not None:
                return TransitionOutcome(state, reason)

        return self._commit(state, transfer)

    @staticmethod
    def _burn(state: LedgerState, transfer: Transfer) -> TransitionOutcome:
        """
        Destroy every spend that is live; spends that are not live are ignored.

        The serial cursor does not move since nothing is created.
        """
        destroyed: List[Bill] = []
        for bill in transfer.spends:
            if bill in state.bills and bill not in destroyed:
                destroyed.append(bill)
        if not destroyed:
            return TransitionOutcome(state)
        remaining = state.bills.difference(destroyed)
        return TransitionOutcome(
            LedgerState(remaining, state.next_serial),
            destroyed=tuple(destroyed),
        )

    @staticmethod
    def _commit(state: LedgerState, transfer: Transfer) -> TransitionOutcome:
        # Receives go in before spends come out; one state is built.
        bills = state.bills.union(transfer.receives).difference(transfer.spends)
        return TransitionOutcome(
            LedgerState(bills, state.next_serial + len(transfer.receives)),
            created=transfer.receives,
            destroyed=transfer.spends,
        )

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @staticmethod
    def _print_outcome(transaction: Transaction, outcome: TransitionOutcome) -> None:
        if outcome.accepted:
            print(f"✓ {transaction!r}: +{len(outcome.created)} -{len(outcome.destroyed)} "
                  f"(next_serial={outcome.state.next_serial})")
        else:
            print(f"✗ REJECTED {transaction!r}: {outcome.reason.value}")


# ============================================================================
# MODULE-LEVEL API
# ============================================================================

_DEFAULT_ENGINE = TransitionEngine()


def apply(state: LedgerState, transaction: Transaction) -> LedgerState:
    """Apply ``transaction`` to ``state`` with the default engine."""
    return _DEFAULT_ENGINE.apply(state, transaction)


def evaluate(state: LedgerState, transaction: Transaction) -> TransitionOutcome:
    """Evaluate ``transaction`` against ``state`` with the default engine."""
    return _DEFAULT_ENGINE.evaluate(state, transaction)
