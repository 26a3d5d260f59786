"""
ledger.py - Stateful Paper Cash Ledger

The CashLedger class is the single writer for an evolving ledger state.
The transition engine is pure; CashLedger serializes calls to it, keeps
the current snapshot, and records every accepted transition.

Key responsibilities:
    - Executes transactions atomically through the TransitionEngine
    - Optional optimistic-concurrency guard against a stale expected state
    - Audit trail of accepted transitions (state digests before and after)
    - Tracks minted and burned value for conservation checks
    - Temporal operations: clone, state_at, replay
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .core import (
    Bill, LedgerState, Participant, RejectReason, Transaction, Mint,
    LedgerError, LedgerStateMismatch,
)
from .engine import TransitionEngine, TransitionOutcome


class ExecuteResult(Enum):
    """
    Outcome of a CashLedger.execute() call.

    APPLIED: The transaction was accepted and the ledger state advanced.
    REJECTED: The transaction failed validation; the state is unchanged.
    STALE: The caller's expected state no longer matches the ledger.
    """
    APPLIED = "applied"
    REJECTED = "rejected"
    STALE = "stale"


@dataclass(frozen=True, slots=True)
class TransitionRecord:
    """
    An accepted transition - represents FACT.

    Attributes:
        sequence_number: Monotonic position in the ledger's log (from 0)
        transaction: The Mint or Transfer that was applied
        intent_id: Content hash of the transaction
        state_before: Digest of the state the transaction was applied to
        state_after: Digest of the resulting state
        created: Bills inserted by the transition
        destroyed: Bills removed by the transition
    """
    sequence_number: int
    transaction: Transaction
    intent_id: str
    state_before: str
    state_after: str
    created: Tuple[Bill, ...]
    destroyed: Tuple[Bill, ...]

    @property
    def minted(self) -> int:
        """Value created from nothing (mints only)."""
        if isinstance(self.transaction, Mint):
            return sum(b.amount for b in self.created)
        return 0

    @property
    def burned(self) -> int:
        """Value destroyed: spent value minus received value."""
        if isinstance(self.transaction, Mint):
            return 0
        return sum(b.amount for b in self.destroyed) - sum(b.amount for b in self.created)

    def __repr__(self) -> str:
        return (f"TransitionRecord(#{self.sequence_number} {self.transaction!r} "
                f"+{len(self.created)} -{len(self.destroyed)})")


class CashLedger:
    """
    Single-writer ledger holding the current state and an audit trail.

    Design Principles:
        - Always validates: every transaction goes through the engine.
        - Always logs: every accepted transaction is recorded, enabling
          state_at() and replay().

    Thread Safety:
        Not thread-safe. Each thread should hold its own CashLedger, or
        callers must serialize access.

    Example:
        ledger = CashLedger("main")
        ledger.execute(Mint(Participant.ALICE, 20))
        ledger.execute(compute_payment(ledger.state, Participant.ALICE, Participant.BOB, 5))
    """

    def __init__(
        self,
        name: str,
        genesis: Optional[LedgerState] = None,
        verbose: bool = True,
        test_mode: bool = False,
        engine: Optional[TransitionEngine] = None,
    ):
        """
        Create a ledger.

        Args:
            name: Ledger identifier
            genesis: Starting state (default: empty state)
            verbose: Print a line per executed transaction (default: True)
            test_mode: Allow set_state() calls (default: False)
            engine: Transition engine (default: a quiet TransitionEngine)
        """
        self.name = name
        self.verbose = verbose
        self._test_mode = test_mode
        self.engine = engine if engine is not None else TransitionEngine()
        self._genesis: LedgerState = genesis if genesis is not None else LedgerState.empty()
        self._state: LedgerState = self._genesis
        self.transaction_log: List[TransitionRecord] = []
        self.last_rejection: Optional[RejectReason] = None
        self.minted_total: int = 0
        self.burned_total: int = 0

    # ========================================================================
    # READ-ONLY ACCESS
    # ========================================================================

    @property
    def state(self) -> LedgerState:
        """Current state snapshot. Later transitions do not affect it."""
        return self._state

    @property
    def genesis(self) -> LedgerState:
        return self._genesis

    @property
    def next_serial(self) -> int:
        return self._state.next_serial

    @property
    def bills(self) -> Tuple[Bill, ...]:
        """Live bills in serial order."""
        return self._state.sorted_bills()

    def balance_of(self, owner: Participant) -> int:
        return self._state.balance_of(owner)

    def total_supply(self) -> int:
        return self._state.total_supply()

    def verify_conservation(self) -> Dict[str, Any]:
        """
        Verify that circulating value is fully explained by the log.

        Value enters only through mints and leaves only through burns
        (explicit or implicit), so relative to genesis:

            supply == genesis_supply + minted - burned

        Returns:
            Dict with keys:
            - 'valid': bool - True if the identity holds
            - 'supply': int - Current total supply
            - 'minted': int - Value minted since genesis
            - 'burned': int - Value burned since genesis
            - 'discrepancy': int - supply minus the expected supply
        """
        expected = self._genesis.total_supply() + self.minted_total - self.burned_total
        supply = self._state.total_supply()
        return {
            'valid': supply == expected,
            'supply': supply,
            'minted': self.minted_total,
            'burned': self.burned_total,
            'discrepancy': supply - expected,
        }

    # ========================================================================
    # TRANSACTION EXECUTION (Mutating)
    # ========================================================================

    def execute(
        self,
        transaction: Transaction,
        expected_state: Optional[LedgerState] = None,
    ) -> ExecuteResult:
        """
        Execute a transaction against the current state.

        Args:
            transaction: Mint or Transfer to apply
            expected_state: If given, the state the caller built the
                transaction against. When the ledger has moved on, nothing
                is applied and STALE is returned so the caller can rebuild
                and retry.

        Returns:
            ExecuteResult.APPLIED if the state advanced
            ExecuteResult.REJECTED if validation failed
            ExecuteResult.STALE if expected_state is out of date
        """
        if expected_state is not None and expected_state != self._state:
            if self.verbose:
                print(f"⚠️  STALE: {transaction!r} built against an older state")
            return ExecuteResult.STALE

        outcome = self.engine.evaluate(self._state, transaction)
        if not outcome.accepted:
            self.last_rejection = outcome.reason
            if self.verbose:
                print(f"✗ REJECTED: {transaction!r}: {outcome.reason.value}")
            return ExecuteResult.REJECTED

        record = self._record(transaction, outcome)
        self._state = outcome.state
        self.last_rejection = None

        if self.verbose:
            print(f"✓ APPLIED: {record!r} next_serial={self._state.next_serial}")
        return ExecuteResult.APPLIED

    def execute_many(self, transactions: List[Transaction]) -> List[ExecuteResult]:
        """Execute transactions in order; each is independent of the others' outcome."""
        return [self.execute(tx) for tx in transactions]

    def _record(self, transaction: Transaction, outcome: TransitionOutcome) -> TransitionRecord:
        record = TransitionRecord(
            sequence_number=len(self.transaction_log),
            transaction=transaction,
            intent_id=transaction.intent_id,
            state_before=self._state.digest(),
            state_after=outcome.state.digest(),
            created=outcome.created,
            destroyed=outcome.destroyed,
        )
        self.transaction_log.append(record)
        self.minted_total += record.minted
        self.burned_total += record.burned
        return record

    def set_state(self, state: LedgerState) -> None:
        """
        Replace the current state directly.

        WARNING: This bypasses the engine and is only available in test
        mode. The state also becomes the new genesis and the log is cleared,
        so replay() stays consistent.

        Raises:
            LedgerError: If called when test_mode is False
        """
        if not self._test_mode:
            raise LedgerError(
                "set_state() is disabled in production mode. "
                "Use execute() to change the ledger state. "
                "Set test_mode=True when creating CashLedger for testing."
            )
        self._genesis = state
        self._state = state
        self.transaction_log = []
        self.minted_total = 0
        self.burned_total = 0

    # ========================================================================
    # LEDGER OPERATIONS
    # ========================================================================

    def clone(self) -> CashLedger:
        """
        Create an independent copy of this ledger.

        States and records are immutable, so sharing them is safe; the log
        list itself is copied.
        """
        cloned = CashLedger.__new__(CashLedger)
        cloned.name = self.name
        cloned.verbose = self.verbose
        cloned._test_mode = self._test_mode
        cloned.engine = self.engine
        cloned._genesis = self._genesis
        cloned._state = self._state
        cloned.transaction_log = list(self.transaction_log)
        cloned.last_rejection = self.last_rejection
        cloned.minted_total = self.minted_total
        cloned.burned_total = self.burned_total
        return cloned

    def state_at(self, sequence: int) -> LedgerState:
        """
        Reconstruct the state after the first ``sequence`` logged transitions.

        Args:
            sequence: Number of records to apply (0 = genesis)

        Raises:
            ValueError: If sequence is negative or beyond the log
        """
        if sequence < 0 or sequence > len(self.transaction_log):
            raise ValueError(
                f"sequence {sequence} outside log of length {len(self.transaction_log)}"
            )
        state = self._genesis
        for record in self.transaction_log[:sequence]:
            state = self.engine.apply(state, record.transaction)
        return state

    def replay(self, from_tx: int = 0) -> CashLedger:
        """
        Create a new ledger by re-executing the transition log.

        Replay starts from the state reached after ``from_tx`` records and
        checks every re-executed transition against the recorded digests.

        Args:
            from_tx: Starting record index (0 = replay from genesis)

        Returns:
            New CashLedger with the replayed state and log

        Raises:
            LedgerStateMismatch: If a transition is rejected or produces a
                different state than the one recorded
        """
        start = self.state_at(from_tx)
        new_ledger = CashLedger(
            name=f"{self.name}_replayed",
            genesis=start,
            verbose=self.verbose,
            test_mode=self._test_mode,
            engine=self.engine,
        )
        for record in self.transaction_log[from_tx:]:
            if new_ledger.state.digest() != record.state_before:
                raise LedgerStateMismatch(
                    f"Replay diverged before record {record.sequence_number}"
                )
            result = new_ledger.execute(record.transaction)
            if result != ExecuteResult.APPLIED:
                raise LedgerStateMismatch(
                    f"Replay failed at record {record.sequence_number}: "
                    f"{new_ledger.last_rejection}"
                )
            if new_ledger.state.digest() != record.state_after:
                raise LedgerStateMismatch(
                    f"Replay produced a different state at record {record.sequence_number}"
                )
        return new_ledger
