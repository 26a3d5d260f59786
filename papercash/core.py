"""
Core types and pure functions for the paper cash ledger.

This module provides the foundational data structures for the ledger:
1. Enums: Participant, RejectReason
2. Immutable data structures: Bill, Mint, Transfer, LedgerState
3. Exceptions: LedgerError and domain-specific error types
4. Canonicalization helpers used for content-addressed identifiers

All types in this module are immutable. No function here can mutate a
ledger state; new states are produced only by the transition engine.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import hashlib
from typing import Any, FrozenSet, Iterable, Iterator, Optional, Tuple, Union


# ============================================================================
# CONSTANTS
# ============================================================================

# Bill amounts and serial numbers are unsigned 64-bit integers.
U64_MAX = 2 ** 64 - 1

# The serial number assigned to the first bill of a fresh ledger.
GENESIS_SERIAL = 0

# Number of hex characters kept from a sha256 content hash.
INTENT_ID_LENGTH = 16


# ============================================================================
# ENUMS
# ============================================================================

class Participant(Enum):
    """
    Closed set of participant identities that can own bills.

    The ledger treats a participant as an opaque label: only equality is
    ever used.
    """
    ALICE = "alice"
    BOB = "bob"
    CHARLIE = "charlie"

    def __repr__(self) -> str:
        return f"Participant.{self.name}"


class RejectReason(Enum):
    """
    Why a transfer was refused.

    Rejections are policy outcomes, not faults: the state is returned
    unchanged and the reason is reported for diagnostics.

    Only the first failing check is reported. Spending the same
    large bill twice can overflow the spent total before the duplicate
    check runs, so it is reported as SPEND_OVERFLOW.
    """
    EMPTY_SPENDS = "empty_spends"
    ZERO_AMOUNT_RECEIVE = "zero_amount_receive"
    RECEIVE_EQUALS_SPEND = "receive_equals_spend"
    RECEIVE_OVERFLOW = "receive_overflow"
    UNKNOWN_SPEND = "unknown_spend"
    SPEND_OVERFLOW = "spend_overflow"
    DUPLICATE_SPEND = "duplicate_spend"
    SERIAL_COLLISION = "serial_collision"
    SERIAL_NOT_CONTIGUOUS = "serial_not_contiguous"
    SERIAL_EXHAUSTED = "serial_exhausted"
    VALUE_CREATED = "value_created"
    UNSUPPORTED_TRANSACTION = "unsupported_transaction"


# ============================================================================
# EXCEPTIONS
# ============================================================================

class LedgerError(Exception):
    """Base exception for all ledger-related errors."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when an owner's bills cannot cover a requested payment."""
    pass


class LedgerStateMismatch(LedgerError):
    """Raised when replaying the transition log does not reproduce the recorded state."""
    pass


# ============================================================================
# VALIDATION HELPERS
# ============================================================================

def _check_u64(name: str, value: Any) -> None:
    """Raise ValueError unless value is a plain int in the u64 range."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be int, got {type(value).__name__}")
    if value < 0 or value > U64_MAX:
        raise ValueError(f"{name} out of u64 range: {value}")


def _check_participant(name: str, value: Any) -> None:
    if not isinstance(value, Participant):
        raise ValueError(f"{name} must be a Participant, got {value!r}")


def checked_add(total: int, amount: int) -> Optional[int]:
    """
    Add two u64 values, returning None if the result overflows.

    Python integers never wrap, so the u64 bound is enforced explicitly.
    """
    result = total + amount
    if result > U64_MAX:
        return None
    return result


# ============================================================================
# CORE DATA STRUCTURES
# ============================================================================

@dataclass(frozen=True, slots=True)
class Bill:
    """
    A single bearer bill: an indivisible unit of value with one owner.

    Attributes:
        owner: The participant allowed to spend the bill.
        amount: Value of the bill (u64).
        serial: Unique serial number (u64), never reused.

    Equality and hashing use all three fields, so two bills that share a
    serial but differ in owner or amount are distinct set members.

    This class is immutable (frozen=True) and memory-optimized (slots=True).
    All fields are validated in __post_init__.
    """
    owner: Participant
    amount: int
    serial: int

    def __post_init__(self):
        _check_participant("Bill owner", self.owner)
        _check_u64("Bill amount", self.amount)
        _check_u64("Bill serial", self.serial)

    def __repr__(self) -> str:
        return f"Bill(#{self.serial} {self.amount} → {self.owner.value})"


@dataclass(frozen=True, slots=True)
class Mint:
    """
    Request to create one new bill owned by the minter.

    Minting authority is checked outside the ledger; the engine only does
    the bookkeeping.
    """
    minter: Participant
    amount: int

    def __post_init__(self):
        _check_participant("Mint minter", self.minter)
        _check_u64("Mint amount", self.amount)

    @property
    def intent_id(self) -> str:
        """Content hash of this request (same inputs, same id)."""
        return _hash_content(f"mint:{self.minter.value}|{self.amount}")

    def __repr__(self) -> str:
        return f"Mint({self.amount} → {self.minter.value})"


@dataclass(frozen=True, slots=True)
class Transfer:
    """
    Request to destroy the bills in ``spends`` and create those in ``receives``.

    Both sides are ordered. Order of ``receives`` matters: the i-th received
    bill must carry serial ``next_serial + i``. Lists are accepted and stored
    as tuples.

    Attributes:
        spends: Bills to destroy, each of which must currently exist.
        receives: Bills to create. Total value must not exceed the spent value;
            any difference is destroyed.
    """
    spends: Tuple[Bill, ...] = ()
    receives: Tuple[Bill, ...] = ()

    def __post_init__(self):
        spends = tuple(self.spends)
        receives = tuple(self.receives)
        for bill in spends + receives:
            if not isinstance(bill, Bill):
                raise ValueError(f"Transfer entries must be Bill, got {type(bill).__name__}")
        object.__setattr__(self, 'spends', spends)
        object.__setattr__(self, 'receives', receives)

    @property
    def intent_id(self) -> str:
        """Content hash of this request; entry order is part of the content."""
        content = "|".join(
            [f"spend:{_canonical_bill(b)}" for b in self.spends]
            + [f"receive:{_canonical_bill(b)}" for b in self.receives]
        )
        return _hash_content(f"transfer:{content}")

    def __repr__(self) -> str:
        return f"Transfer({len(self.spends)} spends, {len(self.receives)} receives)"


# A transaction is a tagged choice between the two request types.
Transaction = Union[Mint, Transfer]


@dataclass(frozen=True)
class LedgerState:
    """
    Snapshot of the ledger: the live bills and the next serial to assign.

    States are immutable and compared structurally: two states are equal
    only when both the bill set and ``next_serial`` match.

    Attributes:
        bills: Set of currently circulating (unspent) bills.
        next_serial: Serial number the next created bill will receive.
    """
    bills: FrozenSet[Bill] = field(default_factory=frozenset)
    next_serial: int = GENESIS_SERIAL

    def __post_init__(self):
        bills = frozenset(self.bills)
        for bill in bills:
            if not isinstance(bill, Bill):
                raise ValueError(f"LedgerState bills must be Bill, got {type(bill).__name__}")
        _check_u64("LedgerState next_serial", self.next_serial)
        object.__setattr__(self, 'bills', bills)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def empty(cls) -> LedgerState:
        """A fresh ledger with no bills and next_serial at genesis."""
        return cls()

    @classmethod
    def from_bills(cls, bills: Iterable[Bill]) -> LedgerState:
        """
        Build a genesis state by inserting bills in iteration order.

        Each inserted bill advances ``next_serial`` by one, exactly as the
        engine does on insertion. The bills' own serials are not checked.

        Example:
            state = LedgerState.from_bills([Bill(Participant.ALICE, 20, 0)])
            assert state.next_serial == 1
        """
        inserted = list(bills)
        return cls(frozenset(inserted), GENESIS_SERIAL + len(inserted))

    def with_bill(self, bill: Bill) -> LedgerState:
        """Return a new state with ``bill`` inserted and the serial advanced."""
        return LedgerState(self.bills | {bill}, self.next_serial + 1)

    def with_next_serial(self, serial: int) -> LedgerState:
        """Return a copy with the serial cursor moved (genesis and tests only)."""
        return LedgerState(self.bills, serial)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def contains(self, bill: Bill) -> bool:
        """True if exactly this bill (owner, amount and serial) is live."""
        return bill in self.bills

    def __contains__(self, bill: object) -> bool:
        return bill in self.bills

    def __len__(self) -> int:
        return len(self.bills)

    def __iter__(self) -> Iterator[Bill]:
        return iter(self.sorted_bills())

    def sorted_bills(self) -> Tuple[Bill, ...]:
        """Live bills in serial order (ties broken by owner and amount)."""
        return tuple(sorted(self.bills, key=_bill_sort_key))

    def bills_of(self, owner: Participant) -> Tuple[Bill, ...]:
        """Live bills held by ``owner``, in serial order."""
        return tuple(b for b in self.sorted_bills() if b.owner == owner)

    def balance_of(self, owner: Participant) -> int:
        """Total value of the bills held by ``owner``."""
        return sum(b.amount for b in self.bills if b.owner == owner)

    def total_supply(self) -> int:
        """Total value of all live bills."""
        return sum(b.amount for b in self.bills)

    def find(self, serial: int) -> Optional[Bill]:
        """Return the live bill with ``serial``, or None."""
        for bill in self.bills:
            if bill.serial == serial:
                return bill
        return None

    def digest(self) -> str:
        """
        Deterministic content hash of the state.

        Bills are rendered in serial order so the digest does not depend on
        set iteration order.
        """
        content = "|".join(_canonical_bill(b) for b in self.sorted_bills())
        return _hash_content(f"state:{self.next_serial}|{content}")

    def __repr__(self) -> str:
        bills = ", ".join(repr(b) for b in self.sorted_bills())
        return f"LedgerState(next_serial={self.next_serial}, bills=[{bills}])"


# ============================================================================
# CANONICALIZATION
# ============================================================================

def _bill_sort_key(bill: Bill) -> Tuple[int, str, int]:
    return (bill.serial, bill.owner.value, bill.amount)


def _canonical_bill(bill: Bill) -> str:
    return f"{bill.serial}:{bill.owner.value}:{bill.amount}"


def _hash_content(content: str) -> str:
    return hashlib.sha256(content.encode()).hexdigest()[:INTENT_ID_LENGTH]
