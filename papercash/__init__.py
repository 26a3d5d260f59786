"""
papercash - Paper Cash Ledger

A bearer-bill ledger: every unit of value is an indivisible bill with one
owner and a unique serial number. Transactions destroy bills and create new
ones; the transition engine decides whether a transaction is allowed.

Usage:
    from papercash import (
        LedgerState, Participant, Mint, apply, compute_payment,
    )

    state = apply(LedgerState.empty(), Mint(Participant.ALICE, 20))

    # Alice pays Bob 15 and keeps 5 in change
    payment = compute_payment(state, Participant.ALICE, Participant.BOB, 15)
    state = apply(state, payment)
"""

# Core types
from .core import (
    Participant,
    Bill,
    Mint,
    Transfer,
    Transaction,
    LedgerState,
    RejectReason,
    LedgerError,
    InsufficientFunds,
    LedgerStateMismatch,
    checked_add,
    U64_MAX,
    GENESIS_SERIAL,
)

# Transition engine
from .engine import (
    TransitionEngine,
    TransitionOutcome,
    TransferCheck,
    DEFAULT_TRANSFER_CHECKS,
    apply,
    evaluate,
)

# Ledger
from .ledger import (
    CashLedger,
    ExecuteResult,
    TransitionRecord,
)

# Wallet helpers
from .wallet import (
    build_mint,
    build_transfer,
    select_bills,
    compute_payment,
)

__all__ = [
    # Core
    'Participant', 'Bill', 'Mint', 'Transfer', 'Transaction', 'LedgerState',
    'RejectReason', 'LedgerError', 'InsufficientFunds', 'LedgerStateMismatch',
    'checked_add', 'U64_MAX', 'GENESIS_SERIAL',
    # Engine
    'TransitionEngine', 'TransitionOutcome', 'TransferCheck',
    'DEFAULT_TRANSFER_CHECKS', 'apply', 'evaluate',
    # Ledger
    'CashLedger', 'ExecuteResult', 'TransitionRecord',
    # Wallet
    'build_mint', 'build_transfer', 'select_bills', 'compute_payment',
]

__version__ = '1.0.0'
