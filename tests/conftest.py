"""
conftest.py - Shared pytest fixtures for papercash tests

Provides common fixtures used across unit, conformance and functional tests:
- States (single bill, several owners)
- Ledgers (quiet, test mode, funded)
"""

import pytest
from papercash import (
    Bill, CashLedger, LedgerState, Mint, Participant, ExecuteResult,
)


ALICE = Participant.ALICE
BOB = Participant.BOB
CHARLIE = Participant.CHARLIE


# =============================================================================
# STATE FIXTURES
# =============================================================================

@pytest.fixture
def alice_20():
    """Alice holds one bill of 20 with serial 0."""
    return Bill(ALICE, 20, 0)


@pytest.fixture
def alice_state(alice_20):
    """State holding only alice_20; next_serial is 1."""
    return LedgerState.from_bills([alice_20])


@pytest.fixture
def mixed_state():
    """Alice 40 (#0), Charlie 42 (#1), Bob 10 (#2); next_serial is 3."""
    return LedgerState.from_bills([
        Bill(ALICE, 40, 0),
        Bill(CHARLIE, 42, 1),
        Bill(BOB, 10, 2),
    ])


# =============================================================================
# LEDGER FIXTURES
# =============================================================================

@pytest.fixture
def ledger():
    """Quiet, empty ledger."""
    return CashLedger("test", verbose=False, test_mode=True)


@pytest.fixture
def funded_ledger(ledger):
    """Alice minted 100 (#0), Bob minted 50 (#1)."""
    assert ledger.execute(Mint(ALICE, 100)) == ExecuteResult.APPLIED
    assert ledger.execute(Mint(BOB, 50)) == ExecuteResult.APPLIED
    return ledger
