"""
wallet.py - Transaction builders for bill holders

Pure functions that turn an intent ("Alice pays Bob 15") into a Mint or
Transfer the engine will accept against a given state:
1. build_mint() - Mint request for a participant
2. build_transfer() - Transfer with serials assigned from the state
3. select_bills() - Pick an owner's bills covering an amount
4. compute_payment() - Full payment with change returned to the payer

All functions read the state only and return immutable results. A built
transaction is valid for the state it was built from; if the ledger moves
on, rebuild it (see CashLedger.execute(expected_state=...)).
"""

from __future__ import annotations
from typing import List, Sequence, Tuple

from .core import (
    Bill, LedgerState, Mint, Participant, Transfer,
    InsufficientFunds,
)


def build_mint(minter: Participant, amount: int) -> Mint:
    """Create a Mint request for ``amount`` owned by ``minter``."""
    return Mint(minter=minter, amount=amount)


def build_transfer(
    state: LedgerState,
    spends: Sequence[Bill],
    outputs: Sequence[Tuple[Participant, int]],
) -> Transfer:
    """
    Build a Transfer whose received bills carry the serials the state expects.

    Args:
        state: State the transfer will be applied to
        spends: Live bills to destroy
        outputs: (owner, amount) pairs for the bills to create, in order

    Returns:
        Transfer with receives[i].serial == state.next_serial + i

    Example:
        transfer = build_transfer(state, [bill], [(Participant.BOB, 15), (Participant.ALICE, 5)])
    """
    receives = tuple(
        Bill(owner=owner, amount=amount, serial=state.next_serial + i)
        for i, (owner, amount) in enumerate(outputs)
    )
    return Transfer(spends=tuple(spends), receives=receives)


def select_bills(state: LedgerState, owner: Participant, amount: int) -> Tuple[Bill, ...]:
    """
    Select bills held by ``owner`` whose total covers ``amount``.

    Bills are taken oldest first (lowest serial) until the running total
    reaches ``amount``.

    Raises:
        InsufficientFunds: If the owner's balance is below ``amount``
    """
    selected: List[Bill] = []
    total = 0
    for bill in state.bills_of(owner):
        if total >= amount:
            break
        selected.append(bill)
        total += bill.amount
    if total < amount:
        raise InsufficientFunds(
            f"{owner.value} holds {state.balance_of(owner)}, needs {amount}"
        )
    return tuple(selected)


def compute_payment(
    state: LedgerState,
    payer: Participant,
    payee: Participant,
    amount: int,
) -> Transfer:
    """
    Build a Transfer paying ``amount`` from ``payer`` to ``payee``.

    Whole bills are spent, so any excess comes back to the payer as a
    change bill created right after the payee's bill.

    Args:
        state: State the payment will be applied to
        payer: Participant spending bills
        payee: Participant receiving ``amount``
        amount: Value to pay (must be positive)

    Returns:
        Transfer that the engine accepts against ``state``

    Raises:
        ValueError: If amount is not positive
        InsufficientFunds: If the payer cannot cover ``amount``
    """
    if amount <= 0:
        raise ValueError(f"amount must be positive, got {amount}")

    spends = select_bills(state, payer, amount)
    change = sum(b.amount for b in spends) - amount

    outputs = [(payee, amount)]
    if change > 0:
        outputs.append((payer, change))
    return build_transfer(state, spends, outputs)
