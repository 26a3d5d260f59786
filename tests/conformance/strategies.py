"""
Hypothesis strategies shared by the conformance suite.

Generated transactions are deliberately a mix of valid and invalid ones:
spends are drawn mostly from live bills, receives mostly carry the serials
the state expects, and amounts mostly stay within the spent total.
"""

from hypothesis import strategies as st

from papercash import (
    Bill, LedgerState, Mint, Participant, Transfer, U64_MAX, apply,
)


participants = st.sampled_from(list(Participant))

amounts = st.one_of(
    st.integers(min_value=0, max_value=1000),
    st.sampled_from([0, 1, U64_MAX - 1, U64_MAX]),
)


@st.composite
def bills(draw, max_serial=50):
    return Bill(
        owner=draw(participants),
        amount=draw(amounts),
        serial=draw(st.integers(min_value=0, max_value=max_serial)),
    )


@st.composite
def minted_states(draw, max_mints=6):
    """A state reached from empty by a sequence of mints."""
    state = LedgerState.empty()
    for _ in range(draw(st.integers(min_value=0, max_value=max_mints))):
        state = apply(state, Mint(draw(participants), draw(st.integers(min_value=0, max_value=1000))))
    return state


@st.composite
def transfers_for(draw, state):
    """A transfer against ``state`` that may or may not be valid."""
    live = state.sorted_bills()
    spends = []
    if live:
        spends = draw(st.lists(st.sampled_from(live), max_size=4))
    if draw(st.booleans()):
        spends = spends + draw(st.lists(bills(), max_size=2))

    spent_total = sum(b.amount for b in spends)
    receive_count = draw(st.integers(min_value=0, max_value=4))
    receives = []
    for i in range(receive_count):
        if draw(st.integers(min_value=0, max_value=9)) == 0:
            serial = draw(st.integers(min_value=0, max_value=60))
        else:
            serial = state.next_serial + i
        if spent_total and draw(st.booleans()):
            amount = draw(st.integers(min_value=0, max_value=max(spent_total // max(receive_count, 1), 1)))
        else:
            amount = draw(amounts)
        receives.append(Bill(draw(participants), amount, serial))

    return Transfer(spends=tuple(spends), receives=tuple(receives))


@st.composite
def transactions_for(draw, state):
    if draw(st.integers(min_value=0, max_value=4)) == 0:
        return Mint(draw(participants), draw(st.integers(min_value=0, max_value=1000)))
    return draw(transfers_for(state))


@st.composite
def state_and_transaction(draw):
    state = draw(minted_states())
    return state, draw(transactions_for(state))


@st.composite
def valid_transfers_for(draw, state):
    """
    A transfer the engine accepts against ``state``.

    Requires at least one live bill. Receives split at most the spent total
    into positive amounts; if the spent bills are worth nothing the
    transfer is a burn.
    """
    live = state.sorted_bills()
    spends = draw(st.lists(st.sampled_from(live), min_size=1, max_size=len(live), unique=True))
    spent_total = sum(b.amount for b in spends)

    outputs = []
    budget = draw(st.integers(min_value=0, max_value=spent_total))
    while budget > 0 and len(outputs) < 4:
        amount = draw(st.integers(min_value=1, max_value=budget))
        outputs.append((draw(participants), amount))
        budget -= amount

    receives = tuple(
        Bill(owner, amount, state.next_serial + i)
        for i, (owner, amount) in enumerate(outputs)
    )
    return Transfer(spends=tuple(spends), receives=receives)


@st.composite
def state_and_valid_transfer(draw):
    state = draw(minted_states(max_mints=6).filter(lambda s: len(s) > 0))
    return state, draw(valid_transfers_for(state))
