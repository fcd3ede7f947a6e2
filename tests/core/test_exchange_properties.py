# [TESTER] v1

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

from hypothesis import given, settings
from hypothesis import strategies as st

from simpleswap.core.clock import ManualClock
from simpleswap.core.exchange import SimpleSwap
from simpleswap.errors import SimpleSwapError
from simpleswap.state.balances import MAX_UINT256
from simpleswap.state.tokens import TokenFactory

OWNER = "0x" + "a1" * 20
NOW = 1_700_000_000
SUPPLY = 10**6 * 10**18

amounts = st.integers(min_value=1, max_value=10**23)


def _fresh_engine():
    tokens = TokenFactory()
    token_a = tokens.deploy(OWNER, "Token A", "TKA", 10**6)
    token_b = tokens.deploy(OWNER, "Token B", "TKB", 10**6)
    engine = SimpleSwap(tokens, clock=ManualClock(NOW))
    for token in (token_a, token_b):
        tokens.approve(token, OWNER, engine.address, MAX_UINT256)
    return tokens, engine, token_a, token_b


def _custody_matches(tokens, engine, token_a, token_b) -> bool:
    reserve_a, reserve_b = engine.get_reserves(token_a, token_b)
    return (
        tokens.balance_of(token_a, engine.address) == reserve_a
        and tokens.balance_of(token_b, engine.address) == reserve_b
    )


@settings(max_examples=60, deadline=None)
@given(a=amounts, b=amounts)
def test_sole_provider_round_trip_is_lossless(a: int, b: int) -> None:
    tokens, engine, token_a, token_b = _fresh_engine()
    _, _, shares = engine.add_liquidity(OWNER, token_a, token_b, a, b, 0, 0, OWNER, NOW)
    assert engine.remove_liquidity(OWNER, token_a, token_b, shares, 0, 0, OWNER, NOW) == (a, b)
    assert tokens.balance_of(token_a, OWNER) == SUPPLY
    assert tokens.balance_of(token_b, OWNER) == SUPPLY
    assert engine.total_liquidity(token_a, token_b) == 0


@settings(max_examples=60, deadline=None)
@given(
    a=amounts,
    b=amounts,
    trades=st.lists(st.tuples(st.booleans(), st.integers(min_value=1, max_value=10**22)), max_size=8),
)
def test_swaps_never_decrease_product(a: int, b: int, trades) -> None:
    tokens, engine, token_a, token_b = _fresh_engine()
    engine.add_liquidity(OWNER, token_a, token_b, a, b, 0, 0, OWNER, NOW)
    k = a * b
    for a_to_b, amount in trades:
        path = [token_a, token_b] if a_to_b else [token_b, token_a]
        try:
            engine.swap_exact_tokens_for_tokens(OWNER, amount, 0, path, OWNER, NOW)
        except SimpleSwapError:
            pass
        reserve_a, reserve_b = engine.get_reserves(token_a, token_b)
        assert reserve_a > 0 and reserve_b > 0
        assert reserve_a * reserve_b >= k
        k = reserve_a * reserve_b
        assert _custody_matches(tokens, engine, token_a, token_b)


@settings(max_examples=60, deadline=None)
@given(a=amounts, b=amounts, extra_a=amounts, extra_b=amounts)
def test_later_deposit_never_dilutes_existing_shares(a: int, b: int, extra_a: int, extra_b: int) -> None:
    tokens, engine, token_a, token_b = _fresh_engine()
    _, _, first = engine.add_liquidity(OWNER, token_a, token_b, a, b, 0, 0, OWNER, NOW)
    reserve_a, reserve_b = engine.get_reserves(token_a, token_b)
    try:
        used_a, used_b, minted = engine.add_liquidity(
            OWNER, token_a, token_b, extra_a, extra_b, 0, 0, OWNER, NOW
        )
    except SimpleSwapError as exc:
        assert exc.tag == "INSUFFICIENT_LIQUIDITY_MINTED"
        return
    # minted / total_before <= used / reserve on both sides
    assert minted * reserve_a <= used_a * first
    assert minted * reserve_b <= used_b * first
    assert used_a <= extra_a and used_b <= extra_b
    assert _custody_matches(tokens, engine, token_a, token_b)
