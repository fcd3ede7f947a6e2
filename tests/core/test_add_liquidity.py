# [TESTER] v1

from __future__ import annotations

import pytest

from simpleswap.errors import (
    Expired,
    IdenticalAddresses,
    InsufficientAOrB,
    InsufficientLiquidityMinted,
    Overflow,
    TransferFailed,
    ZeroAddress,
)
from simpleswap.kernels.python.int_math import isqrt
from simpleswap.state.balances import ZERO_ADDRESS

ETHER = 10**18


def test_first_deposit_uses_desired_amounts(market) -> None:
    a, b, shares = market.add(ETHER // 10, ETHER // 5)
    assert (a, b) == (ETHER // 10, ETHER // 5)
    assert shares == isqrt((ETHER // 10) * (ETHER // 5))
    assert market.engine.get_reserves(market.token_a, market.token_b) == (ETHER // 10, ETHER // 5)
    assert market.engine.get_reserves(market.token_b, market.token_a) == (ETHER // 5, ETHER // 10)
    assert market.engine.total_liquidity(market.token_a, market.token_b) == shares
    assert market.engine.balance_of(market.owner, market.token_b, market.token_a) == shares


def test_first_deposit_moves_assets_into_custody(market) -> None:
    market.add(ETHER // 10, ETHER // 5)
    tokens, engine = market.tokens, market.engine
    assert tokens.balance_of(market.token_a, market.owner) == ETHER - ETHER // 10
    assert tokens.balance_of(market.token_b, market.owner) == ETHER - ETHER // 5
    assert tokens.balance_of(market.token_a, engine.address) == ETHER // 10
    assert tokens.balance_of(market.token_b, engine.address) == ETHER // 5


def test_minimums_are_ignored_for_an_empty_pool(market) -> None:
    a, b, _ = market.add(10**6, 10**6, min_a=10**9, min_b=10**9)
    assert (a, b) == (10**6, 10**6)


def test_proportional_deposit_issues_proportional_shares(market) -> None:
    _, _, first = market.add(ETHER // 10, ETHER // 5)
    a, b, shares = market.add(5 * 10**16, 10**17, min_a=49 * 10**15, min_b=99 * 10**15)
    assert (a, b) == (5 * 10**16, 10**17)
    assert shares == first // 2
    assert market.engine.total_liquidity(market.token_a, market.token_b) == first + shares


def test_deposit_follows_pool_ratio(market) -> None:
    market.add(ETHER // 10, ETHER // 5)
    # b is capped at the pool ratio; the excess stays with the caller.
    a, b, _ = market.add(10**16, 10**17)
    assert (a, b) == (10**16, 2 * 10**16)
    assert market.engine.get_price(market.token_a, market.token_b) == 2 * ETHER


def test_deposit_below_minimum_is_rejected(market) -> None:
    market.add(ETHER // 10, ETHER // 5)
    before = market.tokens.balance_of(market.token_a, market.owner)
    with pytest.raises(InsufficientAOrB) as exc_info:
        market.add(10**16, 10**17, min_a=2 * 10**16, min_b=9 * 10**16)
    assert str(exc_info.value).startswith("SimpleSwap: INSUFFICIENT_A_OR_B")
    assert market.tokens.balance_of(market.token_a, market.owner) == before


def test_zero_share_deposit_is_rejected(market) -> None:
    with pytest.raises(InsufficientLiquidityMinted):
        market.add(10**6, 0)
    assert market.engine.total_liquidity(market.token_a, market.token_b) == 0
    assert market.tokens.balance_of(market.token_a, market.owner) == ETHER


def test_shares_go_to_recipient(market) -> None:
    engine = market.engine
    _, _, shares = engine.add_liquidity(
        market.owner, market.token_a, market.token_b, 1000, 1000, 0, 0, market.user, market.deadline()
    )
    assert engine.balance_of(market.user, market.token_a, market.token_b) == shares
    assert engine.balance_of(market.owner, market.token_a, market.token_b) == 0


def test_deadline_equal_to_now_is_accepted(market) -> None:
    engine = market.engine
    engine.add_liquidity(
        market.owner, market.token_a, market.token_b, 1000, 1000, 0, 0, market.owner, market.clock.now()
    )


def test_expired_deadline_is_rejected(market) -> None:
    with pytest.raises(Expired):
        market.engine.add_liquidity(
            market.owner, market.token_a, market.token_b, 1000, 1000, 0, 0, market.owner, market.clock.now() - 1
        )


def test_identical_tokens_are_rejected(market) -> None:
    with pytest.raises(IdenticalAddresses):
        market.engine.add_liquidity(
            market.owner, market.token_a, market.token_a, 1000, 1000, 0, 0, market.owner, market.deadline()
        )


@pytest.mark.parametrize("where", ["token", "recipient"])
def test_zero_address_is_rejected(market, where: str) -> None:
    token_b = ZERO_ADDRESS if where == "token" else market.token_b
    to = ZERO_ADDRESS if where == "recipient" else market.owner
    with pytest.raises(ZeroAddress):
        market.engine.add_liquidity(market.owner, market.token_a, token_b, 1000, 1000, 0, 0, to, market.deadline())


def test_missing_allowance_fails_the_transfer(market) -> None:
    market.tokens.transfer(market.token_a, market.owner, market.user, 1000)
    market.tokens.transfer(market.token_b, market.owner, market.user, 1000)
    with pytest.raises(TransferFailed):
        market.add(1000, 1000, who=market.user)
    assert market.tokens.balance_of(market.token_a, market.user) == 1000
    assert market.engine.total_liquidity(market.token_a, market.token_b) == 0


def test_insufficient_balance_fails_the_transfer(market) -> None:
    with pytest.raises(TransferFailed):
        market.add(2 * ETHER, ETHER // 2)
    assert market.tokens.balance_of(market.token_a, market.owner) == ETHER


def test_amount_above_configured_bound_overflows(market) -> None:
    with pytest.raises(Overflow):
        market.add(market.engine.config.max_amount + 1, 1)


def test_negative_amount_is_a_value_error(market) -> None:
    with pytest.raises(ValueError):
        market.add(-1, 1000)
