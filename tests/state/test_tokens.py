# [TESTER] v1

from __future__ import annotations

import pytest

from simpleswap.state.balances import MAX_UINT256, ZERO_ADDRESS
from simpleswap.state.tokens import TokenFactory

ETHER = 10**18
OWNER = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20
SPENDER = "0x" + "5e" * 20


@pytest.fixture
def factory() -> TokenFactory:
    return TokenFactory()


def test_deploy_mints_scaled_initial_supply(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    assert token.startswith("0x") and len(token) == 42
    assert factory.balance_of(token, OWNER) == ETHER
    assert factory.total_supply(token) == ETHER
    assert (factory.name(token), factory.symbol(token), factory.decimals(token)) == ("Token A", "TKA", 18)


def test_deploy_addresses_are_distinct(factory: TokenFactory) -> None:
    a = factory.deploy(OWNER, "Token A", "TKA")
    b = factory.deploy(OWNER, "Token A", "TKA")
    assert a != b
    assert [m.address for m in factory.tokens()] == sorted([a, b])


def test_mint_scales_by_decimals(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA")
    assert factory.mint(BOB, token, 5) == 5 * ETHER
    assert factory.balance_of(token, BOB) == 5 * ETHER


def test_mint_unknown_token_raises(factory: TokenFactory) -> None:
    with pytest.raises(KeyError):
        factory.mint(BOB, "0x" + "ff" * 20, 1)


def test_transfer_moves_balance(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    assert factory.transfer(token, OWNER, BOB, 10)
    assert factory.balance_of(token, BOB) == 10
    assert factory.balance_of(token, OWNER) == ETHER - 10


def test_transfer_failures_return_false(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    assert not factory.transfer(token, OWNER, BOB, ETHER + 1)
    assert not factory.transfer(token, OWNER, ZERO_ADDRESS, 1)
    assert not factory.transfer(token, OWNER, BOB, -1)
    assert not factory.transfer("0x" + "ff" * 20, OWNER, BOB, 1)
    assert factory.balance_of(token, OWNER) == ETHER


def test_transfer_from_consumes_allowance(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    assert factory.approve(token, OWNER, SPENDER, 100)
    assert factory.transfer_from(token, OWNER, BOB, 60, spender=SPENDER)
    assert factory.allowance(token, OWNER, SPENDER) == 40
    assert not factory.transfer_from(token, OWNER, BOB, 41, spender=SPENDER)
    assert factory.balance_of(token, BOB) == 60


def test_infinite_allowance_is_not_decremented(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    factory.approve(token, OWNER, SPENDER, MAX_UINT256)
    assert factory.transfer_from(token, OWNER, BOB, 123, spender=SPENDER)
    assert factory.allowance(token, OWNER, SPENDER) == MAX_UINT256


def test_owner_needs_no_allowance_for_itself(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    assert factory.transfer_from(token, OWNER, BOB, 5, spender=OWNER)


def test_atomic_rolls_back_on_exception(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    factory.approve(token, OWNER, SPENDER, 100)
    with pytest.raises(RuntimeError):
        with factory.atomic():
            factory.transfer_from(token, OWNER, BOB, 50, spender=SPENDER)
            factory.mint(BOB, token, 1)
            raise RuntimeError("abort")
    assert factory.balance_of(token, OWNER) == ETHER
    assert factory.balance_of(token, BOB) == 0
    assert factory.allowance(token, OWNER, SPENDER) == 100
    assert factory.total_supply(token) == ETHER


def test_nested_atomic_rolls_back_to_its_own_mark(factory: TokenFactory) -> None:
    token = factory.deploy(OWNER, "Token A", "TKA", 1)
    with factory.atomic():
        factory.transfer(token, OWNER, BOB, 1)
        with pytest.raises(RuntimeError):
            with factory.atomic():
                factory.transfer(token, OWNER, BOB, 2)
                raise RuntimeError("inner")
    assert factory.balance_of(token, BOB) == 1
