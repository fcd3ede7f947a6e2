# [TESTER] v1

from __future__ import annotations

from dataclasses import dataclass

import pytest

from simpleswap.core.clock import ManualClock
from simpleswap.core.exchange import SimpleSwap
from simpleswap.state.balances import MAX_UINT256
from simpleswap.state.tokens import TokenFactory

ETHER = 10**18
NOW = 1_700_000_000


@dataclass
class Market:
    tokens: TokenFactory
    engine: SimpleSwap
    clock: ManualClock
    token_a: str
    token_b: str
    owner: str = "0x" + "a1" * 20
    user: str = "0x" + "b2" * 20

    def deadline(self, delta: int = 1000) -> int:
        return self.clock.now() + delta

    def approve_all(self, who: str) -> None:
        for token in (self.token_a, self.token_b):
            self.tokens.approve(token, who, self.engine.address, MAX_UINT256)

    def add(self, amount_a: int, amount_b: int, *, who: str | None = None, min_a: int = 0, min_b: int = 0):
        who = who or self.owner
        return self.engine.add_liquidity(
            who, self.token_a, self.token_b, amount_a, amount_b, min_a, min_b, who, self.deadline()
        )


def make_market(tokens: TokenFactory | None = None) -> Market:
    tokens = tokens or TokenFactory()
    clock = ManualClock(NOW)
    owner = Market.owner
    token_a = tokens.deploy(owner, "Token A", "TKA", 1)
    token_b = tokens.deploy(owner, "Token B", "TKB", 1)
    engine = SimpleSwap(tokens, clock=clock)
    m = Market(tokens=tokens, engine=engine, clock=clock, token_a=token_a, token_b=token_b)
    m.approve_all(owner)
    return m


@pytest.fixture
def market() -> Market:
    return make_market()
