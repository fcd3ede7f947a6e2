#!/usr/bin/env python3

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from simpleswap.config import config_from_env
from simpleswap.core.exchange import SimpleSwap
from simpleswap.errors import SimpleSwapError
from simpleswap.state.balances import MAX_UINT256
from simpleswap.state.tokens import TokenFactory

ETHER = 10**18


def _now() -> int:
    return int(time.time())


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    owner = "0x" + "a1" * 20
    trader = "0x" + "b2" * 20

    tokens = TokenFactory()
    token_a = tokens.deploy(owner, "Token A", "TKA", 1)
    token_b = tokens.deploy(owner, "Token B", "TKB", 1)

    engine = SimpleSwap(tokens, config=config_from_env())
    tokens.approve(token_a, owner, engine.address, MAX_UINT256)
    tokens.approve(token_b, owner, engine.address, MAX_UINT256)

    deadline = _now() + 3600
    amount_a, amount_b, shares = engine.add_liquidity(
        owner, token_a, token_b, ETHER // 10, ETHER // 5, 0, 0, owner, deadline
    )
    print(f"[offline-demo] deposited a={amount_a} b={amount_b} shares={shares}")
    print(f"[offline-demo] price (B per A, 1e18 scale) = {engine.get_price(token_a, token_b)}")

    tokens.transfer(token_a, owner, trader, ETHER // 100)
    tokens.approve(token_a, trader, engine.address, MAX_UINT256)
    amount_out = engine.swap_exact_tokens_for_tokens(trader, ETHER // 100, 0, [token_a, token_b], trader, deadline)
    print(f"[offline-demo] swapped {ETHER // 100} TKA for {amount_out} TKB")
    print(f"[offline-demo] reserves after swap: {engine.get_reserves(token_a, token_b)}")

    try:
        engine.swap_exact_tokens_for_tokens(trader, 1, 0, [token_a], trader, deadline)
    except SimpleSwapError as exc:
        print(f"[offline-demo] rejected as expected: {exc.tag}")

    out_a, out_b = engine.remove_liquidity(owner, token_a, token_b, shares, 0, 0, owner, deadline)
    print(f"[offline-demo] withdrew a={out_a} b={out_b}; total shares now {engine.total_liquidity(token_a, token_b)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
