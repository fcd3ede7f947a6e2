# [TESTER] v1

from __future__ import annotations

import pytest

from simpleswap.core.clock import ManualClock
from simpleswap.core.exchange import SimpleSwap
from simpleswap.integration.snapshot import SNAPSHOT_VERSION, snapshot_from_engine
from simpleswap.state.balances import MAX_UINT256
from simpleswap.state.tokens import TokenFactory

OWNER = "0x" + "a1" * 20
NOW = 1_700_000_000


def _traded_engine() -> SimpleSwap:
    tokens = TokenFactory()
    token_a = tokens.deploy(OWNER, "Token A", "TKA", 1)
    token_b = tokens.deploy(OWNER, "Token B", "TKB", 1)
    engine = SimpleSwap(tokens, clock=ManualClock(NOW))
    for token in (token_a, token_b):
        tokens.approve(token, OWNER, engine.address, MAX_UINT256)
    engine.add_liquidity(OWNER, token_a, token_b, 1000, 4000, 0, 0, OWNER, NOW)
    engine.swap_exact_tokens_for_tokens(OWNER, 10, 0, [token_a, token_b], OWNER, NOW)
    return engine


def test_snapshot_lists_pools_and_shares(market) -> None:
    _, _, shares = market.add(1000, 4000)
    snap = snapshot_from_engine(market.engine)
    assert snap.version == SNAPSHOT_VERSION
    data = snap.data
    assert data["engine_address"] == market.engine.address
    assert data["price_scale"] == 10**18
    (pool,) = data["pools"]
    assert {pool["token0"], pool["token1"]} == {market.token_a, market.token_b}
    assert pool["total_shares"] == shares
    assert {pool["reserve0"], pool["reserve1"]} == {1000, 4000}
    assert data["shares"] == [
        {"owner": market.owner, "token0": pool["token0"], "token1": pool["token1"], "shares": shares}
    ]


def test_snapshot_commitment_is_deterministic() -> None:
    s1 = snapshot_from_engine(_traded_engine())
    s2 = snapshot_from_engine(_traded_engine())
    assert s1.canonical_bytes() == s2.canonical_bytes()
    assert s1.commitment_hex() == s2.commitment_hex()
    assert s1.commitment_hex().startswith("0x") and len(s1.commitment_hex()) == 66


def test_commitment_tracks_state(market) -> None:
    market.add(1000, 4000)
    before = snapshot_from_engine(market.engine).commitment_hex()
    market.engine.swap_exact_tokens_for_tokens(
        market.owner, 10, 0, [market.token_a, market.token_b], market.owner, market.deadline()
    )
    assert snapshot_from_engine(market.engine).commitment_hex() != before


def test_to_json_dict_carries_commitment(market) -> None:
    snap = snapshot_from_engine(market.engine)
    body = snap.to_json_dict()
    assert body["commitment"] == snap.commitment_hex()
    assert body["data"]["pools"] == []


def test_invalid_version_is_rejected(market) -> None:
    with pytest.raises(ValueError):
        snapshot_from_engine(market.engine, version=0)
