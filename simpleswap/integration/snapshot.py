"""
Engine state snapshot encoding.

Goals:
- Deterministic JSON for hashing and for read-only consumers (UI, audits).
- Explicit versioning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..core.exchange import SimpleSwap
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class EngineSnapshot:
    """
    Deterministic, versioned snapshot of a SimpleSwap engine.

    The commitment is not included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment_hex(self) -> str:
        payload = domain_sep_bytes("engine_snapshot", version=self.version) + self.canonical_bytes()
        return sha256_hex(payload)

    def to_json_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "commitment": self.commitment_hex(), "data": self.data}


def snapshot_from_engine(engine: SimpleSwap, *, version: int = SNAPSHOT_VERSION) -> EngineSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")

    pools_entries = []
    for pair in engine.pools.pairs():
        pool = engine.get_pool(pair.token0, pair.token1)
        pools_entries.append(
            {
                "token0": pair.token0,
                "token1": pair.token1,
                "reserve0": int(pool.reserve0),
                "reserve1": int(pool.reserve1),
                "total_shares": int(pool.total_shares),
            }
        )

    share_entries = [
        {"owner": owner, "token0": pair.token0, "token1": pair.token1, "shares": int(amount)}
        for (owner, pair), amount in engine.shares.get_all_balances().items()
    ]
    share_entries.sort(key=lambda e: (e["owner"], e["token0"], e["token1"]))

    data = {
        "engine_address": engine.address,
        "price_scale": int(engine.config.price_scale),
        "pools": pools_entries,
        "shares": share_entries,
    }
    return EngineSnapshot(version=version, data=data)
