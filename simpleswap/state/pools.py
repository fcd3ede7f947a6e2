"""
Pool state management for SimpleSwap pools.

Pools are keyed by a canonical `Pair` so that (A, B) and (B, A) resolve to the
same pool. Reserves are stored in canonical order (token0 < token1).
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from ..errors import IdenticalAddresses, InsufficientLiquidity, PoolInvariantError
from .balances import Amount, AssetId


@dataclass(frozen=True, order=True)
class Pair:
    """Unordered asset pair in canonical order (token0 < token1)."""

    token0: AssetId
    token1: AssetId

    def __post_init__(self) -> None:
        if self.token0 >= self.token1:
            raise ValueError(f"Assets must be in canonical order: {self.token0} < {self.token1}")

    def is_token0(self, asset: AssetId) -> bool:
        """Return True for token0, False for token1; raise for other assets."""
        if asset == self.token0:
            return True
        if asset == self.token1:
            return False
        raise ValueError(f"Asset {asset} not in pair ({self.token0}, {self.token1})")

    def key(self) -> str:
        return f"{self.token0}/{self.token1}"


def canonical_pair(asset_a: AssetId, asset_b: AssetId) -> Pair:
    """
    Build the canonical pair for two distinct assets.

    Raises:
        IdenticalAddresses: if both assets are equal
    """
    if asset_a == asset_b:
        raise IdenticalAddresses()
    if asset_a < asset_b:
        return Pair(asset_a, asset_b)
    return Pair(asset_b, asset_a)


@dataclass
class Pool:
    """
    Reserve state of one pool.

    Attributes:
        pair: Canonical asset pair
        reserve0: Reserve of pair.token0
        reserve1: Reserve of pair.token1
        total_shares: Total ownership units issued for this pool
    """
    pair: Pair
    reserve0: Amount = 0
    reserve1: Amount = 0
    total_shares: Amount = 0

    def is_empty(self) -> bool:
        return self.total_shares == 0

    def reserves_for(self, asset_in: AssetId) -> Tuple[Amount, Amount]:
        """
        Return (reserve_in, reserve_out) with `asset_in` as the input side.

        Raises:
            ValueError: If asset is not in this pool
        """
        if self.pair.is_token0(asset_in):
            return self.reserve0, self.reserve1
        return self.reserve1, self.reserve0

    def get_constant_product(self) -> int:
        """Compute k = reserve0 * reserve1."""
        return self.reserve0 * self.reserve1

    def invariant_violations(self) -> List[str]:
        violations = []
        if self.reserve0 < 0 or self.reserve1 < 0:
            violations.append(f"negative reserve ({self.reserve0}, {self.reserve1})")
        if self.total_shares < 0:
            violations.append(f"negative total_shares {self.total_shares}")
        empty = (self.reserve0 == 0, self.reserve1 == 0, self.total_shares == 0)
        if any(empty) and not all(empty):
            violations.append(
                f"partially funded pool (reserve0={self.reserve0}, reserve1={self.reserve1}, "
                f"total_shares={self.total_shares})"
            )
        return violations

    def verify_invariant(self, min_k: int = 0) -> bool:
        """Verify the ledger invariants and reserve0 * reserve1 >= min_k."""
        return not self.invariant_violations() and self.get_constant_product() >= min_k

    def __repr__(self) -> str:
        return (
            f"Pool(pair=({self.pair.token0[:10]}..., {self.pair.token1[:10]}...), "
            f"reserves=({self.reserve0}, {self.reserve1}), total_shares={self.total_shares})"
        )


class PoolLedger:
    """
    Reserve ledger for every pool.

    The ledger never validates callers or deadlines. Reads return copies so a
    caller cannot mutate ledger state through a returned Pool.
    """

    def __init__(self) -> None:
        self._pools: Dict[Pair, Pool] = {}
        self._lock = threading.Lock()

    def get(self, pair: Pair) -> Pool:
        """Get a copy of the pool for `pair` (0/0/0 if unfunded)."""
        with self._lock:
            pool = self._pools.get(pair)
            return replace(pool) if pool is not None else Pool(pair=pair)

    def pairs(self) -> List[Pair]:
        with self._lock:
            return sorted(self._pools)

    def fund(self, pair: Pair, delta0: Amount, delta1: Amount, delta_shares: Amount) -> Pool:
        """Increase reserves and total shares by non-negative deltas."""
        _require_non_negative_deltas(delta0, delta1, delta_shares)
        with self._lock:
            current = self._pools.get(pair) or Pool(pair=pair)
            updated = Pool(
                pair=pair,
                reserve0=current.reserve0 + delta0,
                reserve1=current.reserve1 + delta1,
                total_shares=current.total_shares + delta_shares,
            )
            return self._commit(updated)

    def drain(self, pair: Pair, delta0: Amount, delta1: Amount, delta_shares: Amount) -> Pool:
        """
        Decrease reserves and total shares.

        Raises:
            InsufficientLiquidity: If any resulting value would be negative
        """
        _require_non_negative_deltas(delta0, delta1, delta_shares)
        with self._lock:
            current = self._pools.get(pair) or Pool(pair=pair)
            updated = Pool(
                pair=pair,
                reserve0=current.reserve0 - delta0,
                reserve1=current.reserve1 - delta1,
                total_shares=current.total_shares - delta_shares,
            )
            if updated.reserve0 < 0 or updated.reserve1 < 0 or updated.total_shares < 0:
                raise InsufficientLiquidity("drain exceeds pool state")
            return self._commit(updated)

    def apply_swap(self, pair: Pair, amount_in: Amount, amount_out: Amount, token_in_is_0: bool) -> Pool:
        """
        reserve_in += amount_in, reserve_out -= amount_out.

        Raises:
            InsufficientLiquidity: If reserve_out would go negative
        """
        _require_non_negative_deltas(amount_in, amount_out)
        with self._lock:
            current = self._pools.get(pair) or Pool(pair=pair)
            if token_in_is_0:
                reserve0 = current.reserve0 + amount_in
                reserve1 = current.reserve1 - amount_out
                reserve_out = reserve1
            else:
                reserve0 = current.reserve0 - amount_out
                reserve1 = current.reserve1 + amount_in
                reserve_out = reserve0
            if reserve_out < 0:
                raise InsufficientLiquidity("swap output exceeds reserve")
            updated = Pool(pair=pair, reserve0=reserve0, reserve1=reserve1, total_shares=current.total_shares)
            return self._commit(updated)

    def _commit(self, updated: Pool) -> Pool:
        violations = updated.invariant_violations()
        if violations:
            raise PoolInvariantError(violations)
        self._pools[updated.pair] = updated
        return replace(updated)

    def __repr__(self) -> str:
        return f"PoolLedger({len(self._pools)} pools)"


def _require_non_negative_deltas(*deltas: Amount) -> None:
    for d in deltas:
        if not isinstance(d, int) or isinstance(d, bool):
            raise TypeError("deltas must be ints")
        if d < 0:
            raise ValueError(f"Delta must be non-negative: {d}")
