"""
SimpleSwap exchange engine (imperative shell).

Every mutating call follows the same shape:
1. validate the deadline, the pair, the caller and the recipient (fail-closed),
2. under the pool lock, read a pool snapshot and compute a pure quote,
3. run the asset transfer legs inside `assets.atomic()`, then commit the
   pool ledger and share table deltas,
4. still under the pool lock, publish the event, so each pool's events
   appear in the event log in commit order.

A failure at any step leaves reserves, shares and asset balances unchanged.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager, nullcontext
from typing import Any, ContextManager, Dict, Iterator, Optional, Protocol, Sequence, Tuple

from ..config import EngineConfig
from ..errors import (
    Expired,
    InvalidAccount,
    InvalidPath,
    NoLiquidity,
    Overflow,
    SimpleSwapError,
    TransferFailed,
    ZeroAddress,
)
from ..kernels.python.cpmm_swap import get_amount_out as _kernel_get_amount_out
from ..state.balances import ZERO_ADDRESS, Address, Amount, AssetId
from ..state.lp import ShareTable
from ..state.pools import Pair, Pool, PoolLedger, canonical_pair
from .clock import Clock, SystemClock
from .events import EventLog, LiquidityAdded, LiquidityRemoved, TokensSwapped
from .liquidity import quote_add_liquidity, quote_remove_liquidity, quote_swap


logger = logging.getLogger(__name__)


class AssetTransfer(Protocol):
    """Asset ledger collaborator. Transfer methods return False on failure."""

    def transfer(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> bool: ...

    def transfer_from(
        self, asset: AssetId, sender: Address, to: Address, amount: Amount, *, spender: Address
    ) -> bool: ...

    def atomic(self) -> ContextManager[Any]: ...


@contextmanager
def _log_rejection(op: str) -> Iterator[None]:
    try:
        yield
    except SimpleSwapError as exc:
        logger.debug("%s rejected: %s", op, exc)
        raise


class SimpleSwap:
    """
    Constant-product exchange over any number of pools.

    Pools are keyed by the canonical pair; share balances by (owner, pair).
    Mutations of one pool are serialized by that pool's lock.
    """

    def __init__(
        self,
        assets: AssetTransfer,
        *,
        clock: Optional[Clock] = None,
        config: Optional[EngineConfig] = None,
        events: Optional[EventLog] = None,
    ) -> None:
        self.assets = assets
        self.clock: Clock = clock if clock is not None else SystemClock()
        self.config = config if config is not None else EngineConfig()
        self.events = events if events is not None else EventLog()
        self.pools = PoolLedger()
        self.shares = ShareTable()
        self._locks: Dict[Pair, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @property
    def address(self) -> Address:
        """Custody account holding the reserves of every pool."""
        return self.config.engine_address

    # -- mutating operations -------------------------------------------------

    def add_liquidity(
        self,
        caller: Address,
        token_a: AssetId,
        token_b: AssetId,
        amount_a_desired: Amount,
        amount_b_desired: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        to: Address,
        deadline: int,
    ) -> Tuple[Amount, Amount, Amount]:
        """
        Deposit both assets of a pair and mint shares to `to`.

        Returns:
            Tuple of (amount_a, amount_b, shares_minted)
        """
        with _log_rejection("add_liquidity"):
            self._ensure_not_expired(deadline)
            pair = self._validated_pair(token_a, token_b, caller, to)
            self._ensure_amounts(
                amount_a_desired=amount_a_desired,
                amount_b_desired=amount_b_desired,
                amount_a_min=amount_a_min,
                amount_b_min=amount_b_min,
            )

            with self._pool_lock(pair):
                pool = self.pools.get(pair)
                quote = quote_add_liquidity(
                    pool, token_a, amount_a_desired, amount_b_desired, amount_a_min, amount_b_min
                )
                self._ensure_stored(
                    pool.reserve0 + quote.delta0,
                    pool.reserve1 + quote.delta1,
                    pool.total_shares + quote.shares,
                )
                with self.assets.atomic():
                    self._pull(token_a, caller, quote.amount_a)
                    self._pull(token_b, caller, quote.amount_b)
                    self.pools.fund(pair, quote.delta0, quote.delta1, quote.shares)
                    self.shares.mint(to, pair, quote.shares)
                self.events.publish(
                    LiquidityAdded(
                        sender=caller,
                        to=to,
                        pair=pair,
                        amount0=quote.delta0,
                        amount1=quote.delta1,
                        shares=quote.shares,
                    )
                )

        logger.info(
            "liquidity added: pair=%s amounts=(%d, %d) shares=%d to=%s",
            pair.key(), quote.delta0, quote.delta1, quote.shares, to,
        )
        return quote.amount_a, quote.amount_b, quote.shares

    def remove_liquidity(
        self,
        caller: Address,
        token_a: AssetId,
        token_b: AssetId,
        shares: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        to: Address,
        deadline: int,
    ) -> Tuple[Amount, Amount]:
        """
        Burn the caller's shares and pay the proportional reserves to `to`.

        Returns:
            Tuple of (amount_a, amount_b)
        """
        with _log_rejection("remove_liquidity"):
            self._ensure_not_expired(deadline)
            pair = self._validated_pair(token_a, token_b, caller, to)
            self._ensure_amounts(shares=shares, amount_a_min=amount_a_min, amount_b_min=amount_b_min)

            with self._pool_lock(pair):
                pool = self.pools.get(pair)
                quote = quote_remove_liquidity(
                    pool,
                    token_a,
                    shares,
                    self.shares.balance_of(caller, pair),
                    amount_a_min,
                    amount_b_min,
                )
                with self.assets.atomic():
                    self._push(token_a, to, quote.amount_a)
                    self._push(token_b, to, quote.amount_b)
                    self.shares.burn(caller, pair, shares)
                    self.pools.drain(pair, quote.delta0, quote.delta1, shares)
                self.events.publish(
                    LiquidityRemoved(
                        sender=caller,
                        to=to,
                        pair=pair,
                        amount0=quote.delta0,
                        amount1=quote.delta1,
                        shares=shares,
                    )
                )

        logger.info(
            "liquidity removed: pair=%s amounts=(%d, %d) shares=%d to=%s",
            pair.key(), quote.delta0, quote.delta1, shares, to,
        )
        return quote.amount_a, quote.amount_b

    def swap_exact_tokens_for_tokens(
        self,
        caller: Address,
        amount_in: Amount,
        amount_out_min: Amount,
        path: Sequence[AssetId],
        to: Address,
        deadline: int,
    ) -> Amount:
        """
        Swap exactly `amount_in` of path[0] for path[1], paying `to`.

        Returns:
            The output amount
        """
        with _log_rejection("swap_exact_tokens_for_tokens"):
            self._ensure_not_expired(deadline)
            if len(path) != 2:
                raise InvalidPath(f"path length {len(path)} != 2")
            token_in, token_out = path[0], path[1]
            pair = self._validated_pair(token_in, token_out, caller, to)
            self._ensure_amounts(amount_in=amount_in, amount_out_min=amount_out_min)

            with self._pool_lock(pair):
                pool = self.pools.get(pair)
                quote = quote_swap(pool, token_in, amount_in, amount_out_min)
                reserve_in, _reserve_out = pool.reserves_for(token_in)
                self._ensure_stored(reserve_in + amount_in)
                with self.assets.atomic():
                    self._pull(token_in, caller, amount_in)
                    self._push(token_out, to, quote.amount_out)
                    self.pools.apply_swap(pair, amount_in, quote.amount_out, quote.token_in_is_0)
                self.events.publish(
                    TokensSwapped(
                        sender=caller,
                        to=to,
                        token_in=token_in,
                        token_out=token_out,
                        amount_in=amount_in,
                        amount_out=quote.amount_out,
                    )
                )

        logger.info(
            "swap: %s -> %s amount_in=%d amount_out=%d to=%s",
            token_in, token_out, amount_in, quote.amount_out, to,
        )
        return quote.amount_out

    # -- queries -------------------------------------------------------------

    @staticmethod
    def get_amount_out(amount_in: Amount, reserve_in: Amount, reserve_out: Amount) -> Amount:
        """floor(amount_in * reserve_out / (reserve_in + amount_in)), no fee."""
        return _kernel_get_amount_out(amount_in, reserve_in, reserve_out)

    def get_price(self, token_a: AssetId, token_b: AssetId) -> int:
        """
        Units of token_b per unit of token_a, scaled by config.price_scale.

        Raises:
            NoLiquidity: If either reserve is zero
        """
        reserve_a, reserve_b = self.get_reserves(token_a, token_b)
        if reserve_a == 0 or reserve_b == 0:
            raise NoLiquidity()
        return (reserve_b * self.config.price_scale) // reserve_a

    def total_liquidity(self, token_a: AssetId, token_b: AssetId) -> Amount:
        """Total shares of the pool (0 if unfunded)."""
        return self.get_pool(token_a, token_b).total_shares

    def balance_of(self, owner: Address, token_a: AssetId, token_b: AssetId) -> Amount:
        """Shares held by `owner` in the pool for (token_a, token_b)."""
        pair = canonical_pair(token_a, token_b)
        with self._read_guard(pair):
            return self.shares.balance_of(owner, pair)

    def get_reserves(self, token_a: AssetId, token_b: AssetId) -> Tuple[Amount, Amount]:
        """Reserves in caller order: (reserve_a, reserve_b)."""
        return self.get_pool(token_a, token_b).reserves_for(token_a)

    def get_pool(self, token_a: AssetId, token_b: AssetId) -> Pool:
        pair = canonical_pair(token_a, token_b)
        with self._read_guard(pair):
            return self.pools.get(pair)

    # -- internals -----------------------------------------------------------

    def _pool_lock(self, pair: Pair) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(pair)
            if lock is None:
                lock = threading.RLock()
                self._locks[pair] = lock
            return lock

    def _read_guard(self, pair: Pair) -> ContextManager[Any]:
        # Reads never allocate a lock, so queries on unknown pairs leave no trace.
        with self._locks_guard:
            lock = self._locks.get(pair)
        return lock if lock is not None else nullcontext()

    def _ensure_not_expired(self, deadline: int) -> None:
        now = self.clock.now()
        if deadline < now:
            raise Expired(f"deadline {deadline} < now {now}")

    def _validated_pair(self, token_a: AssetId, token_b: AssetId, caller: Address, to: Address) -> Pair:
        pair = canonical_pair(token_a, token_b)
        if token_a == ZERO_ADDRESS or token_b == ZERO_ADDRESS:
            raise ZeroAddress("asset")
        if to == ZERO_ADDRESS:
            raise ZeroAddress("recipient")
        # The custody account can neither pay into nor be paid by its own pools.
        if caller == self.address:
            raise InvalidAccount("caller is the custody account")
        if to == self.address:
            raise InvalidAccount("recipient is the custody account")
        return pair

    def _ensure_amounts(self, **amounts: Amount) -> None:
        for name, v in amounts.items():
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative")
            if v > self.config.max_amount:
                raise Overflow(name)

    def _ensure_stored(self, *values: Amount) -> None:
        for v in values:
            if v > self.config.max_amount:
                raise Overflow("stored value exceeds max_amount")

    def _pull(self, asset: AssetId, sender: Address, amount: Amount) -> None:
        if not self.assets.transfer_from(asset, sender, self.address, amount, spender=self.address):
            raise TransferFailed(f"transfer_from {asset} {sender} -> engine ({amount})")

    def _push(self, asset: AssetId, to: Address, amount: Amount) -> None:
        if not self.assets.transfer(asset, self.address, to, amount):
            raise TransferFailed(f"transfer {asset} engine -> {to} ({amount})")

    def __repr__(self) -> str:
        return f"SimpleSwap(address={self.address}, pools={len(self.pools.pairs())})"
