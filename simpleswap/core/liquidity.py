"""
Pure quotes for add/remove liquidity and exact-in swaps.

Each quote reads a Pool snapshot, applies the kernels, enforces the caller's
slippage bounds and returns the deltas to apply. Nothing here mutates state.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import (
    InsufficientAOrB,
    InsufficientLiquidity,
    InsufficientLiquidityMinted,
    InsufficientOutputAmount,
    NotEnoughUserShares,
)
from ..kernels.python.cpmm_swap import swap_exact_in
from ..kernels.python.lp_math import burn_liquidity, mint_liquidity
from ..state.balances import Amount, AssetId
from ..state.pools import Pool


@dataclass(frozen=True)
class AddLiquidityQuote:
    amount_a: Amount
    amount_b: Amount
    shares: Amount
    # Deltas in canonical (token0, token1) order.
    delta0: Amount
    delta1: Amount


@dataclass(frozen=True)
class RemoveLiquidityQuote:
    amount_a: Amount
    amount_b: Amount
    shares: Amount
    delta0: Amount
    delta1: Amount


@dataclass(frozen=True)
class SwapQuote:
    amount_in: Amount
    amount_out: Amount
    token_in_is_0: bool
    k_before: int
    k_after: int


def _to_canonical(pool: Pool, token_a: AssetId, amount_a: Amount, amount_b: Amount) -> tuple[Amount, Amount]:
    if pool.pair.is_token0(token_a):
        return amount_a, amount_b
    return amount_b, amount_a


def quote_add_liquidity(
    pool: Pool,
    token_a: AssetId,
    amount_a_desired: Amount,
    amount_b_desired: Amount,
    amount_a_min: Amount,
    amount_b_min: Amount,
) -> AddLiquidityQuote:
    """
    Quote a deposit.

    Empty pool: uses the desired amounts and issues isqrt(a * b) shares.
    Otherwise the amounts follow the current ratio and
        shares = min(a * total // reserve_a, b * total // reserve_b)

    Raises:
        InsufficientAOrB: If a chosen amount is below its minimum
        InsufficientLiquidityMinted: If the deposit would issue zero shares
    """
    reserve_a, reserve_b = pool.reserves_for(token_a)
    res = mint_liquidity(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_supply=pool.total_shares,
        amount_a_desired=amount_a_desired,
        amount_b_desired=amount_b_desired,
    )

    if not pool.is_empty():
        if res.amount_a_used < amount_a_min:
            raise InsufficientAOrB(f"amount_a ({res.amount_a_used}) < amount_a_min ({amount_a_min})")
        if res.amount_b_used < amount_b_min:
            raise InsufficientAOrB(f"amount_b ({res.amount_b_used}) < amount_b_min ({amount_b_min})")

    if res.shares_minted <= 0:
        raise InsufficientLiquidityMinted()

    delta0, delta1 = _to_canonical(pool, token_a, res.amount_a_used, res.amount_b_used)
    return AddLiquidityQuote(
        amount_a=res.amount_a_used,
        amount_b=res.amount_b_used,
        shares=res.shares_minted,
        delta0=delta0,
        delta1=delta1,
    )


def quote_remove_liquidity(
    pool: Pool,
    token_a: AssetId,
    shares: Amount,
    user_shares: Amount,
    amount_a_min: Amount,
    amount_b_min: Amount,
) -> RemoveLiquidityQuote:
    """
    Quote a withdrawal of `shares` by an owner holding `user_shares`.

    Outputs:
        amount_a = floor(shares * reserve_a / total_shares)
        amount_b = floor(shares * reserve_b / total_shares)

    Raises:
        NotEnoughUserShares: If shares is zero or exceeds user_shares
        InsufficientOutputAmount: If an output is below its minimum
    """
    if shares <= 0 or user_shares < shares:
        raise NotEnoughUserShares(f"requested {shares}, held {user_shares}")
    if shares > pool.total_shares:
        raise InsufficientLiquidity(f"requested {shares} > total_shares {pool.total_shares}")

    reserve_a, reserve_b = pool.reserves_for(token_a)
    res = burn_liquidity(
        shares=shares,
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_supply=pool.total_shares,
    )
    if res.amount_a_out < amount_a_min:
        raise InsufficientOutputAmount(f"amount_a ({res.amount_a_out}) < amount_a_min ({amount_a_min})")
    if res.amount_b_out < amount_b_min:
        raise InsufficientOutputAmount(f"amount_b ({res.amount_b_out}) < amount_b_min ({amount_b_min})")

    delta0, delta1 = _to_canonical(pool, token_a, res.amount_a_out, res.amount_b_out)
    return RemoveLiquidityQuote(
        amount_a=res.amount_a_out,
        amount_b=res.amount_b_out,
        shares=shares,
        delta0=delta0,
        delta1=delta1,
    )


def quote_swap(pool: Pool, token_in: AssetId, amount_in: Amount, amount_out_min: Amount) -> SwapQuote:
    """
    Quote an exact-in swap.

    Raises:
        InsufficientLiquidity: If either reserve is empty
        InsufficientInputAmount: If amount_in is zero
        InsufficientOutputAmount: If the output is zero or below amount_out_min
    """
    reserve_in, reserve_out = pool.reserves_for(token_in)
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity()

    res = swap_exact_in(reserve_in=reserve_in, reserve_out=reserve_out, amount_in=amount_in)
    if res.amount_out < amount_out_min:
        raise InsufficientOutputAmount(f"amount_out ({res.amount_out}) < amount_out_min ({amount_out_min})")
    if res.amount_out == 0:
        raise InsufficientOutputAmount("amount_out is zero (trade too small)")

    return SwapQuote(
        amount_in=amount_in,
        amount_out=res.amount_out,
        token_in_is_0=pool.pair.is_token0(token_in),
        k_before=res.k_before,
        k_after=res.k_after,
    )
