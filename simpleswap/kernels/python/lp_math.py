"""
Liquidity math kernel.

Pure functions with explicit rounding rules:
- deposits keep the pool price by matching the existing reserve ratio (floor),
- the first deposit issues `isqrt(amount0 * amount1)` shares (no lock),
- later deposits issue the smaller of the two proportional issuances (floor),
- withdrawals redeem `shares * reserve // total_supply` on each side (floor).

Reserves here are in the caller's (a, b) order, not canonical pair order.
"""

from __future__ import annotations

from dataclasses import dataclass

from .int_math import isqrt, min_int


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def _require_non_negative(**values: int) -> None:
    for name, v in values.items():
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative")


@dataclass(frozen=True)
class OptimalLiquidityResult:
    amount_a_used: int
    amount_b_used: int
    amount_a_refund: int
    amount_b_refund: int


@dataclass(frozen=True)
class MintLiquidityResult:
    shares_minted: int
    amount_a_used: int
    amount_b_used: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_a_out: int
    amount_b_out: int
    new_reserve_a: int
    new_reserve_b: int
    new_total_supply: int


def optimal_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    amount_a_desired: int,
    amount_b_desired: int,
) -> OptimalLiquidityResult:
    """
    Compute the largest ratio-preserving amounts within the desired caps.

    For an empty pool, uses everything and refunds nothing.
    """
    _require_non_negative(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        amount_a_desired=amount_a_desired,
        amount_b_desired=amount_b_desired,
    )

    if reserve_a == 0 or reserve_b == 0:
        return OptimalLiquidityResult(
            amount_a_used=amount_a_desired,
            amount_b_used=amount_b_desired,
            amount_a_refund=0,
            amount_b_refund=0,
        )

    amount_b_optimal = (amount_a_desired * reserve_b) // reserve_a
    if amount_b_optimal <= amount_b_desired:
        amount_a_used = amount_a_desired
        amount_b_used = amount_b_optimal
    else:
        amount_a_used = (amount_b_desired * reserve_a) // reserve_b
        amount_b_used = amount_b_desired

    if amount_a_used > amount_a_desired or amount_b_used > amount_b_desired:
        raise AssertionError("used amounts exceed desired amounts")

    return OptimalLiquidityResult(
        amount_a_used=amount_a_used,
        amount_b_used=amount_b_used,
        amount_a_refund=amount_a_desired - amount_a_used,
        amount_b_refund=amount_b_desired - amount_b_used,
    )


def shares_for_deposit(
    *,
    reserve_a: int,
    reserve_b: int,
    total_supply: int,
    amount_a: int,
    amount_b: int,
) -> int:
    """
    Shares issued for depositing (amount_a, amount_b).

    Empty pool: isqrt(amount_a * amount_b).
    Otherwise:  min(amount_a * total // reserve_a, amount_b * total // reserve_b).

    May return 0; the caller rejects zero issuance.
    """
    _require_non_negative(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_supply=total_supply,
        amount_a=amount_a,
        amount_b=amount_b,
    )

    if total_supply == 0:
        if reserve_a != 0 or reserve_b != 0:
            raise ValueError("cannot issue initial shares when reserves are non-zero")
        return isqrt(amount_a * amount_b)

    if reserve_a == 0 or reserve_b == 0:
        raise ValueError("cannot issue shares into an empty pool when total_supply > 0")

    return min_int(
        (amount_a * total_supply) // reserve_a,
        (amount_b * total_supply) // reserve_b,
    )


def mint_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    total_supply: int,
    amount_a_desired: int,
    amount_b_desired: int,
) -> MintLiquidityResult:
    """Ratio-preserving deposit quote + post-state."""
    opt = optimal_liquidity(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        amount_a_desired=amount_a_desired,
        amount_b_desired=amount_b_desired,
    )
    minted = shares_for_deposit(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        total_supply=total_supply,
        amount_a=opt.amount_a_used,
        amount_b=opt.amount_b_used,
    )
    return MintLiquidityResult(
        shares_minted=minted,
        amount_a_used=opt.amount_a_used,
        amount_b_used=opt.amount_b_used,
        new_reserve_a=reserve_a + opt.amount_a_used,
        new_reserve_b=reserve_b + opt.amount_b_used,
        new_total_supply=total_supply + minted,
    )


def burn_liquidity(*, shares: int, reserve_a: int, reserve_b: int, total_supply: int) -> BurnLiquidityResult:
    """
    Burn shares for the underlying assets (floor rounding).
    """
    _require_non_negative(shares=shares, reserve_a=reserve_a, reserve_b=reserve_b, total_supply=total_supply)

    if shares == 0:
        raise ValueError("shares must be positive")
    if total_supply == 0:
        raise ValueError("total_supply must be positive")
    if shares > total_supply:
        raise ValueError("cannot burn more than total_supply")

    amount_a_out = (shares * reserve_a) // total_supply
    amount_b_out = (shares * reserve_b) // total_supply
    return BurnLiquidityResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_reserve_a=reserve_a - amount_a_out,
        new_reserve_b=reserve_b - amount_b_out,
        new_total_supply=total_supply - shares,
    )
