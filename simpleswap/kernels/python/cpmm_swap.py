"""
Zero-fee CPMM swap kernel.

Pricing rule (no fee is charged):
    amount_out = floor(amount_in * reserve_out / (reserve_in + amount_in))

Floor rounding on the output keeps every rounding unit inside the pool, so
    (reserve_in + amount_in) * (reserve_out - amount_out) >= reserve_in * reserve_out
"""

from __future__ import annotations

from dataclasses import dataclass

from ...errors import InsufficientInputAmount, InsufficientLiquidity


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class SwapExactInResult:
    amount_in: int
    amount_out: int
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """
    Quote the output of an exact-in swap.

    Raises InsufficientInputAmount when `amount_in == 0` and
    InsufficientLiquidity when either reserve is empty (checked in that order).
    """
    for name, v in (
        ("amount_in", amount_in),
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
    ):
        _require_int(name, v)

    if amount_in < 0:
        raise ValueError("amount_in must be non-negative")
    if reserve_in < 0 or reserve_out < 0:
        raise ValueError("reserves must be non-negative")
    if amount_in == 0:
        raise InsufficientInputAmount()
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity()

    return (amount_in * reserve_out) // (reserve_in + amount_in)


def swap_exact_in(*, reserve_in: int, reserve_out: int, amount_in: int) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    A zero quote is returned as-is; callers decide whether it is acceptable.
    """
    amount_out = get_amount_out(amount_in, reserve_in, reserve_out)
    if amount_out >= reserve_out:
        raise AssertionError("amount_out must stay below reserve_out")

    k_before = reserve_in * reserve_out
    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    k_after = new_reserve_in * new_reserve_out
    if k_after < k_before:
        raise AssertionError(f"invariant violation: k_after ({k_after}) < k_before ({k_before})")

    return SwapExactInResult(
        amount_in=amount_in,
        amount_out=amount_out,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )
