"""
Integer math helpers shared by the LP and swap kernels.

Both functions are integer-only and exact for arbitrarily large operands.
"""

from __future__ import annotations


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def isqrt(n: int) -> int:
    """
    Floor of the square root of `n` (Babylonian iteration).

    Starts from `n // 2 + 1` and iterates `z = (n // z + z) // 2` while the
    estimate strictly decreases. The loop terminates at the floor root:
        isqrt(n) ** 2 <= n < (isqrt(n) + 1) ** 2
    """
    _require_int("n", n)
    if n < 0:
        raise ValueError("n must be non-negative")
    if n < 4:
        return 0 if n == 0 else 1

    y = n
    z = n // 2 + 1
    while z < y:
        y = z
        z = (n // z + z) // 2
    return y


def min_int(a: int, b: int) -> int:
    _require_int("a", a)
    _require_int("b", b)
    return a if a <= b else b
