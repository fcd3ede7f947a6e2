"""Exception types for the SimpleSwap engine.

Every failure a caller can trigger carries a stable ``tag`` string. The tags
are part of the public contract (UIs and tests branch on them), so never
rename one. ``str(exc)`` renders as ``"SimpleSwap: <TAG>"``.
"""

from __future__ import annotations

from typing import Optional


class SimpleSwapError(ValueError):
    """Base class for engine rejections."""

    tag: str = "SIMPLESWAP_ERROR"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        message = f"SimpleSwap: {self.tag}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class Expired(SimpleSwapError):
    tag = "EXPIRED"


class IdenticalAddresses(SimpleSwapError):
    tag = "IDENTICAL_ADDRESSES"


class ZeroAddress(SimpleSwapError):
    tag = "ZERO_ADDRESS"


class InsufficientAOrB(SimpleSwapError):
    tag = "INSUFFICIENT_A_OR_B"


class NotEnoughUserShares(SimpleSwapError):
    tag = "NOT_ENOUGH_USER_LIQUIDITY"


class InsufficientUserShares(NotEnoughUserShares):
    """Raised by the share table when a burn exceeds the owner's balance."""


class InsufficientOutputAmount(SimpleSwapError):
    tag = "INSUFFICIENT_OUTPUT_AMOUNT"


class InvalidPath(SimpleSwapError):
    tag = "INVALID_PATH"


class InsufficientLiquidity(SimpleSwapError):
    tag = "INSUFFICIENT_LIQUIDITY"


class InsufficientInputAmount(SimpleSwapError):
    tag = "INSUFFICIENT_INPUT_AMOUNT"


class NoLiquidity(SimpleSwapError):
    tag = "NO_LIQUIDITY"


class InsufficientLiquidityMinted(SimpleSwapError):
    tag = "INSUFFICIENT_LIQUIDITY_MINTED"


class TransferFailed(SimpleSwapError):
    tag = "TRANSFER_FAILED"


class Overflow(SimpleSwapError):
    tag = "OVERFLOW"


class InvalidAccount(SimpleSwapError):
    """Raised when the engine's custody account is used as caller or recipient."""

    tag = "INVALID_ACCOUNT"


class PoolInvariantError(Exception):
    """Raised when a pool ledger mutation would break a ledger invariant."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"pool invariant violations: {', '.join(violations)}")


ERROR_TAGS = tuple(
    cls.tag
    for cls in (
        Expired,
        IdenticalAddresses,
        ZeroAddress,
        InsufficientAOrB,
        NotEnoughUserShares,
        InsufficientOutputAmount,
        InvalidPath,
        InsufficientLiquidity,
        InsufficientInputAmount,
        NoLiquidity,
        InsufficientLiquidityMinted,
        TransferFailed,
        Overflow,
        InvalidAccount,
    )
)
