"""
Core exchange logic
"""

from .clock import Clock, ManualClock, SystemClock
from .events import EventLog, LiquidityAdded, LiquidityRemoved, TokensSwapped
from .exchange import AssetTransfer, SimpleSwap
from .liquidity import quote_add_liquidity, quote_remove_liquidity, quote_swap

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "EventLog",
    "LiquidityAdded",
    "LiquidityRemoved",
    "TokensSwapped",
    "AssetTransfer",
    "SimpleSwap",
    "quote_add_liquidity",
    "quote_remove_liquidity",
    "quote_swap",
]
