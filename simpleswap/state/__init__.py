"""
State management for SimpleSwap
"""

from .balances import ZERO_ADDRESS, BalanceTable
from .lp import ShareTable
from .pools import Pair, Pool, PoolLedger, canonical_pair
from .tokens import TokenFactory

__all__ = [
    "ZERO_ADDRESS",
    "BalanceTable",
    "ShareTable",
    "Pair",
    "Pool",
    "PoolLedger",
    "canonical_pair",
    "TokenFactory",
]
