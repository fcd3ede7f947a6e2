"""
SimpleSwap: a zero-fee constant-product AMM engine.
"""

from .config import EngineConfig, load_config
from .core.exchange import SimpleSwap
from .errors import SimpleSwapError
from .state.tokens import TokenFactory

__all__ = [
    "EngineConfig",
    "load_config",
    "SimpleSwap",
    "SimpleSwapError",
    "TokenFactory",
]
