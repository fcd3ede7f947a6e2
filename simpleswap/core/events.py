"""
Engine events.

Events are published only after an operation has committed, while the engine
still holds that pool's lock: events of one pool appear in commit order, and
subscribers run under the lock, so they must not block. Events of different
pools are not ordered relative to each other. A subscriber that raises is
logged and skipped; it cannot undo the committed operation.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, List, Union

from ..state.balances import Address, Amount, AssetId
from ..state.pools import Pair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LiquidityAdded:
    sender: Address
    to: Address
    pair: Pair
    amount0: Amount
    amount1: Amount
    shares: Amount


@dataclass(frozen=True)
class LiquidityRemoved:
    sender: Address
    to: Address
    pair: Pair
    amount0: Amount
    amount1: Amount
    shares: Amount


@dataclass(frozen=True)
class TokensSwapped:
    sender: Address
    to: Address
    token_in: AssetId
    token_out: AssetId
    amount_in: Amount
    amount_out: Amount


Event = Union[LiquidityAdded, LiquidityRemoved, TokensSwapped]
Subscriber = Callable[[Event], None]


class EventLog:
    """Append-only event log with post-commit subscribers."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, fn: Subscriber) -> Callable[[], None]:
        """Register `fn`; returns a callable that unsubscribes it."""
        with self._lock:
            self._subscribers.append(fn)

        def _unsubscribe() -> None:
            with self._lock:
                if fn in self._subscribers:
                    self._subscribers.remove(fn)

        return _unsubscribe

    def publish(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)
            subscribers = list(self._subscribers)
        for fn in subscribers:
            try:
                fn(event)
            except Exception:
                logger.exception("event subscriber failed for %s", type(event).__name__)

    def events(self) -> List[Event]:
        with self._lock:
            return list(self._events)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)
