"""
Share (LP unit) accounting for SimpleSwap pools.

Shares are scoped per pair and tracked separately from asset balances, so
shares from unrelated pools are never fungible.
"""

from __future__ import annotations

import threading
from typing import Dict, Tuple

from ..errors import InsufficientUserShares
from .balances import Address, Amount
from .pools import Pair


class ShareTable:
    """
    Share ledger mapping (owner, pair) -> shares, plus a per-pair total.

    Notes:
    - Balances are always non-negative; zero balances are omitted.
    - For every pair, the sum of owner balances equals total_supply(pair).
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, Pair], Amount] = {}
        self._totals: Dict[Pair, Amount] = {}
        self._lock = threading.Lock()

    def balance_of(self, owner: Address, pair: Pair) -> Amount:
        """Get the share balance for (owner, pair). Returns 0 if not found."""
        with self._lock:
            return self._balances.get((owner, pair), 0)

    def total_supply(self, pair: Pair) -> Amount:
        with self._lock:
            return self._totals.get(pair, 0)

    def mint(self, owner: Address, pair: Pair, amount: Amount) -> None:
        """Credit `amount` shares to owner and increase the pair total."""
        _require_amount(amount)
        if amount == 0:
            return
        with self._lock:
            self._set(owner, pair, self._balances.get((owner, pair), 0) + amount)
            self._totals[pair] = self._totals.get(pair, 0) + amount

    def burn(self, owner: Address, pair: Pair, amount: Amount) -> None:
        """
        Debit `amount` shares from owner and decrease the pair total.

        Raises:
            InsufficientUserShares: If the owner's balance is below `amount`
        """
        _require_amount(amount)
        with self._lock:
            current = self._balances.get((owner, pair), 0)
            if current < amount:
                raise InsufficientUserShares(f"balance {current} < {amount}")
            self._set(owner, pair, current - amount)
            remaining = self._totals.get(pair, 0) - amount
            if remaining == 0:
                self._totals.pop(pair, None)
            else:
                self._totals[pair] = remaining

    def get_all_balances(self) -> Dict[Tuple[Address, Pair], Amount]:
        with self._lock:
            return dict(self._balances)

    def verify_totals(self) -> bool:
        """Verify that owner balances sum to each pair's total."""
        with self._lock:
            sums: Dict[Pair, Amount] = {}
            for (_owner, pair), amount in self._balances.items():
                if amount < 0:
                    return False
                sums[pair] = sums.get(pair, 0) + amount
            return sums == self._totals

    def _set(self, owner: Address, pair: Pair, amount: Amount) -> None:
        if amount == 0:
            self._balances.pop((owner, pair), None)
        else:
            self._balances[(owner, pair)] = amount

    def __repr__(self) -> str:
        return f"ShareTable({len(self._balances)} entries, {len(self._totals)} pools)"


def _require_amount(amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("share amount must be an int")
    if amount < 0:
        raise ValueError(f"share amount must be non-negative: {amount}")
