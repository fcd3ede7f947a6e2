"""
Per-asset balance tracking.

Implements BalanceTable[(Address, AssetId)] -> Amount
"""

from typing import Dict, Tuple


# Type aliases
Address = str  # EVM-style account address, "0x" + 40 hex chars
AssetId = str  # token address, same format as Address
Amount = int  # Non-negative integer (arbitrary precision)

# Distinguished invalid identifier for assets and recipients
ZERO_ADDRESS = "0x" + "00" * 20

# Upper bound of the 256-bit amount domain
MAX_UINT256 = 2**256 - 1


class BalanceTable:
    """
    Balance table mapping (owner, asset) -> amount.

    Zero balances are omitted to keep the table sparse. Callers that need a
    stable ordering should sort keys explicitly.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Address, AssetId], Amount] = {}

    def get(self, owner: Address, asset: AssetId) -> Amount:
        """Get balance for (owner, asset). Returns 0 if not found."""
        return self._balances.get((owner, asset), 0)

    def set(self, owner: Address, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (owner, asset).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop((owner, asset), None)
        else:
            self._balances[(owner, asset)] = amount

    def add(self, owner: Address, asset: AssetId, delta: int) -> None:
        """
        Add delta to a balance (delta may be negative).

        Raises:
            ValueError: If the resulting balance would be negative
        """
        current = self.get(owner, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(f"Insufficient balance: {current} + {delta} = {new_balance} < 0")
        self.set(owner, asset, new_balance)

    def move(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> None:
        """Move `amount` of `asset` from sender to `to`; all-or-nothing."""
        if amount < 0:
            raise ValueError(f"Amount must be non-negative: {amount}")
        if self.get(sender, asset) < amount:
            raise ValueError(f"Insufficient balance: {self.get(sender, asset)} < {amount}")
        self.add(sender, asset, -amount)
        self.add(to, asset, amount)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
