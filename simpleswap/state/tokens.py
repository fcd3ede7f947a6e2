"""
In-process fungible token ledger.

`TokenFactory` deploys mintable tokens (18 decimals) and implements the asset
transfer collaborator used by the exchange engine: `transfer`,
`transfer_from` (allowance-checked) and a journaled `atomic()` scope.

Transfer methods report failure by returning False, never by raising, so the
engine decides how a failed leg aborts the operation.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .balances import MAX_UINT256, ZERO_ADDRESS, Address, Amount, AssetId, BalanceTable

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18

_AllowanceKey = Tuple[AssetId, Address, Address]  # (asset, owner, spender)


@dataclass(frozen=True)
class TokenMetadata:
    address: AssetId
    name: str
    symbol: str
    decimals: int
    deployer: Address


class TokenFactory:
    """
    Deterministic multi-token ledger.

    Addresses are derived as "0x" + sha256(deployer || symbol || nonce)[:40].
    An allowance of MAX_UINT256 is treated as infinite and never decremented.
    """

    def __init__(self) -> None:
        self._tokens: Dict[AssetId, TokenMetadata] = {}
        self._balances = BalanceTable()
        self._supply: Dict[AssetId, Amount] = {}
        self._allowances: Dict[_AllowanceKey, Amount] = {}
        self._nonce = 0
        self._lock = threading.RLock()
        self._journal: Optional[List[tuple]] = None

    # -- deployment / minting ------------------------------------------------

    def deploy(self, deployer: Address, name: str, symbol: str, initial_mint: int = 0) -> AssetId:
        """
        Deploy a token and mint `initial_mint` whole units to the deployer.

        Returns:
            The new token's address
        """
        if not isinstance(name, str) or not name:
            raise ValueError("name must be a non-empty string")
        if not isinstance(symbol, str) or not symbol:
            raise ValueError("symbol must be a non-empty string")
        if deployer == ZERO_ADDRESS:
            raise ValueError("deployer must not be the zero address")
        with self._lock:
            self._nonce += 1
            digest = hashlib.sha256(f"TokenFactory:{deployer}:{symbol}:{self._nonce}".encode("utf-8")).hexdigest()
            address = "0x" + digest[:40]
            self._tokens[address] = TokenMetadata(
                address=address,
                name=name,
                symbol=symbol,
                decimals=DEFAULT_DECIMALS,
                deployer=deployer,
            )
            logger.info("deployed token %s (%s) at %s", name, symbol, address)
            if initial_mint:
                self.mint(deployer, address, initial_mint)
            return address

    def mint(self, caller: Address, asset: AssetId, amount: int) -> Amount:
        """
        Mint `amount` whole units (scaled by 10**decimals) to the caller.

        Returns:
            The minted amount in base units
        """
        meta = self.metadata(asset)
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise ValueError(f"mint amount must be a non-negative int: {amount!r}")
        scaled = amount * 10**meta.decimals
        with self._lock:
            supply = self._supply.get(asset, 0) + scaled
            if supply > MAX_UINT256:
                raise OverflowError("total supply exceeds uint256")
            self._record_supply(asset)
            self._supply[asset] = supply
            self._record_balance(caller, asset)
            self._balances.add(caller, asset, scaled)
        return scaled

    # -- views ---------------------------------------------------------------

    def metadata(self, asset: AssetId) -> TokenMetadata:
        meta = self._tokens.get(asset)
        if meta is None:
            raise KeyError(f"unknown token: {asset}")
        return meta

    def name(self, asset: AssetId) -> str:
        return self.metadata(asset).name

    def symbol(self, asset: AssetId) -> str:
        return self.metadata(asset).symbol

    def decimals(self, asset: AssetId) -> int:
        return self.metadata(asset).decimals

    def total_supply(self, asset: AssetId) -> Amount:
        with self._lock:
            return self._supply.get(asset, 0)

    def balance_of(self, asset: AssetId, owner: Address) -> Amount:
        with self._lock:
            return self._balances.get(owner, asset)

    def allowance(self, asset: AssetId, owner: Address, spender: Address) -> Amount:
        with self._lock:
            return self._allowances.get((asset, owner, spender), 0)

    def tokens(self) -> List[TokenMetadata]:
        return sorted(self._tokens.values(), key=lambda m: m.address)

    # -- transfers -----------------------------------------------------------

    def approve(self, asset: AssetId, owner: Address, spender: Address, amount: Amount) -> bool:
        if asset not in self._tokens or spender == ZERO_ADDRESS:
            return False
        if not isinstance(amount, int) or isinstance(amount, bool) or not (0 <= amount <= MAX_UINT256):
            return False
        with self._lock:
            key = (asset, owner, spender)
            self._record_allowance(key)
            self._allowances[key] = amount
        return True

    def transfer(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> bool:
        """Move `amount` from sender to `to` on the sender's own authority."""
        with self._lock:
            if not self._can_move(asset, sender, to, amount):
                return False
            self._move(asset, sender, to, amount)
        return True

    def transfer_from(
        self, asset: AssetId, sender: Address, to: Address, amount: Amount, *, spender: Address
    ) -> bool:
        """Move `amount` from sender to `to` using spender's allowance."""
        with self._lock:
            if not self._can_move(asset, sender, to, amount):
                return False
            key = (asset, sender, spender)
            allowed = self._allowances.get(key, 0)
            if spender != sender:
                if allowed < amount:
                    logger.debug("allowance too low for %s: %s < %s", spender, allowed, amount)
                    return False
                if allowed != MAX_UINT256:
                    self._record_allowance(key)
                    self._allowances[key] = allowed - amount
            self._move(asset, sender, to, amount)
        return True

    @contextmanager
    def atomic(self) -> Iterator["TokenFactory"]:
        """
        Hold the ledger lock and undo every movement made inside the scope if
        it exits with an exception. Nested scopes roll back to their own mark.
        """
        with self._lock:
            outer = self._journal is None
            if outer:
                self._journal = []
            mark = len(self._journal)
            try:
                yield self
            except BaseException:
                self._rollback(mark)
                raise
            finally:
                if outer:
                    self._journal = None

    # -- internals -----------------------------------------------------------

    def _can_move(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> bool:
        if asset not in self._tokens:
            logger.debug("transfer of unknown token %s", asset)
            return False
        if to == ZERO_ADDRESS or sender == ZERO_ADDRESS:
            return False
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            return False
        if self._balances.get(sender, asset) < amount:
            logger.debug("balance too low for %s: %s < %s", sender, self._balances.get(sender, asset), amount)
            return False
        return True

    def _move(self, asset: AssetId, sender: Address, to: Address, amount: Amount) -> None:
        self._record_balance(sender, asset)
        self._record_balance(to, asset)
        self._balances.move(asset, sender, to, amount)

    def _record_balance(self, owner: Address, asset: AssetId) -> None:
        if self._journal is not None:
            self._journal.append(("balance", (owner, asset), self._balances.get(owner, asset)))

    def _record_allowance(self, key: _AllowanceKey) -> None:
        if self._journal is not None:
            self._journal.append(("allowance", key, self._allowances.get(key, 0)))

    def _record_supply(self, asset: AssetId) -> None:
        if self._journal is not None:
            self._journal.append(("supply", asset, self._supply.get(asset, 0)))

    def _rollback(self, mark: int) -> None:
        assert self._journal is not None
        while len(self._journal) > mark:
            kind, key, previous = self._journal.pop()
            if kind == "balance":
                owner, asset = key
                self._balances.set(owner, asset, previous)
            elif kind == "allowance":
                if previous == 0:
                    self._allowances.pop(key, None)
                else:
                    self._allowances[key] = previous
            else:
                self._supply[key] = previous

    def __repr__(self) -> str:
        return f"TokenFactory({len(self._tokens)} tokens)"
