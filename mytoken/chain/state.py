"""
Chain State

In-memory account, code and storage state for the local chain, with
snapshot / revert used both for transaction atomicity and test fixtures.
"""

from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional, Tuple, Type

from ..crypto import normalize_address


@dataclass
class Account:
    """
    Ethereum-style account (EOA or contract).

    Attributes:
        address: Account address (checksum format)
        balance: Account balance in wei
        nonce: Transaction / creation nonce
        code: Contract class deployed at this address (None for EOA)
    """
    address: str
    balance: int = 0
    nonce: int = 0
    code: Optional[Type] = None

    @property
    def is_contract(self) -> bool:
        return self.code is not None

    @property
    def is_empty(self) -> bool:
        """Check if account is empty (EIP-161)."""
        return self.balance == 0 and self.nonce == 0 and not self.is_contract


class ChainState:
    """
    Manages accounts and contract storage.

    Storage is keyed by (address, key) where key is any hashable value the
    contract chooses (a variable name, or a tuple of name and mapping keys).
    Stored values must be immutable so that a shallow copy is a valid snapshot.
    """

    def __init__(self):
        self._accounts: Dict[str, Account] = {}
        self._storage: Dict[Tuple[str, Hashable], Any] = {}
        self._snapshots: List[Dict[str, Any]] = []

    # ── Accounts ──────────────────────────────────────────────────────

    def get_account(self, address: str) -> Account:
        address = normalize_address(address)
        account = self._accounts.get(address)
        if account is None:
            account = Account(address=address)
            self._accounts[address] = account
        return account

    def get_balance(self, address: str) -> int:
        return self.get_account(address).balance

    def set_balance(self, address: str, balance: int) -> None:
        if balance < 0:
            raise ValueError(f"Balance cannot be negative: {balance}")
        self.get_account(address).balance = balance

    def get_nonce(self, address: str) -> int:
        return self.get_account(address).nonce

    def increment_nonce(self, address: str) -> int:
        """Increment the nonce and return the value it had before."""
        account = self.get_account(address)
        nonce = account.nonce
        account.nonce += 1
        return nonce

    def get_code(self, address: str) -> Optional[Type]:
        return self.get_account(address).code

    def set_code(self, address: str, code: Type) -> None:
        self.get_account(address).code = code

    def is_contract(self, address: str) -> bool:
        return self.get_account(address).is_contract

    def account_exists(self, address: str) -> bool:
        return not self.get_account(address).is_empty

    # ── Storage ───────────────────────────────────────────────────────

    def get_storage(self, address: str, key: Hashable, default: Any = None) -> Any:
        return self._storage.get((normalize_address(address), key), default)

    def set_storage(self, address: str, key: Hashable, value: Any) -> None:
        cache_key = (normalize_address(address), key)
        if value is None:
            self._storage.pop(cache_key, None)
        else:
            self._storage[cache_key] = value

    def storage_keys(self, address: str) -> List[Hashable]:
        address = normalize_address(address)
        return [k for (a, k) in self._storage if a == address]

    # ── Snapshots ─────────────────────────────────────────────────────

    def snapshot(self) -> int:
        """
        Create state snapshot for revert.

        Returns:
            Snapshot ID
        """
        snapshot = {
            'accounts': {addr: Account(**vars(acc)) for addr, acc in self._accounts.items()},
            'storage': dict(self._storage),
        }
        self._snapshots.append(snapshot)
        return len(self._snapshots) - 1

    def revert(self, snapshot_id: int) -> None:
        """
        Revert state to snapshot and drop it together with any newer ones.

        Args:
            snapshot_id: Snapshot ID from snapshot()
        """
        if snapshot_id < 0 or snapshot_id >= len(self._snapshots):
            raise ValueError(f"Invalid snapshot ID: {snapshot_id}")

        snapshot = self._snapshots[snapshot_id]
        self._accounts = snapshot['accounts']
        self._storage = snapshot['storage']
        self._snapshots = self._snapshots[:snapshot_id]

    def discard(self, snapshot_id: int) -> None:
        """Forget a snapshot (and newer ones) without reverting; the commit path."""
        if snapshot_id < 0 or snapshot_id >= len(self._snapshots):
            raise ValueError(f"Invalid snapshot ID: {snapshot_id}")
        self._snapshots = self._snapshots[:snapshot_id]
