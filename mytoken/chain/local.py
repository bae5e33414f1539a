"""
Local Chain

An in-process, auto-mining chain in the spirit of a development network:
funded signer accounts, native balances, Python contract classes as code,
atomic transactions, receipts and snapshots.

The public surface is ``async`` so callers await it the way they would a
JSON-RPC provider; execution itself is synchronous and strictly sequential.
"""

from typing import Any, Dict, List, Optional, Type, Union

from eth_utils import keccak, to_checksum_address
import rlp

from ..constants import (
    DEFAULT_ACCOUNT_BALANCE,
    DEFAULT_ACCOUNT_COUNT,
    DEFAULT_ACCOUNT_SEED,
    DEFAULT_CHAIN_ID,
    ZERO_ADDRESS,
)
from ..contracts.base import Revert
from ..crypto import generate_contract_address, normalize_address
from ..exceptions import ContractNotFoundError, TransactionReverted
from ..logger import get_logger
from .state import ChainState
from .types import Log, Message, Receipt, Signer

logger = get_logger(__name__)

# str, Signer, or any object with a string ``address`` (e.g. ContractHandle)
AddressLike = Union[str, Signer, Any]


def derive_account_address(seed: str, index: int) -> str:
    """Deterministic address of the index-th development account."""
    return to_checksum_address(keccak(text=f"{seed}:{index}")[-20:])


def address_of(account: AddressLike) -> str:
    """
    Checksum address of *account*: an address string, or anything carrying
    one in ``.address`` (signers, contract handles).
    """
    if not isinstance(account, str):
        account = getattr(account, "address", account)
    return normalize_address(account)


def as_abi_argument(value: Any) -> Any:
    """Replace signers and contract handles by their address; pass anything else through."""
    address = getattr(value, "address", None)
    return address if isinstance(address, str) else value


class LocalChain:
    """
    In-process development chain.

    Every transaction is mined into its own block. A transaction either
    applies all of its state changes or, on revert, none of them.
    """

    def __init__(
        self,
        accounts: int = DEFAULT_ACCOUNT_COUNT,
        initial_balance: int = DEFAULT_ACCOUNT_BALANCE,
        chain_id: int = DEFAULT_CHAIN_ID,
        seed: str = DEFAULT_ACCOUNT_SEED,
    ):
        if accounts < 1:
            raise ValueError("A local chain needs at least one account")
        if initial_balance < 0:
            raise ValueError("Initial balance cannot be negative")

        self.chain_id = chain_id
        self.state = ChainState()
        self.block_number = 0
        self._receipts: Dict[str, Receipt] = {}
        self._pending_logs: List[Log] = []
        self._signers = [
            Signer(address=derive_account_address(seed, i), index=i)
            for i in range(accounts)
        ]
        for signer in self._signers:
            self.state.set_balance(signer.address, initial_balance)

        logger.debug(f"Local chain {chain_id} started with {accounts} funded accounts")

    # ── Provider-style queries ────────────────────────────────────────

    @property
    def signers(self) -> List[Signer]:
        return list(self._signers)

    async def get_signers(self) -> List[Signer]:
        return self.signers

    async def get_balance(self, account: AddressLike) -> int:
        return self.state.get_balance(address_of(account))

    async def get_transaction_count(self, account: AddressLike) -> int:
        return self.state.get_nonce(address_of(account))

    async def get_code(self, account: AddressLike) -> Optional[Type]:
        return self.state.get_code(address_of(account))

    async def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        return self._receipts.get(tx_hash)

    # ── Snapshots (evm_snapshot / evm_revert) ─────────────────────────

    def snapshot(self) -> int:
        return self.state.snapshot()

    def revert(self, snapshot_id: int) -> None:
        self.state.revert(snapshot_id)
        logger.debug(f"Reverted chain state to snapshot {snapshot_id}")

    # ── Transactions ──────────────────────────────────────────────────

    async def deploy(
        self,
        contract_cls: Type,
        sender: AddressLike,
        *args: Any,
        value: int = 0,
    ) -> Receipt:
        """
        Deploy *contract_cls* from *sender*, running its constructor with *args*.

        Returns:
            Receipt whose ``contract_address`` is the new contract
        """
        sender = address_of(sender)
        nonce = self.state.get_nonce(sender)
        address = generate_contract_address(sender, nonce)
        tx_hash = self._tx_hash(sender, nonce, None, value, contract_cls.__name__.encode())

        def apply() -> bytes:
            self.state.set_code(address, contract_cls)
            if value:
                self.transfer_value(sender, address, value)
            contract_cls(self, Message(sender=sender, to=address, value=value)).constructor(*args)
            return b""

        receipt = self._apply_transaction(tx_hash, sender, None, apply)
        receipt.contract_address = address
        logger.info(f"Deployed {contract_cls.__name__} at {address} (tx {tx_hash})")
        return receipt

    async def send_transaction(
        self,
        sender: AddressLike,
        to: AddressLike,
        data: bytes = b"",
        value: int = 0,
    ) -> Receipt:
        """
        Execute a state-changing call and mine it.

        Raises:
            TransactionReverted: if execution reverts; the state is unchanged
        """
        sender = address_of(sender)
        to = address_of(to)
        if value < 0:
            raise ValueError("Transaction value cannot be negative")
        nonce = self.state.get_nonce(sender)
        tx_hash = self._tx_hash(sender, nonce, to, value, data)

        def apply() -> bytes:
            if value:
                self.transfer_value(sender, to, value)
            return self.execute_message(Message(sender=sender, to=to, value=value, data=data))

        return self._apply_transaction(tx_hash, sender, to, apply)

    async def call(
        self,
        to: AddressLike,
        data: bytes = b"",
        sender: Optional[AddressLike] = None,
        value: int = 0,
    ) -> bytes:
        """
        Execute without mining (eth_call). State changes are always discarded.
        """
        to = address_of(to)
        sender = address_of(sender) if sender is not None else ZERO_ADDRESS
        outer_logs = self._pending_logs
        self._pending_logs = []
        snapshot_id = self.state.snapshot()
        try:
            if value:
                self.transfer_value(sender, to, value)
            return self.execute_message(
                Message(sender=sender, to=to, value=value, data=data)
            )
        except Revert as e:
            raise TransactionReverted(e.reason) from None
        finally:
            self.state.revert(snapshot_id)
            self._pending_logs = outer_logs

    def _apply_transaction(self, tx_hash: str, sender: str, to: Optional[str], apply) -> Receipt:
        self._pending_logs = []
        snapshot_id = self.state.snapshot()
        try:
            self.state.increment_nonce(sender)
            return_data = apply()
        except Revert as e:
            self.state.revert(snapshot_id)
            self._pending_logs = []
            logger.warning(f"Transaction {tx_hash} reverted: {e.reason or 'no reason'}")
            raise TransactionReverted(e.reason, tx_hash=tx_hash) from None
        except Exception:
            self.state.revert(snapshot_id)
            self._pending_logs = []
            raise

        self.state.discard(snapshot_id)
        self.block_number += 1
        receipt = Receipt(
            tx_hash=tx_hash,
            block_number=self.block_number,
            sender=sender,
            to=to,
            logs=self._pending_logs,
            return_data=return_data,
        )
        self._pending_logs = []
        self._receipts[tx_hash] = receipt
        logger.debug(f"Mined block {self.block_number}: tx {tx_hash} from {sender}")
        return receipt

    def _tx_hash(self, sender: str, nonce: int, to: Optional[str], value: int, data: bytes) -> str:
        to_bytes = bytes.fromhex(to[2:]) if to else b""
        payload = rlp.encode([
            nonce, to_bytes, value, data, self.chain_id, bytes.fromhex(sender[2:]),
        ])
        return "0x" + keccak(payload).hex()

    # ── Execution (used by contract code) ─────────────────────────────

    def execute_message(self, msg: Message) -> bytes:
        """
        Run the code at ``msg.executing_address`` in the context of ``msg.to``.

        A plain value transfer to an account without code succeeds and
        returns empty data.
        """
        code = self.state.get_code(msg.executing_address)
        if code is None:
            if msg.code_address is not None:
                raise Revert("Address: delegate call to non-contract")
            return b""
        return code(self, msg).execute()

    def transfer_value(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise Revert("negative value transfer")
        balance = self.state.get_balance(sender)
        if balance < amount:
            raise Revert(f"sender doesn't have enough funds to send tx: {balance} < {amount}")
        self.state.set_balance(sender, balance - amount)
        self.state.set_balance(recipient, self.state.get_balance(recipient) + amount)

    def emit(self, address: str, event: Any) -> None:
        self._pending_logs.append(Log(address=address, event=event))

    def require_contract(self, address: str) -> Type:
        code = self.state.get_code(address)
        if code is None:
            raise ContractNotFoundError(f"No contract deployed at {address}")
        return code

    def __repr__(self) -> str:
        return f"<LocalChain id={self.chain_id} block={self.block_number}>"
