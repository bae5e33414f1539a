"""
Chain data types: signers, call messages, logs and receipts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Signer:
    """A funded externally-owned account of the local chain."""
    address: str
    index: int = 0

    def __str__(self) -> str:
        return self.address


@dataclass(frozen=True)
class Message:
    """
    Execution context of one call frame.

    ``to`` is the account whose storage and balance are in use; ``code_address``
    is where the executing code lives. They differ only under delegatecall.
    """
    sender: str
    to: str
    value: int = 0
    data: bytes = b""
    code_address: Optional[str] = None
    static: bool = False

    @property
    def executing_address(self) -> str:
        return self.code_address or self.to


@dataclass(frozen=True)
class Log:
    """An event emitted by the contract at ``address``."""
    address: str
    event: Any

    @property
    def name(self) -> str:
        return type(self.event).__name__.replace("Event", "")

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, **self.event.to_dict()}


@dataclass
class Receipt:
    """Result of a mined transaction."""
    tx_hash: str
    block_number: int
    sender: str
    to: Optional[str]
    status: int = 1
    contract_address: Optional[str] = None
    logs: List[Log] = field(default_factory=list)
    return_data: bytes = b""

    def events(self, name: str) -> List[Any]:
        """All events with the given name (e.g. "Transfer"), in emission order."""
        return [log.event for log in self.logs if log.name == name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transactionHash": self.tx_hash,
            "blockNumber": self.block_number,
            "from": self.sender,
            "to": self.to,
            "status": self.status,
            "contractAddress": self.contract_address,
            "logs": [log.to_dict() for log in self.logs],
        }
