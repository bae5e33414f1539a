"""
Contract events.

Each event is a frozen dataclass recorded in the transaction receipt's logs.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class TransferEvent:
    """ERC-20 Transfer. Mints come from, and burns go to, the zero address."""
    sender: str
    recipient: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "from": self.sender,
            "to": self.recipient,
            "value": self.amount,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    owner: str
    spender: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "owner": self.owner,
            "spender": self.spender,
            "value": self.amount,
        }


@dataclass(frozen=True)
class OwnershipTransferredEvent:
    previous_owner: str
    new_owner: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "OwnershipTransferred",
            "previousOwner": self.previous_owner,
            "newOwner": self.new_owner,
        }


@dataclass(frozen=True)
class PausedEvent:
    account: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Paused", "account": self.account}


@dataclass(frozen=True)
class UnpausedEvent:
    account: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Unpaused", "account": self.account}


@dataclass(frozen=True)
class UpgradedEvent:
    """ERC-1967 Upgraded: the proxy now points at ``implementation``."""
    implementation: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Upgraded", "implementation": self.implementation}


@dataclass(frozen=True)
class InitializedEvent:
    version: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "Initialized", "version": self.version}


@dataclass(frozen=True)
class EthDepositedEvent:
    account: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "EthDeposited", "account": self.account, "amount": self.amount}


@dataclass(frozen=True)
class EthWithdrawnEvent:
    recipient: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "EthWithdrawn", "recipient": self.recipient, "amount": self.amount}
