"""
Single-owner access control.
"""

import functools

from ..constants import ZERO_ADDRESS
from .base import external, require
from .events import OwnershipTransferredEvent
from .proxy import Initializable


def only_owner(fn):
    """Revert unless msg.sender is the current owner."""
    @functools.wraps(fn)
    def wrapper(self, *args):
        self._check_owner()
        return fn(self, *args)
    return wrapper


class OwnableUpgradeable(Initializable):
    __storage__ = ("_owner",)

    def _ownable_init(self) -> None:
        self._only_initializing()
        self._transfer_ownership(self.msg.sender)

    @external("owner()", "address", view=True)
    def owner(self) -> str:
        return self._sload("_owner", ZERO_ADDRESS)

    def _check_owner(self) -> None:
        require(self.owner() == self.msg.sender, "Ownable: caller is not the owner")

    @external("renounceOwnership()")
    @only_owner
    def renounce_ownership(self) -> None:
        self._transfer_ownership(ZERO_ADDRESS)

    @external("transferOwnership(address)")
    @only_owner
    def transfer_ownership(self, new_owner: str) -> None:
        require(new_owner != ZERO_ADDRESS, "Ownable: new owner is the zero address")
        self._transfer_ownership(new_owner)

    def _transfer_ownership(self, new_owner: str) -> None:
        old_owner = self.owner()
        self._sstore("_owner", new_owner)
        self._emit(OwnershipTransferredEvent(old_owner, new_owner))
