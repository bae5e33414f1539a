"""
Emergency stop: a pause flag and the guards that consult it.
"""

import functools

from .base import external, require
from .events import PausedEvent, UnpausedEvent
from .proxy import Initializable


def when_not_paused(fn):
    @functools.wraps(fn)
    def wrapper(self, *args):
        self._require_not_paused()
        return fn(self, *args)
    return wrapper


def when_paused(fn):
    @functools.wraps(fn)
    def wrapper(self, *args):
        self._require_paused()
        return fn(self, *args)
    return wrapper


class PausableUpgradeable(Initializable):
    __storage__ = ("_paused",)

    def _pausable_init(self) -> None:
        self._only_initializing()
        self._sstore("_paused", False)

    @external("paused()", "bool", view=True)
    def paused(self) -> bool:
        return bool(self._sload("_paused", False))

    def _require_not_paused(self) -> None:
        require(not self.paused(), "Pausable: paused")

    def _require_paused(self) -> None:
        require(self.paused(), "Pausable: not paused")

    @when_not_paused
    def _pause(self) -> None:
        self._sstore("_paused", True)
        self._emit(PausedEvent(self.msg.sender))

    @when_paused
    def _unpause(self) -> None:
        self._sstore("_paused", False)
        self._emit(UnpausedEvent(self.msg.sender))
