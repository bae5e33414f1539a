"""
Proxy contracts: ERC-1967 proxy, initializer guards and UUPS upgrade logic.

The proxy only stores the implementation address (in the ERC-1967 slot) and
delegates every call to it; the upgrade entry points live in the
implementation (UUPS), so a proxy whose implementation drops them can no
longer be upgraded.
"""

import functools
from dataclasses import replace

from eth_abi.exceptions import DecodingError

from ..constants import IMPLEMENTATION_SLOT, ZERO_ADDRESS
from ..crypto import decode_return, encode_function_call
from .base import Contract, Revert, external, require
from .events import InitializedEvent, UpgradedEvent

_MAX_INITIALIZED_VERSION = 255
_IMPLEMENTATION_SLOT_BYTES = bytes.fromhex(IMPLEMENTATION_SLOT[2:])


# ══════════════════════════════════════════════════════════════════════
#  INITIALIZABLE
# ══════════════════════════════════════════════════════════════════════

def reinitializer(version: int):
    """
    Guard an initializer so it runs at most once, and only while the
    contract's initialized version is below *version*.
    """
    if not 1 <= version <= _MAX_INITIALIZED_VERSION:
        raise ValueError(f"Initializer version must be 1-{_MAX_INITIALIZED_VERSION}, got {version}")

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(self, *args):
            require(
                not self._sload("_initializing", False) and self._sload("_initialized") < version,
                "Initializable: contract is already initialized",
            )
            self._sstore("_initialized", version)
            self._sstore("_initializing", True)
            result = fn(self, *args)
            self._sstore("_initializing", False)
            self._emit(InitializedEvent(version))
            return result
        return wrapper

    return decorator


initializer = reinitializer(1)


class Initializable(Contract):
    __storage__ = ("_initialized", "_initializing")

    def _only_initializing(self) -> None:
        require(self._sload("_initializing", False), "Initializable: contract is not initializing")

    def _disable_initializers(self) -> None:
        """Lock this storage against any future initialization."""
        require(not self._sload("_initializing", False), "Initializable: contract is initializing")
        if self._sload("_initialized") < _MAX_INITIALIZED_VERSION:
            self._sstore("_initialized", _MAX_INITIALIZED_VERSION)
            self._emit(InitializedEvent(_MAX_INITIALIZED_VERSION))

    def _get_initialized_version(self) -> int:
        return self._sload("_initialized")


# ══════════════════════════════════════════════════════════════════════
#  UUPS
# ══════════════════════════════════════════════════════════════════════

class UUPSUpgradeable(Initializable):
    """Upgrade logic that lives in the implementation and runs in the proxy's context."""

    def _implementation(self) -> str:
        return self._sload(IMPLEMENTATION_SLOT, ZERO_ADDRESS)

    def _only_proxy(self) -> None:
        require(self.address != self.code_address, "Function must be called through delegatecall")
        require(self._implementation() == self.code_address, "Function must be called through active proxy")

    def _not_delegated(self) -> None:
        require(
            self.address == self.code_address,
            "UUPSUpgradeable: must not be called through delegatecall",
        )

    def _authorize_upgrade(self, new_implementation: str) -> None:
        raise NotImplementedError(f"{type(self).__name__} must define _authorize_upgrade")

    @external("proxiableUUID()", "bytes32", view=True)
    def proxiable_uuid(self) -> bytes:
        self._not_delegated()
        return _IMPLEMENTATION_SLOT_BYTES

    @external("upgradeTo(address)")
    def upgrade_to(self, new_implementation: str) -> None:
        self._only_proxy()
        self._authorize_upgrade(new_implementation)
        self._upgrade_to_and_call_uups(new_implementation, b"", False)

    @external("upgradeToAndCall(address,bytes)", payable=True)
    def upgrade_to_and_call(self, new_implementation: str, data: bytes) -> None:
        self._only_proxy()
        self._authorize_upgrade(new_implementation)
        self._upgrade_to_and_call_uups(new_implementation, data, True)

    def _upgrade_to_and_call_uups(self, new_implementation: str, data: bytes, force_call: bool) -> None:
        require(
            self._chain.state.is_contract(new_implementation),
            "ERC1967: new implementation is not a contract",
        )
        uuid_call = replace(
            self.msg,
            sender=self.address,
            to=new_implementation,
            value=0,
            data=encode_function_call("proxiableUUID()"),
            code_address=None,
            static=True,
        )
        try:
            slot = decode_return(("bytes32",), self._chain.execute_message(uuid_call))
        except (Revert, DecodingError):
            raise Revert("ERC1967Upgrade: new implementation is not UUPS") from None
        require(slot == _IMPLEMENTATION_SLOT_BYTES, "ERC1967Upgrade: unsupported proxiableUUID")

        self._sstore(IMPLEMENTATION_SLOT, new_implementation)
        self._emit(UpgradedEvent(new_implementation))
        if data or force_call:
            self._delegatecall(new_implementation, data)


# ══════════════════════════════════════════════════════════════════════
#  ERC-1967 PROXY
# ══════════════════════════════════════════════════════════════════════

class ERC1967Proxy(Contract):
    """Delegates every call, including plain value transfers, to the implementation."""

    def constructor(self, implementation: str, data: bytes = b"") -> None:
        require(
            self._chain.state.is_contract(implementation),
            "ERC1967: new implementation is not a contract",
        )
        self._sstore(IMPLEMENTATION_SLOT, implementation)
        self._emit(UpgradedEvent(implementation))
        if data:
            self._delegatecall(implementation, data)

    def execute(self) -> bytes:
        return self._delegatecall(self._sload(IMPLEMENTATION_SLOT, ZERO_ADDRESS), self.msg.data)
