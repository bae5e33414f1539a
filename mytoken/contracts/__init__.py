"""
Contract code for the local chain.

``ARTIFACTS`` maps artifact names to contract classes, the way a compiled
artifacts directory maps contract names to bytecode.
"""

from typing import Dict, Type

from .base import Contract, FunctionABI, Revert, external, require
from .proxy import ERC1967Proxy, Initializable, UUPSUpgradeable, initializer, reinitializer
from .access import OwnableUpgradeable, only_owner
from .security import PausableUpgradeable, when_not_paused, when_paused
from .erc20 import ERC20Upgradeable, ERC20BurnableUpgradeable
from .my_token import MyToken, MyToken2

ARTIFACTS: Dict[str, Type[Contract]] = {
    "MyToken": MyToken,
    "MyToken2": MyToken2,
    "ERC1967Proxy": ERC1967Proxy,
}

__all__ = [
    "ARTIFACTS",
    "Contract",
    "FunctionABI",
    "Revert",
    "external",
    "require",
    "ERC1967Proxy",
    "Initializable",
    "UUPSUpgradeable",
    "initializer",
    "reinitializer",
    "OwnableUpgradeable",
    "only_owner",
    "PausableUpgradeable",
    "when_not_paused",
    "when_paused",
    "ERC20Upgradeable",
    "ERC20BurnableUpgradeable",
    "MyToken",
    "MyToken2",
]
