"""
MyToken

Upgradeable ERC-20 token with ETH custody, running on an in-process local
chain, plus the UUPS proxy tooling to deploy and upgrade it.
"""

__version__ = "1.0.0"

from .exceptions import (
    MyTokenException,
    TransactionReverted,
    InvalidAddressError,
    ContractNotFoundError,
    UpgradeError,
    ConfigurationError,
)
from .chain import LocalChain, ContractHandle, ContractFactory, get_contract_factory, load_fixture
from .contracts import MyToken, MyToken2, ERC1967Proxy
from .upgrades import deploy_proxy, upgrade_proxy

__all__ = [
    "__version__",
    "MyTokenException",
    "TransactionReverted",
    "InvalidAddressError",
    "ContractNotFoundError",
    "UpgradeError",
    "ConfigurationError",
    "LocalChain",
    "ContractHandle",
    "ContractFactory",
    "get_contract_factory",
    "load_fixture",
    "MyToken",
    "MyToken2",
    "ERC1967Proxy",
    "deploy_proxy",
    "upgrade_proxy",
]
