"""
Local development chain: state, execution, receipts and contract handles.
"""

from .state import ChainState, Account
from .types import Signer, Message, Log, Receipt
from .local import LocalChain, derive_account_address, address_of
from .client import ContractFactory, ContractHandle, BoundFunction, get_contract_factory
from .helpers import load_fixture

__all__ = [
    'ChainState',
    'Account',
    'Signer',
    'Message',
    'Log',
    'Receipt',
    'LocalChain',
    'derive_account_address',
    'address_of',
    'ContractFactory',
    'ContractHandle',
    'BoundFunction',
    'get_contract_factory',
    'load_fixture',
]
