"""
Contract client

ethers-style handles over the local chain: a ``ContractFactory`` deploys a
contract class, a ``ContractHandle`` exposes its ABI functions as awaitable
attributes bound to a signer.

    token = await factory.deploy()
    await token.transfer(addr1, amount)          # -> Receipt
    balance = await token.balanceOf(addr1)        # -> int
    await token.connect(addr1).deposit(value=10)  # payable call from addr1
"""

from typing import Any, Dict, List, Optional, Type

from ..contracts import ARTIFACTS
from ..contracts.base import Contract, FunctionABI
from ..crypto import decode_return, encode_function_call
from ..exceptions import ContractNotFoundError
from ..logger import get_logger
from .local import AddressLike, LocalChain, address_of, as_abi_argument
from .types import Receipt

logger = get_logger(__name__)


class BoundFunction:
    """One ABI function of a handle; awaiting a call performs it."""

    def __init__(self, handle: "ContractHandle", overloads: List[FunctionABI]):
        self._handle = handle
        self._overloads = overloads
        self.name = overloads[0].name

    def _select(self, args: tuple) -> FunctionABI:
        matches = [f for f in self._overloads if len(f.inputs) == len(args)]
        if len(matches) != 1:
            signatures = ", ".join(f.signature for f in self._overloads)
            raise TypeError(f"No unique overload of {self.name} for {len(args)} argument(s): {signatures}")
        return matches[0]

    async def __call__(self, *args: Any, value: int = 0) -> Any:
        abi = self._select(args)
        args = tuple(as_abi_argument(a) for a in args)
        if value and not abi.payable:
            raise TypeError(f"{abi.signature} is not payable")

        data = encode_function_call(abi.signature, *args)
        handle = self._handle
        if abi.view:
            raw = await handle.chain.call(handle.address, data, sender=handle.signer, value=value)
            return decode_return(abi.outputs, raw)

        logger.debug(f"{abi.signature} on {handle.address} from {address_of(handle.signer)}")
        return await handle.chain.send_transaction(handle.signer, handle.address, data, value=value)

    async def call_static(self, *args: Any, value: int = 0) -> Any:
        """Run a state-changing function as a call and decode its result."""
        abi = self._select(args)
        args = tuple(as_abi_argument(a) for a in args)
        data = encode_function_call(abi.signature, *args)
        handle = self._handle
        raw = await handle.chain.call(handle.address, data, sender=handle.signer, value=value)
        return decode_return(abi.outputs, raw)

    def encode(self, *args: Any) -> bytes:
        """Calldata for this function (e.g. for upgradeToAndCall)."""
        abi = self._select(args)
        return encode_function_call(abi.signature, *(as_abi_argument(a) for a in args))


class ContractHandle:
    """A deployed contract seen through ``contract_cls``'s ABI, acting as ``signer``."""

    def __init__(
        self,
        chain: LocalChain,
        address: str,
        contract_cls: Type[Contract],
        signer: AddressLike,
        deploy_receipt: Optional[Receipt] = None,
    ):
        self.chain = chain
        self.address = address_of(address)
        self.contract_cls = contract_cls
        self.signer = signer
        self.deploy_receipt = deploy_receipt
        self._functions: Dict[str, List[FunctionABI]] = {}
        for abi in contract_cls.abi():
            self._functions.setdefault(abi.name, []).append(abi)

    def __getattr__(self, name: str) -> BoundFunction:
        functions = self.__dict__.get("_functions", {})
        if name in functions:
            return BoundFunction(self, functions[name])
        raise AttributeError(f"{type(self).__name__} for {self.contract_cls.__name__} has no function {name!r}")

    def connect(self, signer: AddressLike) -> "ContractHandle":
        return ContractHandle(self.chain, self.address, self.contract_cls, signer, self.deploy_receipt)

    def attach(self, address: AddressLike) -> "ContractHandle":
        return ContractHandle(self.chain, address_of(address), self.contract_cls, self.signer)

    @property
    def functions(self) -> List[str]:
        return sorted(self._functions)

    def __repr__(self) -> str:
        return f"<ContractHandle {self.contract_cls.__name__} at {self.address}>"


class ContractFactory:
    """Deploys ``contract_cls`` from ``signer``."""

    def __init__(self, chain: LocalChain, contract_cls: Type[Contract], signer: AddressLike):
        self.chain = chain
        self.contract_cls = contract_cls
        self.signer = signer

    @property
    def name(self) -> str:
        return self.contract_cls.__name__

    async def deploy(self, *args: Any, value: int = 0) -> ContractHandle:
        receipt = await self.chain.deploy(self.contract_cls, self.signer, *args, value=value)
        return ContractHandle(
            self.chain, receipt.contract_address, self.contract_cls, self.signer, receipt
        )

    def attach(self, address: AddressLike) -> ContractHandle:
        return ContractHandle(self.chain, address, self.contract_cls, self.signer)

    def connect(self, signer: AddressLike) -> "ContractFactory":
        return ContractFactory(self.chain, self.contract_cls, signer)


def get_contract_factory(
    chain: LocalChain,
    name: str,
    signer: Optional[AddressLike] = None,
) -> ContractFactory:
    """
    Look up an artifact by name and bind it to *signer* (default: first account).

    Raises:
        ContractNotFoundError: for an unknown artifact name
    """
    contract_cls = ARTIFACTS.get(name)
    if contract_cls is None:
        raise ContractNotFoundError(
            f"Artifact {name!r} not found; known artifacts: {', '.join(sorted(ARTIFACTS))}"
        )
    return ContractFactory(chain, contract_cls, signer if signer is not None else chain.signers[0])
