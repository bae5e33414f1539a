"""
Proxy deployment and upgrades

    factory = get_contract_factory(chain, "MyToken")
    token = await deploy_proxy(chain, factory, initializer="initialize", kind="uups")
    token = await upgrade_proxy(chain, token.address, get_contract_factory(chain, "MyToken2"))

Before anything is deployed, the implementation is validated: the proxy kind
must be supported, a UUPS implementation must carry the upgrade functions,
and an upgrade must keep every existing storage variable in place.
"""

from typing import Any, Optional, Sequence, Tuple, Type, Union

from ..chain.client import ContractFactory, ContractHandle
from ..chain.local import AddressLike, LocalChain, address_of, as_abi_argument
from ..constants import DEFAULT_INITIALIZER, IMPLEMENTATION_SLOT, SUPPORTED_PROXY_KINDS
from ..contracts.base import Contract
from ..contracts.proxy import ERC1967Proxy, UUPSUpgradeable
from ..crypto import encode_function_call
from ..exceptions import UpgradeError
from ..logger import get_logger
from .manifest import ImplementationRecord, ProxyRecord, get_manifest

logger = get_logger(__name__)

UpgradeCall = Union[str, Tuple[str, Sequence[Any]]]


# ══════════════════════════════════════════════════════════════════════
#  VALIDATION
# ══════════════════════════════════════════════════════════════════════

def validate_implementation(contract_cls: Type[Contract], kind: str = "uups") -> None:
    """
    Raises:
        UpgradeError: unsupported kind, or a UUPS implementation without upgradeTo
    """
    if kind not in SUPPORTED_PROXY_KINDS:
        raise UpgradeError(
            f"Unsupported proxy kind {kind!r}; supported: {', '.join(SUPPORTED_PROXY_KINDS)}"
        )
    if kind == "uups" and not issubclass(contract_cls, UUPSUpgradeable):
        raise UpgradeError(
            f"Contract {contract_cls.__name__} is not upgrade safe: "
            "missing public upgradeTo function (inherit UUPSUpgradeable)"
        )


def validate_upgrade(
    current_cls: Type[Contract],
    new_cls: Type[Contract],
    kind: str = "uups",
) -> None:
    """
    Check that *new_cls* can replace *current_cls* behind the same proxy.

    Every variable of the current layout must keep its position; new
    variables may only be appended.
    """
    validate_implementation(new_cls, kind)

    current_layout = current_cls.storage_layout()
    new_layout = new_cls.storage_layout()
    for position, variable in enumerate(current_layout):
        if position >= len(new_layout):
            raise UpgradeError(
                f"New storage layout of {new_cls.__name__} is incompatible: "
                f"deleted variable {variable!r}"
            )
        if new_layout[position] != variable:
            raise UpgradeError(
                f"New storage layout of {new_cls.__name__} is incompatible: "
                f"{variable!r} at position {position} replaced by {new_layout[position]!r}"
            )


def get_implementation_address(chain: LocalChain, proxy: AddressLike) -> str:
    """Read the ERC-1967 implementation slot of *proxy*."""
    proxy = address_of(proxy)
    implementation = chain.state.get_storage(proxy, IMPLEMENTATION_SLOT)
    if implementation is None:
        raise UpgradeError(f"Contract at {proxy} doesn't look like an ERC 1967 proxy")
    return implementation


# ══════════════════════════════════════════════════════════════════════
#  DEPLOYMENT
# ══════════════════════════════════════════════════════════════════════

async def deploy_implementation(
    chain: LocalChain,
    factory: ContractFactory,
    kind: str = "uups",
) -> str:
    """Deploy the factory's contract as an implementation, reusing a live earlier deployment."""
    validate_implementation(factory.contract_cls, kind)
    manifest = get_manifest(chain)

    record = manifest.get_implementation(factory.name)
    if record is not None and chain.state.get_code(record.address) is factory.contract_cls:
        logger.debug(f"Reusing {factory.name} implementation at {record.address}")
        return record.address

    receipt = await chain.deploy(factory.contract_cls, factory.signer)
    manifest.add_implementation(ImplementationRecord(
        contract_name=factory.name,
        address=receipt.contract_address,
        tx_hash=receipt.tx_hash,
        layout=factory.contract_cls.storage_layout(),
    ))
    return receipt.contract_address


def _encode_initializer(
    contract_cls: Type[Contract],
    function_name: str,
    args: Sequence[Any],
) -> bytes:
    overloads = [f for f in contract_cls.get_function(function_name) if len(f.inputs) == len(args)]
    if not overloads:
        raise UpgradeError(
            f"Contract {contract_cls.__name__} does not have a function "
            f"`{function_name}` taking {len(args)} argument(s)"
        )
    args = tuple(as_abi_argument(a) for a in args)
    return encode_function_call(overloads[0].signature, *args)


async def deploy_proxy(
    chain: LocalChain,
    factory: ContractFactory,
    args: Sequence[Any] = (),
    *,
    initializer: Optional[str] = DEFAULT_INITIALIZER,
    kind: str = "uups",
) -> ContractHandle:
    """
    Deploy *factory*'s contract behind a new ERC-1967 proxy.

    Args:
        chain: Target chain
        factory: Implementation factory; its signer deploys and initializes
        args: Initializer arguments
        initializer: Initializer function name, or None to skip initialization
        kind: Proxy kind (only "uups")

    Returns:
        Handle to the proxy using the implementation's ABI
    """
    validate_implementation(factory.contract_cls, kind)
    data = _encode_initializer(factory.contract_cls, initializer, args) if initializer else b""

    implementation = await deploy_implementation(chain, factory, kind)
    receipt = await chain.deploy(ERC1967Proxy, factory.signer, implementation, data)

    get_manifest(chain).add_proxy(ProxyRecord(
        address=receipt.contract_address,
        kind=kind,
        tx_hash=receipt.tx_hash,
    ))
    logger.info(
        f"{factory.name} proxy deployed at {receipt.contract_address} "
        f"(implementation {implementation})"
    )
    return ContractHandle(
        chain, receipt.contract_address, factory.contract_cls, factory.signer, receipt
    )


async def upgrade_proxy(
    chain: LocalChain,
    proxy: Union[AddressLike, ContractHandle],
    factory: ContractFactory,
    *,
    call: Optional[UpgradeCall] = None,
    kind: str = "uups",
) -> ContractHandle:
    """
    Point an existing proxy at *factory*'s contract.

    Args:
        proxy: Proxy address or handle
        factory: New implementation; its signer must be allowed to upgrade
        call: Function to run through the proxy right after the upgrade,
            either a name or a (name, args) tuple
        kind: Proxy kind (only "uups")

    Returns:
        Handle to the proxy using the new implementation's ABI
    """
    proxy = address_of(proxy)

    current_implementation = get_implementation_address(chain, proxy)
    current_cls = chain.state.get_code(current_implementation)
    if current_cls is None or not issubclass(current_cls, UUPSUpgradeable):
        raise UpgradeError(f"Proxy at {proxy} does not point at an upgradeable implementation")
    validate_upgrade(current_cls, factory.contract_cls, kind)

    data = None
    if call is not None:
        name, call_args = (call, ()) if isinstance(call, str) else call
        data = _encode_initializer(factory.contract_cls, name, call_args)

    new_implementation = await deploy_implementation(chain, factory, kind)
    current = ContractHandle(chain, proxy, current_cls, factory.signer)
    if data is None:
        await current.upgradeTo(new_implementation)
    else:
        await current.upgradeToAndCall(new_implementation, data)

    logger.info(
        f"Proxy {proxy} upgraded from {current_cls.__name__} to {factory.name} "
        f"(implementation {new_implementation})"
    )
    return ContractHandle(chain, proxy, factory.contract_cls, factory.signer)
