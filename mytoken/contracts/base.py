"""
Contract runtime.

Contracts are Python classes whose externally callable methods are declared
with ``@external("name(types)")``. Calls arrive as ABI calldata, are routed by
4-byte selector and decoded with eth-abi; results are ABI-encoded back.
State lives in the chain, never on the instance: a fresh instance is created
for every call frame.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Tuple, Union

from eth_abi.exceptions import DecodingError

from ..crypto import (
    compute_function_selector,
    decode_arguments,
    decode_function_call,
    encode_return,
    parse_function_signature,
)

if TYPE_CHECKING:
    from ..chain.local import LocalChain
    from ..chain.types import Message


class Revert(Exception):
    """Raised by contract code to abort the current transaction."""

    def __init__(self, reason: str = ""):
        self.reason = reason
        super().__init__(reason)


def require(condition: bool, reason: str = "") -> None:
    if not condition:
        raise Revert(reason)


@dataclass(frozen=True)
class FunctionABI:
    """ABI entry of one external function."""
    signature: str
    name: str
    inputs: Tuple[str, ...]
    outputs: Tuple[str, ...]
    view: bool
    payable: bool
    method: str

    @property
    def selector(self) -> bytes:
        return compute_function_selector(self.signature)

    def to_dict(self) -> Dict[str, Any]:
        if self.view:
            mutability = "view"
        elif self.payable:
            mutability = "payable"
        else:
            mutability = "nonpayable"
        return {
            "type": "function",
            "name": self.name,
            "inputs": [{"type": t} for t in self.inputs],
            "outputs": [{"type": t} for t in self.outputs],
            "stateMutability": mutability,
        }


def external(
    signature: str,
    returns: Union[str, Tuple[str, ...]] = (),
    *,
    view: bool = False,
    payable: bool = False,
):
    """
    Mark a contract method as externally callable.

    Args:
        signature: Canonical signature, e.g. "transfer(address,uint256)"
        returns: ABI type(s) of the return value
        view: Function does not modify state
        payable: Function accepts a non-zero ``msg.value``
    """
    if isinstance(returns, str):
        returns = (returns,)
    if view and payable:
        raise ValueError("A function cannot be both view and payable")

    def decorator(fn):
        name, inputs = parse_function_signature(signature)
        fn.__abi__ = FunctionABI(
            signature=f"{name}({','.join(inputs)})",
            name=name,
            inputs=inputs,
            outputs=tuple(returns),
            view=view,
            payable=payable,
            method=fn.__name__,
        )
        return fn

    return decorator


class Contract:
    """
    Base class of all contract code.

    Subclasses list the storage variables they introduce in ``__storage__``;
    the full layout is the concatenation along the MRO, base classes first,
    which is what upgrade validation compares.
    """

    __storage__: Tuple[str, ...] = ()
    _functions: Dict[bytes, FunctionABI] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        functions: Dict[bytes, FunctionABI] = {}
        for klass in reversed(cls.__mro__):
            for member in vars(klass).values():
                abi = getattr(member, "__abi__", None)
                if isinstance(abi, FunctionABI):
                    functions[abi.selector] = abi
        cls._functions = functions

    def __init__(self, chain: "LocalChain", msg: "Message"):
        self._chain = chain
        self.msg = msg

    # ── Class-level introspection ─────────────────────────────────────

    @classmethod
    def abi(cls) -> List[FunctionABI]:
        return sorted(cls._functions.values(), key=lambda f: f.signature)

    @classmethod
    def get_function(cls, name: str) -> List[FunctionABI]:
        """All overloads of the function called *name*."""
        return [f for f in cls.abi() if f.name == name]

    @classmethod
    def storage_layout(cls) -> Tuple[str, ...]:
        layout: List[str] = []
        for klass in reversed(cls.__mro__):
            for name in vars(klass).get("__storage__", ()):
                if name not in layout:
                    layout.append(name)
        return tuple(layout)

    # ── Execution context ─────────────────────────────────────────────

    @property
    def address(self) -> str:
        """address(this): the account whose storage is in use."""
        return self.msg.to

    @property
    def code_address(self) -> str:
        """Where this code is deployed; differs from ``address`` under delegatecall."""
        return self.msg.executing_address

    def constructor(self, *args: Any) -> None:
        """Runs once at deployment. Contracts override this."""
        require(not args, "constructor takes no arguments")

    def execute(self) -> bytes:
        selector, payload = decode_function_call(self.msg.data)
        abi = self._functions.get(selector)
        if abi is None:
            return self._fallback()
        if self.msg.value and not abi.payable:
            raise Revert(f"{abi.name}: function is not payable")
        try:
            args = decode_arguments(abi.inputs, payload)
        except DecodingError:
            raise Revert(f"{abi.name}: invalid calldata") from None
        result = getattr(self, abi.method)(*args)
        return encode_return(abi.outputs, result)

    def _fallback(self) -> bytes:
        if not self.msg.data:
            raise Revert("contract does not accept plain value transfers")
        raise Revert("function selector was not recognized and there's no fallback function")

    # ── Storage, balances and logs ────────────────────────────────────

    def _sload(self, key: Hashable, default: Any = 0) -> Any:
        return self._chain.state.get_storage(self.address, key, default)

    def _sstore(self, key: Hashable, value: Any) -> None:
        self._require_mutable()
        self._chain.state.set_storage(self.address, key, value)

    def _emit(self, event: Any) -> None:
        self._require_mutable()
        self._chain.emit(self.address, event)

    def _require_mutable(self) -> None:
        require(not self.msg.static, "state modification in static call")

    def _self_balance(self) -> int:
        return self._chain.state.get_balance(self.address)

    def _send_value(self, recipient: str, amount: int) -> None:
        """Address.sendValue: transfer ETH, running the recipient's code if any."""
        self._require_mutable()
        require(self._self_balance() >= amount, "Address: insufficient balance")
        self._chain.transfer_value(self.address, recipient, amount)
        if self._chain.state.is_contract(recipient):
            try:
                self._chain.execute_message(
                    replace(
                        self.msg,
                        sender=self.address,
                        to=recipient,
                        value=amount,
                        data=b"",
                        code_address=None,
                    )
                )
            except Revert:
                raise Revert("Address: unable to send value, recipient may have reverted") from None

    def _delegatecall(self, target: str, data: bytes) -> bytes:
        """Run *target*'s code against this contract's storage, keeping msg.sender and msg.value."""
        return self._chain.execute_message(
            replace(self.msg, data=data, code_address=target)
        )
