"""
Contract Addressing and ABI Encoding

Ethereum-compatible contract address computation and calldata encoding.
"""

from typing import Any, Sequence, Tuple

from eth_abi import decode, encode
from eth_utils import is_address, keccak, to_checksum_address
import rlp

from ..exceptions import InvalidAddressError


def normalize_address(address: str) -> str:
    """
    Validate an address and return it in EIP-55 checksum form.

    Raises:
        InvalidAddressError: if *address* is not a 20-byte hex address
    """
    if not isinstance(address, str) or not is_address(address):
        raise InvalidAddressError(f"Invalid address: {address!r}")
    return to_checksum_address(address)


def generate_contract_address(sender: str, nonce: int) -> str:
    """
    Generate contract address using CREATE opcode logic.

    Address = keccak256(rlp([sender, nonce]))[-20:]

    Args:
        sender: Deployer address (0x-prefixed)
        nonce: Deployer nonce at deployment time

    Returns:
        Contract address (Ethereum checksum format)
    """
    sender_bytes = bytes.fromhex(normalize_address(sender)[2:])
    rlp_encoded = rlp.encode([sender_bytes, nonce])
    address_bytes = keccak(rlp_encoded)[-20:]
    return to_checksum_address('0x' + address_bytes.hex())


def parse_function_signature(function_signature: str) -> Tuple[str, Tuple[str, ...]]:
    """
    Split "transfer(address,uint256)" into ("transfer", ("address", "uint256")).
    """
    try:
        args_start = function_signature.index('(')
        args_end = function_signature.rindex(')')
    except ValueError:
        raise ValueError(f"Malformed function signature: {function_signature!r}") from None

    name = function_signature[:args_start].strip()
    arg_types_str = function_signature[args_start + 1:args_end]
    if not name:
        raise ValueError(f"Malformed function signature: {function_signature!r}")
    if not arg_types_str.strip():
        return name, ()
    return name, tuple(t.strip() for t in arg_types_str.split(','))


def compute_function_selector(function_signature: str) -> bytes:
    """
    Compute Ethereum function selector (first 4 bytes of keccak256(sig)).

    Args:
        function_signature: Function signature like "transfer(address,uint256)"

    Returns:
        4-byte function selector
    """
    return keccak(text=function_signature)[:4]


def encode_function_call(function_signature: str, *args) -> bytes:
    """
    Encode function call data (selector + ABI-encoded arguments).
    """
    selector = compute_function_selector(function_signature)
    _, arg_types = parse_function_signature(function_signature)

    if len(arg_types) != len(args):
        raise ValueError(
            f"{function_signature} expects {len(arg_types)} argument(s), got {len(args)}"
        )
    if not arg_types:
        return selector
    return selector + encode(list(arg_types), list(args))


def decode_function_call(data: bytes) -> Tuple[bytes, bytes]:
    """
    Decode function call data into selector and arguments.

    Returns:
        Tuple of (selector, encoded arguments); empty selector for short data
    """
    if len(data) < 4:
        return b'', b''
    return data[:4], data[4:]


def decode_arguments(arg_types: Sequence[str], data: bytes) -> Tuple[Any, ...]:
    """Decode ABI-encoded arguments, checksumming any address values."""
    if not arg_types:
        return ()
    values = decode(list(arg_types), data)
    return tuple(
        to_checksum_address(v) if t == 'address' else v
        for t, v in zip(arg_types, values)
    )


def encode_return(return_types: Sequence[str], value: Any) -> bytes:
    """ABI-encode a function result. Multiple return types expect a tuple."""
    if not return_types:
        return b''
    if len(return_types) == 1:
        value = (value,)
    return encode(list(return_types), list(value))


def decode_return(return_types: Sequence[str], data: bytes) -> Any:
    """Inverse of encode_return: a single value, a tuple, or None."""
    if not return_types:
        return None
    values = decode_arguments(return_types, data)
    if len(return_types) == 1:
        return values[0]
    return values
