"""
Addressing and ABI helpers shared by the chain, the contracts and the tooling.
"""

from .contract import (
    normalize_address,
    generate_contract_address,
    parse_function_signature,
    compute_function_selector,
    encode_function_call,
    decode_function_call,
    decode_arguments,
    encode_return,
    decode_return,
)

__all__ = [
    'normalize_address',
    'generate_contract_address',
    'parse_function_signature',
    'compute_function_selector',
    'encode_function_call',
    'decode_function_call',
    'decode_arguments',
    'encode_return',
    'decode_return',
]
