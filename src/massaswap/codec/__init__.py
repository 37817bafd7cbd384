"""Binary encoding for Massa contract calls and operations."""

from massaswap.codec.args import Args, ArgsReader, U256_MAX
from massaswap.codec.operation import address_to_bytes, encode_varint, serialize_call_sc

__all__ = [
    "Args",
    "ArgsReader",
    "U256_MAX",
    "address_to_bytes",
    "encode_varint",
    "serialize_call_sc",
]
