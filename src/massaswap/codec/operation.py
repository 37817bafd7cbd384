"""Serialization of Massa CallSC operation content.

The serialized content is what the signer signs and what ``send_operations``
receives (as a byte list) together with the public key and signature.
"""

import base58

from massaswap.exceptions import CodecError

CALL_SC_OPERATION_TYPE = 4

ADDRESS_HASH_SIZE = 32
_ADDRESS_TYPES = {
    "AU": 0,  # user account
    "AS": 1,  # smart contract
}


def encode_varint(value: int) -> bytes:
    """Unsigned LEB128."""
    if value < 0:
        raise CodecError(f"varint cannot encode negative value {value}")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode an unsigned LEB128 value.

    Returns:
        (value, offset just past the varint)
    """
    value = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise CodecError("Truncated varint")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7


def address_to_bytes(address: str) -> bytes:
    """Convert an ``AU``/``AS`` address to its 34-byte binary form.

    Layout: address type (0 user, 1 contract) + version byte + 32-byte hash.
    """
    prefix = address[:2]
    if prefix not in _ADDRESS_TYPES or len(address) < 3:
        raise CodecError(f"Invalid Massa address prefix: {address[:4]!r}")

    try:
        payload = base58.b58decode_check(address[2:])
    except ValueError as e:
        raise CodecError(f"Invalid Massa address checksum: {address}") from e

    if len(payload) != 1 + ADDRESS_HASH_SIZE:
        raise CodecError(f"Invalid decoded address length {len(payload)} for {address}")

    return bytes([_ADDRESS_TYPES[prefix]]) + payload


def serialize_call_sc(
    fee: int,
    expire_period: int,
    max_gas: int,
    coins: int,
    target_address: str,
    function: str,
    parameter: bytes,
) -> bytes:
    """Serialize the content of a CallSC operation.

    Args:
        fee: Operation fee in nanoMAS
        expire_period: Last period in which the operation is valid
        max_gas: Gas ceiling for execution
        coins: nanoMAS transferred to the target with the call
        target_address: Contract being called (``AS...``)
        function: Exported function name
        parameter: Serialized Args payload

    Returns:
        Operation content bytes
    """
    function_bytes = function.encode("utf-8")
    return b"".join([
        encode_varint(fee),
        encode_varint(expire_period),
        encode_varint(CALL_SC_OPERATION_TYPE),
        encode_varint(max_gas),
        encode_varint(coins),
        address_to_bytes(target_address),
        encode_varint(len(function_bytes)),
        function_bytes,
        encode_varint(len(parameter)),
        bytes(parameter),
    ])
