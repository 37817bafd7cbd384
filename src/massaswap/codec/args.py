"""Massa smart-contract argument ("Args") serialization.

Wire format:
    u32 / u64   fixed-width little-endian
    u256        32 bytes little-endian, zero padded
    bool        1 byte (0 or 1)
    string      u32 byte length + UTF-8 bytes
    array<T>    u32 total byte size of the serialized elements + elements

Array prefixes are byte sizes, not element counts: an array of k u64 values
is prefixed with 8k, an array of k bools with k.
"""

import struct
from typing import Iterable

from massaswap.exceptions import CodecError

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
U256_MAX = 2**256 - 1

U64_SIZE = 8
U256_SIZE = 32
BOOL_SIZE = 1


# ======================
# Encoding
# ======================

def encode_u32(value: int) -> bytes:
    if not 0 <= value <= U32_MAX:
        raise CodecError(f"u32 out of range: {value}")
    return struct.pack("<I", value)


def encode_u64(value: int) -> bytes:
    if not 0 <= value <= U64_MAX:
        raise CodecError(f"u64 out of range: {value}")
    return struct.pack("<Q", value)


def encode_u256(value: int) -> bytes:
    if not 0 <= value <= U256_MAX:
        raise CodecError(f"u256 out of range: {value}")
    return value.to_bytes(U256_SIZE, "little")


def encode_bool(value: bool) -> bytes:
    return b"\x01" if value else b"\x00"


def encode_string(value: str) -> bytes:
    data = value.encode("utf-8")
    return encode_u32(len(data)) + data


def _encode_array(elements: Iterable[bytes]) -> bytes:
    body = b"".join(elements)
    return encode_u32(len(body)) + body


def encode_u64_array(values: Iterable[int]) -> bytes:
    return _encode_array(encode_u64(v) for v in values)


def encode_bool_array(values: Iterable[bool]) -> bytes:
    return _encode_array(encode_bool(v) for v in values)


def encode_string_array(values: Iterable[str]) -> bytes:
    return _encode_array(encode_string(v) for v in values)


def encode_u256_array(values: Iterable[int]) -> bytes:
    return _encode_array(encode_u256(v) for v in values)


class Args:
    """Chainable builder for a contract call parameter.

    Example:
        param = Args().add_string_array(route).add_u256(amount).add_bool(True).serialize()
    """

    def __init__(self):
        self._parts: list[bytes] = []

    def add_u32(self, value: int) -> "Args":
        self._parts.append(encode_u32(value))
        return self

    def add_u64(self, value: int) -> "Args":
        self._parts.append(encode_u64(value))
        return self

    def add_u256(self, value: int) -> "Args":
        self._parts.append(encode_u256(value))
        return self

    def add_bool(self, value: bool) -> "Args":
        self._parts.append(encode_bool(value))
        return self

    def add_string(self, value: str) -> "Args":
        self._parts.append(encode_string(value))
        return self

    def add_u64_array(self, values: Iterable[int]) -> "Args":
        self._parts.append(encode_u64_array(values))
        return self

    def add_bool_array(self, values: Iterable[bool]) -> "Args":
        self._parts.append(encode_bool_array(values))
        return self

    def add_string_array(self, values: Iterable[str]) -> "Args":
        self._parts.append(encode_string_array(values))
        return self

    def add_u256_array(self, values: Iterable[int]) -> "Args":
        self._parts.append(encode_u256_array(values))
        return self

    def serialize(self) -> bytes:
        return b"".join(self._parts)

    def __len__(self) -> int:
        return sum(len(p) for p in self._parts)


# ======================
# Decoding
# ======================

class ArgsReader:
    """Sequential reader over an Args payload.

    Every read is bounds-checked; running past the end of the buffer raises
    CodecError instead of returning zero-filled values.
    """

    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise CodecError(
                f"Read of {size} bytes at offset {self._offset} exceeds buffer "
                f"({self.remaining} bytes left)"
            )
        chunk = self._data[self._offset:self._offset + size]
        self._offset += size
        return chunk

    def next_u32(self) -> int:
        return struct.unpack("<I", self._take(4))[0]

    def next_u64(self) -> int:
        return struct.unpack("<Q", self._take(U64_SIZE))[0]

    def next_u256(self) -> int:
        return int.from_bytes(self._take(U256_SIZE), "little")

    def next_bool(self) -> bool:
        raw = self._take(BOOL_SIZE)[0]
        if raw not in (0, 1):
            raise CodecError(f"Invalid bool byte {raw} at offset {self._offset - 1}")
        return raw == 1

    def next_string(self) -> str:
        length = self.next_u32()
        raw = self._take(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CodecError(f"Invalid UTF-8 string at offset {self._offset - length}") from e

    def _next_array_body(self) -> "ArgsReader":
        size = self.next_u32()
        return ArgsReader(self._take(size))

    def _next_fixed_array(self, width: int, read) -> list:
        body = self._next_array_body()
        if body.remaining % width:
            raise CodecError(
                f"Array body of {body.remaining} bytes is not a multiple of {width}"
            )
        return [read(body) for _ in range(body.remaining // width)]

    def next_u64_array(self) -> list[int]:
        return self._next_fixed_array(U64_SIZE, ArgsReader.next_u64)

    def next_bool_array(self) -> list[bool]:
        return self._next_fixed_array(BOOL_SIZE, ArgsReader.next_bool)

    def next_u256_array(self) -> list[int]:
        return self._next_fixed_array(U256_SIZE, ArgsReader.next_u256)

    def next_string_array(self) -> list[str]:
        body = self._next_array_body()
        values = []
        while body.remaining:
            values.append(body.next_string())
        return values
