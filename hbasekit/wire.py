"""Minimal protocol buffer wire-format encoding."""

from __future__ import annotations

import struct
from typing import Iterable, Union

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LEN = 2
WIRE_FIXED32 = 5

_UINT64_MASK = (1 << 64) - 1


def encode_varint(value: int) -> bytes:
    """Encode an integer as a base-128 varint; negatives use 64-bit two's complement."""
    if value >= 1 << 64 or value < -(1 << 63):
        raise ValueError(f"varint out of range: {value}")
    value &= _UINT64_MASK
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _decode_varint(data: bytes, pos: int) -> tuple[int, int]:
    value = 0
    shift = 0
    while True:
        if pos >= len(data):
            raise ValueError("truncated varint")
        if shift >= 70:
            raise ValueError("varint too long")
        byte = data[pos]
        pos += 1
        value |= (byte & 0x7F) << shift
        shift += 7
        if byte < 0x80:
            return value & _UINT64_MASK, pos


def _key(number: int, wire_type: int) -> bytes:
    if number < 1:
        raise ValueError(f"invalid field number: {number}")
    return encode_varint(number << 3 | wire_type)


class MessageWriter:
    """Builds a serialized message field by field; None values are skipped."""

    def __init__(self) -> None:
        self._chunks: list[bytes] = []

    def add_varint(self, number: int, value: int | None) -> MessageWriter:
        if value is not None:
            self._chunks.append(_key(number, WIRE_VARINT) + encode_varint(int(value)))
        return self

    def add_bool(self, number: int, value: bool | None) -> MessageWriter:
        if value is not None:
            self.add_varint(number, 1 if value else 0)
        return self

    def add_float(self, number: int, value: float | None) -> MessageWriter:
        if value is not None:
            self._chunks.append(_key(number, WIRE_FIXED32) + struct.pack("<f", value))
        return self

    def add_bytes(self, number: int, value: bytes | None) -> MessageWriter:
        if value is not None:
            payload = bytes(value)
            self._chunks.append(_key(number, WIRE_LEN) + encode_varint(len(payload)) + payload)
        return self

    def add_string(self, number: int, value: str | None) -> MessageWriter:
        if value is not None:
            self.add_bytes(number, value.encode("utf-8"))
        return self

    def add_message(
        self, number: int, value: Union[bytes, MessageWriter, None]
    ) -> MessageWriter:
        if isinstance(value, MessageWriter):
            value = value.to_bytes()
        return self.add_bytes(number, value)

    def add_packed_varints(self, number: int, values: Iterable[int] | None) -> MessageWriter:
        if values is None:
            return self
        payload = b"".join(encode_varint(int(v)) for v in values)
        if payload:
            self.add_bytes(number, payload)
        return self

    def to_bytes(self) -> bytes:
        return b"".join(self._chunks)


def parse_fields(data: bytes) -> list[tuple[int, int, object]]:
    """Split a serialized message into (field number, wire type, raw value) triples.

    Varints come back as unsigned ints, other types as bytes.
    """
    data = bytes(data)
    fields: list[tuple[int, int, object]] = []
    pos = 0
    while pos < len(data):
        key, pos = _decode_varint(data, pos)
        number, wire_type = key >> 3, key & 0x07
        if number < 1:
            raise ValueError(f"invalid field number: {number}")
        if wire_type == WIRE_VARINT:
            value, pos = _decode_varint(data, pos)
        elif wire_type in (WIRE_FIXED64, WIRE_FIXED32):
            size = 8 if wire_type == WIRE_FIXED64 else 4
            if pos + size > len(data):
                raise ValueError("truncated fixed-width field")
            value, pos = data[pos:pos + size], pos + size
        elif wire_type == WIRE_LEN:
            size, pos = _decode_varint(data, pos)
            if pos + size > len(data):
                raise ValueError("truncated length-delimited field")
            value, pos = data[pos:pos + size], pos + size
        else:
            raise ValueError(f"unsupported wire type: {wire_type}")
        fields.append((number, wire_type, value))
    return fields