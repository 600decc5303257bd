"""Minimal protobuf framing for the handful of messages the Hub consumes.

Only varint (wire type 0) and length-delimited (wire type 2) fields are
needed. Fields holding their proto3 default (zero, empty) are omitted, as
the Hub's generated decoders expect. Callers opt out per field with
``keep_default`` where the Hub expects the field on the wire regardless.
"""
from __future__ import annotations

from typing import Iterator, Union

from ..exceptions import InvalidFormatError

WIRE_VARINT = 0
WIRE_LENGTH_DELIMITED = 2

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1


def encode_varint(value: int) -> bytes:
    if value < 0:
        raise InvalidFormatError(f"Varint cannot be negative: {value}", expected="unsigned integer")
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
    """Returns ``(value, next_offset)``."""
    result = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise InvalidFormatError("Truncated varint", expected="protobuf varint")
        byte = data[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return result, offset
        shift += 7
        if shift > 63:
            raise InvalidFormatError("Varint too long", expected="protobuf varint")


def make_tag(field_number: int, wire_type: int) -> bytes:
    return encode_varint((field_number << 3) | wire_type)


class ProtoWriter:
    """Append-only builder for a flat sequence of protobuf fields."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def bytes_field(self, field_number: int, value: bytes, keep_default: bool = False) -> "ProtoWriter":
        if value or keep_default:
            self._buf += make_tag(field_number, WIRE_LENGTH_DELIMITED)
            self._buf += encode_varint(len(value))
            self._buf += value
        return self

    def string_field(self, field_number: int, value: str) -> "ProtoWriter":
        return self.bytes_field(field_number, value.encode("utf-8") if value else b"")

    def message_field(self, field_number: int, encoded: bytes, keep_default: bool = False) -> "ProtoWriter":
        """Nested message. An empty sub-message is dropped like any default
        unless ``keep_default`` is set."""
        return self.bytes_field(field_number, encoded, keep_default)

    def uint_field(
        self, field_number: int, value: int, limit: int = UINT64_MAX, keep_default: bool = False
    ) -> "ProtoWriter":
        if value < 0 or value > limit:
            raise InvalidFormatError(
                f"Field {field_number} value {value} out of range",
                expected=f"integer in [0, {limit}]",
            )
        if value or keep_default:
            self._buf += make_tag(field_number, WIRE_VARINT)
            self._buf += encode_varint(value)
        return self

    def uint32_field(self, field_number: int, value: int) -> "ProtoWriter":
        return self.uint_field(field_number, value, UINT32_MAX)

    def uint64_field(self, field_number: int, value: int, keep_default: bool = False) -> "ProtoWriter":
        return self.uint_field(field_number, value, UINT64_MAX, keep_default)

    def to_bytes(self) -> bytes:
        return bytes(self._buf)


FieldValue = Union[int, bytes]


class ProtoReader:
    """Iterates ``(field_number, wire_type, value)`` records of a message."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def __iter__(self) -> Iterator[tuple[int, int, FieldValue]]:
        data = self._data
        offset = 0
        while offset < len(data):
            key, offset = decode_varint(data, offset)
            field_number, wire_type = key >> 3, key & 0x07
            if wire_type == WIRE_VARINT:
                value, offset = decode_varint(data, offset)
                yield field_number, wire_type, value
            elif wire_type == WIRE_LENGTH_DELIMITED:
                length, offset = decode_varint(data, offset)
                end = offset + length
                if end > len(data):
                    raise InvalidFormatError(
                        f"Field {field_number} overruns buffer", expected="well-formed protobuf"
                    )
                yield field_number, wire_type, data[offset:end]
                offset = end
            else:
                raise InvalidFormatError(
                    f"Unsupported wire type {wire_type} for field {field_number}",
                    expected="varint or length-delimited field",
                )

    def fields(self) -> dict[int, FieldValue]:
        """Last value wins for repeated field numbers."""
        return {number: value for number, _, value in self}


__all__ = [
    "WIRE_VARINT",
    "WIRE_LENGTH_DELIMITED",
    "encode_varint",
    "decode_varint",
    "make_tag",
    "ProtoWriter",
    "ProtoReader",
]
