"""Hyperlane message envelope and warp-route token body.

Envelope layout (77 + len(body) bytes)::

    version      u8
    nonce        u32 BE
    origin       u32 BE
    sender       32 bytes
    destination  u32 BE
    recipient    32 bytes
    body         remainder of the buffer

TransferBody layout (64 + len(metadata) bytes)::

    recipient    32 bytes
    amount       u256 BE
    metadata     remainder of the buffer
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from eth_utils import keccak

from ..address import CanonicalAddress
from ..exceptions import InvalidFormatError

HYPERLANE_VERSION = 3
ENVELOPE_HEADER_LENGTH = 77
TRANSFER_BODY_HEADER_LENGTH = 64
UINT256_MAX = 2**256 - 1

_HEADER = struct.Struct(">BII32sI32s")


def _check_u32(name: str, value: int) -> None:
    if not 0 <= value <= 0xFFFFFFFF:
        raise InvalidFormatError(f"{name} {value} does not fit in u32", expected="u32")


@dataclass(frozen=True, slots=True)
class Envelope:
    """A Hyperlane message. Built fresh per transfer and never mutated."""
    origin_domain: int
    sender: CanonicalAddress
    destination_domain: int
    recipient: CanonicalAddress
    body: bytes = b""
    version: int = HYPERLANE_VERSION
    nonce: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.version <= 0xFF:
            raise InvalidFormatError(f"version {self.version} does not fit in u8", expected="u8")
        _check_u32("nonce", self.nonce)
        _check_u32("origin domain", self.origin_domain)
        _check_u32("destination domain", self.destination_domain)

    def serialize(self) -> bytes:
        return serialize_envelope(self)

    def message_id(self) -> str:
        """Keccak-256 of the serialized envelope, as the mailbox computes it."""
        return "0x" + keccak(self.serialize()).hex()


@dataclass(frozen=True, slots=True)
class TransferBody:
    recipient: CanonicalAddress
    amount: int
    metadata: bytes = b""

    def __post_init__(self) -> None:
        if not 0 <= self.amount <= UINT256_MAX:
            raise InvalidFormatError(
                f"Amount {self.amount} does not fit in 256 bits",
                expected="unsigned 256-bit integer",
                value=str(self.amount),
            )

    def serialize(self) -> bytes:
        return serialize_transfer_body(self)


def serialize_envelope(envelope: Envelope) -> bytes:
    header = _HEADER.pack(
        envelope.version,
        envelope.nonce,
        envelope.origin_domain,
        envelope.sender.value,
        envelope.destination_domain,
        envelope.recipient.value,
    )
    return header + bytes(envelope.body)


def parse_envelope(data: bytes) -> Envelope:
    """Inverse of :func:`serialize_envelope`.

    Raises:
        InvalidFormatError: If the buffer is shorter than the fixed header
    """
    if len(data) < ENVELOPE_HEADER_LENGTH:
        raise InvalidFormatError(
            f"Envelope needs at least {ENVELOPE_HEADER_LENGTH} bytes, got {len(data)}",
            expected="Hyperlane message",
        )
    version, nonce, origin, sender, destination, recipient = _HEADER.unpack_from(data)
    return Envelope(
        version=version,
        nonce=nonce,
        origin_domain=origin,
        sender=CanonicalAddress(sender),
        destination_domain=destination,
        recipient=CanonicalAddress(recipient),
        body=bytes(data[ENVELOPE_HEADER_LENGTH:]),
    )


def serialize_transfer_body(body: TransferBody) -> bytes:
    return body.recipient.value + body.amount.to_bytes(32, "big") + bytes(body.metadata)


def parse_transfer_body(data: bytes) -> TransferBody:
    if len(data) < TRANSFER_BODY_HEADER_LENGTH:
        raise InvalidFormatError(
            f"Transfer body needs at least {TRANSFER_BODY_HEADER_LENGTH} bytes, got {len(data)}",
            expected="warp token message",
        )
    return TransferBody(
        recipient=CanonicalAddress(bytes(data[:32])),
        amount=int.from_bytes(data[32:64], "big"),
        metadata=bytes(data[64:]),
    )


__all__ = [
    "HYPERLANE_VERSION",
    "ENVELOPE_HEADER_LENGTH",
    "TRANSFER_BODY_HEADER_LENGTH",
    "Envelope",
    "TransferBody",
    "serialize_envelope",
    "parse_envelope",
    "serialize_transfer_body",
    "parse_transfer_body",
]
