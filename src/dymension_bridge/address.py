"""Address codec between native chain formats and canonical 32-byte form.

Every endpoint embedded in a Hyperlane message is a 32-byte identifier.
Shorter native addresses (EVM, Cosmos bech32) are left-padded with zero
bytes; Solana public keys are already 32 bytes; Kaspa addresses decode to
the 32-byte public key they wrap.

Kaspa conversion is one-way: the canonical form drops the version and
checksum, so there is no decoder back to a ``kaspa:`` string.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import base58
from bech32 import bech32_decode, bech32_encode, convertbits

from .chains import AddressFormat
from .exceptions import InvalidFormatError

logger = logging.getLogger(__name__)

CANONICAL_LENGTH = 32
EVM_ADDRESS_LENGTH = 20

EVM_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]{40}$")
CANONICAL_HEX_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")
SOLANA_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")

KASPA_PREFIXES = ("kaspa", "kaspatest")
KASPA_CHECKSUM_LENGTH = 8
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"


@dataclass(frozen=True, slots=True)
class CanonicalAddress:
    """Exactly 32 bytes identifying an account on any chain."""
    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != CANONICAL_LENGTH:
            raise InvalidFormatError(
                f"Canonical address must be {CANONICAL_LENGTH} bytes, got {len(self.value)}",
                expected="32-byte identifier",
            )

    @classmethod
    def from_hex(cls, value: str) -> "CanonicalAddress":
        if not is_canonical(value):
            raise InvalidFormatError(
                f"Invalid canonical address: {value}",
                expected="64 hex characters with optional 0x prefix",
                value=value,
            )
        return cls(bytes.fromhex(_strip_0x(value)))

    @classmethod
    def from_bytes(cls, value: bytes) -> "CanonicalAddress":
        """Left-pad up to 32 bytes."""
        if len(value) > CANONICAL_LENGTH:
            raise InvalidFormatError(
                f"Address payload of {len(value)} bytes does not fit in {CANONICAL_LENGTH}",
                expected="at most 32 bytes",
            )
        return cls(value.rjust(CANONICAL_LENGTH, b"\x00"))

    @classmethod
    def zero(cls) -> "CanonicalAddress":
        return cls(bytes(CANONICAL_LENGTH))

    def hex(self) -> str:
        return "0x" + self.value.hex()

    def __str__(self) -> str:
        return self.hex()


def _strip_0x(value: str) -> str:
    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def is_canonical(value: str) -> bool:
    """True for exactly 64 hex characters after an optional 0x."""
    if not isinstance(value, str):
        return False
    return bool(CANONICAL_HEX_PATTERN.match(_strip_0x(value)))


# =============================================================================
# EVM
# =============================================================================

def is_valid_evm_address(address: str) -> bool:
    return bool(address) and bool(EVM_HEX_PATTERN.match(_strip_0x(address)))


def evm_to_canonical(address: str) -> CanonicalAddress:
    """Left-pad a 20-byte EVM address to 32 bytes.

    Raises:
        InvalidFormatError: Unless the input is exactly 40 hex characters
            (optionally 0x-prefixed, any case)
    """
    if not is_valid_evm_address(address):
        raise InvalidFormatError(
            f"Invalid EVM address: {address!r}",
            expected="0x followed by 40 hex characters",
            value=address,
        )
    return CanonicalAddress.from_bytes(bytes.fromhex(_strip_0x(address)))


def canonical_to_evm(canonical: CanonicalAddress | str) -> str:
    """Take the low 20 bytes as an EVM address.

    The high 12 bytes are discarded without checking they are zero, so a
    canonical address that did not come from an EVM chain is truncated.
    Output is lowercase hex.
    """
    value = _coerce(canonical)
    return "0x" + value.value[-EVM_ADDRESS_LENGTH:].hex()


# =============================================================================
# Cosmos bech32
# =============================================================================

def _bech32_payload(address: str) -> tuple[str, bytes]:
    if not address:
        raise InvalidFormatError(
            "Empty bech32 address", expected="bech32 address", value=address
        )
    decoded = bech32_decode(address)
    hrp, data = decoded[0], decoded[1]
    if hrp is None or data is None:
        raise InvalidFormatError(
            f"Invalid bech32 address: {address!r}",
            expected="bech32 address with a valid checksum",
            value=address,
        )
    payload = convertbits(data, 5, 8, False)
    if payload is None:
        raise InvalidFormatError(
            f"Invalid bech32 payload padding: {address!r}",
            expected="bech32 address",
            value=address,
        )
    return hrp, bytes(payload)


def is_valid_bech32_address(address: str, prefix: Optional[str] = None) -> bool:
    try:
        hrp, _ = _bech32_payload(address)
    except InvalidFormatError:
        return False
    return prefix is None or hrp == prefix


def bech32_to_canonical(address: str, expected_prefix: Optional[str] = None) -> CanonicalAddress:
    """Decode a bech32 address and left-pad its payload to 32 bytes.

    Raises:
        InvalidFormatError: On a bad checksum, a mismatched prefix, or a
            payload longer than 32 bytes
    """
    hrp, payload = _bech32_payload(address)
    if expected_prefix is not None and hrp != expected_prefix:
        raise InvalidFormatError(
            f"Expected bech32 prefix {expected_prefix!r}, got {hrp!r}",
            expected=f"bech32 address with prefix {expected_prefix}",
            value=address,
        )
    return CanonicalAddress.from_bytes(payload)


def canonical_to_bech32(canonical: CanonicalAddress | str, prefix: str) -> str:
    """Re-encode a canonical address with the given prefix.

    Leading zero bytes are stripped first, so a padded 20-byte account
    comes back as the same 20-byte account.
    """
    payload = _coerce(canonical).value.lstrip(b"\x00")
    data = convertbits(list(payload), 8, 5, True)
    if data is None:
        raise InvalidFormatError("Could not regroup canonical address", expected="32-byte identifier")
    return bech32_encode(prefix, data)


# =============================================================================
# Solana base58
# =============================================================================

def solana_to_canonical(address: str) -> CanonicalAddress:
    """Decode a base58 public key; it must be exactly 32 bytes.

    Raises:
        InvalidFormatError: On invalid alphabet characters or wrong length
    """
    if not address or not SOLANA_PATTERN.match(address):
        raise InvalidFormatError(
            f"Invalid Solana address: {address!r}",
            expected="base58 public key of 32-44 characters",
            value=address,
        )
    raw = base58.b58decode(address)
    if len(raw) != CANONICAL_LENGTH:
        raise InvalidFormatError(
            f"Solana address decodes to {len(raw)} bytes, expected {CANONICAL_LENGTH}",
            expected="base58 encoding of a 32-byte public key",
            value=address,
        )
    return CanonicalAddress(raw)


def canonical_to_solana(canonical: CanonicalAddress | str) -> str:
    return base58.b58encode(_coerce(canonical).value).decode("ascii")


# =============================================================================
# Kaspa
# =============================================================================

def is_valid_kaspa_address(address: str) -> bool:
    try:
        kaspa_to_canonical(address)
    except InvalidFormatError:
        return False
    return True


def kaspa_to_canonical(address: str) -> CanonicalAddress:
    """Extract the 32-byte public key from a ``kaspa:``/``kaspatest:`` address.

    The version character and the trailing 8-character checksum are
    discarded; the checksum is not verified. Remaining 5-bit groups are
    packed into bytes and leftover padding bits are dropped.

    Raises:
        InvalidFormatError: On a missing or unknown prefix, characters
            outside the bech32 alphabet, or a payload that is not 32 bytes
    """
    parts = address.split(":") if address else []
    if len(parts) != 2:
        raise InvalidFormatError(
            f"Invalid Kaspa address: {address!r}",
            expected="kaspa:<payload> or kaspatest:<payload>",
            value=address,
        )
    prefix, data = parts
    if prefix not in KASPA_PREFIXES:
        raise InvalidFormatError(
            f"Invalid Kaspa address prefix: {prefix!r}",
            expected="kaspa: or kaspatest: prefix",
            value=address,
        )
    body = data[:-KASPA_CHECKSUM_LENGTH] if len(data) > KASPA_CHECKSUM_LENGTH else ""

    values = []
    for char in body:
        index = BECH32_CHARSET.find(char)
        if index == -1:
            raise InvalidFormatError(
                f"Invalid character {char!r} in Kaspa address",
                expected="bech32 alphabet",
                value=address,
            )
        values.append(index)

    out = bytearray()
    acc = 0
    bits = 0
    for value in values[1:]:
        acc = ((acc << 5) | value) & 0xFFFF
        bits += 5
        while bits >= 8:
            bits -= 8
            out.append((acc >> bits) & 0xFF)

    if len(out) != CANONICAL_LENGTH:
        raise InvalidFormatError(
            f"Invalid Kaspa address: expected 32-byte pubkey, got {len(out)}",
            expected="Kaspa address wrapping a 32-byte public key",
            value=address,
        )
    return CanonicalAddress(bytes(out))


# =============================================================================
# Dispatch
# =============================================================================

def to_canonical(
    address: str,
    address_format: AddressFormat,
    expected_prefix: Optional[str] = None,
) -> CanonicalAddress:
    """Normalize a native address of the given format."""
    if address_format == AddressFormat.EVM:
        return evm_to_canonical(address)
    if address_format == AddressFormat.BECH32:
        return bech32_to_canonical(address, expected_prefix)
    if address_format == AddressFormat.BASE58:
        return solana_to_canonical(address)
    if address_format == AddressFormat.KASPA:
        return kaspa_to_canonical(address)
    raise InvalidFormatError(f"Unsupported address format: {address_format}")


def canonical_to_hex(canonical: CanonicalAddress | str) -> str:
    return _coerce(canonical).hex()


def _coerce(canonical: CanonicalAddress | str) -> CanonicalAddress:
    if isinstance(canonical, CanonicalAddress):
        return canonical
    return CanonicalAddress.from_hex(canonical)


__all__ = [
    "CanonicalAddress",
    "is_canonical",
    "is_valid_evm_address",
    "evm_to_canonical",
    "canonical_to_evm",
    "is_valid_bech32_address",
    "bech32_to_canonical",
    "canonical_to_bech32",
    "solana_to_canonical",
    "canonical_to_solana",
    "is_valid_kaspa_address",
    "kaspa_to_canonical",
    "to_canonical",
    "canonical_to_hex",
]
