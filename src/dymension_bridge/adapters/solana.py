"""Instruction data for the Hyperlane Sealevel warp program.

Only the instruction payload is built here. Account metas, PDAs, compute
budget and the blockhash come from a Solana client at signing time.
"""
from __future__ import annotations

import struct
from dataclasses import dataclass

from ..address import CanonicalAddress
from ..exceptions import InvalidFormatError

# Warp program instruction discriminator
INSTRUCTION_DISCRIMINATOR = bytes([1] * 8)
TRANSFER_REMOTE_MEMO_VARIANT = 0
U64_MAX = 2**64 - 1
U256_MAX = 2**256 - 1


@dataclass(frozen=True, slots=True)
class SolanaInstruction:
    program_id: str
    method: str
    data: bytes

    def to_dict(self) -> dict:
        return {"program_id": self.program_id, "method": self.method, "data": self.data.hex()}


def encode_transfer_remote(destination_domain: int, recipient: CanonicalAddress, amount: int) -> bytes:
    """u32 LE domain, 32-byte recipient, u64 LE amount (44 bytes)."""
    if not 0 <= amount <= U64_MAX:
        raise InvalidFormatError(
            f"Amount {amount} does not fit in u64", expected="u64 amount", value=str(amount)
        )
    return struct.pack("<I", destination_domain) + recipient.value + struct.pack("<Q", amount)


def encode_transfer_remote_memo(
    destination_domain: int,
    recipient: CanonicalAddress,
    amount: int,
    memo: bytes,
) -> bytes:
    """Variant byte, u32 LE domain, recipient, U256 LE amount, u32 LE length-prefixed memo."""
    if not 0 <= amount <= U256_MAX:
        raise InvalidFormatError(
            f"Amount {amount} does not fit in 256 bits", expected="u256 amount", value=str(amount)
        )
    return (
        struct.pack("<BI", TRANSFER_REMOTE_MEMO_VARIANT, destination_domain)
        + recipient.value
        + amount.to_bytes(32, "little")
        + struct.pack("<I", len(memo))
        + bytes(memo)
    )


def transfer_remote_instruction(
    program_id: str,
    destination_domain: int,
    recipient: CanonicalAddress,
    amount: int,
) -> SolanaInstruction:
    return SolanaInstruction(
        program_id=program_id,
        method="transfer_remote",
        data=INSTRUCTION_DISCRIMINATOR + encode_transfer_remote(destination_domain, recipient, amount),
    )


def transfer_remote_memo_instruction(
    program_id: str,
    destination_domain: int,
    recipient: CanonicalAddress,
    amount: int,
    memo: bytes,
) -> SolanaInstruction:
    return SolanaInstruction(
        program_id=program_id,
        method="transfer_remote_memo",
        data=INSTRUCTION_DISCRIMINATOR
        + encode_transfer_remote_memo(destination_domain, recipient, amount, memo),
    )


__all__ = [
    "INSTRUCTION_DISCRIMINATOR",
    "SolanaInstruction",
    "encode_transfer_remote",
    "encode_transfer_remote_memo",
    "transfer_remote_instruction",
    "transfer_remote_memo_instruction",
]
