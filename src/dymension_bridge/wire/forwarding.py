"""Protobuf payloads instructing the Hub to forward funds onward.

Message shapes (field number, wire type in parentheses)::

    Coin                      denom(1, str) amount(2, str)
    RemoteTransferInstruction sender(1, str) token_id(2, bytes)
                              destination_domain(3, varint) recipient(4, bytes)
                              amount(5, str) custom_hook_id(6, bytes)
                              gas_limit(7, str) max_fee(8, Coin)
                              custom_hook_metadata(9, bytes)
    TimeoutHeight             revision_number(1, varint) revision_height(2, varint)
    IbcTransferInstruction    source_port(1) source_channel(2) token(3, Coin)
                              sender(4) receiver(5) timeout_height(6, TimeoutHeight)
                              timeout_timestamp(7, varint) memo(8)
    ForwardToDirectChain      transfer(1, RemoteTransferInstruction)
    ForwardToIndirectChain    transfer(1, IbcTransferInstruction)
    ForwardingMetadata        forward_to_indirect(1) kaspa(2) forward_to_direct(3)
    CompletionHookCall        name(1, str) data(2, bytes)

32-byte identifiers (token id, recipient, hook id) are written as raw bytes,
matching the Hub's HexAddress custom type.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..address import CanonicalAddress
from ..exceptions import InvalidFormatError
from .proto import ProtoReader, ProtoWriter

DEFAULT_SOURCE_PORT = "transfer"


def _text(value: Union[int, bytes]) -> str:
    if isinstance(value, int):
        raise InvalidFormatError("Expected length-delimited field, got varint", expected="string")
    return value.decode("utf-8")


def _raw(value: Union[int, bytes]) -> bytes:
    if isinstance(value, int):
        raise InvalidFormatError("Expected length-delimited field, got varint", expected="bytes")
    return value


def _int(value: Union[int, bytes]) -> int:
    if not isinstance(value, int):
        raise InvalidFormatError("Expected varint field", expected="varint")
    return value


@dataclass(frozen=True, slots=True)
class Coin:
    denom: str
    amount: int

    def encode(self) -> bytes:
        return (
            ProtoWriter()
            .string_field(1, self.denom)
            .string_field(2, str(self.amount))
            .to_bytes()
        )

    @classmethod
    def decode(cls, data: bytes) -> "Coin":
        fields = ProtoReader(data).fields()
        return cls(
            denom=_text(fields.get(1, b"")),
            amount=int(_text(fields.get(2, b"0")) or "0"),
        )


@dataclass(frozen=True, slots=True)
class RemoteTransferInstruction:
    """A Hyperlane warp transfer executed on the Hub (MsgRemoteTransfer)."""
    token_id: CanonicalAddress
    destination_domain: int
    recipient: CanonicalAddress
    amount: int
    max_fee: Coin
    gas_limit: int = 0
    sender: str = ""
    custom_hook_id: Optional[CanonicalAddress] = None
    custom_hook_metadata: bytes = b""

    def encode(self) -> bytes:
        writer = (
            ProtoWriter()
            .string_field(1, self.sender)
            .bytes_field(2, self.token_id.value)
            .uint32_field(3, self.destination_domain)
            .bytes_field(4, self.recipient.value)
            .string_field(5, str(self.amount))
        )
        if self.custom_hook_id is not None:
            writer.bytes_field(6, self.custom_hook_id.value)
        return (
            writer.string_field(7, str(self.gas_limit))
            .message_field(8, self.max_fee.encode())
            .bytes_field(9, self.custom_hook_metadata)
            .to_bytes()
        )

    @classmethod
    def decode(cls, data: bytes) -> "RemoteTransferInstruction":
        fields = ProtoReader(data).fields()
        if 2 not in fields or 4 not in fields:
            raise InvalidFormatError(
                "Remote transfer is missing token id or recipient",
                expected="MsgRemoteTransfer",
            )
        hook = fields.get(6)
        return cls(
            sender=_text(fields.get(1, b"")),
            token_id=CanonicalAddress(_raw(fields[2])),
            destination_domain=_int(fields.get(3, 0)),
            recipient=CanonicalAddress(_raw(fields[4])),
            amount=int(_text(fields.get(5, b"0")) or "0"),
            custom_hook_id=CanonicalAddress(_raw(hook)) if hook is not None else None,
            gas_limit=int(_text(fields.get(7, b"0")) or "0"),
            max_fee=Coin.decode(_raw(fields.get(8, b""))),
            custom_hook_metadata=_raw(fields.get(9, b"")),
        )


@dataclass(frozen=True, slots=True)
class TimeoutHeight:
    """IBC client height. Both revisions are always written, so a zero
    height still encodes as four bytes."""
    revision_number: int = 0
    revision_height: int = 0

    def encode(self) -> bytes:
        return (
            ProtoWriter()
            .uint64_field(1, self.revision_number, keep_default=True)
            .uint64_field(2, self.revision_height, keep_default=True)
            .to_bytes()
        )

    @classmethod
    def decode(cls, data: bytes) -> "TimeoutHeight":
        fields = ProtoReader(data).fields()
        return cls(_int(fields.get(1, 0)), _int(fields.get(2, 0)))


@dataclass(frozen=True, slots=True)
class IbcTransferInstruction:
    """An ICS-20 transfer (ibc.applications.transfer.v1.MsgTransfer)."""
    source_channel: str
    token: Coin
    sender: str
    receiver: str
    timeout_timestamp: int
    timeout_height: TimeoutHeight = field(default_factory=TimeoutHeight)
    memo: str = ""
    source_port: str = DEFAULT_SOURCE_PORT

    def encode(self) -> bytes:
        return (
            ProtoWriter()
            .string_field(1, self.source_port)
            .string_field(2, self.source_channel)
            .message_field(3, self.token.encode())
            .string_field(4, self.sender)
            .string_field(5, self.receiver)
            .message_field(6, self.timeout_height.encode(), keep_default=True)
            .uint64_field(7, self.timeout_timestamp)
            .string_field(8, self.memo)
            .to_bytes()
        )

    @classmethod
    def decode(cls, data: bytes) -> "IbcTransferInstruction":
        fields = ProtoReader(data).fields()
        return cls(
            source_port=_text(fields.get(1, b"")),
            source_channel=_text(fields.get(2, b"")),
            token=Coin.decode(_raw(fields.get(3, b""))),
            sender=_text(fields.get(4, b"")),
            receiver=_text(fields.get(5, b"")),
            timeout_height=TimeoutHeight.decode(_raw(fields.get(6, b""))),
            timeout_timestamp=_int(fields.get(7, 0)),
            memo=_text(fields.get(8, b"")),
        )


@dataclass(frozen=True, slots=True)
class ForwardToDirectChain:
    transfer: RemoteTransferInstruction

    def encode(self) -> bytes:
        return ProtoWriter().message_field(1, self.transfer.encode()).to_bytes()

    @classmethod
    def decode(cls, data: bytes) -> "ForwardToDirectChain":
        fields = ProtoReader(data).fields()
        return cls(RemoteTransferInstruction.decode(_raw(fields.get(1, b""))))


@dataclass(frozen=True, slots=True)
class ForwardToIndirectChain:
    transfer: IbcTransferInstruction

    def encode(self) -> bytes:
        return ProtoWriter().message_field(1, self.transfer.encode()).to_bytes()

    @classmethod
    def decode(cls, data: bytes) -> "ForwardToIndirectChain":
        fields = ProtoReader(data).fields()
        return cls(IbcTransferInstruction.decode(_raw(fields.get(1, b""))))


ForwardInstruction = Union[ForwardToDirectChain, ForwardToIndirectChain]


@dataclass(frozen=True, slots=True)
class ForwardingMetadata:
    """Metadata carried in a TransferBody; holds at most one instruction.

    Each populated field is a pre-encoded ``ForwardTo*`` message. Unused
    fields are left out of the encoding entirely.
    """
    forward_to_indirect: bytes = b""
    kaspa: bytes = b""
    forward_to_direct: bytes = b""

    def __post_init__(self) -> None:
        if self.forward_to_indirect and self.forward_to_direct:
            raise InvalidFormatError(
                "Forwarding metadata carries at most one forwarding instruction",
                expected="zero or one forwarding instruction",
            )

    @classmethod
    def for_instruction(cls, instruction: Optional[ForwardInstruction]) -> "ForwardingMetadata":
        if instruction is None:
            return cls()
        if isinstance(instruction, ForwardToDirectChain):
            return cls(forward_to_direct=instruction.encode())
        return cls(forward_to_indirect=instruction.encode())

    def encode(self) -> bytes:
        return (
            ProtoWriter()
            .bytes_field(1, self.forward_to_indirect)
            .bytes_field(2, self.kaspa)
            .bytes_field(3, self.forward_to_direct)
            .to_bytes()
        )

    def instruction(self) -> Optional[ForwardInstruction]:
        if self.forward_to_direct:
            return ForwardToDirectChain.decode(self.forward_to_direct)
        if self.forward_to_indirect:
            return ForwardToIndirectChain.decode(self.forward_to_indirect)
        return None


def decode_forwarding_metadata(data: bytes) -> ForwardingMetadata:
    fields = ProtoReader(data).fields()
    return ForwardingMetadata(
        forward_to_indirect=_raw(fields.get(1, b"")),
        kaspa=_raw(fields.get(2, b"")),
        forward_to_direct=_raw(fields.get(3, b"")),
    )


@dataclass(frozen=True, slots=True)
class CompletionHookCall:
    """Hub completion hook invocation embedded (base64) in an IBC memo."""
    name: str
    data: bytes

    def encode(self) -> bytes:
        return ProtoWriter().string_field(1, self.name).bytes_field(2, self.data).to_bytes()

    @classmethod
    def decode(cls, data: bytes) -> "CompletionHookCall":
        fields = ProtoReader(data).fields()
        return cls(name=_text(fields.get(1, b"")), data=_raw(fields.get(2, b"")))


def metadata_for_direct(transfer: RemoteTransferInstruction) -> bytes:
    """Encoded metadata forwarding a Hub landing over Hyperlane."""
    return ForwardingMetadata.for_instruction(ForwardToDirectChain(transfer)).encode()


def metadata_for_indirect(transfer: IbcTransferInstruction) -> bytes:
    """Encoded metadata forwarding a Hub landing over IBC."""
    return ForwardingMetadata.for_instruction(ForwardToIndirectChain(transfer)).encode()


__all__ = [
    "DEFAULT_SOURCE_PORT",
    "Coin",
    "RemoteTransferInstruction",
    "TimeoutHeight",
    "IbcTransferInstruction",
    "ForwardToDirectChain",
    "ForwardToIndirectChain",
    "ForwardInstruction",
    "ForwardingMetadata",
    "decode_forwarding_metadata",
    "CompletionHookCall",
    "metadata_for_direct",
    "metadata_for_indirect",
]
