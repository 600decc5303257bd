"""Cosmos messages executed on the Hub or on IBC chains.

Each message pairs a type URL with a protobuf value so any Cosmos signer
can wrap it in an ``Any`` and broadcast it.
"""
from __future__ import annotations

from dataclasses import dataclass

from ..wire.forwarding import IbcTransferInstruction, RemoteTransferInstruction

MSG_REMOTE_TRANSFER_TYPE_URL = "/hyperlane.warp.v1.MsgRemoteTransfer"
MSG_TRANSFER_TYPE_URL = "/ibc.applications.transfer.v1.MsgTransfer"


@dataclass(frozen=True, slots=True)
class HubRemoteTransferMsg:
    """Hyperlane warp transfer dispatched from the Hub."""
    value: RemoteTransferInstruction
    type_url: str = MSG_REMOTE_TRANSFER_TYPE_URL

    def encode(self) -> bytes:
        return self.value.encode()

    def to_dict(self) -> dict:
        return {
            "type_url": self.type_url,
            "sender": self.value.sender,
            "token_id": self.value.token_id.hex(),
            "destination_domain": self.value.destination_domain,
            "recipient": self.value.recipient.hex(),
            "amount": str(self.value.amount),
            "gas_limit": str(self.value.gas_limit),
            "max_fee": {"denom": self.value.max_fee.denom, "amount": str(self.value.max_fee.amount)},
            "value": self.encode().hex(),
        }


@dataclass(frozen=True, slots=True)
class IbcTransferMsg:
    """ICS-20 transfer, signed on whichever chain owns ``source_channel``."""
    chain: str
    value: IbcTransferInstruction
    type_url: str = MSG_TRANSFER_TYPE_URL

    def encode(self) -> bytes:
        return self.value.encode()

    def to_dict(self) -> dict:
        return {
            "type_url": self.type_url,
            "chain": self.chain,
            "source_channel": self.value.source_channel,
            "token": {"denom": self.value.token.denom, "amount": str(self.value.token.amount)},
            "sender": self.value.sender,
            "receiver": self.value.receiver,
            "timeout_timestamp": str(self.value.timeout_timestamp),
            "memo": self.value.memo,
            "value": self.encode().hex(),
        }


__all__ = [
    "MSG_REMOTE_TRANSFER_TYPE_URL",
    "MSG_TRANSFER_TYPE_URL",
    "HubRemoteTransferMsg",
    "IbcTransferMsg",
]
