"""Wire formats consumed by the Hub and Hyperlane mailboxes."""
from .forwarding import (
    Coin,
    CompletionHookCall,
    ForwardingMetadata,
    ForwardToDirectChain,
    ForwardToIndirectChain,
    IbcTransferInstruction,
    RemoteTransferInstruction,
    TimeoutHeight,
    decode_forwarding_metadata,
    metadata_for_direct,
    metadata_for_indirect,
)
from .ibc import ibc_timeout_timestamp
from .memo import HookName, eibc_fee_memo, incentivized_memo, parse_memo, relay_memo
from .message import (
    Envelope,
    TransferBody,
    parse_envelope,
    parse_transfer_body,
    serialize_envelope,
    serialize_transfer_body,
)

__all__ = [
    "Coin",
    "CompletionHookCall",
    "ForwardingMetadata",
    "ForwardToDirectChain",
    "ForwardToIndirectChain",
    "IbcTransferInstruction",
    "RemoteTransferInstruction",
    "TimeoutHeight",
    "decode_forwarding_metadata",
    "metadata_for_direct",
    "metadata_for_indirect",
    "ibc_timeout_timestamp",
    "HookName",
    "incentivized_memo",
    "eibc_fee_memo",
    "relay_memo",
    "parse_memo",
    "Envelope",
    "TransferBody",
    "parse_envelope",
    "parse_transfer_body",
    "serialize_envelope",
    "serialize_transfer_body",
]
