"""Call descriptors for Hyperlane warp-route contracts on EVM chains.

HypERC20 / HypNative contracts expose ``transferRemote``; the memo-enabled
variants add ``transferRemoteMemo`` for forwarding through the Hub. Both
are payable: ``value`` carries the source-chain IGP payment.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from ..address import CanonicalAddress

TRANSFER_REMOTE_SIGNATURE = "transferRemote(uint32,bytes32,uint256)"
TRANSFER_REMOTE_MEMO_SIGNATURE = "transferRemoteMemo(uint32,bytes32,uint256,bytes)"
QUOTE_GAS_PAYMENT_SIGNATURE = "quoteGasPayment(uint32)"


def _arg_types(signature: str) -> list[str]:
    inner = signature[signature.index("(") + 1 : -1]
    return [t for t in inner.split(",") if t]


@dataclass(frozen=True, slots=True)
class EvmCall:
    """An unsigned contract call: target, method, arguments and value."""
    chain: str
    to: str
    signature: str
    args: tuple[Any, ...]
    value: int = 0

    @property
    def method(self) -> str:
        return self.signature.split("(", 1)[0]

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_calldata(self) -> str:
        encoded = encode(_arg_types(self.signature), list(self.args))
        return "0x" + (self.selector + encoded).hex()

    def to_dict(self) -> dict:
        return {
            "chain": self.chain,
            "to": self.to,
            "method": self.method,
            "data": self.encode_calldata(),
            "value": str(self.value),
        }


def transfer_remote_call(
    chain: str,
    warp_contract: str,
    destination_domain: int,
    recipient: CanonicalAddress,
    amount: int,
    igp_payment: int = 0,
) -> EvmCall:
    return EvmCall(
        chain=chain,
        to=to_checksum_address(warp_contract),
        signature=TRANSFER_REMOTE_SIGNATURE,
        args=(destination_domain, recipient.value, amount),
        value=igp_payment,
    )


def transfer_remote_memo_call(
    chain: str,
    warp_contract: str,
    destination_domain: int,
    recipient: CanonicalAddress,
    amount: int,
    memo: bytes,
    igp_payment: int = 0,
) -> EvmCall:
    """``transferRemoteMemo`` carrying forwarding metadata for the Hub."""
    return EvmCall(
        chain=chain,
        to=to_checksum_address(warp_contract),
        signature=TRANSFER_REMOTE_MEMO_SIGNATURE,
        args=(destination_domain, recipient.value, amount, bytes(memo)),
        value=igp_payment,
    )


def quote_gas_payment_call(chain: str, warp_contract: str, destination_domain: int) -> EvmCall:
    """View call returning the IGP payment required for ``transferRemote``."""
    return EvmCall(
        chain=chain,
        to=to_checksum_address(warp_contract),
        signature=QUOTE_GAS_PAYMENT_SIGNATURE,
        args=(destination_domain,),
    )


__all__ = [
    "TRANSFER_REMOTE_SIGNATURE",
    "TRANSFER_REMOTE_MEMO_SIGNATURE",
    "QUOTE_GAS_PAYMENT_SIGNATURE",
    "EvmCall",
    "transfer_remote_call",
    "transfer_remote_memo_call",
    "quote_gas_payment_call",
]
