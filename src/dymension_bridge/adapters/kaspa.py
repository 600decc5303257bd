"""Kaspa deposits bound for the Hub.

Kaspa has no contracts, so a deposit is a plain payment to the escrow
address whose payload is a complete Hyperlane message. The relayer reads
the payload and mints on the Hub.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from ..address import CanonicalAddress
from ..chains import DOMAINS, KASPA_ESCROW, KASPA_MIN_DEPOSIT_SOMPI, SOMPI_PER_KAS, Network
from ..exceptions import InvalidFormatError
from ..wire.message import Envelope, TransferBody

logger = logging.getLogger(__name__)

_KASPA_DOMAINS = {
    Network.MAINNET: DOMAINS["KASPA_MAINNET"],
    Network.TESTNET: DOMAINS["KASPA_TESTNET"],
}
_HUB_DOMAINS = {
    Network.MAINNET: DOMAINS["DYMENSION_MAINNET"],
    Network.TESTNET: DOMAINS["DYMENSION_TESTNET"],
}


@dataclass(frozen=True, slots=True)
class KaspaDeposit:
    """Escrow payment carrying a serialized Hyperlane message."""
    escrow_address: str
    amount: int
    payload: bytes

    def to_dict(self) -> dict:
        return {
            "escrow_address": self.escrow_address,
            "amount": str(self.amount),
            "payload": self.payload.hex(),
        }


def kaspa_escrow_address(network: Network = Network.MAINNET) -> str:
    return KASPA_ESCROW[Network(network)]


def build_kaspa_deposit(
    hub_recipient: CanonicalAddress,
    amount: int,
    hub_token_id: CanonicalAddress,
    network: Network = Network.MAINNET,
    metadata: bytes = b"",
) -> KaspaDeposit:
    """Build the escrow payment for depositing ``amount`` sompi.

    Args:
        hub_recipient: Account credited on the Hub (or fallback when forwarding)
        amount: Deposit in sompi
        hub_token_id: KAS warp token on the Hub, the message recipient
        network: Selects domains and escrow address
        metadata: Encoded ForwardingMetadata; empty for a plain deposit

    Raises:
        InvalidFormatError: If the deposit is below the minimum
    """
    network = Network(network)
    if amount < KASPA_MIN_DEPOSIT_SOMPI:
        raise InvalidFormatError(
            f"Minimum deposit is {KASPA_MIN_DEPOSIT_SOMPI} sompi "
            f"({KASPA_MIN_DEPOSIT_SOMPI // SOMPI_PER_KAS} KAS), got {amount}",
            expected=f"at least {KASPA_MIN_DEPOSIT_SOMPI} sompi",
            value=str(amount),
        )
    body = TransferBody(recipient=hub_recipient, amount=amount, metadata=metadata)
    envelope = Envelope(
        origin_domain=_KASPA_DOMAINS[network],
        sender=CanonicalAddress.zero(),
        destination_domain=_HUB_DOMAINS[network],
        recipient=hub_token_id,
        body=body.serialize(),
    )
    logger.debug(f"Kaspa deposit of {amount} sompi, message {envelope.message_id()}")
    return KaspaDeposit(
        escrow_address=kaspa_escrow_address(network),
        amount=amount,
        payload=envelope.serialize(),
    )


__all__ = ["KaspaDeposit", "kaspa_escrow_address", "build_kaspa_deposit"]
