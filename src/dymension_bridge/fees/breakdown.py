"""Fee breakdown for single-hop transfers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .bridging import (
    DEFAULT_BRIDGING_FEE_RATE,
    Rate,
    bridging_fee,
    eibc_withdrawal,
)


@dataclass(frozen=True, slots=True)
class FeeBreakdown:
    """All fees of a single-hop transfer.

    ``igp_fee`` and ``tx_fee`` are paid separately by the sender and are not
    taken out of the transferred amount.
    """
    amount: int
    bridging_fee: int
    igp_fee: int
    recipient_receives: int
    eibc_fee: Optional[int] = None
    tx_fee: int = 0

    @property
    def total_fees(self) -> int:
        return self.bridging_fee + (self.eibc_fee or 0) + self.igp_fee + self.tx_fee

    def to_dict(self) -> dict:
        return {
            "amount": str(self.amount),
            "bridging_fee": str(self.bridging_fee),
            "eibc_fee": None if self.eibc_fee is None else str(self.eibc_fee),
            "igp_fee": str(self.igp_fee),
            "tx_fee": str(self.tx_fee),
            "total_fees": str(self.total_fees),
            "recipient_receives": str(self.recipient_receives),
        }


def estimate_single_hop(
    amount: int,
    bridging_rate: Rate = DEFAULT_BRIDGING_FEE_RATE,
    igp_fee: int = 0,
    eibc_fee_percent: Optional[Rate] = None,
    tx_fee: int = 0,
) -> FeeBreakdown:
    """Break down a direct transfer to or from the Hub.

    With ``eibc_fee_percent`` set the transfer is treated as an incentivized
    rollapp withdrawal and ``bridging_rate`` is the delayed-ack fee.
    """
    if eibc_fee_percent is not None:
        withdrawal = eibc_withdrawal(amount, eibc_fee_percent, bridging_rate)
        return FeeBreakdown(
            amount=amount,
            bridging_fee=withdrawal.bridging_fee,
            eibc_fee=withdrawal.eibc_fee,
            igp_fee=igp_fee,
            tx_fee=tx_fee,
            recipient_receives=withdrawal.recipient_receives,
        )
    fee = bridging_fee(amount, bridging_rate)
    return FeeBreakdown(
        amount=amount,
        bridging_fee=fee,
        igp_fee=igp_fee,
        tx_fee=tx_fee,
        recipient_receives=amount - fee,
    )


__all__ = ["FeeBreakdown", "estimate_single_hop"]
