"""Fee planning for two-hop transfers forwarded through the Hub.

A forwarded transfer pays fees twice: once getting to the Hub (hop 1) and
once leaving it (hop 2). Whatever lands on the Hub is the hub budget, and
the Hub's forwarding module enforces::

    max_fee + forward_amount <= hub_budget

Hop 2 reserves the IGP fee first, then splits the remainder so that the
forwarded amount plus its outbound bridging fee fits exactly. The outbound
fee is paid out of ``max_fee``, so the recipient receives the full
``forward_amount``. Transfers leaving the Hub over IBC pay no hop-2 fees.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from ..exceptions import BridgeException, InsufficientBudgetError, InvalidFormatError
from .bridging import (
    FEE_PRECISION,
    Rate,
    ceil_div,
    multiply_scaled,
    percent_to_scaled,
    scale_rate,
)

logger = logging.getLogger(__name__)

MAX_REFINEMENT_ITERATIONS = 10
EXEMPT_FEE_DENOM = "adym"


class SourceKind(str, Enum):
    """How funds reach the Hub on hop 1."""
    DIRECT = "direct"
    RELAY = "indirect"
    INCENTIVIZED = "incentivized"


class RouteKind(str, Enum):
    """Two-hop route shapes, named source-hub-destination."""
    DIRECT_HUB_DIRECT = "direct-hub-direct"
    DIRECT_HUB_INDIRECT = "direct-hub-indirect"
    INDIRECT_HUB_DIRECT = "indirect-hub-direct"
    INCENTIVIZED_HUB_DIRECT = "incentivized-hub-direct"
    INCENTIVIZED_HUB_INDIRECT = "incentivized-hub-indirect"

    @property
    def source_kind(self) -> SourceKind:
        return SourceKind(self.value.split("-hub-")[0])

    @property
    def fee_exempt(self) -> bool:
        """Leaving the Hub over IBC costs no IGP or outbound fee."""
        return self.value.endswith("-indirect")


@dataclass(frozen=True, slots=True)
class Hop1Rates:
    """Fee rates for the source-to-Hub leg.

    Only the rates matching the route's source kind are applied.
    """
    inbound_rate: Rate = 0
    eibc_fee_percent: Rate = 0
    delayed_ack_rate: Rate = 0

    def scaled_deduction_rate(self, source: SourceKind) -> int:
        if source == SourceKind.DIRECT:
            return scale_rate(self.inbound_rate)
        if source == SourceKind.INCENTIVIZED:
            return percent_to_scaled(self.eibc_fee_percent) + scale_rate(self.delayed_ack_rate)
        return 0


@dataclass(frozen=True, slots=True)
class Hop2Params:
    """Fee inputs for the Hub-to-destination leg."""
    igp_fee: int = 0
    outbound_rate: Rate = 0
    fee_hook_id: Optional[str] = None
    fee_denom: str = EXEMPT_FEE_DENOM


@dataclass(frozen=True, slots=True)
class Hop1Fees:
    inbound_fee: int = 0
    eibc_fee: Optional[int] = None
    delayed_ack_fee: Optional[int] = None

    @property
    def total(self) -> int:
        return self.inbound_fee + (self.eibc_fee or 0) + (self.delayed_ack_fee or 0)


@dataclass(frozen=True, slots=True)
class Hop2Fees:
    igp_fee: int
    outbound_fee: int
    fee_hook_id: Optional[str]
    fee_denom: str


@dataclass(frozen=True, slots=True)
class ForwardingPlan:
    """Budget allocation for one forwarded transfer."""
    input_amount: int
    route_kind: RouteKind
    hop1_fees: Hop1Fees
    hub_budget: int
    hop2_fees: Hop2Fees
    forward_amount: int
    max_fee: int
    recipient_receives: int
    total_deducted: int

    def to_dict(self) -> dict:
        return {
            "input_amount": str(self.input_amount),
            "route_kind": self.route_kind.value,
            "hop1_fees": {
                "inbound_fee": str(self.hop1_fees.inbound_fee),
                "eibc_fee": None if self.hop1_fees.eibc_fee is None else str(self.hop1_fees.eibc_fee),
                "delayed_ack_fee": (
                    None if self.hop1_fees.delayed_ack_fee is None
                    else str(self.hop1_fees.delayed_ack_fee)
                ),
            },
            "hub_budget": str(self.hub_budget),
            "hop2_fees": {
                "igp_fee": str(self.hop2_fees.igp_fee),
                "outbound_fee": str(self.hop2_fees.outbound_fee),
                "fee_hook_id": self.hop2_fees.fee_hook_id,
                "fee_denom": self.hop2_fees.fee_denom,
            },
            "forward_amount": str(self.forward_amount),
            "max_fee": str(self.max_fee),
            "recipient_receives": str(self.recipient_receives),
            "total_deducted": str(self.total_deducted),
        }


def hop1_fees(amount: int, route_kind: RouteKind, rates: Hop1Rates) -> Hop1Fees:
    source = route_kind.source_kind
    if source == SourceKind.DIRECT:
        return Hop1Fees(inbound_fee=multiply_scaled(amount, scale_rate(rates.inbound_rate)))
    if source == SourceKind.INCENTIVIZED:
        return Hop1Fees(
            eibc_fee=multiply_scaled(amount, percent_to_scaled(rates.eibc_fee_percent)),
            delayed_ack_fee=multiply_scaled(amount, scale_rate(rates.delayed_ack_rate)),
        )
    return Hop1Fees()


def forward(
    amount: int,
    route_kind: RouteKind,
    hop1: Hop1Rates = Hop1Rates(),
    hop2: Hop2Params = Hop2Params(),
) -> ForwardingPlan:
    """Plan a two-hop transfer of ``amount`` base units.

    Args:
        amount: What the user sends on the source chain
        route_kind: Shape of the route, which picks the hop-1 deductions
        hop1: Source-to-Hub rates
        hop2: Hub-to-destination IGP fee, outbound rate and fee routing

    Returns:
        A ForwardingPlan satisfying ``max_fee + forward_amount <= hub_budget``

    Raises:
        InvalidFormatError: If the amount is not positive
        InsufficientBudgetError: If hop 1 leaves nothing on the Hub, or the
            hub budget cannot cover the IGP fee plus one base unit
    """
    if amount <= 0:
        raise InvalidFormatError(
            f"Amount must be positive, got {amount}", expected="positive integer", value=str(amount)
        )
    if hop2.igp_fee < 0:
        raise InvalidFormatError("IGP fee cannot be negative", expected="non-negative integer")

    fees1 = hop1_fees(amount, route_kind, hop1)
    hub_budget = amount - fees1.total
    if hub_budget <= 0:
        raise InsufficientBudgetError(
            shortfall=1 - hub_budget,
            hub_budget=hub_budget,
            required=1,
            message=f"Hop-1 fees consume the whole transfer: hub budget {hub_budget}",
        )

    if route_kind.fee_exempt:
        fees2 = Hop2Fees(igp_fee=0, outbound_fee=0, fee_hook_id=None, fee_denom=EXEMPT_FEE_DENOM)
        forward_amount = hub_budget
        max_fee = 0
    else:
        budget_after_igp = hub_budget - hop2.igp_fee
        if budget_after_igp <= 0:
            required = hop2.igp_fee + 1
            raise InsufficientBudgetError(
                shortfall=required - hub_budget,
                hub_budget=hub_budget,
                required=required,
                message=(
                    f"Insufficient budget for forwarding: hub budget {hub_budget} does not "
                    f"cover IGP fee {hop2.igp_fee}; need at least {required}"
                ),
            )
        outbound_scaled = scale_rate(hop2.outbound_rate)
        forward_amount = budget_after_igp * FEE_PRECISION // (FEE_PRECISION + outbound_scaled)
        outbound_fee = multiply_scaled(forward_amount, outbound_scaled)
        max_fee = hop2.igp_fee + outbound_fee
        fees2 = Hop2Fees(
            igp_fee=hop2.igp_fee,
            outbound_fee=outbound_fee,
            fee_hook_id=hop2.fee_hook_id,
            fee_denom=hop2.fee_denom,
        )

    plan = ForwardingPlan(
        input_amount=amount,
        route_kind=route_kind,
        hop1_fees=fees1,
        hub_budget=hub_budget,
        hop2_fees=fees2,
        forward_amount=forward_amount,
        max_fee=max_fee,
        recipient_receives=forward_amount,
        total_deducted=fees1.total + max_fee,
    )
    logger.debug(
        f"Forwarding plan {route_kind.value}: input={amount} hub_budget={hub_budget} "
        f"forward={forward_amount} max_fee={max_fee}"
    )
    return plan


def _hub_budget_for(desired: int, route_kind: RouteKind, hop2: Hop2Params) -> int:
    if route_kind.fee_exempt:
        return desired
    return desired + hop2.igp_fee + multiply_scaled(desired, scale_rate(hop2.outbound_rate))


def send_amount_for_desired_forward(
    desired: int,
    route_kind: RouteKind,
    hop1: Hop1Rates = Hop1Rates(),
    hop2: Hop2Params = Hop2Params(),
) -> int:
    """Smallest-found send amount whose plan delivers at least ``desired``.

    Hop 2 is inverted algebraically to a hub budget, hop 1 by ceiling
    division to a send amount. Integer flooring in the forward direction can
    still undershoot by a few base units, so the candidate is bumped by the
    observed shortfall plus one, at most ``MAX_REFINEMENT_ITERATIONS`` times.

    Raises:
        InvalidFormatError: If ``desired`` is not positive or hop-1 rates
            reach 100%
        BridgeException: If refinement does not converge
    """
    if desired <= 0:
        raise InvalidFormatError(
            f"Desired amount must be positive, got {desired}",
            expected="positive integer",
            value=str(desired),
        )
    hop1_scaled = hop1.scaled_deduction_rate(route_kind.source_kind)
    if hop1_scaled >= FEE_PRECISION:
        raise InvalidFormatError("Hop-1 fees reach 100%", expected="combined hop-1 rate below 1")

    hub_budget = _hub_budget_for(desired, route_kind, hop2)
    candidate = ceil_div(hub_budget * FEE_PRECISION, FEE_PRECISION - hop1_scaled)

    for _ in range(MAX_REFINEMENT_ITERATIONS):
        try:
            received = forward(candidate, route_kind, hop1, hop2).recipient_receives
        except InsufficientBudgetError as e:
            candidate = candidate + e.shortfall
            continue
        if received >= desired:
            return candidate
        candidate = candidate + (desired - received) + 1

    if forward(candidate, route_kind, hop1, hop2).recipient_receives >= desired:
        return candidate
    raise BridgeException(
        f"Send amount for {desired} did not converge after {MAX_REFINEMENT_ITERATIONS} iterations",
        error_code="NO_CONVERGENCE",
        details={"desired": str(desired), "last_candidate": str(candidate)},
    )


def validate_forwarding_params(
    amount: int,
    route_kind: RouteKind,
    hop1: Hop1Rates = Hop1Rates(),
    hop2: Hop2Params = Hop2Params(),
) -> Optional[str]:
    """Returns None when the transfer is feasible, else the reason it is not."""
    if amount <= 0:
        return "Amount must be positive"
    if hop2.igp_fee < 0:
        return "IGP fee cannot be negative"
    try:
        outbound = Decimal(str(hop2.outbound_rate))
    except ArithmeticError:
        return f"Invalid outbound bridging fee rate: {hop2.outbound_rate}"
    if not outbound.is_finite() or outbound < 0 or outbound >= 1:
        return "Outbound bridging fee rate must be between 0 and 1"
    try:
        plan = forward(amount, route_kind, hop1, hop2)
    except BridgeException as e:
        return e.message
    if plan.recipient_receives <= 0:
        return f"Fees exceed transfer amount: recipient would receive {plan.recipient_receives}"
    return None


__all__ = [
    "MAX_REFINEMENT_ITERATIONS",
    "EXEMPT_FEE_DENOM",
    "SourceKind",
    "RouteKind",
    "Hop1Rates",
    "Hop2Params",
    "Hop1Fees",
    "Hop2Fees",
    "ForwardingPlan",
    "hop1_fees",
    "forward",
    "send_amount_for_desired_forward",
    "validate_forwarding_params",
]
