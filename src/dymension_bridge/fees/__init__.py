"""Fee arithmetic and the Hub fee provider."""
from .bridging import (
    DEFAULT_BRIDGING_FEE_RATE,
    DEFAULT_EIBC_FEE_PERCENT,
    FEE_PRECISION,
    EibcWithdrawal,
    amount_after_fee,
    bridging_fee,
    eibc_send_amount,
    eibc_withdrawal,
    multiply_by_rate,
    scale_rate,
    send_amount_for_desired,
)
from .breakdown import FeeBreakdown, estimate_single_hop
from .forwarding import (
    ForwardingPlan,
    Hop1Fees,
    Hop1Rates,
    Hop2Fees,
    Hop2Params,
    RouteKind,
    SourceKind,
    forward,
    send_amount_for_desired_forward,
    validate_forwarding_params,
)
from .provider import FeeCache, FeeHook, FeeProvider, igp_cache_key

__all__ = [
    "DEFAULT_BRIDGING_FEE_RATE",
    "DEFAULT_EIBC_FEE_PERCENT",
    "FEE_PRECISION",
    "EibcWithdrawal",
    "amount_after_fee",
    "bridging_fee",
    "eibc_send_amount",
    "eibc_withdrawal",
    "multiply_by_rate",
    "scale_rate",
    "send_amount_for_desired",
    "FeeBreakdown",
    "estimate_single_hop",
    "ForwardingPlan",
    "Hop1Fees",
    "Hop1Rates",
    "Hop2Fees",
    "Hop2Params",
    "RouteKind",
    "SourceKind",
    "forward",
    "send_amount_for_desired_forward",
    "validate_forwarding_params",
    "FeeCache",
    "FeeHook",
    "FeeProvider",
    "igp_cache_key",
]
