"""Single-hop bridging and EIBC fee arithmetic.

Amounts are integers in base units. Rates are fractions (``0.001`` is
0.1%) scaled to 18 decimals before touching an amount, so results are
exact for amounts of any size:

    fee = amount * round(rate * 10**18) // 10**18
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from ..exceptions import InvalidFormatError

FEE_PRECISION = 10**18

# 0.15%, applied for fast finality on rollapp withdrawals
DEFAULT_EIBC_FEE_PERCENT = Decimal("0.15")
DEFAULT_BRIDGING_FEE_RATE = Decimal("0.001")

Rate = Union[Decimal, float, int, str]


def to_decimal(rate: Rate) -> Decimal:
    """Convert a rate to Decimal, going through str for floats."""
    if isinstance(rate, Decimal):
        value = rate
    else:
        try:
            value = Decimal(str(rate))
        except InvalidOperation:
            raise InvalidFormatError(
                f"Invalid fee rate: {rate!r}", expected="decimal rate", value=str(rate)
            ) from None
    if not value.is_finite() or value < 0:
        raise InvalidFormatError(
            f"Fee rate must be a non-negative number, got {rate!r}",
            expected="non-negative decimal rate",
            value=str(rate),
        )
    return value


def scale_rate(rate: Rate) -> int:
    """``round(rate * 10**18)`` as an integer."""
    scaled = to_decimal(rate) * FEE_PRECISION
    return int(scaled.to_integral_value(rounding=ROUND_HALF_UP))


def percent_to_scaled(percent: Rate) -> int:
    """Scale a percentage (``0.15`` meaning 0.15%)."""
    return scale_rate(to_decimal(percent) / 100)


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise InvalidFormatError(
            f"Amount cannot be negative: {amount}", expected="non-negative integer", value=str(amount)
        )


def multiply_scaled(amount: int, scaled_rate: int) -> int:
    return amount * scaled_rate // FEE_PRECISION


def multiply_by_rate(amount: int, rate: Rate) -> int:
    """``floor(amount * rate)`` without floating point."""
    _check_amount(amount)
    return multiply_scaled(amount, scale_rate(rate))


def bridging_fee(amount: int, rate: Rate) -> int:
    return multiply_by_rate(amount, rate)


def amount_after_fee(amount: int, rate: Rate) -> int:
    return amount - bridging_fee(amount, rate)


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def send_amount_for_desired(desired: int, rate: Rate) -> int:
    """Amount to send so that ``amount_after_fee`` is at least ``desired``.

    Computed in one step by ceiling division.

    Raises:
        InvalidFormatError: If the rate is 100% or more
    """
    _check_amount(desired)
    scaled = scale_rate(rate)
    if scaled >= FEE_PRECISION:
        raise InvalidFormatError(
            f"Fee rate {rate} leaves nothing to send", expected="rate below 1"
        )
    return ceil_div(desired * FEE_PRECISION, FEE_PRECISION - scaled)


@dataclass(frozen=True, slots=True)
class EibcWithdrawal:
    eibc_fee: int
    bridging_fee: int
    recipient_receives: int


def eibc_withdrawal(
    amount: int,
    eibc_fee_percent: Rate = DEFAULT_EIBC_FEE_PERCENT,
    bridging_rate: Rate = DEFAULT_BRIDGING_FEE_RATE,
) -> EibcWithdrawal:
    """Fees for a rollapp withdrawal fulfilled through EIBC.

    Both fees are taken from the original amount; they do not compound.

    Args:
        amount: Transfer amount in base units
        eibc_fee_percent: EIBC fee as a percentage (0.5 means 0.5%)
        bridging_rate: Delayed-ack bridging fee as a fraction
    """
    _check_amount(amount)
    eibc_fee = multiply_scaled(amount, percent_to_scaled(eibc_fee_percent))
    fee = multiply_scaled(amount, scale_rate(bridging_rate))
    return EibcWithdrawal(
        eibc_fee=eibc_fee,
        bridging_fee=fee,
        recipient_receives=amount - eibc_fee - fee,
    )


def eibc_send_amount(
    desired: int,
    eibc_fee_percent: Rate = DEFAULT_EIBC_FEE_PERCENT,
    bridging_rate: Rate = DEFAULT_BRIDGING_FEE_RATE,
) -> int:
    """Amount to withdraw so the recipient gets at least ``desired``."""
    _check_amount(desired)
    total = percent_to_scaled(eibc_fee_percent) + scale_rate(bridging_rate)
    if total >= FEE_PRECISION:
        raise InvalidFormatError(
            "Combined EIBC and bridging fees reach 100%", expected="combined rate below 1"
        )
    return ceil_div(desired * FEE_PRECISION, FEE_PRECISION - total)


__all__ = [
    "FEE_PRECISION",
    "DEFAULT_EIBC_FEE_PERCENT",
    "DEFAULT_BRIDGING_FEE_RATE",
    "Rate",
    "to_decimal",
    "scale_rate",
    "percent_to_scaled",
    "multiply_scaled",
    "multiply_by_rate",
    "bridging_fee",
    "amount_after_fee",
    "ceil_div",
    "send_amount_for_desired",
    "EibcWithdrawal",
    "eibc_withdrawal",
    "eibc_send_amount",
]
