"""
Cancellation fee and refund split.

The fee rate comes from ``settings.CANCELLATION_FEE_RATE``. Both halves are
rounded to cents with banker's rounding, which keeps ``fee + refund`` equal to
the original amount for every two-place input.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal

from django.conf import settings

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class RefundBreakdown:
    amount: Decimal
    fee: Decimal
    refund: Decimal


def _fee_rate() -> Decimal:
    return Decimal(str(settings.CANCELLATION_FEE_RATE))


def _to_amount(value) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def calculate_cancellation_fee(amount) -> Decimal:
    amount = _to_amount(amount)
    return (amount * _fee_rate()).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def calculate_refund(amount) -> Decimal:
    amount = _to_amount(amount)
    return (amount * (Decimal("1") - _fee_rate())).quantize(CENTS, rounding=ROUND_HALF_EVEN)


def refund_breakdown(amount) -> RefundBreakdown:
    amount = _to_amount(amount)
    return RefundBreakdown(
        amount=amount,
        fee=calculate_cancellation_fee(amount),
        refund=calculate_refund(amount),
    )
