"""
Receipt URL lookup.

A receipt can live in several places on the provider side depending on how the
checkout completed. Each strategy below looks in one place; ``resolve_receipt``
tries them in order and the first URL found wins. A strategy that fails is
logged and skipped, and when none succeeds the receipt is reported as
unavailable (``None``) rather than raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from django.utils import timezone

from core.exceptions import ProviderError, ValidationError
from payments.models import Payment

from . import gateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReceiptResult:
    url: str
    invoice_id: str = ""
    source: str = ""


Strategy = Callable[[Payment, object], Optional[ReceiptResult]]


def from_stored_invoice(payment: Payment, session=None) -> Optional[ReceiptResult]:
    if not payment.stripe_invoice:
        return None
    invoice = gateway.retrieve_invoice(payment.stripe_invoice)
    url = getattr(invoice, "hosted_invoice_url", "") or ""
    if not url:
        return None
    return ReceiptResult(url=url, invoice_id=invoice.id, source="invoice")


def from_checkout_session(payment: Payment, session=None) -> Optional[ReceiptResult]:
    if session is None:
        if not payment.stripe_checkout_session:
            return None
        session = gateway.retrieve_checkout_session(payment.stripe_checkout_session, expand=("invoice",))
    invoice = getattr(session, "invoice", None)
    if not invoice or isinstance(invoice, str):
        return None
    url = getattr(invoice, "hosted_invoice_url", "") or ""
    if not url:
        return None
    return ReceiptResult(url=url, invoice_id=invoice.id, source="session")


def from_charges(payment: Payment, session=None) -> Optional[ReceiptResult]:
    if not payment.stripe_payment_intent:
        return None
    url = gateway.first_charge_receipt_url(payment.stripe_payment_intent)
    if not url:
        return None
    return ReceiptResult(url=url, source="charge")


def from_new_invoice(payment: Payment, session=None) -> Optional[ReceiptResult]:
    if not payment.stripe_customer:
        return None
    invoice = gateway.create_finalized_invoice(payment=payment)
    url = getattr(invoice, "hosted_invoice_url", "") or ""
    if not url:
        return None
    return ReceiptResult(url=url, invoice_id=invoice.id, source="new_invoice")


RECEIPT_STRATEGIES: Sequence[Strategy] = (
    from_stored_invoice,
    from_checkout_session,
    from_charges,
    from_new_invoice,
)

# At confirmation time the freshly retrieved session already carries the
# expanded invoice and there is no stored invoice id yet.
CONFIRMATION_STRATEGIES: Sequence[Strategy] = (
    from_checkout_session,
    from_charges,
    from_new_invoice,
)


def resolve_receipt(
    payment: Payment,
    *,
    session=None,
    strategies: Sequence[Strategy] = RECEIPT_STRATEGIES,
) -> Optional[ReceiptResult]:
    for strategy in strategies:
        try:
            result = strategy(payment, session)
        except ProviderError as exc:
            logger.warning(
                "Receipt lookup %s failed for payment %s: %s",
                strategy.__name__,
                payment.id,
                exc.detail,
            )
            continue
        if result is not None:
            logger.info("Receipt for payment %s found via %s", payment.id, result.source)
            return result

    logger.warning("No receipt available for payment %s", payment.id)
    return None


def _ensure_paid(payment: Payment) -> None:
    if payment.status not in (Payment.SUCCESS, Payment.REFUNDED):
        raise ValidationError("Receipts are only available for completed payments.")


def _store(payment: Payment, result: ReceiptResult) -> None:
    changes = {"stripe_receipt_url": result.url, "updated_at": timezone.now()}
    if result.invoice_id:
        changes["stripe_invoice"] = result.invoice_id
    Payment.objects.filter(pk=payment.pk).update(**changes)
    for field, value in changes.items():
        setattr(payment, field, value)


def get_receipt_url(payment: Payment) -> Optional[str]:
    """Return the stored receipt URL, looking it up and storing it on first use."""
    _ensure_paid(payment)
    if payment.stripe_receipt_url:
        return payment.stripe_receipt_url

    result = resolve_receipt(payment)
    if result is None:
        return None
    _store(payment, result)
    return result.url


def refresh_receipt(payment: Payment) -> Optional[str]:
    """Look the receipt up again, ignoring any stored URL."""
    _ensure_paid(payment)
    result = resolve_receipt(payment)
    if result is None:
        return None
    _store(payment, result)
    return result.url
