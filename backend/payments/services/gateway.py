"""
Thin wrappers around the Stripe SDK calls used by checkout and receipts.

Every function configures the API key, performs exactly one provider request
(no retries) and converts ``stripe.StripeError`` into ``ProviderError`` so the
calling services only deal with the booking error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Optional

import stripe
from django.conf import settings

from core.exceptions import ProviderError

logger = logging.getLogger(__name__)

INVOICE_DAYS_UNTIL_DUE = 30
INVOICE_DESCRIPTION = "Tourism booking invoice"


def configure_stripe() -> None:
    if not settings.STRIPE_SECRET_KEY:
        raise ProviderError("STRIPE_SECRET_KEY is not configured.")
    stripe.api_key = settings.STRIPE_SECRET_KEY


def object_id(value) -> str:
    """Return the id of an expandable field that may be an object or a bare id."""
    if not value:
        return ""
    if isinstance(value, str):
        return value
    return getattr(value, "id", "") or ""


def _provider_error(action: str, exc: Exception) -> ProviderError:
    logger.exception("Stripe call failed while trying to %s: %s", action, exc)
    return ProviderError(f"Payment provider error: {getattr(exc, 'user_message', None) or exc}")


def find_or_create_customer(*, email: str, name: str = "") -> str:
    configure_stripe()
    try:
        existing = stripe.Customer.list(email=email, limit=1)
        if existing.data:
            return existing.data[0].id
        customer = stripe.Customer.create(
            email=email,
            name=name or None,
            metadata={"source": "tourism_booking"},
        )
    except stripe.StripeError as exc:
        raise _provider_error("find or create a customer", exc)
    return customer.id


def create_checkout_session(
    *,
    booking,
    amount_minor_units: int,
    success_url: str,
    cancel_url: str,
    customer_id: Optional[str] = None,
    customer_email: Optional[str] = None,
):
    """
    Open a hosted checkout session for the full booking amount.

    Pass either ``customer_id`` or ``customer_email``; Stripe rejects both.
    """

    configure_stripe()
    package = booking.package
    product_data = {
        "name": f"{package.name} - {package.location}",
        "description": f"Tourism booking for {booking.seat_count} seat(s)",
    }
    if package.image_url:
        product_data["images"] = [package.image_url]

    params = {
        "mode": "payment",
        "payment_method_types": ["card"],
        "line_items": [
            {
                "quantity": 1,
                "price_data": {
                    "currency": settings.PAYMENT_CURRENCY,
                    "unit_amount": amount_minor_units,
                    "product_data": product_data,
                },
            }
        ],
        "success_url": success_url,
        "cancel_url": cancel_url,
        "invoice_creation": {"enabled": True},
        "metadata": {
            "booking_id": str(booking.id),
            "customer_name": booking.customer_name,
            "package_name": package.name,
        },
    }
    if customer_id:
        params["customer"] = customer_id
    elif customer_email:
        params["customer_email"] = customer_email

    try:
        return stripe.checkout.Session.create(**params)
    except stripe.StripeError as exc:
        raise _provider_error("create a checkout session", exc)


def retrieve_checkout_session(session_id: str, expand=("invoice", "payment_intent")):
    configure_stripe()
    try:
        return stripe.checkout.Session.retrieve(session_id, expand=list(expand))
    except stripe.StripeError as exc:
        raise _provider_error("retrieve a checkout session", exc)


def expire_checkout_session(session_id: str):
    configure_stripe()
    try:
        return stripe.checkout.Session.expire(session_id)
    except stripe.StripeError as exc:
        raise _provider_error("expire a checkout session", exc)


def first_charge_receipt_url(payment_intent_id: str) -> str:
    configure_stripe()
    try:
        charges = stripe.Charge.list(payment_intent=payment_intent_id, limit=1)
    except stripe.StripeError as exc:
        raise _provider_error("list charges", exc)
    if not charges.data:
        return ""
    return charges.data[0].receipt_url or ""


def retrieve_invoice(invoice_id: str):
    configure_stripe()
    try:
        return stripe.Invoice.retrieve(invoice_id)
    except stripe.StripeError as exc:
        raise _provider_error("retrieve an invoice", exc)


def create_finalized_invoice(*, payment):
    """Bill the stored customer for the payment amount and finalize the invoice."""

    configure_stripe()
    metadata = {"booking_id": str(payment.booking_id), "payment_id": str(payment.id)}
    try:
        stripe.InvoiceItem.create(
            customer=payment.stripe_customer,
            amount=payment.amount_minor_units,
            currency=payment.currency,
            description=f"Tourism booking payment - Booking ID: {payment.booking_id}",
            metadata=metadata,
        )
        invoice = stripe.Invoice.create(
            customer=payment.stripe_customer,
            auto_advance=False,
            collection_method="send_invoice",
            days_until_due=INVOICE_DAYS_UNTIL_DUE,
            pending_invoice_items_behavior="include",
            description=INVOICE_DESCRIPTION,
            metadata=metadata,
        )
        return stripe.Invoice.finalize_invoice(invoice.id)
    except stripe.StripeError as exc:
        raise _provider_error("create an invoice", exc)
