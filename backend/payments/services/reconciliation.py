"""
Checkout and provider callback handling.

Provider requests happen before the database transaction opens, once and
without retry. The local writes for each step then commit together with the
affected rows locked. A new checkout expires the session it replaces.
Confirming a paid checkout is the only place package seats are taken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from bookings.models import Booking
from catalog.models import Package
from core.actors import Actor
from core.exceptions import (
    AuthorizationError,
    CapacityError,
    ConcurrencyConflict,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from payments.models import Payment

from . import gateway
from .receipts import CONFIRMATION_STRATEGIES, resolve_receipt

logger = logging.getLogger(__name__)

SESSION_PAID = "paid"
SESSION_OPEN = "open"
SESSION_EXPIRED = "expired"


@dataclass(frozen=True)
class CheckoutResult:
    payment_id: int
    session_id: str
    url: str


@dataclass(frozen=True)
class ConfirmationOutcome:
    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"
    PENDING = "pending"
    FAILED = "failed"
    REVIEW_REQUIRED = "review_required"

    status: str
    booking_id: int
    payment_id: int
    receipt_url: str = ""

    @property
    def is_paid(self) -> bool:
        return self.status in (self.CONFIRMED, self.ALREADY_CONFIRMED, self.REVIEW_REQUIRED)


def _callback_url(path: str, booking_id: int, with_session: bool) -> str:
    base = settings.BACKEND_URL.rstrip("/")
    query = f"booking_id={booking_id}"
    if with_session:
        # Stripe substitutes the session id into this placeholder on redirect.
        query = "session_id={CHECKOUT_SESSION_ID}&" + query
    return f"{base}{path}?{query}"


def build_success_url(booking_id: int) -> str:
    return _callback_url("/api/payments/success/", booking_id, with_session=True)


def build_cancel_url(booking_id: int) -> str:
    return _callback_url("/api/payments/cancel/", booking_id, with_session=False)


def _load_booking_for(actor: Actor, booking_id: int) -> Booking:
    try:
        booking = Booking.objects.select_related("package").get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError("Booking not found.")
    if not actor.can_access(booking.owner_id):
        raise AuthorizationError()
    return booking


def _check_checkout_allowed(booking: Booking, package: Package) -> None:
    if booking.status == Booking.CANCELLED:
        raise ValidationError("Cannot pay for a cancelled booking.")
    if booking.payments.filter(status__in=(Payment.SUCCESS, Payment.REFUNDED)).exists():
        raise ValidationError("This booking has already been paid.")
    if package.available_seats < booking.seat_count:
        raise CapacityError(
            f"Only {package.available_seats} seats are left for {package.name}; "
            f"this booking needs {booking.seat_count}."
        )


def _retire_previous_session(booking: Booking) -> None:
    """
    Close the provider session of an unfinished checkout before opening another.

    If the payer already completed that session the booking is confirmed
    against it and no new checkout is started.
    """

    previous = (
        Payment.objects.filter(booking=booking, status__in=(Payment.PENDING, Payment.CANCELLED))
        .order_by("-created_at", "-id")
        .first()
    )
    if previous is None or not previous.stripe_checkout_session:
        return

    session_id = previous.stripe_checkout_session
    session = gateway.retrieve_checkout_session(session_id)
    if getattr(session, "payment_status", "") == SESSION_PAID:
        outcome = confirm_success(session_id, booking.id)
        logger.info(
            "Checkout session %s for booking %s was already paid (%s)",
            session_id,
            booking.id,
            outcome.status,
        )
        raise ValidationError("This booking has already been paid.")
    if getattr(session, "status", "") == SESSION_OPEN:
        gateway.expire_checkout_session(session_id)
    logger.info("Replacing checkout session %s for booking %s", session_id, booking.id)


def initiate_checkout(actor: Actor, booking_id: int) -> CheckoutResult:
    """Open a provider checkout for the booking and record a pending payment."""

    booking = _load_booking_for(actor, booking_id)
    _check_checkout_allowed(booking, booking.package)
    _retire_previous_session(booking)

    amount = booking.total_amount
    amount_minor_units = int(amount * 100)

    customer_id = None
    try:
        customer_id = gateway.find_or_create_customer(email=booking.email, name=booking.customer_name)
    except ProviderError as exc:
        logger.warning(
            "Falling back to customer email for booking %s checkout: %s",
            booking.id,
            exc.detail,
        )

    session = gateway.create_checkout_session(
        booking=booking,
        amount_minor_units=amount_minor_units,
        success_url=build_success_url(booking.id),
        cancel_url=build_cancel_url(booking.id),
        customer_id=customer_id,
        customer_email=None if customer_id else booking.email,
    )

    fields = {
        "amount": amount,
        "currency": settings.PAYMENT_CURRENCY,
        "stripe_checkout_session": session.id,
        "stripe_customer": customer_id or "",
        "stripe_payment_intent": "",
        "stripe_invoice": "",
        "stripe_receipt_url": "",
        "refund_amount": None,
        "paid_at": None,
    }

    with transaction.atomic():
        locked = Booking.objects.select_for_update().select_related("package").get(pk=booking.pk)
        _check_checkout_allowed(locked, locked.package)

        payment = (
            Payment.objects.select_for_update()
            .filter(booking=locked)
            .order_by("-created_at", "-id")
            .first()
        )
        if payment is None:
            payment = Payment.objects.create(booking=locked, status=Payment.PENDING, **fields)
        elif payment.status == Payment.PENDING:
            updated = Payment.objects.filter(pk=payment.pk, status=Payment.PENDING).update(
                updated_at=timezone.now(), **fields
            )
            if not updated:
                raise ConcurrencyConflict()
        else:
            payment.transition_to(Payment.PENDING, **fields)

    logger.info(
        "Checkout session %s opened for booking %s (payment %s, %s %s)",
        session.id,
        booking.id,
        payment.id,
        amount,
        settings.PAYMENT_CURRENCY,
    )
    return CheckoutResult(payment_id=payment.id, session_id=session.id, url=session.url)


def _find_payment(session_id: str, booking_id: int) -> Payment:
    payment = (
        Payment.objects.filter(stripe_checkout_session=session_id, booking_id=booking_id)
        .order_by("-created_at", "-id")
        .first()
    )
    if payment is None:
        raise NotFoundError("No payment matches this checkout session.")
    return payment


def _mark_failed(payment: Payment) -> ConfirmationOutcome:
    with transaction.atomic():
        locked = Payment.objects.select_for_update().get(pk=payment.pk)
        if locked.can_transition_to(Payment.FAILED):
            locked.transition_to(Payment.FAILED)
    logger.info("Checkout session %s expired; payment %s marked failed", payment.stripe_checkout_session, payment.id)
    return ConfirmationOutcome(ConfirmationOutcome.FAILED, payment.booking_id, payment.id)


def confirm_success(session_id: str, booking_id: int) -> ConfirmationOutcome:
    """
    Settle a checkout after the provider redirects the payer back.

    The session is always re-read from the provider; the redirect itself proves
    nothing. A payment that already succeeded is returned unchanged, so a
    repeated callback never takes seats twice.
    """

    payment = _find_payment(session_id, booking_id)
    if payment.status in (Payment.SUCCESS, Payment.REFUNDED):
        return ConfirmationOutcome(
            ConfirmationOutcome.ALREADY_CONFIRMED,
            payment.booking_id,
            payment.id,
            payment.stripe_receipt_url,
        )

    session = gateway.retrieve_checkout_session(session_id)
    if getattr(session, "payment_status", "") != SESSION_PAID:
        if getattr(session, "status", "") == SESSION_EXPIRED:
            return _mark_failed(payment)
        logger.info("Checkout session %s for booking %s is not paid yet", session_id, booking_id)
        return ConfirmationOutcome(ConfirmationOutcome.PENDING, payment.booking_id, payment.id)

    payment.stripe_payment_intent = gateway.object_id(getattr(session, "payment_intent", None))
    payment.stripe_customer = gateway.object_id(getattr(session, "customer", None)) or payment.stripe_customer
    payment.stripe_invoice = gateway.object_id(getattr(session, "invoice", None))
    receipt = resolve_receipt(payment, session=session, strategies=CONFIRMATION_STRATEGIES)

    changes = {
        "paid_at": timezone.now(),
        "stripe_payment_intent": payment.stripe_payment_intent,
        "stripe_customer": payment.stripe_customer,
        "stripe_invoice": (receipt.invoice_id if receipt and receipt.invoice_id else payment.stripe_invoice),
        "stripe_receipt_url": receipt.url if receipt else "",
    }

    with transaction.atomic():
        locked_payment = Payment.objects.select_for_update().get(pk=payment.pk)
        if locked_payment.status in (Payment.SUCCESS, Payment.REFUNDED):
            return ConfirmationOutcome(
                ConfirmationOutcome.ALREADY_CONFIRMED,
                locked_payment.booking_id,
                locked_payment.id,
                locked_payment.stripe_receipt_url,
            )
        booking = Booking.objects.select_for_update().get(pk=locked_payment.booking_id)
        Package.objects.select_for_update().filter(pk=booking.package_id).first()

        locked_payment.transition_to(Payment.SUCCESS, **changes)

        if booking.status == Booking.CANCELLED:
            logger.warning(
                "Payment %s for cancelled booking %s was completed; manual review required",
                locked_payment.id,
                booking.id,
            )
            return ConfirmationOutcome(
                ConfirmationOutcome.REVIEW_REQUIRED,
                booking.id,
                locked_payment.id,
                changes["stripe_receipt_url"],
            )

        taken = Package.objects.filter(
            pk=booking.package_id,
            available_seats__gte=booking.seat_count,
        ).update(available_seats=F("available_seats") - booking.seat_count)
        if not taken:
            logger.error(
                "Booking %s was paid but package %s no longer has %s seats",
                booking.id,
                booking.package_id,
                booking.seat_count,
            )
            raise CapacityError("The package sold out before this payment completed.")

        booking.transition_to(Booking.CONFIRMED, confirmed_at=timezone.now())

    logger.info(
        "Booking %s confirmed by payment %s; %s seats taken from package %s",
        booking.id,
        locked_payment.id,
        booking.seat_count,
        booking.package_id,
    )
    return ConfirmationOutcome(
        ConfirmationOutcome.CONFIRMED,
        booking.id,
        locked_payment.id,
        changes["stripe_receipt_url"],
    )


def mark_checkout_cancelled(booking_id: int, session_id: Optional[str] = None) -> Optional[Payment]:
    """
    Record that the payer abandoned checkout.

    Only a PENDING payment is moved to CANCELLED, and only when it belongs to
    ``session_id`` if one is given. The booking and package are not touched.
    """

    with transaction.atomic():
        queryset = Payment.objects.select_for_update().filter(booking_id=booking_id, status=Payment.PENDING)
        if session_id:
            queryset = queryset.filter(stripe_checkout_session=session_id)
        payment = queryset.order_by("-created_at", "-id").first()
        if payment is None:
            return None
        payment.transition_to(Payment.CANCELLED)

    logger.info("Checkout for booking %s abandoned; payment %s cancelled", booking_id, payment.id)
    return payment
