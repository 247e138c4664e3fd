"""
Booking lifecycle: reservation and cancellation.

Creating a booking never touches package inventory; seats are taken only when a
payment is confirmed (see ``payments.services.reconciliation``). Cancelling
returns the seats a confirmed booking holds and records the refund decision on
its successful payment. No money is moved through the payment provider here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import validate_email
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from bookings.models import Booking
from catalog.models import Package
from core.actors import Actor
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from payments.models import Payment

from .refunds import refund_breakdown

logger = logging.getLogger(__name__)

NAME_LENGTH = (2, 100)
PHONE_LENGTH = (10, 15)


@dataclass(frozen=True)
class CancellationSummary:
    booking_id: int
    refunded: bool
    amount: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    refund_amount: Optional[Decimal] = None
    seats_restored: int = 0


def _validate_contact(seat_count, customer_name: str, email: str, phone: str) -> dict:
    errors: dict = {}

    if not isinstance(seat_count, int) or isinstance(seat_count, bool):
        errors["seat_count"] = ["Number of seats must be a whole number."]
    elif not Booking.MIN_SEATS <= seat_count <= Booking.MAX_SEATS:
        errors["seat_count"] = [
            f"Number of seats must be between {Booking.MIN_SEATS} and {Booking.MAX_SEATS}."
        ]

    name = (customer_name or "").strip()
    if not NAME_LENGTH[0] <= len(name) <= NAME_LENGTH[1]:
        errors["customer_name"] = ["Name must be between 2 and 100 characters."]

    try:
        validate_email(email or "")
    except DjangoValidationError:
        errors["email"] = ["Please enter a valid email address."]

    phone = (phone or "").strip()
    if not PHONE_LENGTH[0] <= len(phone) <= PHONE_LENGTH[1]:
        errors["phone"] = ["Phone number must be between 10 and 15 characters."]

    return errors


def create_booking(
    actor: Actor,
    *,
    package_id: int,
    seat_count: int,
    customer_name: str,
    email: str,
    phone: str,
) -> Booking:
    """Reserve a pending booking for the actor. Seats are checked, not taken."""

    errors = _validate_contact(seat_count, customer_name, email, phone)
    if errors:
        raise ValidationError(errors)

    try:
        package = Package.objects.get(pk=package_id)
    except Package.DoesNotExist:
        raise NotFoundError("Package not found.")

    if package.available_seats < seat_count:
        raise ValidationError(
            {"seat_count": [f"Only {package.available_seats} seats available for {package.name}."]}
        )

    booking = Booking.objects.create(
        package=package,
        owner_id=actor.user_id,
        seat_count=seat_count,
        customer_name=customer_name.strip(),
        email=email.strip(),
        phone=phone.strip(),
        status=Booking.PENDING,
    )
    logger.info(
        "Booking %s created for package %s (%s seats) by user %s",
        booking.id,
        package.id,
        seat_count,
        actor.user_id,
    )
    return booking


def cancel_booking(actor: Actor, booking_id: int) -> CancellationSummary:
    """
    Cancel a booking and record any refund owed on its successful payment.

    Runs as one transaction with the booking, package and payment rows locked.
    Cancelling an already cancelled booking raises ``ValidationError`` and
    writes nothing.
    """

    with transaction.atomic():
        try:
            booking = Booking.objects.select_for_update().get(pk=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError("Booking not found.")

        if not actor.can_access(booking.owner_id):
            raise AuthorizationError()
        if booking.status == Booking.CANCELLED:
            raise ValidationError("Booking is already cancelled.")

        held_seats = booking.seat_count if booking.holds_seats else 0
        booking.transition_to(Booking.CANCELLED, cancelled_at=timezone.now())

        if held_seats:
            Package.objects.filter(pk=booking.package_id).update(
                available_seats=F("available_seats") + held_seats
            )

        payment = (
            Payment.objects.select_for_update()
            .filter(booking=booking, status=Payment.SUCCESS)
            .order_by("-created_at", "-id")
            .first()
        )
        if payment is None:
            logger.info(
                "Booking %s cancelled by user %s; %s seats restored, no refund due",
                booking.id,
                actor.user_id,
                held_seats,
            )
            return CancellationSummary(
                booking_id=booking.id,
                refunded=False,
                seats_restored=held_seats,
            )

        breakdown = refund_breakdown(payment.amount)
        payment.transition_to(Payment.REFUNDED, refund_amount=breakdown.refund)

    logger.info(
        "Booking %s cancelled by user %s; refund of %s %s recorded on payment %s",
        booking.id,
        actor.user_id,
        breakdown.refund,
        payment.currency,
        payment.id,
    )
    return CancellationSummary(
        booking_id=booking.id,
        refunded=True,
        amount=breakdown.amount,
        fee=breakdown.fee,
        refund_amount=breakdown.refund,
        seats_restored=held_seats,
    )
