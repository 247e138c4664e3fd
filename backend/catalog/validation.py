"""Business rules for travel packages, shared by the package API and the booking flow."""

from __future__ import annotations

from typing import List

from django.db.models import Q
from django.utils import timezone

from .models import Package

MIN_DURATION_DAYS = 1
MAX_DURATION_DAYS = 365


def _booking_model():
    from bookings.models import Booking
    return Booking


def validate_package(package: Package, is_edit: bool = False) -> List[str]:
    """Return every rule the package violates; an empty list means it is valid."""
    errors: List[str] = []
    today = timezone.localdate()

    if package.end_date <= package.start_date:
        errors.append("End date must be after start date.")

    # Existing packages keep their original start date even once it has passed.
    if not is_edit and package.start_date <= today:
        errors.append("Start date must be in the future.")

    duration = package.duration_days
    if duration < MIN_DURATION_DAYS:
        errors.append("Package duration must be at least 1 day.")
    if duration > MAX_DURATION_DAYS:
        errors.append("Package duration cannot exceed 365 days.")

    if package.price is None or package.price <= 0:
        errors.append("Price must be greater than zero.")

    return errors


def is_available_for_booking(package: Package) -> bool:
    return (
        package.available_seats > 0
        and package.start_date > timezone.localdate()
        and package.end_date > package.start_date
    )


def can_be_deleted(package: Package) -> bool:
    Booking = _booking_model()
    # Payment rows are kept even for cancelled bookings.
    return not package.bookings.filter(
        Q(status__in=Booking.ACTIVE_STATUSES) | Q(payments__isnull=False)
    ).exists()
