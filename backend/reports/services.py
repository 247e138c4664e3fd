"""Aggregate figures for the administrator dashboard."""

from __future__ import annotations

from decimal import Decimal

from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce

from bookings.models import Booking
from catalog.models import Package
from payments.models import Payment

RECENT_BOOKINGS_LIMIT = 5

_ZERO = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))


def _money_total(queryset, field: str) -> Decimal:
    return queryset.aggregate(total=Coalesce(Sum(field), _ZERO))["total"]


def build_dashboard_summary() -> dict:
    payments = Payment.objects.all()
    status_counts = {
        row["status"]: row["count"]
        for row in payments.values("status").annotate(count=Count("id")).order_by()
    }

    bookings_per_package = list(
        Package.objects.annotate(
            booking_count=Count("bookings"),
            confirmed_count=Count("bookings", filter=Q(bookings__status__in=Booking.ACTIVE_STATUSES)),
        )
        .order_by("-booking_count", "name")
        .values("id", "name", "booking_count", "confirmed_count", "available_seats")
    )

    return {
        "total_revenue": _money_total(payments.filter(status=Payment.SUCCESS), "amount"),
        "total_refunds": _money_total(payments.filter(status=Payment.REFUNDED), "refund_amount"),
        "total_bookings": Booking.objects.count(),
        "active_bookings": Booking.objects.filter(status__in=Booking.ACTIVE_STATUSES).count(),
        "cancelled_bookings": Booking.objects.filter(status=Booking.CANCELLED).count(),
        "total_packages": Package.objects.count(),
        "packages_with_seats": Package.objects.filter(available_seats__gt=0).count(),
        "payment_status": {
            "paid": status_counts.get(Payment.SUCCESS, 0),
            "refunded": status_counts.get(Payment.REFUNDED, 0),
            "failed": status_counts.get(Payment.FAILED, 0),
            "not_paid": status_counts.get(Payment.PENDING, 0) + status_counts.get(Payment.CANCELLED, 0),
        },
        "bookings_per_package": bookings_per_package,
    }


def recent_bookings(limit: int = RECENT_BOOKINGS_LIMIT):
    return Booking.objects.select_related("package").prefetch_related("payments").order_by("-created_at", "-id")[:limit]
