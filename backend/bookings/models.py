from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from core.state import StatusTransitionMixin


class Booking(StatusTransitionMixin, models.Model):
    """A customer's reservation request for seats on a package."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    STATUSES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
    ]
    TRANSITIONS = {
        PENDING: {CONFIRMED, CANCELLED},
        CONFIRMED: {CANCELLED},
        CANCELLED: set(),
    }
    # Statuses that count as a live booking for reporting and package deletion.
    ACTIVE_STATUSES = (CONFIRMED,)
    # Statuses whose seats have been taken out of the package inventory.
    SEAT_HOLDING_STATUSES = (CONFIRMED,)

    MIN_SEATS = 1
    MAX_SEATS = settings.BOOKING_MAX_SEATS

    package = models.ForeignKey("catalog.Package", on_delete=models.CASCADE, related_name="bookings")
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    seat_count = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_SEATS), MaxValueValidator(MAX_SEATS)],
    )
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    customer_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=100)
    phone = models.CharField(max_length=15)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    confirmed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(seat_count__gte=1, seat_count__lte=settings.BOOKING_MAX_SEATS),
                name="booking_seat_count_range",
            ),
        ]

    def __str__(self):
        return f"Booking #{self.pk} {self.package.name} ({self.seat_count})"

    @property
    def holds_seats(self) -> bool:
        return self.status in self.SEAT_HOLDING_STATUSES

    @property
    def total_amount(self):
        return self.package.price * self.seat_count

    def latest_payment(self):
        return self.payments.order_by("-created_at", "-id").first()
