from django.conf import settings
from django.db import models
from django.db.models import Q

from core.state import StatusTransitionMixin


class Payment(StatusTransitionMixin, models.Model):
    """
    Local record of a checkout attempt for a booking.

    The workflow keeps a single row per booking and reuses it when the payer
    starts checkout again. ``refund_amount`` is populated only once the payment
    is REFUNDED.
    """

    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"
    STATUSES = [
        (PENDING, "Pending"),
        (SUCCESS, "Success"),
        (FAILED, "Failed"),
        (REFUNDED, "Refunded"),
        (CANCELLED, "Cancelled"),
    ]
    TRANSITIONS = {
        PENDING: {SUCCESS, FAILED, CANCELLED},
        # A payer may come back to an abandoned or failed checkout.
        FAILED: {PENDING},
        # The provider can still report an abandoned session as paid.
        CANCELLED: {PENDING, SUCCESS},
        SUCCESS: {REFUNDED},
        REFUNDED: set(),
    }
    RETRYABLE_STATUSES = (PENDING, FAILED, CANCELLED)

    booking = models.ForeignKey("bookings.Booking", on_delete=models.PROTECT, related_name="payments")
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    currency = models.CharField(max_length=10, default=settings.PAYMENT_CURRENCY)
    status = models.CharField(max_length=12, choices=STATUSES, default=PENDING)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    payment_method = models.CharField(max_length=50, default="stripe")
    stripe_checkout_session = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_customer = models.CharField(max_length=255, blank=True)
    stripe_payment_intent = models.CharField(max_length=255, blank=True)
    stripe_invoice = models.CharField(max_length=255, blank=True)
    stripe_receipt_url = models.URLField(max_length=500, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status="REFUNDED", refund_amount__isnull=False)
                    | (~Q(status="REFUNDED") & Q(refund_amount__isnull=True))
                ),
                name="payment_refund_amount_iff_refunded",
            ),
        ]

    def __str__(self):
        return f"Payment #{self.pk} {self.amount} {self.currency} ({self.status})"

    @property
    def amount_minor_units(self) -> int:
        return int(self.amount * 100)
