from django.contrib import admin

from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("id", "booking", "amount", "currency", "status", "refund_amount", "paid_at")
    list_filter = ("status", "currency")
    search_fields = ("booking__customer_name", "booking__email", "stripe_checkout_session", "stripe_payment_intent")
    readonly_fields = (
        "status",
        "refund_amount",
        "stripe_checkout_session",
        "stripe_customer",
        "stripe_payment_intent",
        "stripe_invoice",
        "stripe_receipt_url",
        "paid_at",
        "created_at",
        "updated_at",
    )
