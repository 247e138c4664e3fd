from rest_framework import serializers

from .models import Payment


class CheckoutResultSerializer(serializers.Serializer):
    payment_id = serializers.IntegerField()
    session_id = serializers.CharField()
    url = serializers.URLField()


class ConfirmationOutcomeSerializer(serializers.Serializer):
    status = serializers.CharField()
    booking_id = serializers.IntegerField()
    payment_id = serializers.IntegerField()
    receipt_url = serializers.CharField(allow_blank=True)
    is_paid = serializers.BooleanField()


class PaymentSerializer(serializers.ModelSerializer):
    booking_id = serializers.IntegerField(read_only=True)
    package_name = serializers.CharField(source="booking.package.name", read_only=True)
    customer_name = serializers.CharField(source="booking.customer_name", read_only=True)
    seat_count = serializers.IntegerField(source="booking.seat_count", read_only=True)
    booking_status = serializers.CharField(source="booking.status", read_only=True)
    has_receipt = serializers.SerializerMethodField()

    class Meta:
        model = Payment
        fields = [
            "id",
            "booking_id",
            "package_name",
            "customer_name",
            "seat_count",
            "booking_status",
            "amount",
            "currency",
            "status",
            "refund_amount",
            "payment_method",
            "stripe_invoice",
            "stripe_receipt_url",
            "has_receipt",
            "paid_at",
            "created_at",
        ]
        read_only_fields = fields

    def get_has_receipt(self, obj: Payment) -> bool:
        return bool(obj.stripe_receipt_url)
