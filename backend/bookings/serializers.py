from rest_framework import serializers

from .models import Booking


class BookingPaymentSummarySerializer(serializers.Serializer):
    id = serializers.IntegerField()
    status = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    paid_at = serializers.DateTimeField(allow_null=True)
    has_receipt = serializers.SerializerMethodField()

    def get_has_receipt(self, obj) -> bool:
        return bool(obj.stripe_receipt_url)


class BookingSerializer(serializers.ModelSerializer):
    package_name = serializers.CharField(source="package.name", read_only=True)
    package_location = serializers.CharField(source="package.location", read_only=True)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    payment = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "package",
            "package_name",
            "package_location",
            "seat_count",
            "status",
            "customer_name",
            "email",
            "phone",
            "total_amount",
            "payment",
            "created_at",
            "confirmed_at",
            "cancelled_at",
        ]
        read_only_fields = fields

    def get_payment(self, obj: Booking):
        payment = obj.latest_payment()
        if payment is None:
            return None
        return BookingPaymentSummarySerializer(payment).data


class BookingCreateSerializer(serializers.Serializer):
    """Shape check only; the workflow applies the business rules."""

    package_id = serializers.IntegerField()
    seat_count = serializers.IntegerField()
    customer_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=15)


class CancellationSummarySerializer(serializers.Serializer):
    booking_id = serializers.IntegerField()
    refunded = serializers.BooleanField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    fee = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    refund_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    seats_restored = serializers.IntegerField()
