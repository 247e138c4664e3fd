from rest_framework import serializers

from .models import Package
from .validation import is_available_for_booking, validate_package


class PackageSerializer(serializers.ModelSerializer):
    duration_days = serializers.IntegerField(read_only=True)
    is_available_for_booking = serializers.SerializerMethodField()

    class Meta:
        model = Package
        fields = [
            "id",
            "name",
            "description",
            "location",
            "price",
            "start_date",
            "end_date",
            "duration_days",
            "available_seats",
            "image_url",
            "is_available_for_booking",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_fields(self):
        fields = super().get_fields()
        if self.instance is not None:
            # After creation, seats change only through payment confirmation and cancellation.
            fields["available_seats"] = serializers.IntegerField(read_only=True)
        return fields

    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save(update_fields=[*validated_data, "updated_at"])
        return instance

    def get_is_available_for_booking(self, obj: Package) -> bool:
        return is_available_for_booking(obj)

    def validate(self, attrs):
        instance = self.instance
        candidate = Package(
            name=attrs.get("name", getattr(instance, "name", "")),
            location=attrs.get("location", getattr(instance, "location", "")),
            price=attrs.get("price", getattr(instance, "price", None)),
            start_date=attrs.get("start_date", getattr(instance, "start_date", None)),
            end_date=attrs.get("end_date", getattr(instance, "end_date", None)),
            available_seats=attrs.get("available_seats", getattr(instance, "available_seats", 0)),
        )
        if candidate.start_date is None or candidate.end_date is None:
            return attrs

        errors = {}
        for message in validate_package(candidate, is_edit=instance is not None):
            if message.startswith("End date"):
                key = "end_date"
            elif message.startswith("Start date"):
                key = "start_date"
            else:
                key = "non_field_errors"
            errors.setdefault(key, []).append(message)
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
