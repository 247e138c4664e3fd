from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "package", "customer_name", "email", "seat_count", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("customer_name", "email", "package__name")
    readonly_fields = ("status", "confirmed_at", "cancelled_at", "created_at", "updated_at")
    ordering = ("-created_at",)
