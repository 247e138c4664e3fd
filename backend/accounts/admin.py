from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import User


@admin.register(User)
class TourismUserAdmin(UserAdmin):
    list_display = ("email", "display_name", "role", "is_superuser", "is_active")
    list_filter = ("role", "is_superuser", "is_active")
    search_fields = ("email", "display_name", "first_name", "last_name")
    fieldsets = UserAdmin.fieldsets + (
        ("Profile", {"fields": ("display_name", "phone", "role")}),
    )
