from django.contrib import admin

from .models import Package


@admin.register(Package)
class PackageAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "price", "start_date", "end_date", "available_seats")
    list_filter = ("location",)
    search_fields = ("name", "location")
    ordering = ("start_date",)
