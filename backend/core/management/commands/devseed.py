from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from catalog.models import Package


SEED_PASSWORD = "Tourism123!"
ADMIN_EMAIL = "admin@tourism.test"
ADMIN_PASSWORD = "AdminTourism123!"

SAMPLE_PACKAGES = [
    {
        "name": "Kerala Backwaters Escape",
        "location": "Alleppey, Kerala",
        "price": Decimal("18500.00"),
        "days_out": 21,
        "duration": 4,
        "seats": 20,
        "description": "Houseboat stay through the backwaters with village visits.",
    },
    {
        "name": "Himalayan Valley Trek",
        "location": "Manali, Himachal Pradesh",
        "price": Decimal("24999.00"),
        "days_out": 35,
        "duration": 7,
        "seats": 12,
        "description": "Guided trek through alpine meadows with camping nights.",
    },
    {
        "name": "Golden Triangle Heritage Tour",
        "location": "Delhi - Agra - Jaipur",
        "price": Decimal("32000.00"),
        "days_out": 50,
        "duration": 6,
        "seats": 5,
        "description": "Forts, palaces and the Taj Mahal at sunrise.",
    },
]


class Command(BaseCommand):
    help = "Populate the local development database with sample packages and bookings."

    def handle(self, *args, **options):
        if not settings.DEBUG:
            raise CommandError("Refusing to seed data while DEBUG is False.")

        with transaction.atomic():
            self.stdout.write(self.style.MIGRATE_HEADING("Creating users"))
            admin = self._ensure_admin()
            customer = self._ensure_user(
                email="traveller@example.test",
                first_name="Tara",
                last_name="Traveller",
                phone="9876543210",
            )

            self.stdout.write(self.style.MIGRATE_HEADING("Creating packages"))
            today = timezone.localdate()
            packages = [self._ensure_package(today=today, **data) for data in SAMPLE_PACKAGES]

            self.stdout.write(self.style.MIGRATE_HEADING("Creating bookings"))
            Booking.objects.get_or_create(
                package=packages[0],
                owner=customer,
                defaults={
                    "seat_count": 2,
                    "status": Booking.PENDING,
                    "customer_name": customer.full_name,
                    "email": customer.email,
                    "phone": customer.phone,
                },
            )

        self.stdout.write(self.style.SUCCESS("Seed data ready."))
        self.stdout.write(f"Administrator: {admin.email} / {ADMIN_PASSWORD}")
        self.stdout.write(f"Customer: {customer.email} / {SEED_PASSWORD}")

    def _ensure_user(self, email: str, first_name: str, last_name: str, phone: str) -> User:
        user, created = User.objects.get_or_create(
            email=email,
            defaults={
                "username": email,
                "first_name": first_name,
                "last_name": last_name,
                "display_name": f"{first_name} {last_name}",
                "phone": phone,
                "role": User.CUSTOMER,
            },
        )
        if created:
            user.set_password(SEED_PASSWORD)
            user.save(update_fields=["password"])
        return user

    def _ensure_admin(self) -> User:
        user, created = User.objects.get_or_create(
            email=ADMIN_EMAIL,
            defaults={
                "username": ADMIN_EMAIL,
                "first_name": "Admin",
                "last_name": "User",
                "display_name": "Admin User",
                "role": User.ADMIN,
                "is_staff": True,
                "is_superuser": True,
            },
        )
        flag_updates = {}
        if user.role != User.ADMIN:
            flag_updates["role"] = User.ADMIN
        if not user.is_staff:
            flag_updates["is_staff"] = True
        if flag_updates:
            for attr, value in flag_updates.items():
                setattr(user, attr, value)
            user.save(update_fields=list(flag_updates.keys()))
        if created or not user.has_usable_password():
            user.set_password(ADMIN_PASSWORD)
            user.save(update_fields=["password"])
        return user

    def _ensure_package(
        self,
        *,
        today,
        name: str,
        location: str,
        price: Decimal,
        days_out: int,
        duration: int,
        seats: int,
        description: str,
    ) -> Package:
        start = today + timedelta(days=days_out)
        package, created = Package.objects.get_or_create(
            name=name,
            defaults={
                "location": location,
                "price": price,
                "start_date": start,
                "end_date": start + timedelta(days=duration),
                "available_seats": seats,
                "description": description,
            },
        )
        if not created and package.start_date <= today:
            package.start_date = start
            package.end_date = start + timedelta(days=duration)
            package.save()
        return package
