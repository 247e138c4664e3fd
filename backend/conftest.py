import types
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from accounts.models import User
from bookings.models import Booking
from catalog.models import Package


@pytest.fixture
def customer(db):
    return User.objects.create_user(
        username="traveller@example.com",
        email="traveller@example.com",
        password="password123",
        first_name="Tara",
        last_name="Traveller",
        phone="9876543210",
    )


@pytest.fixture
def other_customer(db):
    return User.objects.create_user(
        username="other@example.com",
        email="other@example.com",
        password="password123",
        first_name="Omar",
        last_name="Other",
    )


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username="admin@example.com",
        email="admin@example.com",
        password="password123",
        first_name="Ada",
        last_name="Admin",
        role=User.ADMIN,
    )


@pytest.fixture
def make_package(db):
    def _make(**overrides):
        start = timezone.localdate() + timedelta(days=10)
        values = {
            "name": "Kerala Backwaters",
            "location": "Alleppey",
            "price": Decimal("1000.00"),
            "start_date": start,
            "end_date": start + timedelta(days=3),
            "available_seats": 5,
        }
        values.update(overrides)
        return Package.objects.create(**values)

    return _make


@pytest.fixture
def package(make_package):
    return make_package()


@pytest.fixture
def booking(customer, package):
    return Booking.objects.create(
        package=package,
        owner=customer,
        seat_count=2,
        customer_name="Tara Traveller",
        email="traveller@example.com",
        phone="9876543210",
    )


@pytest.fixture
def stripe_settings(settings):
    settings.STRIPE_SECRET_KEY = "sk_test_123"
    settings.BACKEND_URL = "https://api.test"
    settings.PAYMENT_CURRENCY = "inr"
    return settings


@pytest.fixture
def paid_session():
    def _make(session_id="cs_test_paid", **overrides):
        values = {
            "id": session_id,
            "payment_status": "paid",
            "status": "complete",
            "payment_intent": types.SimpleNamespace(id="pi_test_1"),
            "customer": "cus_test_1",
            "invoice": types.SimpleNamespace(
                id="in_test_1",
                hosted_invoice_url="https://invoice.stripe.test/in_test_1",
            ),
        }
        values.update(overrides)
        return types.SimpleNamespace(**values)

    return _make
