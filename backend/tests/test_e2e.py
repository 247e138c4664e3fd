import types
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from catalog.models import Package
from payments.services import gateway


@pytest.mark.django_db
def test_end_to_end_booking_flow(monkeypatch, settings):
    settings.STRIPE_SECRET_KEY = "sk_test_123"
    settings.BACKEND_URL = "https://api.test"

    admin = User.objects.create_user(
        username="admin@example.com",
        email="admin@example.com",
        password="pass12345",
        role=User.ADMIN,
    )
    admin_client = APIClient()
    admin_client.force_authenticate(admin)

    # Administrator publishes a package
    start = timezone.localdate() + timedelta(days=20)
    package_response = admin_client.post(
        "/api/packages/",
        {
            "name": "Andaman Island Hopper",
            "location": "Port Blair",
            "price": "1000.00",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(days=5)).isoformat(),
            "available_seats": 5,
        },
        format="json",
    )
    assert package_response.status_code == 201
    package_id = package_response.data["id"]

    # Customer registers and books two seats
    client = APIClient()
    register_response = client.post(
        "/api/auth/register/",
        {
            "email": "traveller@example.com",
            "password": "pass12345",
            "first_name": "Tara",
            "last_name": "Traveller",
            "phone": "9876543210",
        },
        format="json",
    )
    assert register_response.status_code == 201
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {register_response.data['access']}")

    booking_response = client.post(
        "/api/bookings/",
        {"package_id": package_id, "seat_count": 2, "phone": "9876543210"},
        format="json",
    )
    assert booking_response.status_code == 201
    booking_id = booking_response.data["id"]
    assert Package.objects.get(pk=package_id).available_seats == 5

    # Checkout opens a hosted session
    monkeypatch.setattr(gateway, "find_or_create_customer", lambda **kwargs: "cus_e2e")
    monkeypatch.setattr(
        gateway,
        "create_checkout_session",
        lambda **kwargs: types.SimpleNamespace(id="cs_e2e", url="https://checkout.stripe.test/cs_e2e"),
    )
    checkout_response = client.post(f"/api/bookings/{booking_id}/checkout/")
    assert checkout_response.status_code == 201
    assert checkout_response.data["session_id"] == "cs_e2e"

    # Provider redirects back after payment
    monkeypatch.setattr(
        gateway,
        "retrieve_checkout_session",
        lambda session_id, **kwargs: types.SimpleNamespace(
            id=session_id,
            payment_status="paid",
            status="complete",
            payment_intent="pi_e2e",
            customer="cus_e2e",
            invoice=types.SimpleNamespace(id="in_e2e", hosted_invoice_url="https://invoice.stripe.test/in_e2e"),
        ),
    )
    success_response = APIClient().get(
        "/api/payments/success/",
        {"session_id": "cs_e2e", "booking_id": booking_id},
    )
    assert success_response.status_code == 200
    assert Package.objects.get(pk=package_id).available_seats == 3

    detail_response = client.get(f"/api/bookings/{booking_id}/")
    assert detail_response.data["status"] == "CONFIRMED"
    assert detail_response.data["payment"]["status"] == "SUCCESS"
    payment_id = detail_response.data["payment"]["id"]

    receipt_response = client.get(f"/api/payments/{payment_id}/receipt/")
    assert receipt_response.data["receipt_url"] == "https://invoice.stripe.test/in_e2e"

    # Customer cancels and the refund is recorded
    cancel_response = client.post(f"/api/bookings/{booking_id}/cancel/")
    assert cancel_response.status_code == 200
    assert cancel_response.data["refunded"] is True
    assert Decimal(cancel_response.data["refund_amount"]) == Decimal("1700.00")
    assert Package.objects.get(pk=package_id).available_seats == 5

    dashboard = admin_client.get("/api/admin/dashboard/").data
    assert dashboard["total_refunds"] == Decimal("850.00") * 2
    assert dashboard["payment_status"]["refunded"] == 1
