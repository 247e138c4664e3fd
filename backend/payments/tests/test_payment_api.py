import types
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from bookings.models import Booking
from payments.models import Payment
from payments.services import gateway


@pytest.fixture
def pending_payment(booking):
    return Payment.objects.create(
        booking=booking,
        amount=Decimal("2000.00"),
        stripe_checkout_session="cs_test_1",
        stripe_customer="cus_test_1",
    )


@pytest.mark.django_db
def test_success_redirect_confirms_booking(monkeypatch, stripe_settings, pending_payment, paid_session):
    monkeypatch.setattr(
        gateway,
        "retrieve_checkout_session",
        lambda session_id, **kwargs: paid_session(session_id),
    )
    booking = pending_payment.booking

    response = APIClient().get(
        "/api/payments/success/",
        {"session_id": "cs_test_1", "booking_id": booking.id},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "confirmed"
    booking.refresh_from_db()
    assert booking.status == Booking.CONFIRMED


@pytest.mark.django_db
def test_success_redirect_for_unpaid_session_is_accepted_not_confirmed(monkeypatch, stripe_settings, pending_payment, paid_session):
    monkeypatch.setattr(
        gateway,
        "retrieve_checkout_session",
        lambda session_id, **kwargs: paid_session(session_id, payment_status="unpaid", status="open"),
    )

    response = APIClient().get(
        "/api/payments/success/",
        {"session_id": "cs_test_1", "booking_id": pending_payment.booking_id},
    )

    assert response.status_code == 202
    assert response.json()["status"] == "pending"


@pytest.mark.django_db
def test_success_redirect_requires_parameters():
    response = APIClient().get("/api/payments/success/", {"booking_id": "abc", "session_id": "cs_1"})

    assert response.status_code == 400
    assert "booking_id" in response.json()


@pytest.mark.django_db
def test_cancel_redirect_marks_payment_cancelled(pending_payment):
    response = APIClient().get("/api/payments/cancel/", {"booking_id": pending_payment.booking_id})

    assert response.status_code == 200
    assert response.json()["payment_status"] == Payment.CANCELLED
    pending_payment.refresh_from_db()
    assert pending_payment.status == Payment.CANCELLED


@pytest.mark.django_db
def test_owner_sees_payment_detail(customer, pending_payment):
    client = APIClient()
    client.force_authenticate(customer)

    response = client.get(f"/api/payments/{pending_payment.id}/")

    assert response.status_code == 200
    assert response.json()["amount"] == "2000.00"
    assert response.json()["package_name"] == pending_payment.booking.package.name


@pytest.mark.django_db
def test_other_customer_cannot_see_payment(other_customer, pending_payment):
    client = APIClient()
    client.force_authenticate(other_customer)

    response = client.get(f"/api/payments/{pending_payment.id}/")

    assert response.status_code == 403


@pytest.mark.django_db
def test_receipt_endpoint_resolves_and_stores_url(monkeypatch, customer, pending_payment):
    Payment.objects.filter(pk=pending_payment.pk).update(status=Payment.SUCCESS, stripe_payment_intent="pi_1")
    monkeypatch.setattr(
        gateway,
        "retrieve_checkout_session",
        lambda session_id, **kwargs: types.SimpleNamespace(id=session_id, invoice=None),
    )
    monkeypatch.setattr(gateway, "first_charge_receipt_url", lambda intent: "https://pay.test/receipt")
    client = APIClient()
    client.force_authenticate(customer)

    response = client.get(f"/api/payments/{pending_payment.id}/receipt/")

    assert response.status_code == 200
    assert response.json()["receipt_url"] == "https://pay.test/receipt"
    pending_payment.refresh_from_db()
    assert pending_payment.stripe_receipt_url == "https://pay.test/receipt"


@pytest.mark.django_db
def test_receipt_refresh_is_admin_only(customer, admin_user, monkeypatch, pending_payment):
    Payment.objects.filter(pk=pending_payment.pk).update(status=Payment.SUCCESS, stripe_payment_intent="pi_1")
    monkeypatch.setattr(
        gateway,
        "retrieve_checkout_session",
        lambda session_id, **kwargs: types.SimpleNamespace(id=session_id, invoice=None),
    )
    monkeypatch.setattr(gateway, "first_charge_receipt_url", lambda intent: "https://pay.test/new")

    client = APIClient()
    client.force_authenticate(customer)
    assert client.post(f"/api/payments/{pending_payment.id}/receipt/refresh/").status_code == 403

    client.force_authenticate(admin_user)
    response = client.post(f"/api/payments/{pending_payment.id}/receipt/refresh/")

    assert response.status_code == 200
    assert response.json()["receipt_url"] == "https://pay.test/new"
