from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from bookings.models import Booking
from payments.models import Payment
from reports.services import build_dashboard_summary


def _booking(package, owner, status, seats=1):
    return Booking.objects.create(
        package=package,
        owner=owner,
        seat_count=seats,
        status=status,
        customer_name="Tara Traveller",
        email="traveller@example.com",
        phone="9876543210",
    )


@pytest.fixture
def activity(customer, make_package):
    goa = make_package(name="Goa", available_seats=0)
    manali = make_package(name="Manali")
    paid = _booking(goa, customer, Booking.CONFIRMED, seats=2)
    refunded = _booking(goa, customer, Booking.CANCELLED)
    pending = _booking(manali, customer, Booking.PENDING)
    Payment.objects.create(booking=paid, amount=Decimal("2000.00"), status=Payment.SUCCESS)
    Payment.objects.create(
        booking=refunded,
        amount=Decimal("1000.00"),
        status=Payment.REFUNDED,
        refund_amount=Decimal("850.00"),
    )
    Payment.objects.create(booking=pending, amount=Decimal("1000.00"), status=Payment.CANCELLED)
    return goa, manali


@pytest.mark.django_db
def test_summary_totals(activity):
    summary = build_dashboard_summary()

    assert summary["total_revenue"] == Decimal("2000.00")
    assert summary["total_refunds"] == Decimal("850.00")
    assert summary["total_bookings"] == 3
    assert summary["active_bookings"] == 1
    assert summary["cancelled_bookings"] == 1
    assert summary["total_packages"] == 2
    assert summary["packages_with_seats"] == 1
    assert summary["payment_status"] == {"paid": 1, "refunded": 1, "failed": 0, "not_paid": 1}
    per_package = {row["name"]: row for row in summary["bookings_per_package"]}
    assert per_package["Goa"]["booking_count"] == 2
    assert per_package["Goa"]["confirmed_count"] == 1
    assert per_package["Manali"]["booking_count"] == 1


@pytest.mark.django_db
def test_empty_summary_reports_zero_money():
    summary = build_dashboard_summary()

    assert summary["total_revenue"] == Decimal("0.00")
    assert summary["total_refunds"] == Decimal("0.00")
    assert summary["bookings_per_package"] == []


@pytest.mark.django_db
def test_dashboard_endpoint_is_admin_only(customer, admin_user, activity):
    client = APIClient()
    client.force_authenticate(customer)
    assert client.get("/api/admin/dashboard/").status_code == 403

    client.force_authenticate(admin_user)
    response = client.get("/api/admin/dashboard/")

    assert response.status_code == 200
    body = response.json()
    assert body["total_bookings"] == 3
    assert len(body["recent_bookings"]) == 3
