from decimal import Decimal

import pytest

from bookings.models import Booking
from bookings.services.workflow import cancel_booking, create_booking
from core.actors import Actor
from core.exceptions import AuthorizationError, NotFoundError, ValidationError
from payments.models import Payment


def _create(actor, package, **overrides):
    values = {
        "package_id": package.id,
        "seat_count": 2,
        "customer_name": "Tara Traveller",
        "email": "traveller@example.com",
        "phone": "9876543210",
    }
    values.update(overrides)
    return create_booking(actor, **values)


@pytest.mark.django_db
def test_create_booking_is_pending_and_keeps_seats(customer, package):
    booking = _create(Actor.from_user(customer), package)

    assert booking.status == Booking.PENDING
    assert booking.owner_id == customer.id
    package.refresh_from_db()
    assert package.available_seats == 5


@pytest.mark.django_db
@pytest.mark.parametrize("seat_count", [0, 11, -1])
def test_create_booking_rejects_out_of_range_seats(customer, package, seat_count):
    with pytest.raises(ValidationError) as excinfo:
        _create(Actor.from_user(customer), package, seat_count=seat_count)

    assert "seat_count" in excinfo.value.detail
    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_create_booking_validates_contact_details(customer, package):
    with pytest.raises(ValidationError) as excinfo:
        _create(Actor.from_user(customer), package, customer_name="T", email="not-an-email", phone="123")

    assert set(excinfo.value.detail) == {"customer_name", "email", "phone"}


@pytest.mark.django_db
def test_create_booking_needs_enough_seats(customer, make_package):
    package = make_package(available_seats=1)

    with pytest.raises(ValidationError) as excinfo:
        _create(Actor.from_user(customer), package, seat_count=2)

    assert "seat_count" in excinfo.value.detail
    assert not Booking.objects.exists()


@pytest.mark.django_db
def test_create_booking_for_missing_package(customer):
    with pytest.raises(NotFoundError):
        create_booking(
            Actor.from_user(customer),
            package_id=9999,
            seat_count=1,
            customer_name="Tara Traveller",
            email="traveller@example.com",
            phone="9876543210",
        )


@pytest.mark.django_db
def test_cancel_pending_booking_restores_nothing_and_refunds_nothing(customer, booking):
    summary = cancel_booking(Actor.from_user(customer), booking.id)

    booking.refresh_from_db()
    booking.package.refresh_from_db()
    assert booking.status == Booking.CANCELLED
    assert booking.cancelled_at is not None
    assert booking.package.available_seats == 5
    assert summary.refunded is False
    assert summary.refund_amount is None


@pytest.mark.django_db
def test_cancel_confirmed_paid_booking_restores_seats_and_records_refund(customer, booking):
    Booking.objects.filter(pk=booking.pk).update(status=Booking.CONFIRMED)
    booking.package.available_seats = 3
    booking.package.save()
    payment = Payment.objects.create(booking=booking, amount=Decimal("2000.00"), status=Payment.SUCCESS)

    summary = cancel_booking(Actor.from_user(customer), booking.id)

    payment.refresh_from_db()
    booking.package.refresh_from_db()
    assert payment.status == Payment.REFUNDED
    assert payment.refund_amount == Decimal("1700.00")
    assert booking.package.available_seats == 5
    assert summary.refunded is True
    assert summary.fee == Decimal("300.00")
    assert summary.seats_restored == 2


@pytest.mark.django_db
def test_cancel_leaves_pending_payment_untouched(customer, booking):
    payment = Payment.objects.create(booking=booking, amount=Decimal("2000.00"), stripe_checkout_session="cs_1")

    cancel_booking(Actor.from_user(customer), booking.id)

    payment.refresh_from_db()
    assert payment.status == Payment.PENDING
    assert payment.refund_amount is None


@pytest.mark.django_db
def test_cancelling_twice_fails_without_changes(customer, booking):
    actor = Actor.from_user(customer)
    cancel_booking(actor, booking.id)
    booking.refresh_from_db()
    cancelled_at = booking.cancelled_at

    with pytest.raises(ValidationError):
        cancel_booking(actor, booking.id)

    booking.refresh_from_db()
    booking.package.refresh_from_db()
    assert booking.cancelled_at == cancelled_at
    assert booking.package.available_seats == 5


@pytest.mark.django_db
def test_only_owner_or_admin_can_cancel(other_customer, admin_user, booking):
    with pytest.raises(AuthorizationError):
        cancel_booking(Actor.from_user(other_customer), booking.id)

    summary = cancel_booking(Actor.from_user(admin_user), booking.id)
    assert summary.booking_id == booking.id


@pytest.mark.django_db
def test_cancel_missing_booking(customer):
    with pytest.raises(NotFoundError):
        cancel_booking(Actor.from_user(customer), 424242)


@pytest.mark.django_db
def test_illegal_transition_is_rejected(booking):
    Booking.objects.filter(pk=booking.pk).update(status=Booking.CANCELLED)
    booking.refresh_from_db()

    with pytest.raises(ValidationError):
        booking.transition_to(Booking.CONFIRMED)
