import logging

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdministrator
from core.actors import Actor
from core.exceptions import AuthorizationError, NotFoundError, ValidationError

from .models import Payment
from .serializers import ConfirmationOutcomeSerializer, PaymentSerializer
from .services.receipts import get_receipt_url, refresh_receipt
from .services.reconciliation import confirm_success, mark_checkout_cancelled

logger = logging.getLogger(__name__)


def _booking_id_param(request) -> int:
    raw = request.query_params.get("booking_id", "")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError({"booking_id": ["A numeric booking_id is required."]})


class PaymentSuccessView(APIView):
    """
    Provider redirect after a completed checkout.

    Public because the payer's browser follows it straight from the provider;
    the session is re-verified server side before anything changes.
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        session_id = request.query_params.get("session_id", "")
        if not session_id:
            raise ValidationError({"session_id": ["This parameter is required."]})
        outcome = confirm_success(session_id, _booking_id_param(request))
        code = status.HTTP_200_OK if outcome.is_paid else status.HTTP_202_ACCEPTED
        return Response(ConfirmationOutcomeSerializer(outcome).data, status=code)


class PaymentCancelledView(APIView):
    """Provider redirect when the payer abandons checkout."""

    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request, *args, **kwargs):
        booking_id = _booking_id_param(request)
        payment = mark_checkout_cancelled(booking_id, request.query_params.get("session_id") or None)
        return Response(
            {
                "booking_id": booking_id,
                "payment_status": payment.status if payment else None,
                "detail": "Payment was cancelled. You can try again when you're ready.",
            }
        )


class PaymentAccessMixin:
    def get_payment(self, request, payment_id) -> Payment:
        try:
            payment = Payment.objects.select_related("booking__package").get(pk=payment_id)
        except Payment.DoesNotExist:
            raise NotFoundError("Payment not found.")
        if not Actor.from_user(request.user).can_access(payment.booking.owner_id):
            raise AuthorizationError()
        return payment


class PaymentDetailView(PaymentAccessMixin, APIView):
    def get(self, request, payment_id, *args, **kwargs):
        payment = self.get_payment(request, payment_id)
        return Response(PaymentSerializer(payment).data)


class PaymentReceiptView(PaymentAccessMixin, APIView):
    """Return the provider receipt URL, looking it up on first request."""

    def get(self, request, payment_id, *args, **kwargs):
        payment = self.get_payment(request, payment_id)
        url = get_receipt_url(payment)
        if not url:
            return Response(
                {"detail": "Receipt is not available yet. Please try again later."},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response({"payment_id": payment.id, "receipt_url": url})


class RefreshReceiptView(PaymentAccessMixin, APIView):
    permission_classes = [IsAdministrator]

    def post(self, request, payment_id, *args, **kwargs):
        payment = self.get_payment(request, payment_id)
        url = refresh_receipt(payment)
        if not url:
            return Response(
                {"detail": "Unable to retrieve a receipt from the payment provider."},
                status=status.HTTP_502_BAD_GATEWAY,
            )
        logger.info("Receipt for payment %s refreshed by %s", payment.id, request.user.email)
        return Response({"payment_id": payment.id, "receipt_url": url})
