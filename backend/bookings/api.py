from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.actors import Actor
from payments.serializers import CheckoutResultSerializer
from payments.services.reconciliation import initiate_checkout

from .models import Booking
from .serializers import BookingCreateSerializer, BookingSerializer, CancellationSummarySerializer
from .services.workflow import cancel_booking, create_booking


class BookingViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    viewsets.GenericViewSet,
):
    """
    Customers see and manage their own bookings; administrators see all of them.

    Writes go through the booking workflow so that seat inventory and payment
    state stay consistent.
    """

    serializer_class = BookingSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = Booking.objects.select_related("package").prefetch_related("payments")
        if self.request.user.is_administrator:
            return queryset.order_by("-created_at", "-id")
        return queryset.filter(owner=self.request.user).order_by("-created_at", "-id")

    def create(self, request, *args, **kwargs):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        user = request.user

        booking = create_booking(
            Actor.from_user(user),
            package_id=data["package_id"],
            seat_count=data["seat_count"],
            customer_name=data.get("customer_name") or user.full_name,
            email=data.get("email") or user.email,
            phone=data["phone"],
        )
        return Response(BookingSerializer(booking).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        summary = cancel_booking(Actor.from_user(request.user), int(pk))
        return Response(CancellationSummarySerializer(summary).data)

    @action(detail=True, methods=["post"], url_path="checkout")
    def checkout(self, request, pk=None):
        result = initiate_checkout(Actor.from_user(request.user), int(pk))
        return Response(CheckoutResultSerializer(result).data, status=status.HTTP_201_CREATED)
