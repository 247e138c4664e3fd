from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdministrator
from bookings.serializers import BookingSerializer

from .services import build_dashboard_summary, recent_bookings


class AdminDashboardView(APIView):
    """Revenue, refund and occupancy figures for administrators."""

    permission_classes = [IsAdministrator]

    def get(self, request, *args, **kwargs):
        summary = build_dashboard_summary()
        summary["recent_bookings"] = BookingSerializer(recent_bookings(), many=True).data
        return Response(summary)
