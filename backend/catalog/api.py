import logging

from rest_framework import viewsets

from accounts.permissions import IsAdministratorOrReadOnly
from core.exceptions import ValidationError

from .filters import PackageFilter
from .models import Package
from .serializers import PackageSerializer
from .validation import can_be_deleted

logger = logging.getLogger(__name__)


class PackageViewSet(viewsets.ModelViewSet):
    """Browse packages publicly; administrators create, edit and delete them."""

    serializer_class = PackageSerializer
    permission_classes = [IsAdministratorOrReadOnly]
    filterset_class = PackageFilter
    search_fields = ["name", "location", "description"]
    ordering_fields = ["start_date", "price", "name"]

    def get_queryset(self):
        return Package.objects.all().order_by("start_date", "id")

    def perform_create(self, serializer):
        package = serializer.save()
        logger.info("Package %s created by %s", package.id, self.request.user.email)

    def perform_destroy(self, instance):
        if not can_be_deleted(instance):
            raise ValidationError("Cannot delete package with active bookings or payment records.")
        logger.info("Package %s deleted by %s", instance.id, self.request.user.email)
        instance.delete()
