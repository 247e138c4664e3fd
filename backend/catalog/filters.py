import django_filters

from .models import Package


class PackageFilter(django_filters.FilterSet):
    location = django_filters.CharFilter(field_name="location", lookup_expr="icontains")
    min_price = django_filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = django_filters.NumberFilter(field_name="price", lookup_expr="lte")
    start_date = django_filters.DateFilter(field_name="start_date", lookup_expr="gte")

    class Meta:
        model = Package
        fields = ["location", "min_price", "max_price", "start_date"]
