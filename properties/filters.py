"""
Properties Filters - CenterScope API
django-filter FilterSet for the shopping center list endpoint.
"""

from django_filters import BooleanFilter, CharFilter
from django_filters import rest_framework as filters

from .models import ShoppingCenter


class ShoppingCenterFilter(filters.FilterSet):
    """
    Filters for shopping centers.

    Usage:
        GET /api/v1/shopping-centers/?state=DE&type=community center
        GET /api/v1/shopping-centers/?geocoded=false
    """

    type = CharFilter(
        field_name='center_type',
        lookup_expr='iexact',
        help_text='Filter by center type (exact match, case-insensitive)'
    )

    state = CharFilter(
        field_name='address_state',
        lookup_expr='iexact',
        help_text='Filter by state code (exact match, e.g., DE, PA)'
    )

    county = CharFilter(
        field_name='county',
        lookup_expr='iexact',
        help_text='Filter by county name'
    )

    city = CharFilter(
        field_name='address_city',
        lookup_expr='icontains',
        help_text='Filter by city name (partial match)'
    )

    geocoded = BooleanFilter(
        method='filter_geocoded',
        help_text='true: only centers with coordinates; false: only centers without'
    )

    class Meta:
        model = ShoppingCenter
        fields = ['type', 'state', 'county', 'city', 'geocoded']

    def filter_geocoded(self, queryset, name, value):
        geocoded = queryset.filter(latitude__isnull=False, longitude__isnull=False)
        if value:
            return geocoded
        return queryset.exclude(pk__in=geocoded.values('pk'))
