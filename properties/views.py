"""
Views for the properties app.

Read-only API for shopping centers, with the tenant roster and vacancy
statistics of a single center as custom actions.
"""

from django.db.models import Count, Prefetch
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from .filters import ShoppingCenterFilter
from .models import Lease, ShoppingCenter
from .serializers import (
    ShoppingCenterDetailSerializer,
    ShoppingCenterListSerializer,
    SpaceTenantSerializer,
)


# =============================================================================
# CUSTOM PAGINATION CLASS
# =============================================================================

class ShoppingCenterPagination(PageNumberPagination):
    """
    Pagination for Shopping Centers.

    Usage:
        GET /api/v1/shopping-centers/               -> 20 results (default)
        GET /api/v1/shopping-centers/?page_size=100 -> 100 results
        GET /api/v1/shopping-centers/?page_size=1000 -> 1000 results (max)
    """
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 1000


# =============================================================================
# SHOPPING CENTER VIEWSET
# =============================================================================

class ShoppingCenterViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for Shopping Centers.

    Supports:
    - List shopping centers (paginated, filterable, searchable)
    - Retrieve a shopping center
    - Tenant roster per center: /{id}/tenants/
    - Vacancy statistics per center: /{id}/vacancy-stats/
    """
    serializer_class = ShoppingCenterListSerializer
    pagination_class = ShoppingCenterPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = ShoppingCenterFilter

    search_fields = [
        'shopping_center_name',
        'address_city',
        'owner',
        'property_manager',
    ]

    ordering_fields = [
        'shopping_center_name',
        'address_city',
        'address_state',
        'total_gla',
        'created_at',
        'updated_at',
    ]
    ordering = ['shopping_center_name']

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ShoppingCenterDetailSerializer
        return ShoppingCenterListSerializer

    def get_queryset(self):
        return ShoppingCenter.objects.annotate(space_count=Count('spaces'))

    @action(detail=True, methods=['get'])
    def tenants(self, request, pk=None):
        """
        Tenant roster: one entry per space with its active lease.

        GET /api/v1/shopping-centers/{id}/tenants/
        """
        shopping_center = self.get_object()
        spaces = shopping_center.spaces.prefetch_related(
            Prefetch(
                'leases',
                queryset=Lease.objects.filter(is_active=True).select_related('tenant__category'),
                to_attr='active_leases',
            )
        )
        serializer = SpaceTenantSerializer(spaces, many=True)
        return Response({
            'shopping_center_id': shopping_center.id,
            'shopping_center_name': shopping_center.shopping_center_name,
            'count': len(serializer.data),
            'tenants': serializer.data,
        })

    @action(detail=True, methods=['get'], url_path='vacancy-stats')
    def vacancy_stats(self, request, pk=None):
        """
        Vacancy statistics for one center.

        GET /api/v1/shopping-centers/{id}/vacancy-stats/
        """
        shopping_center = self.get_object()
        stats = shopping_center.get_vacancy_stats()
        stats['shopping_center_id'] = shopping_center.id
        stats['shopping_center_name'] = shopping_center.shopping_center_name
        return Response(stats)
