"""
URL configuration for the centerscope project.

/admin/                                        - Django admin interface
/api/v1/health/                                - Health check
/api/v1/shopping-centers/                      - Shopping center read API
/api/v1/shopping-centers/{id}/tenants/         - Tenants by center
/api/v1/shopping-centers/{id}/vacancy-stats/   - Vacancy statistics
/api/v1/imports/                               - CSV import endpoints
/api/v1/demographics/{lat}/{lng}/{radius}/     - Census demographics around a point
"""

import logging

from django.conf import settings
from django.contrib import admin
from django.db import DatabaseError, connection
from django.http import JsonResponse
from django.urls import include, path
from django.utils import timezone
from django.views.decorators.cache import cache_control
from django.views.decorators.http import require_http_methods

logger = logging.getLogger(__name__)

API_VERSION = '1.1.0'


# =============================================================================
# HEALTH CHECK ENDPOINT
# =============================================================================

@require_http_methods(["GET"])
@cache_control(no_cache=True, must_revalidate=True, no_store=True)
def health_check(request):
    """
    Health check endpoint for deployment monitoring.

    Returns database connectivity, entity counts and whether the external
    providers are configured.
    """
    from properties.models import ShoppingCenter, Space

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")

        response_data = {
            "status": "healthy",
            "database": "connected",
            "timestamp": timezone.now().isoformat(),
            "shopping_centers": ShoppingCenter.objects.count(),
            "tenant_spaces": Space.objects.count(),
            "google_maps_configured": bool(settings.GOOGLE_MAPS_API_KEY),
            "census_api_configured": bool(settings.CENSUS_API_KEY),
        }
        return JsonResponse(response_data, status=200)

    except DatabaseError as e:
        logger.error(f"Health check failed: {str(e)}")
        error_response = {
            "status": "unhealthy",
            "database": "error",
            "error": str(e) if settings.DEBUG else "Database connection failed"
        }
        return JsonResponse(error_response, status=503)


# =============================================================================
# API INFO ENDPOINT
# =============================================================================

@require_http_methods(["GET"])
def api_info(request):
    """API information endpoint for frontend integration."""
    return JsonResponse({
        "message": "CenterScope API - shopping centers, tenants and demographics",
        "version": API_VERSION,
        "endpoints": [
            "GET /api/v1/shopping-centers/",
            "GET /api/v1/shopping-centers/{id}/",
            "GET /api/v1/shopping-centers/{id}/tenants/",
            "GET /api/v1/shopping-centers/{id}/vacancy-stats/",
            "GET /api/v1/demographics/{lat}/{lng}/{radius}/",
            "POST /api/v1/imports/csv/",
            "GET /api/v1/imports/batches/",
            "GET /api/v1/health/",
        ],
    })


urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/v1/health/', health_check, name='health-check'),
    path('api/v1/shopping-centers/', include('properties.urls')),
    path('api/v1/imports/', include('imports.urls')),
    path('api/v1/demographics/', include('demographics.urls')),

    path('api/v1/', api_info, name='api-root'),
    path('', api_info, name='api-info'),
]


def custom_404_handler(request, exception):
    """JSON 404 for API endpoints."""
    if request.path.startswith('/api/'):
        return JsonResponse({
            'error': 'API endpoint not found',
            'message': f'The requested endpoint {request.path} does not exist',
        }, status=404)

    from django.views.defaults import page_not_found
    return page_not_found(request, exception)


handler404 = custom_404_handler
