"""
URL configuration for properties app.

Included by the project URLs at /api/v1/shopping-centers/:

- /                       - Shopping center list (GET)
- /{id}/                  - Shopping center detail (GET)
- /{id}/tenants/          - Tenant roster for a center (GET)
- /{id}/vacancy-stats/    - Vacancy statistics for a center (GET)

URL names: 'shopping-center-list', 'shopping-center-detail',
'shopping-center-tenants', 'shopping-center-vacancy-stats'.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import ShoppingCenterViewSet

router = SimpleRouter()
router.register(r'', ShoppingCenterViewSet, basename='shopping-center')

urlpatterns = [
    path('', include(router.urls)),
]
