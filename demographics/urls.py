"""
URL configuration for demographics app.

Endpoints:
    GET /api/v1/demographics/{lat}/{lng}/{radius}/ - Census summary around a point
"""

from django.urls import path

from . import views

urlpatterns = [
    path('<str:lat>/<str:lng>/<str:radius>/', views.demographics, name='demographics'),
]
