"""
URL configuration for imports app.

Endpoints:
    POST /api/v1/imports/csv/                 - Upload and process CSV file
    GET  /api/v1/imports/batches/             - Recent import batches
    GET  /api/v1/imports/batches/{batch_id}/  - One import batch
"""

from django.urls import path

from . import views

urlpatterns = [
    path('csv/', views.upload_csv, name='upload-csv'),
    path('batches/', views.list_batches, name='import-batches'),
    path('batches/<uuid:batch_id>/', views.batch_detail, name='import-batch-detail'),
]
