"""
Import endpoints for CenterScope.

Handles CSV uploads and exposes the import batch history.
"""

import logging

from django.conf import settings
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from services import CSVParseError

from .models import ImportBatch
from .serializers import ImportBatchSerializer
from .services import build_import_service, import_with_batch

logger = logging.getLogger(__name__)

RECENT_BATCH_LIMIT = 50


class UploadRateThrottle(AnonRateThrottle):
    scope = 'upload'


def _error(error, details, http_status=status.HTTP_400_BAD_REQUEST, **extra):
    body = {'success': False, 'error': error, 'details': details}
    body.update(extra)
    return Response(body, status=http_status)


@api_view(['POST'])
@throttle_classes([UploadRateThrottle])
def upload_csv(request):
    """
    CSV upload endpoint.

    Request:
        POST /api/v1/imports/csv/
        Content-Type: multipart/form-data
        Body: file (CSV file)

    Response:
        {
            "success": true,
            "batch_id": "0b0c...",
            "message": "Import completed: 132 rows applied, 0 errors",
            "stats": {
                "shopping_centers_created": 5,
                "shopping_centers_updated": 0,
                "spaces_created": 127,
                "tenants_created": 98,
                "leases_created": 132,
                "geocoded_centers": 5,
                "center_types_processed": {"Community Center": 3, ...},
                "errors": 0,
                "sample_errors": [],
                ...
            }
        }

    Error Response (400):
        {
            "success": false,
            "error": "Error message",
            "details": "Additional error details"
        }

    Row-level problems never fail the request; they are reported in
    stats.errors and stats.sample_errors. Uploads are limited per client
    by THROTTLE_UPLOAD_RATE (429 once exceeded).
    """
    if 'file' not in request.FILES:
        return _error('No file provided', 'Please upload a CSV file using the "file" field')

    uploaded_file = request.FILES['file']

    if not uploaded_file.name.lower().endswith('.csv'):
        return _error('Invalid file type', 'Only CSV files are supported')

    max_bytes = settings.IMPORT_MAX_UPLOAD_BYTES
    if uploaded_file.size > max_bytes:
        return _error(
            'File too large',
            f'Maximum upload size is {max_bytes // (1024 * 1024)} MB'
        )

    try:
        content = uploaded_file.read().decode('utf-8-sig')
    except UnicodeDecodeError as e:
        return _error('Invalid CSV file', f'File is not UTF-8 encoded: {str(e)}')

    service = build_import_service()
    try:
        batch, stats = import_with_batch(service, content, uploaded_file.name, source='api')
    except CSVParseError as e:
        logger.warning(f"Rejected upload {uploaded_file.name}: {str(e)}")
        return _error('Invalid CSV file', str(e))

    return Response(
        {
            'success': True,
            'batch_id': str(batch.batch_id),
            'message': (
                f"Import completed: {stats['rows_processed']} rows applied, "
                f"{stats['errors']} errors"
            ),
            'stats': stats,
        },
        status=status.HTTP_200_OK
    )


@api_view(['GET'])
def list_batches(request):
    """Most recent import batches, newest first."""
    batches = ImportBatch.objects.all()[:RECENT_BATCH_LIMIT]
    serializer = ImportBatchSerializer(batches, many=True)
    return Response({'count': len(serializer.data), 'results': serializer.data})


@api_view(['GET'])
def batch_detail(request, batch_id):
    batch = get_object_or_404(ImportBatch, batch_id=batch_id)
    return Response(ImportBatchSerializer(batch).data)
