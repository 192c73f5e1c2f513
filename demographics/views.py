"""
Demographics endpoint.

GET /api/v1/demographics/{lat}/{lng}/{radius}/

Responds 400 for non-numeric or out-of-range input and 503 when no Census
API key is configured. Provider failures never surface as errors; they
produce the all-zero summary with block_groups_analyzed = 0.
"""

import logging
import math

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response

from services.demographics import DemographicsService

logger = logging.getLogger(__name__)

MAX_RADIUS_MILES = 100


def _parse_coordinate(value):
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"'{value}' is not a finite number")
    return number


@api_view(['GET'])
def demographics(request, lat, lng, radius):
    try:
        latitude = _parse_coordinate(lat)
        longitude = _parse_coordinate(lng)
        radius_miles = _parse_coordinate(radius)
    except ValueError:
        return Response(
            {'error': 'Invalid parameters', 'details': 'lat, lng and radius must be numbers'},
            status=status.HTTP_400_BAD_REQUEST
        )

    if not -90 <= latitude <= 90 or not -180 <= longitude <= 180:
        return Response(
            {'error': 'Invalid coordinates', 'details': 'lat must be within ±90 and lng within ±180'},
            status=status.HTTP_400_BAD_REQUEST
        )

    if not 0 < radius_miles <= MAX_RADIUS_MILES:
        return Response(
            {'error': 'Invalid radius', 'details': f'radius must be greater than 0 and at most {MAX_RADIUS_MILES} miles'},
            status=status.HTTP_400_BAD_REQUEST
        )

    if not settings.CENSUS_API_KEY:
        logger.warning("Demographics requested but CENSUS_API_KEY is not configured")
        return Response(
            {'error': 'Census API not configured', 'details': 'Set CENSUS_API_KEY to enable demographics'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    logger.info(f"Demographics request for ({latitude}, {longitude}) within {radius_miles} miles")
    service = DemographicsService()
    try:
        result = service.get_demographics(latitude, longitude, radius_miles)
    finally:
        service.close()
    return Response(result)
