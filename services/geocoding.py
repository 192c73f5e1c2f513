# services/geocoding.py
"""
Google Maps Geocoding Service for the CenterScope backend.
Converts shopping center addresses to lat/lng coordinates.

Geocoding is best-effort enrichment: every failure is logged and surfaces
as None, never as an exception to the caller.
"""

import logging
import threading
import time
from decimal import Decimal
from typing import NamedTuple, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

# Providers throttle bursts; never call more often than this
MIN_RATE_LIMIT_DELAY = 0.1


class GeocodeResult(NamedTuple):
    latitude: Decimal
    longitude: Decimal
    place_id: Optional[str]


def format_address(*parts) -> str:
    """Join the non-blank address components with commas."""
    return ', '.join(str(p).strip() for p in parts if p and str(p).strip())


class GeocodingService:
    """
    Service for geocoding addresses using Google Maps Geocoding API.
    Handles rate limiting, error handling, and coordinate extraction.

    The minimum interval between outgoing requests is enforced here, under
    a lock, so any loop calling geocode() is rate limited.
    """

    base_url = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, api_key=None, rate_limit_delay=None, timeout=10):
        if api_key is None:
            api_key = getattr(settings, 'GOOGLE_MAPS_API_KEY', '')
        if rate_limit_delay is None:
            rate_limit_delay = getattr(settings, 'GEOCODING_RATE_LIMIT_DELAY', 0.2)

        self.api_key = api_key or None
        self.rate_limit_delay = max(float(rate_limit_delay), MIN_RATE_LIMIT_DELAY)
        self.timeout = timeout

        self._lock = threading.Lock()
        self._last_request_at = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _wait_for_slot(self):
        with self._lock:
            if self._last_request_at is not None:
                elapsed = time.monotonic() - self._last_request_at
                if elapsed < self.rate_limit_delay:
                    time.sleep(self.rate_limit_delay - elapsed)
            self._last_request_at = time.monotonic()

    def geocode(self, street=None, city=None, state=None, zip_code=None) -> Optional[GeocodeResult]:
        """
        Geocode an address given as components.

        Returns:
            GeocodeResult or None if geocoding fails
        """
        return self.geocode_address(format_address(street, city, state, zip_code))

    def geocode_address(self, address: str) -> Optional[GeocodeResult]:
        """
        Geocode a single address string.

        Args:
            address: Full address string (e.g., "1234 Main St, Wilmington, DE 19801")

        Returns:
            GeocodeResult or None if geocoding fails
        """
        if not self.api_key:
            logger.debug("Skipping geocoding: GOOGLE_MAPS_API_KEY not configured")
            return None

        if not address or not address.strip():
            logger.warning("Cannot geocode: Empty address provided")
            return None

        self._wait_for_slot()

        try:
            params = {
                'address': address,
                'key': self.api_key
            }

            response = requests.get(self.base_url, params=params, timeout=self.timeout)
            response.raise_for_status()

            data = response.json()
            status = data.get('status')

            if status == 'OK' and len(data['results']) > 0:
                result = data['results'][0]
                location = result['geometry']['location']
                lat = Decimal(str(location['lat'])).quantize(Decimal('0.0000001'))
                lng = Decimal(str(location['lng'])).quantize(Decimal('0.0000001'))

                logger.info(f"Successfully geocoded: {address} -> ({lat}, {lng})")
                return GeocodeResult(lat, lng, result.get('place_id'))

            elif status == 'ZERO_RESULTS':
                logger.warning(f"No results found for address: {address}")
                return None

            elif status == 'OVER_QUERY_LIMIT':
                logger.error("Google Maps API query limit exceeded")
                return None

            else:
                logger.warning(f"Geocoding failed with status: {status} for address: {address}")
                return None

        except requests.RequestException as e:
            logger.error(f"Network error during geocoding: {str(e)}")
            return None

        except (KeyError, ValueError, TypeError, ArithmeticError) as e:
            logger.error(f"Error parsing geocoding response: {str(e)}")
            return None

    def geocode_shopping_center(self, shopping_center, force=False) -> bool:
        """
        Geocode a ShoppingCenter model instance and update its coordinates.

        Returns:
            True if the center has coordinates afterwards, False otherwise
        """
        if shopping_center.has_coordinates and not force:
            logger.info(f"Skipping already geocoded property: {shopping_center.shopping_center_name}")
            return True

        address = shopping_center.get_full_address()
        if not address:
            logger.warning(f"Cannot geocode {shopping_center.shopping_center_name}: No address information")
            return False

        result = self.geocode_address(address)
        if result is None:
            return False

        shopping_center.latitude = result.latitude
        shopping_center.longitude = result.longitude
        update_fields = ['latitude', 'longitude', 'updated_at']
        if result.place_id and not shopping_center.google_place_id:
            shopping_center.google_place_id = result.place_id
            update_fields.append('google_place_id')
        shopping_center.save(update_fields=update_fields)

        logger.info(f"Updated coordinates for {shopping_center.shopping_center_name}")
        return True

    def batch_geocode_shopping_centers(self, queryset, delay: float = None, force=False) -> dict:
        """
        Geocode multiple shopping centers.

        Args:
            queryset: QuerySet of ShoppingCenter objects to geocode
            delay: Optional extra pause between requests (seconds), on top of
                the built-in rate limit
            force: Re-geocode centers that already have coordinates

        Returns:
            Dictionary with success/failure counts and failed ids
        """
        results = {
            'total': queryset.count(),
            'success': 0,
            'skipped': 0,
            'failed': 0,
            'failed_ids': []
        }

        logger.info(f"Starting batch geocoding of {results['total']} properties")

        for shopping_center in queryset:
            if shopping_center.has_coordinates and not force:
                results['skipped'] += 1
                continue

            if self.geocode_shopping_center(shopping_center, force=force):
                results['success'] += 1
            else:
                results['failed'] += 1
                results['failed_ids'].append(shopping_center.id)

            if delay:
                time.sleep(delay)

        logger.info(
            f"Batch geocoding complete: {results['success']} success, "
            f"{results['skipped']} skipped, {results['failed']} failed"
        )

        return results


_default_service = None
_default_service_lock = threading.Lock()


def get_geocoding_service() -> GeocodingService:
    """Process-wide geocoder, created on first use so settings are loaded."""
    global _default_service
    with _default_service_lock:
        if _default_service is None:
            _default_service = GeocodingService()
        return _default_service


def geocode_address(address: str) -> Optional[GeocodeResult]:
    """Geocode a preformatted address with the process-wide service."""
    return get_geocoding_service().geocode_address(address)
