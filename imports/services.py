"""
CSV import reconciler for CenterScope.

Turns CSV rows into the canonical entity graph
(shopping center -> space -> tenant -> lease) through a storage backend.

Usage:
    from imports.services import run_import
    stats = run_import('path/to/file.csv')

    # or with an explicit backend and geocoder
    service = CSVImportService(InMemoryStorage(), geocoder=None)
    stats = service.import_content(text)

Rows are processed strictly in input order. A failing row is recorded in
the stats and skipped; only an unparsable file (CSVParseError) aborts.
"""

import csv
import io
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from django.conf import settings

from imports.models import ImportBatch
from properties.storage import BaseStorage, get_storage
from services import CSVParseError
from services.classifiers import (
    is_known_center_type,
    normalize_center_type,
    normalize_tenant_name,
)
from services.geocoding import get_geocoding_service
from services.keys import center_key, collapse_whitespace, tenant_key

logger = logging.getLogger(__name__)

REQUIRED_COLUMN = 'shopping_center_name'

# Free-text center fields merged as-is
CENTER_TEXT_FIELDS = (
    'address_street',
    'address_city',
    'address_state',
    'address_zip',
    'county',
    'municipality',
    'owner',
    'property_manager',
)

UNSPECIFIED_CENTER_TYPE = 'Unspecified'
MAX_ERROR_MESSAGE_LENGTH = 200
RENT_PER_AREA_PLACES = Decimal('0.0001')

TRUE_VALUES = ('true', 'yes', '1', 't', 'y', 'x')


# =============================================================================
# VALUE PARSING
# =============================================================================

def clean_value(row: dict, column: str) -> Optional[str]:
    """Trimmed cell value, or None when missing or blank."""
    value = row.get(column)
    if value is None:
        return None
    return str(value).strip() or None


def _numeric_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip().replace(',', '').replace('$', '')
    if text in ('', '.', '-'):
        return None
    return text


def parse_int(value) -> Optional[int]:
    """Parse a count such as '12,500'; unparsable or negative values are None."""
    text = _numeric_text(value)
    if text is None:
        return None
    try:
        number = int(Decimal(text))
    except (InvalidOperation, ValueError, OverflowError):
        return None
    return number if number >= 0 else None


def parse_decimal(value) -> Optional[Decimal]:
    """Parse a currency value such as '$1,250.50'; unparsable or negative values are None."""
    text = _numeric_text(value)
    if text is None:
        return None
    try:
        number = Decimal(text)
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number < 0:
        return None
    return number


def parse_boolean(value) -> bool:
    if not value:
        return False
    return str(value).lower().strip() in TRUE_VALUES


def rent_per_area(base_rent: Optional[Decimal], square_footage: Optional[int]) -> Optional[Decimal]:
    if base_rent is None or not square_footage or square_footage <= 0:
        return None
    return (base_rent / Decimal(square_footage)).quantize(RENT_PER_AREA_PLACES, rounding=ROUND_HALF_UP)


# =============================================================================
# IMPORT SERVICE
# =============================================================================

class CSVImportService:
    """
    Reconciles CSV rows into shopping centers, spaces, tenants and leases.

    The whole import runs inside storage.atomic() and every row inside
    storage.savepoint(). On a transactional store a failed row leaves no
    trace and its counters are discarded; on a non-transactional store its
    partial writes and counters are kept.
    """

    def __init__(self, storage: BaseStorage, geocoder=None, max_sample_errors: Optional[int] = None):
        self.storage = storage
        self.geocoder = geocoder
        if max_sample_errors is None:
            max_sample_errors = getattr(settings, 'IMPORT_MAX_SAMPLE_ERRORS', 10)
        self.max_sample_errors = max_sample_errors

    @property
    def geocoding_enabled(self) -> bool:
        return self.geocoder is not None and self.geocoder.is_configured

    # -------------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------------

    def import_file(self, path: str) -> dict:
        with open(path, 'r', encoding='utf-8-sig', newline='') as f:
            content = f.read()
        logger.info(f"Importing CSV file: {path}")
        return self.import_content(content)

    def import_content(self, content: str) -> dict:
        return self.import_rows(self.parse_csv(content))

    def parse_csv(self, content: str) -> List[Tuple[int, dict]]:
        """
        Parse CSV text into (line number, row) pairs.

        Raises:
            CSVParseError: no header, no shopping_center_name column, or
                malformed CSV structure
        """
        if content.startswith('\ufeff'):
            content = content[1:]

        # strict: an unterminated quote must fail instead of swallowing rows
        reader = csv.DictReader(io.StringIO(content, newline=''), strict=True)
        try:
            header = reader.fieldnames
            if not header:
                raise CSVParseError("CSV file is empty or has no header row")

            reader.fieldnames = [(name or '').strip() for name in header]
            if REQUIRED_COLUMN not in reader.fieldnames:
                raise CSVParseError(f"CSV header is missing the '{REQUIRED_COLUMN}' column")

            rows = []
            for row in reader:
                if all(not (value or '').strip() for key, value in row.items() if isinstance(value, str)):
                    continue
                rows.append((reader.line_num, row))
        except csv.Error as e:
            raise CSVParseError(f"Malformed CSV at line {reader.line_num}: {str(e)}") from e

        return rows

    def import_rows(self, rows: Iterable[Tuple[int, dict]]) -> dict:
        """
        Apply rows in order and return the import result payload.

        Row-level errors never escape this method.
        """
        stats = self._new_stats()
        created_keys = set()
        updated_keys = set()
        seen_centers = {}
        unrecognized = set()

        logger.info(
            f"Starting import ({type(self.storage).__name__}, "
            f"geocoding {'on' if self.geocoding_enabled else 'off'})"
        )

        with self.storage.atomic():
            for row_number, row in rows:
                outcome = self._new_outcome()
                try:
                    with self.storage.savepoint():
                        self._process_row(row, outcome)
                except Exception as e:
                    self._record_error(stats, row_number, e)
                    if self.storage.supports_transactions:
                        continue
                else:
                    stats['rows_processed'] += 1

                for counter in ('shopping_centers_created', 'spaces_created', 'tenants_created',
                                'leases_created', 'geocoded_centers'):
                    stats[counter] += outcome[counter]

                center = outcome['center']
                if center is not None:
                    seen_centers[center.name_key] = center
                    if outcome['shopping_centers_created']:
                        created_keys.add(center.name_key)
                    elif outcome['center_updated'] and center.name_key not in created_keys:
                        updated_keys.add(center.name_key)
                if outcome['unrecognized_center_type']:
                    unrecognized.add(outcome['unrecognized_center_type'])

        stats['shopping_centers_updated'] = len(updated_keys)
        for center in seen_centers.values():
            center_type = center.center_type or UNSPECIFIED_CENTER_TYPE
            tally = stats['center_types_processed']
            tally[center_type] = tally.get(center_type, 0) + 1
        stats['unrecognized_center_types'] = sorted(unrecognized)

        logger.info(
            f"Import complete: {stats['rows_processed']} rows applied, "
            f"{stats['shopping_centers_created']} centers created, "
            f"{stats['shopping_centers_updated']} updated, "
            f"{stats['leases_created']} leases, {stats['errors']} errors"
        )
        for value in stats['unrecognized_center_types']:
            logger.warning(f"Center type needs review: '{value}'")

        return stats

    # -------------------------------------------------------------------------
    # Row processing
    # -------------------------------------------------------------------------

    def _process_row(self, row: dict, outcome: dict):
        key = center_key(clean_value(row, REQUIRED_COLUMN))
        center = self._resolve_center(key, row, outcome)
        space = self._resolve_space(center, row, outcome)
        tenant = self._resolve_tenant(row, outcome)

        base_rent = parse_decimal(row.get('base_rent'))
        self.storage.supersede_lease(
            space,
            tenant,
            base_rent,
            rent_per_area(base_rent, space.square_footage),
        )
        outcome['leases_created'] += 1

    def _center_fields(self, row: dict, outcome: dict) -> dict:
        """Non-blank, parsable center values from a row."""
        fields = {}
        for column in CENTER_TEXT_FIELDS:
            value = clean_value(row, column)
            if value is not None:
                fields[column] = value

        center_type = normalize_center_type(clean_value(row, 'center_type'))
        if center_type is not None:
            fields['center_type'] = center_type
            if not is_known_center_type(center_type):
                outcome['unrecognized_center_type'] = center_type

        total_gla = parse_int(row.get('total_gla'))
        if total_gla is not None:
            fields['total_gla'] = total_gla

        place_id = clean_value(row, 'google_place_id')
        if place_id is not None:
            fields['google_place_id'] = place_id
        return fields

    def _resolve_center(self, key: str, row: dict, outcome: dict):
        fields = self._center_fields(row, outcome)
        center = self.storage.get_center(key)

        if center is None:
            fields['shopping_center_name'] = collapse_whitespace(row.get(REQUIRED_COLUMN))
            self._geocode_into(fields, outcome)
            center = self.storage.create_center(key, fields)
            outcome['shopping_centers_created'] += 1
        else:
            changes = {
                name: value for name, value in fields.items()
                if getattr(center, name) != value
            }
            if changes:
                center = self.storage.update_center(center, changes)
                outcome['center_updated'] = True

        outcome['center'] = center
        return center

    def _geocode_into(self, fields: dict, outcome: dict):
        if not self.geocoding_enabled:
            return
        if not fields.get('address_street') or not fields.get('address_city'):
            return

        result = self.geocoder.geocode(
            fields.get('address_street'),
            fields.get('address_city'),
            fields.get('address_state'),
            fields.get('address_zip'),
        )
        if result is None:
            return

        fields['latitude'] = result.latitude
        fields['longitude'] = result.longitude
        if result.place_id:
            fields['google_place_id'] = result.place_id
        outcome['geocoded_centers'] += 1

    def _resolve_space(self, center, row: dict, outcome: dict):
        suite = clean_value(row, 'tenant_suite_number')
        square_footage = parse_int(row.get('square_footage'))

        if suite is not None:
            space = self.storage.get_space(center, suite)
            if space is not None:
                if square_footage is not None and space.square_footage != square_footage:
                    space = self.storage.update_space(space, square_footage)
                return space

        space = self.storage.create_space(center, suite, square_footage)
        outcome['spaces_created'] += 1
        return space

    def _resolve_tenant(self, row: dict, outcome: dict):
        name, is_vacant = normalize_tenant_name(row.get('tenant_name'))
        key = tenant_key(name)

        category = None
        if not is_vacant:
            category_name = collapse_whitespace(row.get('retail_category'))
            if category_name:
                category, _ = self.storage.get_or_create_category(category_name)
        is_chain = parse_boolean(row.get('is_chain')) and not is_vacant

        tenant = self.storage.get_tenant(key)
        if tenant is None:
            tenant = self.storage.create_tenant(key, {
                'tenant_name': name,
                'is_vacant': is_vacant,
                'category': category,
                'is_national_chain': is_chain,
            })
            if not is_vacant:
                outcome['tenants_created'] += 1
            return tenant

        changes = {}
        if category is not None and tenant.category is None:
            changes['category'] = category
        if is_chain and not tenant.is_national_chain:
            changes['is_national_chain'] = True
        if changes:
            tenant = self.storage.update_tenant(tenant, changes)
        return tenant

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    @staticmethod
    def _new_stats() -> dict:
        return {
            'shopping_centers_created': 0,
            'shopping_centers_updated': 0,
            'spaces_created': 0,
            'tenants_created': 0,
            'leases_created': 0,
            'geocoded_centers': 0,
            'center_types_processed': {},
            'errors': 0,
            'sample_errors': [],
            'rows_processed': 0,
            'unrecognized_center_types': [],
        }

    @staticmethod
    def _new_outcome() -> dict:
        return {
            'shopping_centers_created': 0,
            'spaces_created': 0,
            'tenants_created': 0,
            'leases_created': 0,
            'geocoded_centers': 0,
            'center': None,
            'center_updated': False,
            'unrecognized_center_type': None,
        }

    def _record_error(self, stats: dict, row_number: int, error: Exception):
        message = str(error) or type(error).__name__
        stats['errors'] += 1
        if len(stats['sample_errors']) < self.max_sample_errors:
            stats['sample_errors'].append(f"Row {row_number}: {message[:MAX_ERROR_MESSAGE_LENGTH]}")
        logger.warning(f"Row {row_number} skipped: {message}")


# =============================================================================
# CONVENIENCE WRAPPERS
# =============================================================================

def build_import_service(storage: Optional[BaseStorage] = None, geocode: bool = True) -> CSVImportService:
    return CSVImportService(
        storage or get_storage(),
        geocoder=get_geocoding_service() if geocode else None,
    )


def run_import(csv_path: str, storage: Optional[BaseStorage] = None, geocode: bool = True) -> dict:
    """
    Import a CSV file with the configured storage backend.

    Raises:
        CSVParseError: if the file cannot be parsed
        FileNotFoundError: if the file does not exist
    """
    return build_import_service(storage, geocode).import_file(csv_path)


def import_with_batch(service: CSVImportService, content: str, file_name: str, source: str = 'api'):
    """
    Run an import and record it as an ImportBatch.

    Returns:
        (batch, stats)

    Raises:
        CSVParseError: after marking the batch as failed
    """
    batch = ImportBatch.objects.create(file_name=file_name[:255], source=source)
    batch.mark_as_processing()
    try:
        stats = service.import_content(content)
    except CSVParseError as e:
        batch.mark_as_failed(str(e))
        raise
    batch.mark_as_completed(stats)
    return batch, stats
