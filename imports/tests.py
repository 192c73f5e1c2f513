# ===== IMPORTS APP TEST SUITE =====
"""
Test suite for imports app functionality
File: imports/tests.py

Test Coverage:
- Value parsing helpers
- CSV parsing and structural errors
- Import reconciler against the in-memory and relational stores
- Geocoding on center creation
- ImportBatch lifecycle
- CSV upload and batch history endpoints
- import_csv management command
"""

import os
import shutil
import tempfile
import uuid
from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, TestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from properties.models import Lease, RetailCategory, ShoppingCenter, Space, Tenant
from properties.storage import DjangoStorage, InMemoryStorage
from services import CSVParseError, StorageError
from services.geocoding import GeocodeResult, GeocodingService

from .models import ImportBatch
from .services import (
    CSVImportService,
    import_with_batch,
    parse_boolean,
    parse_decimal,
    parse_int,
    rent_per_area,
)
from .views import UploadRateThrottle

HEADER = (
    'shopping_center_name,center_type,address_street,address_city,address_state,'
    'address_zip,total_gla,tenant_name,tenant_suite_number,square_footage,'
    'retail_category,base_rent,is_chain\n'
)

SAMPLE_CSV = HEADER + (
    'Concord Mall,strip mall,4737 Concord Pike,Wilmington,DE,19803,"750,000",'
    'Starbucks,101,1000,Coffee Shop,"$2,500.00",yes\n'
    'concord  mall,,,,,,,Vacant - Drive-Thru,102,500,Restaurant | Fast Food,,\n'
    'Dover Commons,Bespoke Mixed-Use,,Dover,DE,,,Starbucks,A,1200,Coffee Shop,3000,\n'
)


def no_geocoding_service():
    return GeocodingService(api_key='')


# =============================================================================
# VALUE PARSING TESTS
# =============================================================================

class ValueParsingTest(SimpleTestCase):

    def test_parse_int(self):
        self.assertEqual(parse_int('12,500'), 12500)
        self.assertEqual(parse_int(' 800 '), 800)
        self.assertEqual(parse_int('1200.0'), 1200)
        self.assertIsNone(parse_int(''))
        self.assertIsNone(parse_int('n/a'))
        self.assertIsNone(parse_int('-5'))
        self.assertIsNone(parse_int(None))

    def test_parse_decimal(self):
        self.assertEqual(parse_decimal('$1,250.50'), Decimal('1250.50'))
        self.assertEqual(parse_decimal('3000'), Decimal('3000'))
        self.assertIsNone(parse_decimal('call for pricing'))
        self.assertIsNone(parse_decimal('-10'))
        self.assertIsNone(parse_decimal('NaN'))

    def test_parse_boolean(self):
        for value in ('true', 'Yes', '1', 'T', 'y', 'X'):
            self.assertTrue(parse_boolean(value), value)
        for value in ('', None, 'no', 'false', '0'):
            self.assertFalse(parse_boolean(value), value)

    def test_rent_per_area(self):
        self.assertEqual(rent_per_area(Decimal('2500'), 1000), Decimal('2.5000'))
        self.assertEqual(rent_per_area(Decimal('1000'), 3), Decimal('333.3333'))
        self.assertEqual(rent_per_area(Decimal('2'), 3), Decimal('0.6667'))
        self.assertIsNone(rent_per_area(None, 1000))
        self.assertIsNone(rent_per_area(Decimal('2500'), 0))
        self.assertIsNone(rent_per_area(Decimal('2500'), None))


# =============================================================================
# CSV PARSING TESTS
# =============================================================================

class CSVParsingTest(SimpleTestCase):

    def setUp(self):
        self.service = CSVImportService(InMemoryStorage())

    def test_empty_file(self):
        with self.assertRaises(CSVParseError):
            self.service.parse_csv('')

    def test_missing_required_column(self):
        with self.assertRaises(CSVParseError):
            self.service.parse_csv('name,tenant_name\nConcord Mall,Starbucks\n')

    def test_header_is_trimmed_and_bom_stripped(self):
        rows = self.service.parse_csv('\ufeff shopping_center_name , tenant_name\nConcord Mall,Starbucks\n')
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][1]['shopping_center_name'], 'Concord Mall')

    def test_blank_rows_are_skipped(self):
        rows = self.service.parse_csv('shopping_center_name,tenant_name\n,\nConcord Mall,Starbucks\n')
        self.assertEqual([number for number, row in rows], [3])

    def test_parse_error_aborts_before_writes(self):
        storage = InMemoryStorage()
        with self.assertRaises(CSVParseError):
            CSVImportService(storage).import_content('tenant_name\nStarbucks\n')
        self.assertEqual(storage.summary()['shopping_centers'], 0)

    def test_unterminated_quote_aborts_import(self):
        storage = InMemoryStorage()
        content = (
            'shopping_center_name,tenant_name,tenant_suite_number\n'
            'Concord Mall,"Starbucks,1\n'
            'Concord Mall,Target,2\n'
            'Concord Mall,Gap,3\n'
        )
        with self.assertRaises(CSVParseError):
            CSVImportService(storage).import_content(content)
        self.assertEqual(storage.summary()['shopping_centers'], 0)


# =============================================================================
# RECONCILER TESTS - IN-MEMORY STORE
# =============================================================================

class InMemoryImportTest(SimpleTestCase):

    def setUp(self):
        self.storage = InMemoryStorage()
        self.service = CSVImportService(self.storage)

    def test_import_stats(self):
        stats = self.service.import_content(SAMPLE_CSV)

        self.assertEqual(stats['rows_processed'], 3)
        self.assertEqual(stats['shopping_centers_created'], 2)
        self.assertEqual(stats['shopping_centers_updated'], 0)
        self.assertEqual(stats['spaces_created'], 3)
        self.assertEqual(stats['tenants_created'], 1)
        self.assertEqual(stats['leases_created'], 3)
        self.assertEqual(stats['geocoded_centers'], 0)
        self.assertEqual(stats['errors'], 0)
        self.assertEqual(stats['sample_errors'], [])
        self.assertEqual(stats['center_types_processed'], {
            'Strip/Convenience': 1,
            'Bespoke Mixed-Use': 1,
        })
        self.assertEqual(stats['unrecognized_center_types'], ['Bespoke Mixed-Use'])

    def test_entity_graph(self):
        self.service.import_content(SAMPLE_CSV)

        concord = self.storage.get_center('concord mall')
        self.assertEqual(concord.shopping_center_name, 'Concord Mall')
        self.assertEqual(concord.total_gla, 750000)
        self.assertEqual(concord.center_type, 'Strip/Convenience')

        starbucks = self.storage.get_tenant('starbucks')
        self.assertTrue(starbucks.is_national_chain)
        self.assertEqual(starbucks.category.major_group, 'food_beverage')

        vacant = self.storage.get_tenant('vacant (drive-thru)')
        self.assertTrue(vacant.is_vacant)
        self.assertIsNone(vacant.category)
        # no category is created for vacant rows
        self.assertEqual(list(self.storage.categories), ['Coffee Shop'])

        lease = self.storage.active_leases(self.storage.get_space(concord, '101'))[0]
        self.assertEqual(lease.base_rent, Decimal('2500.00'))
        self.assertEqual(lease.rent_per_area, Decimal('2.5000'))

    def test_reimport_is_idempotent(self):
        self.service.import_content(SAMPLE_CSV)
        stats = self.service.import_content(SAMPLE_CSV)

        self.assertEqual(stats['shopping_centers_created'], 0)
        self.assertEqual(stats['shopping_centers_updated'], 0)
        self.assertEqual(stats['spaces_created'], 0)
        self.assertEqual(stats['tenants_created'], 0)
        self.assertEqual(stats['leases_created'], 3)

        summary = self.storage.summary()
        self.assertEqual(summary['shopping_centers'], 2)
        self.assertEqual(summary['tenants'], 2)
        self.assertEqual(summary['spaces'], 3)
        self.assertEqual(summary['leases'], 6)
        self.assertEqual(summary['active_leases'], 3)

    def test_blank_values_never_clear_fields(self):
        self.service.import_content(SAMPLE_CSV)
        stats = self.service.import_content(
            'shopping_center_name,total_gla,address_city,tenant_name\n'
            'Concord Mall,,,Starbucks\n'
        )

        concord = self.storage.get_center('concord mall')
        self.assertEqual(concord.total_gla, 750000)
        self.assertEqual(concord.address_city, 'Wilmington')
        self.assertEqual(stats['shopping_centers_updated'], 0)

    def test_updated_centers_are_counted_once(self):
        self.service.import_content(SAMPLE_CSV)
        stats = self.service.import_content(
            'shopping_center_name,owner\n'
            'Concord Mall,Brixmor\n'
            'CONCORD MALL,Brixmor Property Group\n'
            'Dover Commons,\n'
        )

        self.assertEqual(stats['shopping_centers_updated'], 1)
        self.assertEqual(self.storage.get_center('concord mall').owner, 'Brixmor Property Group')

    def test_centers_created_in_the_same_import_are_not_updated(self):
        stats = self.service.import_content(
            'shopping_center_name,owner\n'
            'Concord Mall,\n'
            'Concord Mall,Brixmor\n'
        )
        self.assertEqual(stats['shopping_centers_created'], 1)
        self.assertEqual(stats['shopping_centers_updated'], 0)

    def test_suite_dedup_and_footage_overwrite(self):
        stats = self.service.import_content(
            'shopping_center_name,tenant_suite_number,square_footage,tenant_name\n'
            'Concord Mall,101,1000,Starbucks\n'
            'Concord Mall,101,1100,Panera Bread\n'
            'Concord Mall,101,,Chipotle\n'
        )

        self.assertEqual(stats['spaces_created'], 1)
        space = self.storage.get_space(self.storage.get_center('concord mall'), '101')
        self.assertEqual(space.square_footage, 1100)
        active = self.storage.active_leases(space)
        self.assertEqual(len(active), 1)
        self.assertEqual(active[0].tenant.tenant_name, 'Chipotle')

    def test_rows_without_suite_always_create_spaces(self):
        stats = self.service.import_content(
            'shopping_center_name,tenant_name\n'
            'Concord Mall,Vacant\n'
            'Concord Mall,Vacant\n'
        )
        self.assertEqual(stats['spaces_created'], 2)
        self.assertEqual(stats['tenants_created'], 0)
        self.assertEqual(self.storage.summary()['active_leases'], 2)

    def test_existing_tenant_gains_category_and_chain_flag(self):
        stats = self.service.import_content(
            'shopping_center_name,tenant_name,retail_category,is_chain\n'
            'Concord Mall,Target,,\n'
            'Dover Commons,target,Discount Store,x\n'
        )

        self.assertEqual(stats['tenants_created'], 1)
        target = self.storage.get_tenant('target')
        self.assertEqual(target.tenant_name, 'Target')
        self.assertEqual(target.category.name, 'Discount Store')
        self.assertTrue(target.is_national_chain)

    def test_vacancy_placeholder_is_never_a_chain(self):
        self.service.import_content(
            'shopping_center_name,tenant_name,tenant_suite_number,is_chain\n'
            'Concord Mall,,101,yes\n'
            'Concord Mall,Vacant - Drive-Thru,102,true\n'
        )

        self.assertFalse(self.storage.get_tenant('vacant').is_national_chain)
        self.assertFalse(self.storage.get_tenant('vacant (drive-thru)').is_national_chain)

    def test_row_errors_do_not_abort(self):
        stats = self.service.import_content(
            'shopping_center_name,tenant_name\n'
            'Concord Mall,Starbucks\n'
            '  ,Orphan\n'
            'Dover Commons,Target\n'
        )

        self.assertEqual(stats['rows_processed'], 2)
        self.assertEqual(stats['shopping_centers_created'], 2)
        self.assertEqual(stats['errors'], 1)
        self.assertEqual(stats['sample_errors'], ['Row 3: shopping_center_name is required'])

    def test_sample_errors_are_bounded(self):
        service = CSVImportService(self.storage, max_sample_errors=2)
        stats = service.import_content('shopping_center_name,tenant_name\n,A\n,B\n,C\n')

        self.assertEqual(stats['errors'], 3)
        self.assertEqual(len(stats['sample_errors']), 2)

    def test_failed_row_keeps_partial_writes(self):
        with patch.object(self.storage, 'supersede_lease', side_effect=StorageError('disk full')):
            stats = self.service.import_content('shopping_center_name,tenant_name\nConcord Mall,Starbucks\n')

        self.assertEqual(stats['errors'], 1)
        self.assertEqual(stats['shopping_centers_created'], 1)
        self.assertEqual(self.storage.summary()['shopping_centers'], 1)
        self.assertIn('disk full', stats['sample_errors'][0])

    def test_long_error_messages_are_truncated(self):
        with patch.object(self.storage, 'supersede_lease', side_effect=StorageError('x' * 500)):
            stats = self.service.import_content('shopping_center_name\nConcord Mall\n')
        self.assertEqual(stats['sample_errors'][0], 'Row 2: ' + 'x' * 200)


# =============================================================================
# RECONCILER TESTS - GEOCODING
# =============================================================================

class ImportGeocodingTest(SimpleTestCase):

    def setUp(self):
        self.geocoder = Mock()
        self.geocoder.is_configured = True
        self.geocoder.geocode.return_value = GeocodeResult(
            Decimal('39.8170000'), Decimal('-75.5430000'), 'place-123'
        )
        self.storage = InMemoryStorage()
        self.service = CSVImportService(self.storage, geocoder=self.geocoder)

    def test_new_centers_are_geocoded_once(self):
        stats = self.service.import_content(SAMPLE_CSV)

        # Dover Commons has no street address
        self.geocoder.geocode.assert_called_once_with('4737 Concord Pike', 'Wilmington', 'DE', '19803')
        self.assertEqual(stats['geocoded_centers'], 1)

        concord = self.storage.get_center('concord mall')
        self.assertEqual(concord.latitude, Decimal('39.8170000'))
        self.assertEqual(concord.google_place_id, 'place-123')

    def test_failed_geocode_is_not_an_error(self):
        self.geocoder.geocode.return_value = None

        stats = self.service.import_content(SAMPLE_CSV)

        self.assertEqual(stats['geocoded_centers'], 0)
        self.assertEqual(stats['errors'], 0)
        self.assertIsNone(self.storage.get_center('concord mall').latitude)

    def test_unconfigured_geocoder_is_skipped(self):
        self.geocoder.is_configured = False
        self.service.import_content(SAMPLE_CSV)
        self.geocoder.geocode.assert_not_called()


# =============================================================================
# RECONCILER TESTS - RELATIONAL STORE
# =============================================================================

class DatabaseImportTest(TestCase):

    def setUp(self):
        self.service = CSVImportService(DjangoStorage())

    def test_import_creates_models(self):
        stats = self.service.import_content(SAMPLE_CSV)

        self.assertEqual(stats['errors'], 0)
        self.assertEqual(ShoppingCenter.objects.count(), 2)
        self.assertEqual(Space.objects.count(), 3)
        self.assertEqual(Tenant.objects.count(), 2)
        self.assertEqual(RetailCategory.objects.count(), 1)
        self.assertEqual(Lease.objects.filter(is_active=True).count(), 3)

        lease = Lease.objects.get(space__suite_number='101')
        self.assertEqual(lease.tenant.tenant_name, 'Starbucks')
        self.assertEqual(lease.rent_per_area, Decimal('2.5000'))

    def test_reimport_is_idempotent(self):
        self.service.import_content(SAMPLE_CSV)
        stats = self.service.import_content(SAMPLE_CSV)

        self.assertEqual(stats['shopping_centers_created'], 0)
        self.assertEqual(stats['tenants_created'], 0)
        self.assertEqual(ShoppingCenter.objects.count(), 2)
        self.assertEqual(Tenant.objects.count(), 2)
        self.assertEqual(Lease.objects.count(), 6)
        for space in Space.objects.all():
            self.assertEqual(space.leases.filter(is_active=True).count(), 1)

    def test_blank_total_gla_does_not_clear(self):
        self.service.import_content(SAMPLE_CSV)
        self.service.import_content('shopping_center_name,total_gla\nConcord Mall,\n')

        self.assertEqual(ShoppingCenter.objects.get(name_key='concord mall').total_gla, 750000)

    def test_failed_row_is_rolled_back(self):
        with patch.object(DjangoStorage, 'supersede_lease', side_effect=StorageError('lock timeout')):
            stats = self.service.import_content(
                'shopping_center_name,tenant_name\nConcord Mall,Starbucks\n'
            )

        self.assertEqual(stats['errors'], 1)
        self.assertEqual(stats['shopping_centers_created'], 0)
        self.assertEqual(stats['rows_processed'], 0)
        self.assertEqual(ShoppingCenter.objects.count(), 0)
        self.assertEqual(Tenant.objects.count(), 0)

    def test_good_rows_survive_a_bad_row(self):
        stats = self.service.import_content(
            'shopping_center_name,tenant_name,tenant_suite_number\n'
            'Concord Mall,Starbucks,101\n'
            ',Orphan,102\n'
            'Concord Mall,Panera Bread,103\n'
        )

        self.assertEqual(stats['errors'], 1)
        self.assertEqual(Space.objects.count(), 2)
        self.assertEqual(stats['spaces_created'], 2)


# =============================================================================
# IMPORT BATCH TESTS
# =============================================================================

class ImportBatchTest(TestCase):

    def test_completed_batch(self):
        service = CSVImportService(DjangoStorage())
        batch, stats = import_with_batch(service, SAMPLE_CSV, 'centers.csv', source='cli')

        batch.refresh_from_db()
        self.assertEqual(batch.status, 'completed')
        self.assertEqual(batch.source, 'cli')
        self.assertEqual(batch.stats['shopping_centers_created'], 2)
        self.assertIsNotNone(batch.processing_duration)

    def test_failed_batch(self):
        service = CSVImportService(DjangoStorage())
        with self.assertRaises(CSVParseError):
            import_with_batch(service, 'tenant_name\nStarbucks\n', 'bad.csv')

        batch = ImportBatch.objects.get(file_name='bad.csv')
        self.assertEqual(batch.status, 'failed')
        self.assertIn('shopping_center_name', batch.error_message)

    def test_pending_batch_has_no_duration(self):
        batch = ImportBatch.objects.create(file_name='pending.csv')
        self.assertIsNone(batch.processing_duration)
        self.assertEqual(str(batch), 'pending.csv (pending)')


# =============================================================================
# API TESTS
# =============================================================================

@patch('imports.services.get_geocoding_service', side_effect=no_geocoding_service)
class CSVUploadAPITest(APITestCase):

    def setUp(self):
        cache.clear()

    def upload(self, content, name='centers.csv'):
        if isinstance(content, str):
            content = content.encode('utf-8')
        upload = SimpleUploadedFile(name, content, content_type='text/csv')
        return self.client.post(reverse('upload-csv'), {'file': upload}, format='multipart')

    def test_upload_success(self, mock_geocoder):
        response = self.upload(SAMPLE_CSV)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['stats']['shopping_centers_created'], 2)
        self.assertEqual(response.data['stats']['leases_created'], 3)
        self.assertEqual(ShoppingCenter.objects.count(), 2)

        batch = ImportBatch.objects.get(batch_id=response.data['batch_id'])
        self.assertEqual(batch.status, 'completed')
        self.assertEqual(batch.source, 'api')

    def test_row_errors_still_succeed(self, mock_geocoder):
        response = self.upload('shopping_center_name,tenant_name\n,Orphan\nConcord Mall,Starbucks\n')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['errors'], 1)
        self.assertEqual(len(response.data['stats']['sample_errors']), 1)

    def test_utf8_bom_upload(self, mock_geocoder):
        response = self.upload('\ufeffshopping_center_name\nConcord Mall\n'.encode('utf-8'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(ShoppingCenter.objects.filter(name_key='concord mall').exists())

    def test_no_file(self, mock_geocoder):
        response = self.client.post(reverse('upload-csv'), {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'No file provided')

    def test_wrong_extension(self, mock_geocoder):
        response = self.upload(SAMPLE_CSV, name='centers.xlsx')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid file type')

    @override_settings(IMPORT_MAX_UPLOAD_BYTES=16)
    def test_file_too_large(self, mock_geocoder):
        response = self.upload(SAMPLE_CSV)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'File too large')

    def test_not_utf8(self, mock_geocoder):
        response = self.upload(b'shopping_center_name\n\xff\xfeCaf\xe9\n')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid CSV file')

    def test_missing_required_column(self, mock_geocoder):
        response = self.upload('name,tenant_name\nConcord Mall,Starbucks\n')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])
        self.assertEqual(ShoppingCenter.objects.count(), 0)
        self.assertEqual(ImportBatch.objects.get().status, 'failed')

    def test_uploads_are_rate_limited(self, mock_geocoder):
        with patch.object(UploadRateThrottle, 'THROTTLE_RATES', {'upload': '1/hour'}):
            first = self.upload(SAMPLE_CSV)
            second = self.upload(SAMPLE_CSV)

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(ImportBatch.objects.count(), 1)


@patch('imports.services.get_geocoding_service', side_effect=no_geocoding_service)
class ImportBatchAPITest(APITestCase):

    def setUp(self):
        cache.clear()

    def test_list_and_detail(self, mock_geocoder):
        upload = SimpleUploadedFile('centers.csv', SAMPLE_CSV.encode('utf-8'), content_type='text/csv')
        batch_id = self.client.post(reverse('upload-csv'), {'file': upload}, format='multipart').data['batch_id']

        response = self.client.get(reverse('import-batches'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['file_name'], 'centers.csv')

        response = self.client.get(reverse('import-batch-detail', args=[batch_id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'completed')
        self.assertEqual(response.data['stats']['spaces_created'], 3)

    def test_unknown_batch(self, mock_geocoder):
        response = self.client.get(reverse('import-batch-detail', args=[uuid.uuid4()]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# =============================================================================
# MANAGEMENT COMMAND TESTS
# =============================================================================

class ImportCSVCommandTest(TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.csv_path = os.path.join(self.tmp_dir, 'centers.csv')
        with open(self.csv_path, 'w', encoding='utf-8') as f:
            f.write(SAMPLE_CSV)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir)

    def test_import(self):
        out = StringIO()
        call_command('import_csv', self.csv_path, '--no-geocode', stdout=out)

        self.assertEqual(ShoppingCenter.objects.count(), 2)
        batch = ImportBatch.objects.get()
        self.assertEqual(batch.source, 'cli')
        self.assertEqual(batch.file_name, 'centers.csv')
        self.assertIn('Shopping centers created:  2', out.getvalue())
        self.assertIn('Bespoke Mixed-Use', out.getvalue())

    def test_dry_run_writes_nothing(self):
        out = StringIO()
        call_command('import_csv', self.csv_path, '--dry-run', stdout=out)

        self.assertEqual(ShoppingCenter.objects.count(), 0)
        self.assertEqual(ImportBatch.objects.count(), 0)
        self.assertIn('In-memory store', out.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_csv', os.path.join(self.tmp_dir, 'missing.csv'), stdout=StringIO())

    def test_unparsable_file(self):
        bad_path = os.path.join(self.tmp_dir, 'bad.csv')
        with open(bad_path, 'w', encoding='utf-8') as f:
            f.write('tenant_name\nStarbucks\n')

        with self.assertRaises(CommandError):
            call_command('import_csv', bad_path, '--no-geocode', stdout=StringIO())
        self.assertEqual(ImportBatch.objects.get().status, 'failed')
