# ===== SERVICES LAYER TEST SUITE =====
"""
Test suite for the services layer
File: services/tests.py

Test Coverage:
- Identity keys for centers, spaces and tenants
- Center type, tenant name and retail category classifiers
- Google Maps geocoding adapter (mocked HTTP)
- Census client (mocked session)
- Demographics aggregation and fan-out
"""

from decimal import Decimal
from unittest.mock import Mock, patch

import requests
from django.test import SimpleTestCase, TestCase, override_settings

from properties.models import ShoppingCenter

from . import EnrichmentError, PartialDataError, RowValidationError
from .census import BLOCK_GROUP_FIELDS, BlockGroup, CensusArea, CensusClient, parse_count
from .classifiers import (
    CENTER_TYPES,
    DEFAULT_MAJOR_GROUP,
    is_known_center_type,
    major_group_for_category,
    normalize_center_type,
    normalize_tenant_name,
)
from .demographics import (
    DemographicsService,
    aggregate_demographics,
    empty_demographics,
    percentage,
    weighted_median_income,
)
from .geocoding import GeocodeResult, GeocodingService, format_address
from .keys import center_key, collapse_whitespace, space_key, tenant_key


def make_unit(**counts):
    """Block group counts with every field present, zero unless given."""
    unit = {field: 0 for field in BLOCK_GROUP_FIELDS}
    unit.update(counts)
    return unit


def mock_response(payload):
    response = Mock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


# =============================================================================
# IDENTITY KEY TESTS
# =============================================================================

class KeyTest(SimpleTestCase):

    def test_center_key_ignores_case_and_whitespace(self):
        self.assertEqual(center_key('  Plaza   at the Park '), 'plaza at the park')
        self.assertEqual(center_key('PLAZA AT THE PARK'), center_key('plaza\tat  the park'))

    def test_center_key_requires_a_name(self):
        with self.assertRaises(RowValidationError):
            center_key('   ')
        with self.assertRaises(RowValidationError):
            center_key(None)

    def test_space_key(self):
        self.assertEqual(space_key('plaza', ' 101 '), 'plaza::101')
        self.assertIsNone(space_key('plaza', ''))
        self.assertIsNone(space_key('plaza', None))

    def test_tenant_key(self):
        self.assertEqual(tenant_key('Vacant (Drive-Thru)'), 'vacant (drive-thru)')
        self.assertEqual(tenant_key(' Panera  Bread '), tenant_key('panera bread'))

    def test_collapse_whitespace(self):
        self.assertEqual(collapse_whitespace(None), '')
        self.assertEqual(collapse_whitespace(' a \n b '), 'a b')


# =============================================================================
# CLASSIFIER TESTS
# =============================================================================

class CenterTypeClassifierTest(SimpleTestCase):

    def test_blank_is_none(self):
        self.assertIsNone(normalize_center_type(''))
        self.assertIsNone(normalize_center_type('   '))
        self.assertIsNone(normalize_center_type(None))

    def test_exact_match_is_case_insensitive(self):
        self.assertEqual(normalize_center_type('power center'), 'Power Center')
        self.assertEqual(normalize_center_type('SUPER REGIONAL MALL'), 'Super Regional Mall')
        for value in CENTER_TYPES:
            self.assertEqual(normalize_center_type(value.lower()), value)

    def test_heuristics(self):
        cases = {
            'strip mall': 'Strip/Convenience',
            'Convenience plaza': 'Strip/Convenience',
            'power': 'Power Center',
            'Open-air lifestyle': 'Lifestyle Center',
            'community shopping': 'Community Center',
            'Neighborhood': 'Neighborhood Center',
            'regional': 'Regional Mall',
            'Super-Regional': 'Super Regional Mall',
            'Outlet Mall': 'Factory Outlet',
            'festival marketplace': 'Theme/Festival',
        }
        for raw, expected in cases.items():
            self.assertEqual(normalize_center_type(raw), expected, raw)

    def test_precedence_first_hit_wins(self):
        # strip beats power, community beats neighborhood
        self.assertEqual(normalize_center_type('power strip'), 'Strip/Convenience')
        self.assertEqual(normalize_center_type('community/neighborhood'), 'Community Center')

    def test_unknown_passes_through(self):
        with self.assertLogs('services.classifiers', level='WARNING'):
            value = normalize_center_type('Bespoke Mixed-Use')
        self.assertEqual(value, 'Bespoke Mixed-Use')
        self.assertFalse(is_known_center_type(value))
        self.assertTrue(is_known_center_type('Lifestyle Center'))


class TenantNameClassifierTest(SimpleTestCase):

    def test_blank_is_vacant(self):
        self.assertEqual(normalize_tenant_name(''), ('Vacant', True))
        self.assertEqual(normalize_tenant_name(None), ('Vacant', True))

    def test_vacancy_qualifiers(self):
        cases = {
            'Vacant - Drive-Thru': 'Vacant (Drive-Thru)',
            'VACANT OFFICE': 'Vacant (Office)',
            'Vacant 2nd Floor': 'Vacant (2nd Floor)',
            'vacant restaurant': 'Vacant (Restaurant)',
            'Vacant - Subdivide Planned': 'Vacant (Subdivide Planned)',
            'Empty outparcel': 'Vacant (Outparcel)',
            'vacant': 'Vacant',
            'Empty': 'Vacant',
        }
        for raw, expected in cases.items():
            result = normalize_tenant_name(raw)
            self.assertEqual(result.name, expected, raw)
            self.assertTrue(result.is_vacant)

    def test_qualifier_precedence(self):
        # drive-thru is checked before office
        self.assertEqual(normalize_tenant_name('Vacant office drive thru').name, 'Vacant (Drive-Thru)')

    def test_regular_tenant_is_trimmed(self):
        result = normalize_tenant_name('  Starbucks  ')
        self.assertEqual(result.name, 'Starbucks')
        self.assertFalse(result.is_vacant)


class MajorGroupTest(SimpleTestCase):

    def test_known_categories(self):
        self.assertEqual(major_group_for_category('Supermarket'), 'anchors_majors')
        self.assertEqual(major_group_for_category('coffee shop'), 'food_beverage')
        self.assertEqual(major_group_for_category('Nail Salon'), 'services')
        self.assertEqual(major_group_for_category('Movie Theater'), 'entertainment_leisure')

    def test_unmapped_category_defaults(self):
        with self.assertLogs('services.classifiers', level='WARNING'):
            self.assertEqual(major_group_for_category('Space Tourism'), DEFAULT_MAJOR_GROUP)

    def test_blank_category(self):
        self.assertIsNone(major_group_for_category('  '))


# =============================================================================
# GEOCODING SERVICE TESTS
# =============================================================================

@patch('services.geocoding.time.sleep')
class GeocodingServiceTest(TestCase):
    """Test geocoding service functionality"""

    def setUp(self):
        self.service = GeocodingService(api_key='test-key', rate_limit_delay=0)
        self.ok_payload = {
            'status': 'OK',
            'results': [{
                'geometry': {'location': {'lat': 37.323012345, 'lng': -121.9718}},
                'place_id': 'ChIJ-test',
            }],
        }

    def test_format_address(self, mock_sleep):
        self.assertEqual(
            format_address('2855 Stevens Creek Blvd', 'Santa Clara', '', 'CA', None, '95050'),
            '2855 Stevens Creek Blvd, Santa Clara, CA, 95050'
        )

    @patch('services.geocoding.requests.get')
    def test_geocode_success(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response(self.ok_payload)

        result = self.service.geocode('2855 Stevens Creek Blvd', 'Santa Clara', 'CA', '95050')

        self.assertIsInstance(result, GeocodeResult)
        self.assertEqual(result.latitude, Decimal('37.3230123'))
        self.assertEqual(result.longitude, Decimal('-121.9718000'))
        self.assertEqual(result.place_id, 'ChIJ-test')

        params = mock_get.call_args[1]['params']
        self.assertEqual(params['address'], '2855 Stevens Creek Blvd, Santa Clara, CA, 95050')
        self.assertEqual(params['key'], 'test-key')

    @patch('services.geocoding.requests.get')
    def test_zero_results(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response({'status': 'ZERO_RESULTS', 'results': []})
        self.assertIsNone(self.service.geocode_address('Nowhere'))

    @patch('services.geocoding.requests.get')
    def test_provider_error_status(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response({'status': 'REQUEST_DENIED'})
        self.assertIsNone(self.service.geocode_address('1 Main St'))

    @patch('services.geocoding.requests.get')
    def test_network_error_is_swallowed(self, mock_get, mock_sleep):
        mock_get.side_effect = requests.ConnectionError('Network error')
        self.assertIsNone(self.service.geocode_address('1 Main St'))

    @patch('services.geocoding.requests.get')
    def test_malformed_payload(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response({'status': 'OK', 'results': [{'geometry': {}}]})
        self.assertIsNone(self.service.geocode_address('1 Main St'))

    @patch('services.geocoding.requests.get')
    def test_unconfigured_service_never_calls_out(self, mock_get, mock_sleep):
        service = GeocodingService(api_key='')
        self.assertFalse(service.is_configured)
        self.assertIsNone(service.geocode('1 Main St', 'Dover', 'DE', '19901'))
        mock_get.assert_not_called()

    @patch('services.geocoding.requests.get')
    def test_empty_address_never_calls_out(self, mock_get, mock_sleep):
        self.assertIsNone(self.service.geocode(None, '', None, None))
        mock_get.assert_not_called()

    def test_rate_limit_has_a_floor(self, mock_sleep):
        self.assertEqual(self.service.rate_limit_delay, 0.1)

    @patch('services.geocoding.requests.get')
    def test_back_to_back_calls_are_spaced(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response(self.ok_payload)

        self.service.geocode_address('1 Main St')
        self.service.geocode_address('2 Main St')

        mock_sleep.assert_called_once()
        self.assertLessEqual(mock_sleep.call_args[0][0], 0.1)

    @patch('services.geocoding.requests.get')
    def test_geocode_shopping_center(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response(self.ok_payload)
        center = ShoppingCenter.objects.create(
            name_key='valley fair',
            shopping_center_name='Valley Fair',
            address_street='2855 Stevens Creek Blvd',
            address_city='Santa Clara',
            address_state='CA',
        )

        self.assertTrue(self.service.geocode_shopping_center(center))

        center.refresh_from_db()
        self.assertEqual(center.latitude, Decimal('37.3230123'))
        self.assertEqual(center.google_place_id, 'ChIJ-test')

    @patch('services.geocoding.requests.get')
    def test_batch_geocode_skips_and_fails(self, mock_get, mock_sleep):
        mock_get.return_value = mock_response({'status': 'ZERO_RESULTS', 'results': []})
        ShoppingCenter.objects.create(
            name_key='done', shopping_center_name='Done',
            latitude=Decimal('1.0'), longitude=Decimal('2.0'),
        )
        missing = ShoppingCenter.objects.create(
            name_key='missing', shopping_center_name='Missing',
            address_street='1 Main St', address_city='Dover',
        )

        results = self.service.batch_geocode_shopping_centers(ShoppingCenter.objects.order_by('id'))

        self.assertEqual(results['total'], 2)
        self.assertEqual(results['skipped'], 1)
        self.assertEqual(results['success'], 0)
        self.assertEqual(results['failed_ids'], [missing.id])


# =============================================================================
# CENSUS CLIENT TESTS
# =============================================================================

@override_settings(
    CENSUS_API_KEY='census-key',
    CENSUS_ACS_YEAR='2023',
    CENSUS_GEOCODER_BENCHMARK='2020',
    CENSUS_GEOCODER_VINTAGE='2020',
    CENSUS_REQUEST_TIMEOUT=5,
)
class CensusClientTest(SimpleTestCase):

    def setUp(self):
        self.client = CensusClient()
        self.block_group = BlockGroup('10', '003', '010200', '1')

    def test_parse_count(self):
        self.assertEqual(parse_count('1200'), 1200)
        self.assertEqual(parse_count(None), 0)
        self.assertEqual(parse_count('N/A'), 0)
        self.assertEqual(parse_count('-666666666'), 0)

    def test_acs_url_uses_year(self):
        self.assertEqual(self.client.acs_url, 'https://api.census.gov/data/2023/acs/acs5')

    def test_close_releases_session(self):
        with patch.object(self.client.session, 'close') as mock_close:
            self.client.close()
        mock_close.assert_called_once_with()

    def test_resolve_area(self):
        payload = {'result': {'geographies': {
            'States': [{'STATE': '10'}],
            'Counties': [{'COUNTY': '003'}],
        }}}
        with patch.object(self.client.session, 'get', return_value=mock_response(payload)) as mock_get:
            area = self.client.resolve_area(39.74, -75.55)

        self.assertEqual(area, CensusArea('10', '003'))
        params = mock_get.call_args[1]['params']
        self.assertEqual(params['x'], -75.55)
        self.assertEqual(params['y'], 39.74)

    def test_resolve_area_without_geographies(self):
        payload = {'result': {'geographies': {'States': [], 'Counties': []}}}
        with patch.object(self.client.session, 'get', return_value=mock_response(payload)):
            with self.assertRaises(EnrichmentError):
                self.client.resolve_area(0, 0)

    def test_request_failure_is_enrichment_error(self):
        with patch.object(self.client.session, 'get', side_effect=requests.Timeout('slow')):
            with self.assertRaises(EnrichmentError):
                self.client.list_block_groups('10', '003')

    def test_list_block_groups(self):
        payload = [
            ['NAME', 'state', 'county', 'tract', 'block group'],
            ['Block Group 1', '10', '003', '010200', '1'],
            ['Block Group 2', '10', '003', '010200', '2'],
        ]
        with patch.object(self.client.session, 'get', return_value=mock_response(payload)) as mock_get:
            block_groups = self.client.list_block_groups('10', '003')

        self.assertEqual(len(block_groups), 2)
        self.assertEqual(block_groups[1].block_group, '2')
        self.assertEqual(block_groups[0].name, 'Block Group 1')
        params = mock_get.call_args[1]['params']
        self.assertEqual(params['for'], 'block group:*')
        self.assertEqual(params['in'], 'state:10 county:003')
        self.assertEqual(params['key'], 'census-key')

    def test_fetch_block_group(self):
        header = ['B01003_001E', 'B19013_001E', 'B25003_002E', 'state', 'county', 'tract', 'block group']
        payload = [header, ['1500', '72000', '-666666666', '10', '003', '010200', '1']]
        with patch.object(self.client.session, 'get', return_value=mock_response(payload)):
            unit = self.client.fetch_block_group(self.block_group)

        self.assertEqual(unit['total_population'], 1500)
        self.assertEqual(unit['median_household_income'], 72000)
        self.assertEqual(unit['owner_occupied_housing'], 0)
        # variables missing from the response count as zero
        self.assertEqual(unit['work_from_home'], 0)
        self.assertEqual(set(unit), set(BLOCK_GROUP_FIELDS))

    def test_fetch_block_group_failure_is_none(self):
        with patch.object(self.client.session, 'get', side_effect=requests.ConnectionError('down')):
            self.assertIsNone(self.client.fetch_block_group(self.block_group))

    def test_fetch_block_group_without_rows_is_none(self):
        with patch.object(self.client.session, 'get', return_value=mock_response([['B01003_001E']])):
            self.assertIsNone(self.client.fetch_block_group(self.block_group))


# =============================================================================
# DEMOGRAPHICS AGGREGATION TESTS
# =============================================================================

class AggregationTest(SimpleTestCase):

    def test_percentage_rounds_half_up(self):
        self.assertEqual(percentage(1, 16), 6.3)
        self.assertEqual(percentage(1, 3), 33.3)
        self.assertEqual(percentage(5, 0), 0.0)

    def test_weighted_median_income(self):
        units = [
            make_unit(total_population=100, median_household_income=50000),
            make_unit(total_population=300, median_household_income=70000),
        ]
        self.assertEqual(weighted_median_income(units), 65000)

    def test_weighted_median_counts_missing_income_as_zero(self):
        units = [
            make_unit(total_population=100, median_household_income=50000),
            make_unit(total_population=300, median_household_income=0),
        ]
        self.assertEqual(weighted_median_income(units), 12500)

    def test_weighted_median_without_population(self):
        self.assertEqual(weighted_median_income([make_unit(median_household_income=50000)]), 0)

    def test_percentages_use_summed_denominators(self):
        units = [
            make_unit(
                total_population=100, total_housing_units=40,
                occupied_housing_units=10, owner_occupied_housing=9,
                education_population=50, bachelors_degree=10, masters_degree=5,
                total_commuters=20, commute_30_34=2, commute_90_plus=1,
                total_workers=25, work_from_home=5,
                total_households=10, households_200k_plus=1,
            ),
            make_unit(
                total_population=300, total_housing_units=110,
                occupied_housing_units=90, owner_occupied_housing=45,
                education_population=150, doctorate_degree=5,
                total_commuters=80, commute_45_59=7,
                total_workers=75, work_from_home=5,
                total_households=90, households_200k_plus=9,
            ),
        ]

        result = aggregate_demographics(units, 5, block_groups_available=12)

        self.assertEqual(result['radius'], 5)
        self.assertEqual(result['total_population'], 400)
        self.assertEqual(result['total_housing_units'], 150)
        self.assertEqual(result['owner_occupied_percent'], 54.0)
        self.assertEqual(result['bachelors_degree_percent'], 10.0)
        self.assertEqual(result['commute_30_plus_percent'], 10.0)
        self.assertEqual(result['work_from_home_percent'], 10.0)
        self.assertEqual(result['households_200k_percent'], 10.0)
        self.assertEqual(result['block_groups_analyzed'], 2)
        self.assertEqual(result['block_groups_available'], 12)

    def test_no_units_is_partial_data(self):
        with self.assertRaises(PartialDataError):
            aggregate_demographics([], 3)

    def test_empty_demographics(self):
        result = empty_demographics(3)
        self.assertEqual(result['block_groups_analyzed'], 0)
        self.assertEqual(result['total_population'], 0)
        self.assertEqual(result['owner_occupied_percent'], 0.0)


class DemographicsServiceTest(SimpleTestCase):

    def setUp(self):
        self.client = Mock()
        self.client.resolve_area.return_value = CensusArea('10', '003')
        self.block_groups = [BlockGroup('10', '003', '010200', str(n)) for n in range(1, 6)]
        self.client.list_block_groups.return_value = self.block_groups
        self.service = DemographicsService(client=self.client, max_block_groups=3, max_workers=2)

    def test_caps_candidates_and_uses_every_result(self):
        self.client.fetch_block_group.side_effect = lambda bg: make_unit(
            total_population=100 * int(bg.block_group),
            median_household_income=50000,
        )

        result = self.service.get_demographics(39.74, -75.55, 3)

        self.assertEqual(self.client.fetch_block_group.call_count, 3)
        self.assertEqual(result['total_population'], 600)
        self.assertEqual(result['median_household_income'], 50000)
        self.assertEqual(result['block_groups_analyzed'], 3)
        self.assertEqual(result['block_groups_available'], 5)

    def test_failed_units_are_excluded(self):
        def fetch(bg):
            if bg.block_group == '2':
                return None
            if bg.block_group == '3':
                raise RuntimeError('boom')
            return make_unit(total_population=250)
        self.client.fetch_block_group.side_effect = fetch

        result = self.service.get_demographics(39.74, -75.55, 3)

        self.assertEqual(result['block_groups_analyzed'], 1)
        self.assertEqual(result['total_population'], 250)

    def test_all_fetches_fail_gives_zero_result(self):
        self.client.fetch_block_group.return_value = None

        result = self.service.get_demographics(39.74, -75.55, 3)

        self.assertEqual(result['block_groups_analyzed'], 0)
        self.assertEqual(result['block_groups_available'], 5)
        self.assertEqual(result['total_population'], 0)
        self.assertEqual(result['median_household_income'], 0)
        self.assertEqual(result['households_200k_percent'], 0.0)

    def test_unresolvable_area_gives_zero_result(self):
        self.client.resolve_area.side_effect = EnrichmentError('no county')

        result = self.service.get_demographics(0.0, 0.0, 1)

        self.assertEqual(result, empty_demographics(1))
        self.client.fetch_block_group.assert_not_called()
