# ===== PROPERTIES APP TEST SUITE =====
"""
Test suite for properties app functionality
File: properties/tests.py

Test Coverage:
- ShoppingCenter, Space, RetailCategory, Tenant and Lease models
- Vacancy statistics
- Storage backends (relational and in-memory)
- Shopping center read API: list, detail, filters, tenants, vacancy-stats
- Project endpoints: health check, API info, JSON 404
- Admin changelists
"""

from decimal import Decimal
from io import StringIO
from unittest.mock import Mock, patch

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from services import StorageError

from .models import Lease, RetailCategory, ShoppingCenter, Space, Tenant
from .storage import DjangoStorage, InMemoryStorage, get_storage

User = get_user_model()


def create_center(name='Concord Mall', **fields):
    return ShoppingCenter.objects.create(
        name_key=name.lower(),
        shopping_center_name=name,
        **fields
    )


def create_tenant(name, is_vacant=False, category=None, is_national_chain=False):
    return Tenant.objects.create(
        name_key=name.lower(),
        tenant_name=name,
        is_vacant=is_vacant,
        category=category,
        is_national_chain=is_national_chain,
    )


# =============================================================================
# MODEL TESTS
# =============================================================================

class ShoppingCenterModelTest(TestCase):
    """Test ShoppingCenter model functionality"""

    def setUp(self):
        self.center = create_center(
            'Concord Mall',
            center_type='Regional Mall',
            address_street='4737 Concord Pike',
            address_city='Wilmington',
            address_state='DE',
            address_zip='19803',
            total_gla=750000,
        )

    def test_string_representation(self):
        self.assertEqual(str(self.center), 'Concord Mall')

    def test_name_key_is_unique(self):
        with self.assertRaises(IntegrityError):
            create_center('Concord Mall')

    def test_full_address(self):
        self.assertEqual(
            self.center.get_full_address(),
            '4737 Concord Pike, Wilmington, DE, 19803'
        )

    def test_full_address_partial_data(self):
        center = create_center('Partial Plaza', address_city='Dover')
        self.assertEqual(center.get_full_address(), 'Dover')

    def test_has_coordinates(self):
        self.assertFalse(self.center.has_coordinates)
        self.center.latitude = Decimal('39.8170000')
        self.center.longitude = Decimal('-75.5430000')
        self.assertTrue(self.center.has_coordinates)


class SpaceModelTest(TestCase):

    def setUp(self):
        self.center = create_center()

    def test_suite_number_unique_per_center(self):
        Space.objects.create(shopping_center=self.center, suite_number='101')
        with self.assertRaises(IntegrityError):
            Space.objects.create(shopping_center=self.center, suite_number='101')

    def test_same_suite_in_other_center(self):
        other = create_center('Other Plaza')
        Space.objects.create(shopping_center=self.center, suite_number='101')
        Space.objects.create(shopping_center=other, suite_number='101')
        self.assertEqual(Space.objects.filter(suite_number='101').count(), 2)

    def test_spaces_without_suite_are_not_deduplicated(self):
        Space.objects.create(shopping_center=self.center, suite_number=None)
        Space.objects.create(shopping_center=self.center, suite_number=None)
        self.assertEqual(self.center.spaces.count(), 2)


class RetailCategoryModelTest(TestCase):

    def test_major_group_derived_on_create(self):
        self.assertEqual(RetailCategory.objects.create(name='Coffee Shop').major_group, 'food_beverage')
        self.assertEqual(RetailCategory.objects.create(name='Supermarket').major_group, 'anchors_majors')

    def test_unmapped_category_is_other(self):
        self.assertEqual(RetailCategory.objects.create(name='Unknown Thing').major_group, 'other_nonretail')


class LeaseModelTest(TestCase):

    def setUp(self):
        self.space = Space.objects.create(shopping_center=create_center(), suite_number='101')
        self.tenant = create_tenant('Starbucks')

    def test_one_active_lease_per_space(self):
        Lease.objects.create(space=self.space, tenant=self.tenant)
        with self.assertRaises(IntegrityError), transaction.atomic():
            Lease.objects.create(space=self.space, tenant=self.tenant)

    def test_inactive_leases_are_kept(self):
        Lease.objects.create(space=self.space, tenant=self.tenant, is_active=False)
        Lease.objects.create(space=self.space, tenant=self.tenant, is_active=False)
        Lease.objects.create(space=self.space, tenant=self.tenant)
        self.assertEqual(self.space.leases.count(), 3)
        self.assertEqual(self.space.active_lease.tenant, self.tenant)


class VacancyStatsTest(TestCase):

    def setUp(self):
        self.center = create_center()
        occupied = Space.objects.create(shopping_center=self.center, suite_number='101', square_footage=1000)
        vacant = Space.objects.create(shopping_center=self.center, suite_number='102', square_footage=500)
        Space.objects.create(shopping_center=self.center, suite_number='103', square_footage=500)

        Lease.objects.create(space=occupied, tenant=create_tenant('Starbucks'))
        Lease.objects.create(space=vacant, tenant=create_tenant('Vacant', is_vacant=True))

    def test_vacancy_stats(self):
        stats = self.center.get_vacancy_stats()

        self.assertEqual(stats['total_spaces'], 3)
        self.assertEqual(stats['vacant_spaces'], 2)
        self.assertEqual(stats['occupied_spaces'], 1)
        self.assertEqual(stats['vacancy_rate_by_count'], 66.7)
        self.assertEqual(stats['total_square_footage'], 2000)
        self.assertEqual(stats['vacant_square_footage'], 1000)
        self.assertEqual(stats['vacancy_rate_by_area'], 50.0)

    def test_superseded_tenant_no_longer_counts(self):
        space = self.center.spaces.get(suite_number='101')
        DjangoStorage().supersede_lease(space, Tenant.objects.get(name_key='vacant'), None, None)

        self.assertEqual(self.center.get_vacancy_stats()['vacant_spaces'], 3)

    def test_empty_center(self):
        stats = create_center('Empty Plaza').get_vacancy_stats()
        self.assertEqual(stats['total_spaces'], 0)
        self.assertEqual(stats['vacancy_rate_by_count'], 0.0)
        self.assertEqual(stats['vacancy_rate_by_area'], 0.0)


# =============================================================================
# STORAGE BACKEND TESTS
# =============================================================================

class StorageContractMixin:
    """Behaviour both storage backends share."""

    def make_storage(self):
        raise NotImplementedError

    def setUp(self):
        self.storage = self.make_storage()
        self.center = self.storage.create_center('concord mall', {
            'shopping_center_name': 'Concord Mall',
            'total_gla': 750000,
        })

    def test_get_center(self):
        self.assertIsNone(self.storage.get_center('missing'))
        self.assertEqual(self.storage.get_center('concord mall').shopping_center_name, 'Concord Mall')

    def test_update_center(self):
        center = self.storage.update_center(self.center, {'owner': 'Brixmor', 'total_gla': 800000})
        self.assertEqual(center.owner, 'Brixmor')
        self.assertEqual(self.storage.get_center('concord mall').total_gla, 800000)

    def test_spaces_by_suite(self):
        space = self.storage.create_space(self.center, '101', 1200)
        self.assertEqual(self.storage.get_space(self.center, '101').id, space.id)
        self.assertIsNone(self.storage.get_space(self.center, '999'))

        self.storage.update_space(space, 1500)
        self.assertEqual(self.storage.get_space(self.center, '101').square_footage, 1500)

    def test_get_or_create_category(self):
        category, created = self.storage.get_or_create_category('Coffee Shop')
        self.assertTrue(created)
        self.assertEqual(category.major_group, 'food_beverage')

        again, created = self.storage.get_or_create_category('Coffee Shop')
        self.assertFalse(created)
        self.assertEqual(again.id, category.id)

    def test_tenants(self):
        category, _ = self.storage.get_or_create_category('Coffee Shop')
        tenant = self.storage.create_tenant('starbucks', {
            'tenant_name': 'Starbucks',
            'is_vacant': False,
            'category': None,
            'is_national_chain': False,
        })
        self.storage.update_tenant(tenant, {'category': category, 'is_national_chain': True})

        stored = self.storage.get_tenant('starbucks')
        self.assertEqual(stored.category.name, 'Coffee Shop')
        self.assertTrue(stored.is_national_chain)

    def test_supersede_lease_keeps_history(self):
        space = self.storage.create_space(self.center, '101', 1000)
        first = self.storage.create_tenant('starbucks', {'tenant_name': 'Starbucks'})
        second = self.storage.create_tenant('vacant', {'tenant_name': 'Vacant', 'is_vacant': True})

        self.storage.supersede_lease(space, first, Decimal('2500.00'), Decimal('2.5000'))
        lease = self.storage.supersede_lease(space, second, None, None)

        self.assertTrue(lease.is_active)
        self.assertEqual(self.active_lease_count(space), 1)
        self.assertEqual(self.lease_count(space), 2)


class DjangoStorageTest(StorageContractMixin, TestCase):

    def make_storage(self):
        return DjangoStorage()

    def active_lease_count(self, space):
        return Lease.objects.filter(space=space, is_active=True).count()

    def lease_count(self, space):
        return Lease.objects.filter(space=space).count()

    def test_duplicate_center_is_storage_error(self):
        with self.assertRaises(StorageError), transaction.atomic():
            self.storage.create_center('concord mall', {'shopping_center_name': 'Concord Mall'})

    def test_supports_transactions(self):
        self.assertTrue(self.storage.supports_transactions)


class InMemoryStorageTest(StorageContractMixin, TestCase):

    def make_storage(self):
        return InMemoryStorage()

    def active_lease_count(self, space):
        return len(self.storage.active_leases(space))

    def lease_count(self, space):
        return len([lease for lease in self.storage.leases if lease.space is space])

    def test_duplicate_center_is_storage_error(self):
        with self.assertRaises(StorageError):
            self.storage.create_center('concord mall', {'shopping_center_name': 'Concord Mall'})

    def test_duplicate_suite_is_storage_error(self):
        self.storage.create_space(self.center, '101', None)
        with self.assertRaises(StorageError):
            self.storage.create_space(self.center, '101', None)

    def test_spaces_without_suite(self):
        self.storage.create_space(self.center, None, None)
        self.storage.create_space(self.center, None, None)
        self.assertIsNone(self.storage.get_space(self.center, None))
        self.assertEqual(self.storage.summary()['spaces'], 2)

    def test_summary(self):
        self.assertEqual(self.storage.summary(), {
            'shopping_centers': 1,
            'spaces': 0,
            'tenants': 0,
            'retail_categories': 0,
            'leases': 0,
            'active_leases': 0,
        })


class GetStorageTest(TestCase):

    def test_backends(self):
        self.assertIsInstance(get_storage('database'), DjangoStorage)
        self.assertIsInstance(get_storage('memory'), InMemoryStorage)
        self.assertIs(get_storage('memory'), get_storage('memory'))

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            get_storage('redis')


# =============================================================================
# API TESTS
# =============================================================================

class PropertiesAPITestCase(APITestCase):
    """Base test case with sample centers, spaces and leases"""

    def setUp(self):
        self.concord = create_center(
            'Concord Mall',
            center_type='Regional Mall',
            address_street='4737 Concord Pike',
            address_city='Wilmington',
            address_state='DE',
            county='New Castle',
            latitude=Decimal('39.8170000'),
            longitude=Decimal('-75.5430000'),
            total_gla=750000,
            owner='Brixmor',
        )
        self.dover = create_center(
            'Dover Commons',
            center_type='Community Center',
            address_city='Dover',
            address_state='DE',
            county='Kent',
        )
        self.willow = create_center(
            'Willow Grove Park',
            center_type='Regional Mall',
            address_city='Willow Grove',
            address_state='PA',
        )

        coffee = RetailCategory.objects.create(name='Coffee Shop')
        starbucks = create_tenant('Starbucks', category=coffee, is_national_chain=True)
        drive_thru = create_tenant('Vacant (Drive-Thru)', is_vacant=True)

        suite_101 = Space.objects.create(shopping_center=self.concord, suite_number='101', square_footage=1000)
        suite_102 = Space.objects.create(shopping_center=self.concord, suite_number='102', square_footage=500)
        Space.objects.create(shopping_center=self.concord, suite_number='103', square_footage=500)

        Lease.objects.create(space=suite_101, tenant=drive_thru, is_active=False)
        Lease.objects.create(
            space=suite_101,
            tenant=starbucks,
            base_rent=Decimal('2500.00'),
            rent_per_area=Decimal('2.5000'),
        )
        Lease.objects.create(space=suite_102, tenant=drive_thru)


class ShoppingCenterAPITest(PropertiesAPITestCase):

    def test_list_shopping_centers(self):
        response = self.client.get(reverse('shopping-center-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 3)
        names = [item['shopping_center_name'] for item in response.data['results']]
        self.assertEqual(names, ['Concord Mall', 'Dover Commons', 'Willow Grove Park'])
        self.assertEqual(response.data['results'][0]['space_count'], 3)

    def test_page_size(self):
        response = self.client.get(reverse('shopping-center-list'), {'page_size': 2})
        self.assertEqual(len(response.data['results']), 2)
        self.assertIsNotNone(response.data['next'])

    def test_retrieve_shopping_center(self):
        response = self.client.get(reverse('shopping-center-detail', args=[self.concord.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shopping_center_name'], 'Concord Mall')
        self.assertEqual(response.data['full_address'], '4737 Concord Pike, Wilmington, DE')
        self.assertTrue(response.data['has_coordinates'])
        self.assertEqual(response.data['space_count'], 3)

    def test_retrieve_missing_center(self):
        response = self.client.get(reverse('shopping-center-detail', args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_read_only(self):
        response = self.client.post(reverse('shopping-center-list'), {'shopping_center_name': 'New'})
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)


class ShoppingCenterFilterTest(PropertiesAPITestCase):

    def names(self, params):
        response = self.client.get(reverse('shopping-center-list'), params)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return sorted(item['shopping_center_name'] for item in response.data['results'])

    def test_filter_by_state(self):
        self.assertEqual(self.names({'state': 'de'}), ['Concord Mall', 'Dover Commons'])

    def test_filter_by_type(self):
        self.assertEqual(self.names({'type': 'regional mall'}), ['Concord Mall', 'Willow Grove Park'])

    def test_filter_by_county(self):
        self.assertEqual(self.names({'county': 'kent'}), ['Dover Commons'])

    def test_filter_by_city(self):
        self.assertEqual(self.names({'city': 'willow'}), ['Willow Grove Park'])

    def test_filter_geocoded(self):
        self.assertEqual(self.names({'geocoded': 'true'}), ['Concord Mall'])
        self.assertEqual(self.names({'geocoded': 'false'}), ['Dover Commons', 'Willow Grove Park'])

    def test_search(self):
        self.assertEqual(self.names({'search': 'brixmor'}), ['Concord Mall'])

    def test_ordering(self):
        response = self.client.get(reverse('shopping-center-list'), {'ordering': '-shopping_center_name'})
        self.assertEqual(response.data['results'][0]['shopping_center_name'], 'Willow Grove Park')


class ShoppingCenterActionsTest(PropertiesAPITestCase):

    def test_tenants(self):
        response = self.client.get(reverse('shopping-center-tenants', args=[self.concord.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shopping_center_name'], 'Concord Mall')
        self.assertEqual(response.data['count'], 3)

        by_suite = {entry['suite_number']: entry for entry in response.data['tenants']}
        self.assertEqual(by_suite['101']['tenant_name'], 'Starbucks')
        self.assertEqual(by_suite['101']['category'], 'Coffee Shop')
        self.assertEqual(by_suite['101']['major_group'], 'food_beverage')
        self.assertEqual(by_suite['101']['base_rent'], '2500.00')
        self.assertEqual(by_suite['101']['rent_per_area'], '2.5000')
        self.assertTrue(by_suite['101']['is_national_chain'])
        self.assertFalse(by_suite['101']['is_vacant'])

        self.assertEqual(by_suite['102']['tenant_name'], 'Vacant (Drive-Thru)')
        self.assertEqual(by_suite['102']['major_group'], 'vacant')
        self.assertTrue(by_suite['102']['is_vacant'])

        self.assertIsNone(by_suite['103']['tenant_name'])
        self.assertTrue(by_suite['103']['is_vacant'])

    def test_tenants_of_empty_center(self):
        response = self.client.get(reverse('shopping-center-tenants', args=[self.dover.id]))
        self.assertEqual(response.data['count'], 0)
        self.assertEqual(response.data['tenants'], [])

    def test_vacancy_stats(self):
        response = self.client.get(reverse('shopping-center-vacancy-stats', args=[self.concord.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shopping_center_id'], self.concord.id)
        self.assertEqual(response.data['total_spaces'], 3)
        self.assertEqual(response.data['vacant_spaces'], 2)
        self.assertEqual(response.data['vacancy_rate_by_area'], 50.0)

    def test_vacancy_stats_missing_center(self):
        response = self.client.get(reverse('shopping-center-vacancy-stats', args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# =============================================================================
# PROJECT ENDPOINT TESTS
# =============================================================================

class ProjectEndpointTest(APITestCase):

    def test_health_check(self):
        create_center()
        response = self.client.get(reverse('health-check'))

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['shopping_centers'], 1)
        self.assertEqual(data['tenant_spaces'], 0)

    def test_api_info(self):
        response = self.client.get(reverse('api-root'))
        self.assertEqual(response.status_code, 200)
        self.assertIn('GET /api/v1/shopping-centers/', response.json()['endpoints'])

    def test_unknown_api_path_is_json_404(self):
        response = self.client.get('/api/v1/does-not-exist/')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error'], 'API endpoint not found')


# =============================================================================
# ADMIN TESTS
# =============================================================================

class PropertiesAdminTest(PropertiesAPITestCase):

    def setUp(self):
        super().setUp()
        self.admin_user = User.objects.create_superuser('admin', 'admin@example.com', 'password')
        self.client.force_login(self.admin_user)

    def test_changelists_render(self):
        for name in ('shoppingcenter', 'space', 'retailcategory', 'tenant', 'lease'):
            response = self.client.get(reverse(f'admin:properties_{name}_changelist'))
            self.assertEqual(response.status_code, 200, name)

    def test_shopping_center_change_page(self):
        response = self.client.get(reverse('admin:properties_shoppingcenter_change', args=[self.concord.id]))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, 'Concord Mall')


# =============================================================================
# MANAGEMENT COMMAND TESTS
# =============================================================================

class GeocodePropertiesCommandTest(TestCase):

    def setUp(self):
        self.geocoded = create_center(
            'Concord Mall', latitude=Decimal('39.8170000'), longitude=Decimal('-75.5430000'),
        )
        self.missing = create_center('Dover Commons', address_street='1 Main St', address_city='Dover')

    def run_command(self, service, *args):
        out = StringIO()
        with patch('properties.management.commands.geocode_properties.get_geocoding_service',
                   return_value=service):
            call_command('geocode_properties', *args, stdout=out)
        return out.getvalue()

    def test_only_missing_centers_are_geocoded(self):
        service = Mock()
        service.is_configured = True
        service.batch_geocode_shopping_centers.return_value = {
            'total': 1, 'success': 1, 'skipped': 0, 'failed': 0, 'failed_ids': [],
        }

        output = self.run_command(service)

        queryset = service.batch_geocode_shopping_centers.call_args[0][0]
        self.assertEqual(list(queryset), [self.missing])
        self.assertIn('GEOCODING COMPLETE', output)

    def test_force_includes_geocoded_centers(self):
        service = Mock()
        service.is_configured = True
        service.batch_geocode_shopping_centers.return_value = {
            'total': 2, 'success': 1, 'skipped': 0, 'failed': 1, 'failed_ids': [self.missing.id],
        }

        output = self.run_command(service, '--force')

        args, kwargs = service.batch_geocode_shopping_centers.call_args
        self.assertEqual(args[0].count(), 2)
        self.assertTrue(kwargs['force'])
        self.assertIn(str(self.missing.id), output)

    def test_unconfigured_service(self):
        service = Mock()
        service.is_configured = False

        output = self.run_command(service)

        service.batch_geocode_shopping_centers.assert_not_called()
        self.assertIn('GOOGLE_MAPS_API_KEY', output)

    def test_unknown_id(self):
        service = Mock()
        service.is_configured = True

        output = self.run_command(service, '--id', '99999')

        service.batch_geocode_shopping_centers.assert_not_called()
        self.assertIn('not found', output)
