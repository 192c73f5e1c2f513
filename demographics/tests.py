# ===== DEMOGRAPHICS APP TEST SUITE =====
"""
Tests for GET /api/v1/demographics/{lat}/{lng}/{radius}/
"""

from unittest.mock import patch

from django.test import override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from services.demographics import empty_demographics


def demographics_url(lat, lng, radius):
    return reverse('demographics', args=[lat, lng, radius])


@override_settings(CENSUS_API_KEY='census-key')
class DemographicsAPITest(APITestCase):

    @patch('demographics.views.DemographicsService')
    def test_success(self, mock_service_class):
        payload = empty_demographics(3.0)
        payload.update({
            'total_population': 4200,
            'median_household_income': 65000,
            'block_groups_analyzed': 4,
            'block_groups_available': 12,
        })
        mock_service_class.return_value.get_demographics.return_value = payload

        response = self.client.get(demographics_url('39.74', '-75.55', '3'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_population'], 4200)
        self.assertEqual(response.data['median_household_income'], 65000)
        mock_service_class.return_value.get_demographics.assert_called_once_with(39.74, -75.55, 3.0)
        mock_service_class.return_value.close.assert_called_once_with()

    @patch('demographics.views.DemographicsService')
    def test_no_data_is_still_success(self, mock_service_class):
        mock_service_class.return_value.get_demographics.return_value = empty_demographics(1.0)

        response = self.client.get(demographics_url('0', '0', '1'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['block_groups_analyzed'], 0)
        self.assertEqual(response.data['total_population'], 0)

    @patch('demographics.views.DemographicsService')
    def test_census_session_closed_when_aggregation_fails(self, mock_service_class):
        mock_service_class.return_value.get_demographics.side_effect = RuntimeError('boom')

        with self.assertRaises(RuntimeError):
            self.client.get(demographics_url('39.74', '-75.55', '3'))
        mock_service_class.return_value.close.assert_called_once_with()

    @patch('demographics.views.DemographicsService')
    def test_invalid_input(self, mock_service_class):
        cases = [
            ('abc', '-75.55', '3'),
            ('39.74', 'west', '3'),
            ('39.74', '-75.55', 'far'),
            ('nan', '-75.55', '3'),
            ('91', '-75.55', '3'),
            ('39.74', '-181', '3'),
            ('39.74', '-75.55', '0'),
            ('39.74', '-75.55', '-2'),
            ('39.74', '-75.55', '101'),
        ]
        for lat, lng, radius in cases:
            response = self.client.get(demographics_url(lat, lng, radius))
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, (lat, lng, radius))
        mock_service_class.assert_not_called()

    @override_settings(CENSUS_API_KEY='')
    @patch('demographics.views.DemographicsService')
    def test_census_not_configured(self, mock_service_class):
        response = self.client.get(demographics_url('39.74', '-75.55', '3'))

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        mock_service_class.assert_not_called()

    def test_post_not_allowed(self):
        response = self.client.post(demographics_url('39.74', '-75.55', '3'))
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
