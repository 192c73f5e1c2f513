"""
Properties App Configuration - CenterScope Backend
"""

from django.apps import AppConfig


class PropertiesConfig(AppConfig):
    """
    Configuration for the Properties app.

    This app manages:
    - Shopping centers, spaces, tenants, retail categories and leases
    - The storage backends used by the CSV import reconciler
    - The read-only shopping center API
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'properties'
    verbose_name = 'Shopping Centers & Tenants'
