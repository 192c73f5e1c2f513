"""
Django application configuration for the services app.

The services app holds the provider adapters (geocoding, census) and the
normalization helpers shared by the import pipeline and the API.
"""

from django.apps import AppConfig


class ServicesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'services'
    verbose_name = 'Services'
