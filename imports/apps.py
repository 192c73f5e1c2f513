# ===== IMPORTS APP CONFIGURATION =====
"""
Django App Configuration for Imports.

Handles CSV ingestion: the reconciler service, the upload endpoint and the
ImportBatch audit trail.
"""

from django.apps import AppConfig


class ImportsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'imports'
    verbose_name = 'Data Imports'
