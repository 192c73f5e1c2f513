#!/usr/bin/env python
"""
Django's command-line utility for administrative tasks.

CenterScope Backend Management Script
=====================================

Usage Examples:
===============

Development:
  python manage.py runserver                    # Start development server
  python manage.py migrate                      # Apply migrations
  python manage.py createsuperuser              # Create admin user

Data:
  python manage.py import_csv <file>            # Import shopping center CSV
  python manage.py import_csv <file> --dry-run  # Reconcile in memory only
  python manage.py geocode_properties           # Geocode missing coordinates

Production:
  python manage.py collectstatic --noinput      # Collect static files
"""

import os
import sys


def main():
    """Run administrative tasks."""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'centerscope.settings')

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Couldn't import Django. Are you sure it's installed and "
            "available on your PYTHONPATH environment variable? Did you "
            "forget to activate a virtual environment?\n"
            f"DJANGO_SETTINGS_MODULE: {os.environ.get('DJANGO_SETTINGS_MODULE', 'Not set')}"
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
