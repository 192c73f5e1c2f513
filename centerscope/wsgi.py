"""
WSGI config for the centerscope project.

Exposes the module-level ``application`` used by ``runserver`` and by
production servers, e.g. ``gunicorn centerscope.wsgi:application``.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'centerscope.settings')

application = get_wsgi_application()
