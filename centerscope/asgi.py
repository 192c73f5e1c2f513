"""
ASGI config for the centerscope project.

Exposes the module-level ``application`` for ASGI servers such as Uvicorn.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'centerscope.settings')

application = get_asgi_application()
