"""
ASGI config for the hospital billing service.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hmsbilling.settings')

application = get_asgi_application()
