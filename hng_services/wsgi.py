"""WSGI entry point, e.g. ``gunicorn hng_services.wsgi``."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hng_services.settings')

application = get_wsgi_application()
