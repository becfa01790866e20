"""
WSGI config for GampFire project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gampfire.settings')

application = get_wsgi_application()
