"""
WSGI config for concursos_backend.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "concursos_backend.settings")

application = get_wsgi_application()
