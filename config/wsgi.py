"""WSGI entry point for TourDesk (gunicorn, uWSGI).

Deployed servers run the production settings unless DJANGO_SETTINGS_MODULE
says otherwise; ``manage.py runserver`` keeps using ``config.settings.dev``.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.prod')

application = get_wsgi_application()
