"""Top-level package for Django configuration.

Settings modules for each environment, URL routing, the Celery
application and the WSGI/ASGI entry points of the TourDesk back office.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
