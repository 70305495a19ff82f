"""WSGI config for the Ticketbooth project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ticketbooth.settings")

application = get_wsgi_application()
