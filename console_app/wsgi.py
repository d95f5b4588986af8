"""
WSGI config for console_app project.

It exposes the WSGI callable as a module-level variable named ``application``.
Migrations for the auth/session database run once at start-up.

For more information on this file, see
https://docs.djangoproject.com/en/5.2/howto/deployment/wsgi/
"""

import logging
import os

from django.core.management import call_command
from django.core.wsgi import get_wsgi_application
from django.db.utils import OperationalError

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "console_app.settings")

application = get_wsgi_application()

try:
    call_command("migrate", interactive=False)
except OperationalError:
    logging.getLogger(__name__).warning(
        "Auth database unavailable at start-up; skipping migrations", exc_info=True
    )
