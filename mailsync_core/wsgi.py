"""WSGI config for the mailbox sync project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mailsync_core.settings.dev")

application = get_wsgi_application()
