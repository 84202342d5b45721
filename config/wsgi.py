"""
WSGI config for the sales_audit project.

Exposes the module-level ``application`` used by ``runserver`` and WSGI
servers through the ``WSGI_APPLICATION`` setting.
"""

import os

from django.core.wsgi import get_wsgi_application

# If DJANGO_SETTINGS_MODULE is unset, pick local or production from BUILD_ENV.
if "DJANGO_SETTINGS_MODULE" not in os.environ:
    build_env = os.environ.get("BUILD_ENV", "production").lower()
    os.environ["DJANGO_SETTINGS_MODULE"] = (
        "config.settings.local" if build_env == "local" else "config.settings.production"
    )

application = get_wsgi_application()
