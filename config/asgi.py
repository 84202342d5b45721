"""
ASGI config for the sales_audit project.
"""

import os

from django.core.asgi import get_asgi_application

if "DJANGO_SETTINGS_MODULE" not in os.environ:
    build_env = os.environ.get("BUILD_ENV", "production").lower()
    os.environ["DJANGO_SETTINGS_MODULE"] = (
        "config.settings.local" if build_env == "local" else "config.settings.production"
    )

application = get_asgi_application()
