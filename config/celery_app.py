import os

from celery import Celery
from celery.signals import setup_logging

# Deployed workers default to production settings; pytest passes
# --ds=config.settings.test, which setdefault leaves alone.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("sales_audit")

# All Celery settings live in Django settings with a CELERY_ prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up sales_audit.audits.tasks among others.
app.autodiscover_tasks()
