from django.apps import AppConfig


class AuditsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales_audit.audits"
    verbose_name = "Quarterly audits"
