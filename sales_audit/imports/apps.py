from django.apps import AppConfig


class ImportsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "sales_audit.imports"
    verbose_name = "Bulk imports"
