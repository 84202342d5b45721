from django.contrib import admin

from sales_audit.audits.models import Audit


@admin.register(Audit)
class AuditAdmin(admin.ModelAdmin):
    list_display = [
        "id",
        "employee",
        "year",
        "quarter",
        "zona_final",
        "profile",
        "deleted_at",
    ]
    list_filter = ["year", "quarter", "zona_final", "profile"]
    search_fields = ["employee__employee_code", "employee__full_name"]
    readonly_fields = [
        "pillar_answers",
        "team_structure",
        "targets",
        "prodem",
        "report",
        "created_at",
        "updated_at",
    ]
