from django.contrib import admin

from sales_audit.imports.models import UploadLog


@admin.register(UploadLog)
class UploadLogAdmin(admin.ModelAdmin):
    list_display = ["id", "period", "branch", "uploaded_by", "status", "total_rows", "created_at"]
    list_filter = ["status", "period"]
    readonly_fields = ["errors", "created_at"]
