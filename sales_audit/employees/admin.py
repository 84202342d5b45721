from django.contrib import admin

from sales_audit.employees import models


@admin.register(models.Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ["id", "employee_code", "full_name", "position", "manager", "status"]
    list_filter = ["status", "position", "branch"]
    search_fields = ["employee_code", "full_name", "email"]
    raw_id_fields = ["manager", "user"]


@admin.register(models.MonthlyPerformance)
class MonthlyPerformanceAdmin(admin.ModelAdmin):
    list_display = ["id", "employee", "year", "month", "quarter", "margin_personal", "na_personal"]
    list_filter = ["year", "quarter"]
    search_fields = ["employee__employee_code", "employee__full_name"]
