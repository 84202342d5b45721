from django.contrib import admin

from sales_audit.org import models


@admin.register(models.Position)
class PositionAdmin(admin.ModelAdmin):
    list_display = ["id", "code", "name", "level"]
    ordering = ["level"]


@admin.register(models.Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ["id", "code", "name"]
    search_fields = ["code", "name"]


@admin.register(models.CeoUnit)
class CeoUnitAdmin(admin.ModelAdmin):
    list_display = ["id", "name", "company"]
    list_filter = ["company"]


@admin.register(models.Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ["id", "code", "name", "company", "is_active"]
    search_fields = ["code", "name"]
    list_filter = ["is_active", "company"]
