"""Serializers for employees and monthly performance."""

from rest_framework import serializers

from sales_audit.audits.exceptions import HierarchyViolationError
from sales_audit.employees.api.fields import NormalizedDecimalField
from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.employees.services.hierarchy import validate_manager_assignment
from sales_audit.employees.services.hierarchy import validate_position_change


class EmployeeSerializer(serializers.ModelSerializer):
    position_code = serializers.CharField(source="position.code", read_only=True)
    position_name = serializers.CharField(source="position.name", read_only=True)
    position_level = serializers.IntegerField(source="position.level", read_only=True)
    manager_name = serializers.CharField(
        source="manager.full_name", read_only=True, default=None
    )

    class Meta:
        model = Employee
        fields = [
            "id",
            "employee_code",
            "full_name",
            "email",
            "phone",
            "date_of_birth",
            "join_date",
            "status",
            "position",
            "position_code",
            "position_name",
            "position_level",
            "manager",
            "manager_name",
            "company",
            "ceo_unit",
            "branch",
            "user",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_employee_code(self, value: str) -> str:
        return value.strip().upper()

    def validate(self, attrs):
        instance = self.instance
        position = attrs.get("position", getattr(instance, "position", None))
        manager = attrs.get("manager", getattr(instance, "manager", None))
        try:
            if instance is not None and "position" in attrs:
                validate_position_change(instance, position)
            validate_manager_assignment(
                manager=manager, position=position, employee=instance
            )
        except HierarchyViolationError as exc:
            raise serializers.ValidationError({"manager": [exc.message]}) from exc
        return attrs


class SubordinateSerializer(serializers.ModelSerializer):
    position_code = serializers.CharField(source="position.code", read_only=True)
    position_name = serializers.CharField(source="position.name", read_only=True)

    class Meta:
        model = Employee
        fields = [
            "id",
            "employee_code",
            "full_name",
            "position_code",
            "position_name",
            "manager",
            "status",
        ]
        read_only_fields = fields


class MonthlyPerformanceSerializer(serializers.ModelSerializer):
    margin_personal = NormalizedDecimalField(max_digits=15, decimal_places=2)
    employee_code = serializers.CharField(source="employee.employee_code", read_only=True)

    class Meta:
        model = MonthlyPerformance
        fields = [
            "id",
            "employee",
            "employee_code",
            "year",
            "month",
            "quarter",
            "margin_personal",
            "na_personal",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["quarter", "created_at", "updated_at"]
