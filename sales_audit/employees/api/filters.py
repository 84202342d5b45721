import django_filters

from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance


class EmployeeFilter(django_filters.FilterSet):
    position = django_filters.CharFilter(field_name="position__code", lookup_expr="iexact")
    manager = django_filters.NumberFilter(field_name="manager_id")
    branch = django_filters.NumberFilter(field_name="branch_id")
    is_root = django_filters.BooleanFilter(field_name="manager", lookup_expr="isnull")

    class Meta:
        model = Employee
        fields = ["status", "position", "manager", "branch", "is_root"]


class MonthlyPerformanceFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name="employee_id")

    class Meta:
        model = MonthlyPerformance
        fields = ["employee", "year", "month", "quarter"]
