import logging

from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from sales_audit.activity.utils import client_ip
from sales_audit.activity.utils import log_action
from sales_audit.audits.exceptions import HierarchyViolationError
from sales_audit.audits.repository import get_walker
from sales_audit.audits.services import quarterly_performance
from sales_audit.employees.api.filters import EmployeeFilter
from sales_audit.employees.api.filters import MonthlyPerformanceFilter
from sales_audit.employees.api.permissions import IsAdminCanWrite
from sales_audit.employees.api.permissions import managed_employee_ids
from sales_audit.employees.api.serializers import EmployeeSerializer
from sales_audit.employees.api.serializers import MonthlyPerformanceSerializer
from sales_audit.employees.api.serializers import SubordinateSerializer
from sales_audit.employees.models import Employee
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.employees.services.hierarchy import ensure_deletable
from sales_audit.hierarchy.repository import HierarchyError

logger = logging.getLogger(__name__)


def _snapshot(employee: Employee) -> dict:
    return {
        "employee_code": employee.employee_code,
        "full_name": employee.full_name,
        "position": employee.position_id,
        "manager": employee.manager_id,
        "status": employee.status,
    }


@extend_schema_view(
    list=extend_schema(tags=["Employees"]),
    retrieve=extend_schema(tags=["Employees"]),
    create=extend_schema(tags=["Employees"]),
    update=extend_schema(tags=["Employees"]),
    partial_update=extend_schema(tags=["Employees"]),
)
class EmployeeViewSet(viewsets.ModelViewSet):
    queryset = Employee.objects.all().select_related("position", "manager", "branch")
    serializer_class = EmployeeSerializer
    permission_classes = [IsAuthenticated, IsAdminCanWrite]
    filter_backends = [DjangoFilterBackend, SearchFilter]
    filterset_class = EmployeeFilter
    search_fields = ["employee_code", "full_name", "email"]

    def get_queryset(self):
        """Admins and owners see everyone; others see themselves and their subtree."""
        qs = super().get_queryset()
        visible = managed_employee_ids(self.request.user)
        if visible is None:
            return qs
        return qs.filter(id__in=visible)

    def perform_create(self, serializer):
        employee = serializer.save()
        log_action(
            "employees.employee.create",
            actor=self.request.user,
            model_name="Employee",
            record_id=employee.pk,
            after=_snapshot(employee),
            ip_address=client_ip(self.request),
        )

    def perform_update(self, serializer):
        before = _snapshot(serializer.instance)
        employee = serializer.save()
        log_action(
            "employees.employee.update",
            actor=self.request.user,
            model_name="Employee",
            record_id=employee.pk,
            before=before,
            after=_snapshot(employee),
            ip_address=client_ip(self.request),
        )

    @extend_schema(tags=["Employees"], responses={204: None})
    def destroy(self, request, *args, **kwargs):
        employee = self.get_object()
        try:
            ensure_deletable(employee)
        except HierarchyViolationError as exc:
            return Response(exc.as_response_data(), status=exc.status_code)
        before = _snapshot(employee)
        record_id = employee.pk
        with transaction.atomic():
            employee.delete()
            log_action(
                "employees.employee.delete",
                actor=request.user,
                model_name="Employee",
                record_id=record_id,
                before=before,
                ip_address=client_ip(request),
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Employees"],
        parameters=[
            OpenApiParameter(
                "recursive", bool, description="Include every level below, not only direct reports"
            )
        ],
        responses={200: SubordinateSerializer(many=True)},
    )
    @action(detail=True, methods=["get"])
    def subordinates(self, request, pk=None):
        employee = self.get_object()
        recursive = request.query_params.get("recursive", "").lower() in {"1", "true", "yes"}
        if recursive:
            try:
                ids = [rec.id for rec in get_walker().all_subordinates_recursive(employee.pk)]
            except HierarchyError as exc:
                logger.error("Subordinate walk failed for %s: %s", employee.pk, exc)
                return Response(
                    {"detail": str(exc), "code": "hierarchy_error"},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            qs = Employee.objects.filter(id__in=ids)
        else:
            qs = employee.subordinates.all()
        qs = qs.select_related("position").order_by("full_name", "id")
        return Response(SubordinateSerializer(qs, many=True).data)

    @extend_schema(tags=["Employees"], responses={200: OpenApiTypes.OBJECT})
    @action(detail=True, methods=["get"])
    def hierarchy(self, request, pk=None):
        """Management chain above the employee and the full tree below."""
        employee = self.get_object()
        walker = get_walker()
        try:
            chain = walker.management_chain(employee.pk)
            tree = walker.build_tree(employee.pk)
        except HierarchyError as exc:
            logger.error("Hierarchy walk failed for %s: %s", employee.pk, exc)
            return Response(
                {"detail": str(exc), "code": "hierarchy_error"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return Response(
            {
                "management_chain": [
                    {
                        "id": m.id,
                        "employee_code": m.employee_code,
                        "full_name": m.full_name,
                        "position_code": m.position_code,
                    }
                    for m in chain
                ],
                "tree": tree.as_dict() if tree else None,
            }
        )


@extend_schema_view(
    list=extend_schema(tags=["Performance"]),
    retrieve=extend_schema(tags=["Performance"]),
    create=extend_schema(tags=["Performance"]),
    update=extend_schema(tags=["Performance"]),
    partial_update=extend_schema(tags=["Performance"]),
    destroy=extend_schema(tags=["Performance"]),
)
class MonthlyPerformanceViewSet(viewsets.ModelViewSet):
    queryset = MonthlyPerformance.objects.all().select_related("employee")
    serializer_class = MonthlyPerformanceSerializer
    permission_classes = [IsAuthenticated, IsAdminCanWrite]
    filter_backends = [DjangoFilterBackend]
    filterset_class = MonthlyPerformanceFilter

    def get_queryset(self):
        qs = super().get_queryset()
        visible = managed_employee_ids(self.request.user)
        if visible is None:
            return qs
        return qs.filter(employee_id__in=visible)

    @extend_schema(
        tags=["Performance"],
        summary="Quarter totals and completeness for one employee",
        parameters=[
            OpenApiParameter("employee", int, required=True),
            OpenApiParameter("year", int, required=True),
            OpenApiParameter("quarter", int, required=True),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["get"])
    def quarterly(self, request):
        params = request.query_params
        try:
            employee_id = int(params.get("employee", ""))
            year = int(params.get("year", ""))
            quarter = int(params.get("quarter", ""))
        except ValueError:
            return Response(
                {"detail": "employee, year and quarter are required integers"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        if quarter not in {1, 2, 3, 4}:
            return Response(
                {"detail": "quarter must be between 1 and 4"},
                status=status.HTTP_400_BAD_REQUEST,
            )
        visible = managed_employee_ids(request.user)
        if visible is not None and employee_id not in visible:
            return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(quarterly_performance(employee_id, year, quarter).as_dict())
