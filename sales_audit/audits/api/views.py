"""Quarterly audit endpoints."""

import logging
from decimal import Decimal

from django.db.models import Count
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import mixins
from rest_framework import permissions
from rest_framework import status
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from sales_audit.activity.utils import client_ip
from sales_audit.audits import services
from sales_audit.audits.api.filters import AuditFilter
from sales_audit.audits.api.serializers import AuditCreateSerializer
from sales_audit.audits.api.serializers import AuditListSerializer
from sales_audit.audits.api.serializers import AuditSerializer
from sales_audit.audits.api.serializers import SoftDeleteSerializer
from sales_audit.audits.exceptions import AuditPermissionError
from sales_audit.audits.exceptions import AuditServiceError
from sales_audit.audits.models import Audit
from sales_audit.audits.models import Zone
from sales_audit.employees.api.permissions import IsAdmin
from sales_audit.employees.api.permissions import can_manage_employee
from sales_audit.employees.api.permissions import managed_employee_ids

logger = logging.getLogger(__name__)

SUMMARY_LATEST = 3


def _error_response(exc: AuditServiceError) -> Response:
    return Response(exc.as_response_data(), status=exc.status_code)


@extend_schema_view(
    list=extend_schema(tags=["Audits"], summary="List audits"),
    retrieve=extend_schema(tags=["Audits"], summary="Audit detail"),
    destroy=extend_schema(tags=["Audits"], summary="Permanently delete an audit"),
)
class AuditViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    serializer_class = AuditSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AuditFilter

    def get_queryset(self):
        qs = Audit.objects.select_related("employee", "employee__position")
        visible = managed_employee_ids(self.request.user)
        if visible is not None:
            qs = qs.filter(employee_id__in=visible)
        return qs

    def get_serializer_class(self):
        if self.action == "list":
            return AuditListSerializer
        return super().get_serializer_class()

    def get_permissions(self):
        if self.action == "destroy":
            return [IsAdmin()]
        return super().get_permissions()

    def get_object(self):
        # Detail routes address soft-deleted audits too.
        obj = get_object_or_404(self.get_queryset(), pk=self.kwargs["pk"])
        self.check_object_permissions(self.request, obj)
        return obj

    def _require_manage(self, audit: Audit) -> None:
        if not can_manage_employee(self.request.user, audit.employee):
            msg = "You cannot manage this employee's audits"
            raise AuditPermissionError(msg)

    @extend_schema(
        tags=["Audits"],
        summary="Create a quarterly audit",
        request=AuditCreateSerializer,
        responses={201: AuditSerializer},
    )
    def create(self, request):
        serializer = AuditCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        employee = data["employee_id"]
        if not can_manage_employee(request.user, employee):
            return _error_response(
                AuditPermissionError("You cannot audit this employee")
            )
        try:
            result = services.create_audit(
                employee=employee,
                year=data["year"],
                quarter=data["quarter"],
                pillar_answers=[dict(a) for a in data["pillar_answers"]],
                actor=request.user,
            )
        except AuditServiceError as exc:
            return _error_response(exc)
        return Response(
            {
                "audit": AuditSerializer(result.audit).data,
                "warnings": result.warnings,
                "pending_subordinates": result.pending_subordinates,
            },
            status=status.HTTP_201_CREATED,
        )

    def destroy(self, request, *args, **kwargs):
        audit = self.get_object()
        services.hard_delete_audit(audit, actor=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Audits"],
        summary="Recompute team figures from subordinate audits",
        request=None,
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=True, methods=["patch"], url_path="refresh-aggregation")
    def refresh_aggregation(self, request, pk=None):
        audit = self.get_object()
        try:
            self._require_manage(audit)
            aggregation = services.refresh_aggregation(audit, actor=request.user)
        except AuditServiceError as exc:
            return _error_response(exc)
        return Response(
            {
                "audit": AuditSerializer(audit).data,
                "aggregation": aggregation.as_dict(),
            }
        )

    @extend_schema(
        tags=["Audits"],
        summary="Regenerate classification and report from stored inputs",
        request=None,
        responses={200: AuditSerializer},
    )
    @action(detail=True, methods=["patch"], url_path="regenerate-report")
    def regenerate_report(self, request, pk=None):
        audit = self.get_object()
        try:
            self._require_manage(audit)
            audit = services.regenerate_report(audit, actor=request.user)
        except AuditServiceError as exc:
            return _error_response(exc)
        return Response(AuditSerializer(audit).data)

    @extend_schema(
        tags=["Audits"],
        summary="Soft delete an audit with a reason",
        request=SoftDeleteSerializer,
        responses={200: AuditSerializer},
    )
    @action(detail=True, methods=["post"], url_path="soft-delete")
    def soft_delete(self, request, pk=None):
        audit = self.get_object()
        serializer = SoftDeleteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            self._require_manage(audit)
            services.soft_delete_audit(
                audit, actor=request.user, reason=serializer.validated_data["reason"]
            )
        except AuditServiceError as exc:
            return _error_response(exc)
        logger.info("Audit %s soft deleted from %s", audit.pk, client_ip(request))
        return Response(AuditSerializer(audit).data)

    @extend_schema(
        tags=["Audits"],
        summary="Active audit for one employee and period",
        parameters=[
            OpenApiParameter("employee", int, required=True),
            OpenApiParameter("year", int, required=True),
            OpenApiParameter("quarter", int, required=True),
        ],
        responses={200: AuditSerializer},
    )
    @action(detail=False, methods=["get"], url_path="by-period")
    def by_period(self, request):
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
        audit = (
            self.get_queryset()
            .active()
            .filter(employee_id=employee_id, year=year, quarter=quarter)
            .first()
        )
        if audit is None:
            return Response(
                {"detail": "No audit for this period"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(AuditSerializer(audit).data)

    @extend_schema(
        tags=["Audits"],
        summary="Zone distribution and latest audits in the caller's scope",
        parameters=[
            OpenApiParameter("year", int, required=False),
            OpenApiParameter("quarter", int, required=False),
        ],
        responses={200: OpenApiTypes.OBJECT},
    )
    @action(detail=False, methods=["get"], url_path="summary")
    def summary(self, request):
        qs = self.filter_queryset(self.get_queryset()).active()
        counts = {zone: 0 for zone in Zone.values}
        for row in qs.order_by().values("zona_final").annotate(total=Count("id")):
            counts[row["zona_final"]] = row["total"]
        total = sum(counts.values())
        success_pct = (
            Decimal(counts[Zone.SUCCESS] * 100) / Decimal(total) if total else Decimal(0)
        )
        latest = qs.order_by("-created_at", "-id")[:SUMMARY_LATEST]
        return Response(
            {
                "total_audits": total,
                "employees_audited": qs.order_by().values("employee_id").distinct().count(),
                "by_zona_final": counts,
                "success_percentage": f"{success_pct:.1f}",
                "latest": AuditListSerializer(latest, many=True).data,
            }
        )
