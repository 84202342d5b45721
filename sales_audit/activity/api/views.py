from __future__ import annotations

from typing import TYPE_CHECKING

from drf_spectacular.utils import OpenApiParameter
from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from sales_audit.activity.api.serializers import ActivityLogSerializer
from sales_audit.activity.models import ActivityLog
from sales_audit.employees.api.permissions import ROLE_BRANCH_MANAGER
from sales_audit.employees.api.permissions import has_global_scope
from sales_audit.employees.api.permissions import _user_in_groups

if TYPE_CHECKING:
    from django.db.models import QuerySet


class RecentActivityView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="Most recent activity entries",
        parameters=[OpenApiParameter("limit", int, description="1-50, default 5")],
    )
    def get(self, request):
        user = request.user
        if not (has_global_scope(user) or _user_in_groups(user, [ROLE_BRANCH_MANAGER])):
            return Response({"detail": "Forbidden"}, status=403)

        try:
            limit = int(request.query_params.get("limit", "5"))
        except (TypeError, ValueError):
            limit = 5
        limit = max(1, min(limit, 50))

        qs: QuerySet[ActivityLog] = ActivityLog.objects.select_related("actor").all()
        action_prefix = request.query_params.get("action")
        if action_prefix:
            qs = qs.filter(action__startswith=action_prefix)
        rows = list(qs[:limit])
        data = ActivityLogSerializer(rows, many=True).data
        return Response({"results": data, "limit": limit})
