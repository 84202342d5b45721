"""Bulk import endpoints: dry-run validation, commit and upload history."""

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import generics
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from sales_audit.employees.api.permissions import CanImport
from sales_audit.imports.api.serializers import ImportCommitSerializer
from sales_audit.imports.api.serializers import ImportValidateSerializer
from sales_audit.imports.api.serializers import UploadLogSerializer
from sales_audit.imports.models import UploadLog
from sales_audit.imports.services import commit_import
from sales_audit.imports.validators import BulkImportValidator

logger = logging.getLogger(__name__)


class ImportValidateView(APIView):
    permission_classes = [CanImport]

    @extend_schema(
        tags=["Imports"],
        summary="Validate import rows without writing anything",
        request=ImportValidateSerializer,
        responses={200: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = ImportValidateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        validation = BulkImportValidator().validate(serializer.validated_data["rows"])
        return Response(validation.as_dict())


class ImportCommitView(APIView):
    permission_classes = [CanImport]

    @extend_schema(
        tags=["Imports"],
        summary="Validate and commit import rows for a period",
        request=ImportCommitSerializer,
        responses={201: OpenApiTypes.OBJECT, 400: OpenApiTypes.OBJECT},
    )
    def post(self, request):
        serializer = ImportCommitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = commit_import(
            data["rows"],
            period=data["period"],
            branch=data["branch_id"],
            actor=request.user,
            file_name=data["file_name"],
            allow_partial=data["allow_partial"],
        )
        if not result.committed:
            return Response(result.as_dict(), status=status.HTTP_400_BAD_REQUEST)
        return Response(result.as_dict(), status=status.HTTP_201_CREATED)


@extend_schema(tags=["Imports"], summary="Upload history")
class UploadLogListView(generics.ListAPIView):
    serializer_class = UploadLogSerializer
    permission_classes = [CanImport]

    def get_queryset(self):
        qs = UploadLog.objects.select_related("branch", "uploaded_by")
        status_value = self.request.query_params.get("status")
        if status_value:
            qs = qs.filter(status=status_value)
        return qs
