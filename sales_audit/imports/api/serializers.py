from rest_framework import serializers

from sales_audit.imports.models import UploadLog
from sales_audit.imports.services import parse_period
from sales_audit.org.models import Branch


class ImportValidateSerializer(serializers.Serializer):
    rows = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class ImportCommitSerializer(ImportValidateSerializer):
    period = serializers.CharField()
    branch_id = serializers.PrimaryKeyRelatedField(
        queryset=Branch.objects.filter(is_active=True),
        required=False,
        allow_null=True,
        default=None,
    )
    file_name = serializers.CharField(required=False, allow_blank=True, default="")
    allow_partial = serializers.BooleanField(required=False, default=False)

    def validate_period(self, value: str) -> str:
        try:
            year, month = parse_period(value)
        except ValueError as exc:
            raise serializers.ValidationError(str(exc)) from exc
        return f"{year:04d}-{month:02d}"


class UploadLogSerializer(serializers.ModelSerializer):
    uploaded_by_username = serializers.CharField(
        source="uploaded_by.username", read_only=True, default=None
    )
    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)

    class Meta:
        model = UploadLog
        fields = [
            "id",
            "period",
            "branch",
            "branch_name",
            "uploaded_by",
            "uploaded_by_username",
            "file_name",
            "total_rows",
            "success_rows",
            "error_rows",
            "employees_created",
            "employees_updated",
            "performance_rows",
            "status",
            "errors",
            "created_at",
        ]
        read_only_fields = fields
