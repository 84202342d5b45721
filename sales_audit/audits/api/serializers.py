from rest_framework import serializers

from sales_audit.audits.models import Audit
from sales_audit.audits.pillars import CATEGORY_NAMES
from sales_audit.audits.pillars import PILLAR_COUNT
from sales_audit.employees.models import Employee


class PillarAnswerSerializer(serializers.Serializer):
    pillar_id = serializers.IntegerField(min_value=1, max_value=PILLAR_COUNT)
    category = serializers.ChoiceField(choices=sorted(CATEGORY_NAMES))
    score = serializers.IntegerField(min_value=1, max_value=5)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class AuditCreateSerializer(serializers.Serializer):
    employee_id = serializers.PrimaryKeyRelatedField(
        queryset=Employee.objects.select_related("position")
    )
    year = serializers.IntegerField(min_value=2000, max_value=2100)
    quarter = serializers.IntegerField(min_value=1, max_value=4)
    pillar_answers = PillarAnswerSerializer(many=True, allow_empty=False)


class AuditSerializer(serializers.ModelSerializer):
    employee_code = serializers.CharField(source="employee.employee_code", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)
    position_name = serializers.CharField(
        source="employee.position.name", read_only=True
    )
    period = serializers.CharField(read_only=True)
    is_deleted = serializers.BooleanField(read_only=True)

    class Meta:
        model = Audit
        fields = [
            "id",
            "employee",
            "employee_code",
            "employee_name",
            "position_name",
            "year",
            "quarter",
            "period",
            "margin_personal_q",
            "na_personal_q",
            "margin_team_q",
            "na_team_q",
            "team_structure",
            "targets",
            "pillar_answers",
            "total_self_score",
            "total_reality_score",
            "total_gap",
            "zona_kinerja",
            "zona_perilaku",
            "zona_final",
            "profile",
            "prodem",
            "report",
            "tenure_months",
            "created_by",
            "aggregated_at",
            "report_generated_at",
            "created_at",
            "updated_at",
            "is_deleted",
            "deleted_at",
            "delete_reason",
        ]
        read_only_fields = fields


class AuditListSerializer(serializers.ModelSerializer):
    employee_code = serializers.CharField(source="employee.employee_code", read_only=True)
    employee_name = serializers.CharField(source="employee.full_name", read_only=True)

    class Meta:
        model = Audit
        fields = [
            "id",
            "employee",
            "employee_code",
            "employee_name",
            "year",
            "quarter",
            "margin_personal_q",
            "margin_team_q",
            "zona_final",
            "profile",
            "created_at",
            "deleted_at",
        ]
        read_only_fields = fields


class SoftDeleteSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=1000, trim_whitespace=True)
