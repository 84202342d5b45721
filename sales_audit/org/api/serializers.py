from rest_framework import serializers

from sales_audit.org.models import Branch
from sales_audit.org.models import Position


class PositionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Position
        fields = ["id", "code", "name", "level"]


class BranchSerializer(serializers.ModelSerializer):
    company_name = serializers.CharField(source="company.name", read_only=True, default=None)

    class Meta:
        model = Branch
        fields = ["id", "code", "name", "company", "company_name", "is_active"]
