from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework import serializers

from sales_audit.activity.models import ActivityLog

User = get_user_model()


class ActivityActorSerializer(serializers.ModelSerializer):
    full_name = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "full_name"]

    def get_full_name(self, obj) -> str | None:
        return (obj.get_full_name() or "").strip() or None


class ActivityLogSerializer(serializers.ModelSerializer):
    actor = ActivityActorSerializer(allow_null=True)

    class Meta:
        model = ActivityLog
        fields = [
            "id",
            "action",
            "message",
            "model_name",
            "record_id",
            "after",
            "ip_address",
            "created_at",
            "actor",
        ]
