from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import viewsets
from rest_framework.permissions import IsAuthenticated

from sales_audit.org.models import Branch
from sales_audit.org.models import Position

from .serializers import BranchSerializer
from .serializers import PositionSerializer


@extend_schema_view(
    list=extend_schema(summary="List positions (highest authority first)"),
    retrieve=extend_schema(summary="Get a position"),
)
class PositionViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Position.objects.all()
    serializer_class = PositionSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = None


@extend_schema_view(
    list=extend_schema(summary="List active branches"),
    retrieve=extend_schema(summary="Get a branch"),
)
class BranchViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = Branch.objects.filter(is_active=True).select_related("company")
    serializer_class = BranchSerializer
    permission_classes = [IsAuthenticated]
