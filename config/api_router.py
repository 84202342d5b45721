from django.conf import settings
from django.urls import include
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from sales_audit.audits.api.views import AuditViewSet
from sales_audit.employees.api.views import EmployeeViewSet
from sales_audit.employees.api.views import MonthlyPerformanceViewSet
from sales_audit.org.api.views import BranchViewSet
from sales_audit.org.api.views import PositionViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("audits", AuditViewSet, basename="audits")
router.register("employees", EmployeeViewSet, basename="employees")
router.register("performance", MonthlyPerformanceViewSet, basename="performance")
router.register("positions", PositionViewSet)
router.register("branches", BranchViewSet)


app_name = "api"
urlpatterns = [
    path("imports/", include("sales_audit.imports.api.urls")),
    path("activity/", include("sales_audit.activity.api.urls")),
    *router.urls,
]
