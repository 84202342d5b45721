from django.conf import settings
from django.contrib import admin
from django.urls import include
from django.urls import path
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from drf_spectacular.views import SpectacularAPIView
from drf_spectacular.views import SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView
from rest_framework_simplejwt.views import TokenRefreshView
from rest_framework_simplejwt.views import TokenVerifyView

from .health import health as health_view

AUTH_TAGS = ["JWT Authentication"]


@extend_schema_view(post=extend_schema(tags=AUTH_TAGS))
class LoginView(TokenObtainPairView):
    """Exchange username/password for an access + refresh pair."""


@extend_schema_view(post=extend_schema(tags=AUTH_TAGS))
class RefreshView(TokenRefreshView):
    pass


@extend_schema_view(post=extend_schema(tags=AUTH_TAGS))
class VerifyView(TokenVerifyView):
    pass


auth_patterns = [
    path("jwt/create/", LoginView.as_view(), name="jwt-create"),
    path("jwt/refresh/", RefreshView.as_view(), name="jwt-refresh"),
    path("jwt/verify/", VerifyView.as_view(), name="jwt-verify"),
]

docs_patterns = [
    path("schema/", SpectacularAPIView.as_view(), name="api-schema-v1"),
    path(
        "docs/",
        SpectacularSwaggerView.as_view(url_name="api-schema-v1"),
        name="api-docs-v1",
    ),
]

urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path("health/", health_view, name="health"),
    # Resource endpoints live under the 'api_v1' namespace
    path("api/v1/", include(("config.api_router", "api"), namespace="api_v1")),
    path("api/v1/auth/", include(auth_patterns)),
    path("api/v1/", include(docs_patterns)),
]
