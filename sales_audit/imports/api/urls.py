from django.urls import path

from sales_audit.imports.api.views import ImportCommitView
from sales_audit.imports.api.views import ImportValidateView
from sales_audit.imports.api.views import UploadLogListView

app_name = "imports"

urlpatterns = [
    path("validate/", ImportValidateView.as_view(), name="validate"),
    path("commit/", ImportCommitView.as_view(), name="commit"),
    path("logs/", UploadLogListView.as_view(), name="logs"),
]
