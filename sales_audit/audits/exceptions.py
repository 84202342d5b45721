from __future__ import annotations

from typing import Any


class AuditServiceError(Exception):
    """Domain failure that views translate into an HTTP response."""

    status_code = 400
    code = "invalid"

    def __init__(self, message: str, *, detail: Any = None):
        super().__init__(message)
        self.message = message
        self.detail = detail

    def as_response_data(self) -> dict[str, Any]:
        data: dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.detail is not None:
            data["errors"] = self.detail
        return data


class DuplicateAuditError(AuditServiceError):
    status_code = 409
    code = "duplicate_audit"


class IncompleteDataError(AuditServiceError):
    code = "incomplete_data"


class HierarchyViolationError(AuditServiceError):
    code = "hierarchy_violation"


class AuditPermissionError(AuditServiceError):
    status_code = 403
    code = "forbidden"
