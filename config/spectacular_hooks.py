"""OpenAPI post-processing for drf-spectacular.

Every operation is filed under exactly one feature tag based on its path
so Swagger UI groups audits, imports and the hierarchy separately.
"""

from __future__ import annotations

from typing import Any

_HTTP_METHODS = {"get", "post", "put", "patch", "delete", "options", "head"}

PATTERN_TAGS = [
    ("/api/v1/auth/jwt", "JWT Authentication"),
    ("/api/v1/audits", "Audits"),
    ("/api/v1/imports", "Imports"),
    ("/api/v1/employees", "Employees"),
    ("/api/v1/performance", "Performance"),
    ("/api/v1/positions", "Organization"),
    ("/api/v1/branches", "Organization"),
    ("/api/v1/activity", "Activity"),
    ("/api/v1/schema", "Meta"),
]

ALL_TAGS = list(dict.fromkeys(t for _, t in PATTERN_TAGS))


def assign_group_tag(path: str) -> str | None:
    for prefix, tag in PATTERN_TAGS:
        if path.startswith(prefix):
            return tag
    return None


def group_tags(result: dict[str, Any], **kwargs: Any) -> dict[str, Any]:
    for path, path_item in result.get("paths", {}).items():
        tag = assign_group_tag(path)
        if not tag:
            continue
        for method, op_obj in path_item.items():
            if method.lower() in _HTTP_METHODS and isinstance(op_obj, dict):
                op_obj["tags"] = [tag]

    existing = {t.get("name") for t in result.get("tags", [])}
    tag_list = result.setdefault("tags", [])
    tag_list.extend({"name": tag} for tag in ALL_TAGS if tag not in existing)
    return result
