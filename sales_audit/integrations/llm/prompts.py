from __future__ import annotations

import json
from typing import Any

NARRATIVE_SECTIONS = ("executive_summary", "strengths", "coaching", "action_plan")


def build_audit_narrative_prompt(context: dict[str, Any]) -> str:
    """Prompt asking for the free-text sections of an audit report.

    The classification in ``context`` is final. The model only writes prose
    around it and must not restate different zones or recommendations.
    """

    context_str = json.dumps(context, ensure_ascii=False, sort_keys=True)
    guidance = (
        "You are a sales performance coach writing a quarterly audit report. "
        "Return ONLY a compact JSON object (no markdown) with the string keys: "
        + ", ".join(NARRATIVE_SECTIONS)
        + ".\n\n"
        "Rules:\n"
        "- Zones, profile and recommendation in the context are final; "
        "do not contradict or re-derive them.\n"
        "- Refer to pillars by the names given in the context.\n"
        "- Keep each section under 120 words.\n"
        "- Do not invent figures that are not in the context.\n"
    )
    return f"{guidance}\nContext JSON:\n{context_str}\n"
