"""Free-text report sections.

The classification is passed in frozen; nothing produced here feeds back
into zones, profile or recommendation. When the LLM integration is disabled
or returns nothing usable, a deterministic template is used instead.
"""

from __future__ import annotations

import logging
from typing import Any

from sales_audit.integrations.llm.client import get_llm_client_from_settings
from sales_audit.integrations.llm.prompts import NARRATIVE_SECTIONS
from sales_audit.integrations.llm.prompts import build_audit_narrative_prompt

logger = logging.getLogger(__name__)


def _template_narrative(context: dict[str, Any]) -> dict[str, str]:
    classification = context["classification"]
    prodem = classification["prodem"]
    pillars = classification["pillars"]
    strongest = sorted(pillars, key=lambda p: (-float(p["reality_score"]), p["pillar_id"]))[:3]
    weakest = sorted(pillars, key=lambda p: (float(p["gap"]), p["pillar_id"]))[:3]

    return {
        "executive_summary": (
            f"{context['employee_name']} ({context['position_name']}) closes "
            f"{context['period']} in the {classification['zona_final']} zone with a "
            f"{classification['profile']} profile. Recommendation: "
            f"{prodem['recommendation']}. {context['progress']['summary']}"
        ),
        "strengths": "Strongest pillars: "
        + ", ".join(p["name"] for p in strongest)
        + ".",
        "coaching": "Coaching focus: "
        + ", ".join(f"{p['name']} (gap {p['gap']})" for p in weakest)
        + ".",
        "action_plan": prodem["next_step"],
    }


def build_narrative(
    *,
    employee_name: str,
    position_name: str,
    period: str,
    classification: dict[str, Any],
    progress: dict[str, Any],
    early_warning: dict[str, Any],
) -> dict[str, Any]:
    context = {
        "employee_name": employee_name,
        "position_name": position_name,
        "period": period,
        "classification": classification,
        "progress": progress,
        "early_warning": early_warning,
    }
    sections = _template_narrative(context)
    source = "template"

    client = get_llm_client_from_settings()
    if client is not None:
        generated = client.generate_json(build_audit_narrative_prompt(context))
        if isinstance(generated, dict):
            usable = {
                key: generated[key].strip()
                for key in NARRATIVE_SECTIONS
                if isinstance(generated.get(key), str) and generated[key].strip()
            }
            if usable:
                sections.update(usable)
                source = "llm"
        else:
            logger.info("LLM narrative unavailable for %s %s; using template", employee_name, period)

    return {"source": source, **sections}
