"""Deterministic report sections derived from a classification."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING
from typing import Any

if TYPE_CHECKING:
    from .classification import Classification
    from .classification import QuarterMetrics
    from .classification import Targets

STATUS_ABOVE = "above"
STATUS_MEET = "meet"
STATUS_BELOW = "below"


def achievement_status(actual, target) -> str:
    """Above when more than 5% over target, meet within 5%, else below."""
    if not target:
        return STATUS_MEET
    actual = Decimal(actual)
    target = Decimal(target)
    if actual > target * Decimal("1.05"):
        return STATUS_ABOVE
    if actual >= target * Decimal("0.95"):
        return STATUS_MEET
    return STATUS_BELOW


def quarterly_progress(metrics: QuarterMetrics, targets: Targets) -> dict[str, Any]:
    rows = {
        "personal_margin": (metrics.margin_personal, targets.margin_personal),
        "personal_na": (metrics.na_personal, targets.na_personal),
        "team_margin": (metrics.margin_team, targets.margin_team),
        "team_na": (metrics.na_team, targets.na_team),
    }
    labels = {
        "personal_margin": "personal margin",
        "personal_na": "personal NA",
        "team_margin": "team margin",
        "team_na": "team NA",
    }
    detail = {}
    strengths, concerns = [], []
    for key, (actual, target) in rows.items():
        status = achievement_status(actual, target)
        detail[key] = {"actual": str(actual), "target": str(target), "status": status}
        if status == STATUS_ABOVE:
            strengths.append(f"{labels[key]} above target")
        elif status == STATUS_BELOW:
            concerns.append(f"{labels[key]} below target")

    parts = []
    if strengths:
        parts.append("Strengths: " + ", ".join(strengths) + ".")
    if concerns:
        parts.append("Needs attention: " + ", ".join(concerns) + ".")
    if not parts:
        parts.append("Performance is in line with targets.")
    return {"summary": " ".join(parts), **detail}


def early_warning(classification: Classification) -> dict[str, Any]:
    pillars = classification.pillars
    critical = sorted(
        (p for p in pillars if p.reality_score < Decimal("3.0")),
        key=lambda p: (p.reality_score, p.pillar_id),
    )
    warning = sorted(
        (p for p in pillars if Decimal("3.0") <= p.reality_score < Decimal("3.5")),
        key=lambda p: (p.reality_score, p.pillar_id),
    )
    large_gap = sorted(
        (p for p in pillars if abs(p.gap) > Decimal("1.5")),
        key=lambda p: (-abs(p.gap), p.pillar_id),
    )

    if critical:
        level = "critical"
        summary = f"CRITICAL: {len(critical)} pillar(s) below 3.0 need immediate action."
        if large_gap:
            summary += f" Self-awareness gap on {len(large_gap)} pillar(s)."
    elif len(warning) >= 3:
        level = "warning"
        summary = (
            f"WARNING: {len(warning)} pillars between 3.0 and 3.5. "
            "Preventive action needed."
        )
    elif warning or large_gap:
        level = "warning"
        summary = f"CAUTION: {len(warning)} pillar(s) need improvement."
        if large_gap:
            summary += " Coaching for self-calibration recommended."
    else:
        level = "good"
        summary = "HEALTHY: all pillars are in good condition."

    def brief(p):
        return {
            "pillar_id": p.pillar_id,
            "name": p.name,
            "self_score": p.self_score,
            "reality_score": str(p.reality_score),
            "gap": str(p.gap),
        }

    return {
        "level": level,
        "summary": summary,
        "critical_pillars": [brief(p) for p in critical],
        "warning_pillars": [brief(p) for p in warning],
        "large_gap_pillars": [brief(p) for p in large_gap],
    }
