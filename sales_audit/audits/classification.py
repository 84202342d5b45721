"""Score classification for quarterly audits.

Everything here is a pure function of its arguments: no clock, no database,
no randomness. Regenerating a report from stored answers therefore
reproduces the stored zones, profile and recommendation exactly.

Reality score per pillar:

- category A: personal margin/NA against personal targets;
- category B: the self score (conduct is not measured);
- category C: team margin/NA against team targets.

Achievement ratio = 0.7 * margin/target + 0.3 * na/target (a missing target
counts as ratio 1.0), mapped >=1.10 -> 5, >=0.81 -> 4, >=0.61 -> 3, else 2.

Zones use thresholds 4.0 (success) and 3.0 (warning):

- zona kinerja = zone(0.6 * mean(A) + 0.4 * mean(B))
- zona perilaku = zone(mean(C))
- zona final: any critical -> critical; success with warning -> warning;
  both success -> success; both warning -> zone(0.7 * kinerja + 0.3 * perilaku).
"""

from __future__ import annotations

from dataclasses import asdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import Any

from sales_audit.audits.pillars import CATEGORY_A
from sales_audit.audits.pillars import CATEGORY_B
from sales_audit.audits.pillars import CATEGORY_C
from sales_audit.audits.pillars import PILLARS_BY_ID

ZONE_SUCCESS = "success"
ZONE_WARNING = "warning"
ZONE_CRITICAL = "critical"

PROFILE_LEADER = "Leader"
PROFILE_VISIONARY = "Visionary"
PROFILE_PERFORMER = "Performer"
PROFILE_AT_RISK = "At-Risk"

PROMOSI = "Promosi"
DIPERTAHANKAN = "Dipertahankan"
PEMBINAAN = "Pembinaan"
DEMOSI = "Demosi"

MARGIN_WEIGHT = Decimal("0.7")
NA_WEIGHT = Decimal("0.3")
RATIO_BANDS = ((Decimal("1.10"), 5), (Decimal("0.81"), 4), (Decimal("0.61"), 3))
FLOOR_SCORE = 2
SUCCESS_THRESHOLD = Decimal("4.0")
WARNING_THRESHOLD = Decimal("3.0")
GRACE_PERIOD_MONTHS = 6

_TWO = Decimal("0.01")
_ONE = Decimal("0.1")


def _q2(value: Decimal) -> Decimal:
    return value.quantize(_TWO, rounding=ROUND_HALF_UP)


def _fmt1(value: Decimal) -> str:
    return str(value.quantize(_ONE, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class QuarterMetrics:
    margin_personal: Decimal
    na_personal: int
    margin_team: Decimal
    na_team: int


@dataclass(frozen=True)
class Targets:
    margin_personal: Decimal
    na_personal: int
    margin_team: Decimal
    na_team: int
    source: str = "default"

    def as_dict(self) -> dict[str, Any]:
        return {
            "margin_personal": str(self.margin_personal),
            "na_personal": self.na_personal,
            "margin_team": str(self.margin_team),
            "na_team": self.na_team,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Targets:
        return cls(
            margin_personal=Decimal(str(data["margin_personal"])),
            na_personal=int(data["na_personal"]),
            margin_team=Decimal(str(data["margin_team"])),
            na_team=int(data["na_team"]),
            source=data.get("source", "default"),
        )


@dataclass(frozen=True)
class ScoredPillar:
    pillar_id: int
    category: str
    name: str
    self_score: int
    reality_score: Decimal
    gap: Decimal
    insight: str
    notes: str = ""

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["reality_score"] = str(self.reality_score)
        data["gap"] = str(self.gap)
        return data


@dataclass(frozen=True)
class Classification:
    pillars: tuple[ScoredPillar, ...]
    zona_kinerja: str
    zona_perilaku: str
    zona_final: str
    profile: str
    prodem: dict[str, Any]
    kinerja_score: Decimal
    perilaku_score: Decimal
    avg_reality: Decimal
    avg_abs_gap: Decimal
    total_self_score: int
    total_reality_score: Decimal
    total_gap: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {
            "pillars": [p.as_dict() for p in self.pillars],
            "zona_kinerja": self.zona_kinerja,
            "zona_perilaku": self.zona_perilaku,
            "zona_final": self.zona_final,
            "profile": self.profile,
            "prodem": self.prodem,
            "kinerja_score": str(self.kinerja_score),
            "perilaku_score": str(self.perilaku_score),
            "avg_reality": str(self.avg_reality),
            "avg_abs_gap": str(self.avg_abs_gap),
            "total_self_score": self.total_self_score,
            "total_reality_score": str(self.total_reality_score),
            "total_gap": str(self.total_gap),
        }


def ratio_to_score(ratio: Decimal) -> int:
    for threshold, score in RATIO_BANDS:
        if ratio >= threshold:
            return score
    return FLOOR_SCORE


def achievement_ratio(margin: Decimal, na: int, margin_target, na_target) -> Decimal:
    margin_ratio = Decimal(margin) / Decimal(margin_target) if margin_target else Decimal(1)
    na_ratio = Decimal(na) / Decimal(na_target) if na_target else Decimal(1)
    return margin_ratio * MARGIN_WEIGHT + na_ratio * NA_WEIGHT


def reality_score(
    category: str, self_score: int, metrics: QuarterMetrics, targets: Targets
) -> Decimal:
    if category == CATEGORY_B:
        return Decimal(self_score)
    if category == CATEGORY_A:
        margin, na = metrics.margin_personal, metrics.na_personal
        margin_target, na_target = targets.margin_personal, targets.na_personal
    else:
        margin, na = metrics.margin_team, metrics.na_team
        margin_target, na_target = targets.margin_team, targets.na_team
    if not margin_target and not na_target:
        return Decimal(self_score)
    return Decimal(ratio_to_score(achievement_ratio(margin, na, margin_target, na_target)))


def pillar_insight(gap: Decimal) -> str:
    if abs(gap) > Decimal("1.5"):
        if gap > 0:
            return (
                f"Measured performance exceeds the self-assessment (+{_fmt1(gap)}). "
                "Self-awareness is growing."
            )
        return (
            f"Significant gap between self-assessment and reality ({_fmt1(gap)}). "
            "Expectations need calibration."
        )
    if abs(gap) > Decimal("0.5"):
        if gap > 0:
            return "Slight underestimation. Good progress."
        return "Slight overestimation. Self-awareness calibration recommended."
    return ""


def score_to_zone(score: Decimal) -> str:
    if score >= SUCCESS_THRESHOLD:
        return ZONE_SUCCESS
    if score >= WARNING_THRESHOLD:
        return ZONE_WARNING
    return ZONE_CRITICAL


def _mean(values: list[Decimal]) -> Decimal:
    if not values:
        return Decimal(0)
    return sum(values, Decimal(0)) / len(values)


def combine_zones(
    kinerja: str, perilaku: str, kinerja_score: Decimal, perilaku_score: Decimal
) -> str:
    if ZONE_CRITICAL in (kinerja, perilaku):
        return ZONE_CRITICAL
    if kinerja != perilaku:
        return ZONE_WARNING
    if kinerja == ZONE_SUCCESS:
        return ZONE_SUCCESS
    return score_to_zone(kinerja_score * Decimal("0.7") + perilaku_score * Decimal("0.3"))


def classify_profile(avg_reality: Decimal, avg_abs_gap: Decimal) -> str:
    if avg_reality >= Decimal("4.2") and avg_abs_gap <= Decimal("0.5"):
        return PROFILE_LEADER
    if Decimal("3.6") <= avg_reality < Decimal("4.2"):
        return PROFILE_VISIONARY
    if Decimal("3.0") <= avg_reality < Decimal("3.6") or avg_abs_gap > Decimal("1.0"):
        return PROFILE_PERFORMER
    return PROFILE_AT_RISK


def _requirement(label: str, value: str, met: bool) -> dict[str, Any]:
    return {"label": label, "value": value, "met": met}


def recommend_prodem(  # noqa: PLR0913
    zona_final: str,
    profile: str,
    pillars: tuple[ScoredPillar, ...],
    *,
    current_position: str,
    next_position: str | None,
    tenure_months: int,
    margin_over_target: bool,
) -> dict[str, Any]:
    """Promotion / retention / coaching / demotion with its audit trail."""
    base = {"current_position": current_position, "next_position": None}

    if zona_final == ZONE_SUCCESS:
        if profile == PROFILE_LEADER and margin_over_target:
            return {
                **base,
                "recommendation": PROMOSI,
                "next_position": next_position,
                "reason": (
                    "Consistently in the success zone with a Leader profile; "
                    "margin is above target."
                ),
                "consequence": "Promote to the next position to use leadership potential.",
                "next_step": "Prepare onboarding for the new role, knowledge transfer and succession.",
                "requirements": [
                    _requirement("Avg reality score", ">= 4.2", True),
                    _requirement("Zona final", "Success", True),
                    _requirement("Margin achievement", "Above target", margin_over_target),
                ],
            }
        return {
            **base,
            "recommendation": DIPERTAHANKAN,
            "reason": f"Solid performance in the success zone ({profile}).",
            "consequence": "Keep the current role with added responsibility.",
            "next_step": "Focus on leadership development ahead of a future promotion.",
            "requirements": [
                _requirement("Zona final", "Success", True),
                _requirement("Profile", "Leader", profile == PROFILE_LEADER),
                _requirement("Margin achievement", "Above target", margin_over_target),
            ],
        }

    if zona_final == ZONE_WARNING:
        large_negative = [p for p in pillars if p.gap < Decimal("-1.5")]
        avg_reality = _mean([p.reality_score for p in pillars])
        if len(large_negative) >= 6 and avg_reality < Decimal("3.2"):
            return {
                **base,
                "recommendation": DEMOSI,
                "reason": (
                    f"Warning zone with a downward trend: {len(large_negative)} pillars "
                    "show large negative gaps, a systematic over-estimation."
                ),
                "consequence": "Move to a lower position with an intensive coaching programme.",
                "next_step": "One-on-one discussion on role transition and realistic goals.",
                "requirements": [
                    _requirement("Avg reality score", "Min 3.5 within 3 months", False),
                    _requirement("Self-assessment calibration", "Align with reality", False),
                ],
            }
        focus = sorted(
            (p for p in pillars if abs(p.gap) > Decimal("1.0")),
            key=lambda p: (-abs(p.gap), p.pillar_id),
        )[:3]
        focus_names = ", ".join(p.name for p in focus) or "no single pillar"
        return {
            **base,
            "recommendation": PEMBINAAN,
            "reason": f"Warning zone requires an improvement plan. Largest gaps: {focus_names}.",
            "consequence": "Intensive coaching for 3 to 6 months with periodic reviews.",
            "next_step": "30-60-90 day action plan focused on the largest gaps.",
            "requirements": [
                _requirement(p.name, f"Raise score from {p.reality_score} to at least 4.0", False)
                for p in focus
            ],
        }

    if tenure_months < GRACE_PERIOD_MONTHS:
        return {
            **base,
            "recommendation": PEMBINAAN,
            "reason": (
                f"Critical zone early in tenure ({tenure_months} months). "
                "Grace period with intensive coaching."
            ),
            "consequence": "Extended onboarding with 3 months of mentoring, then re-evaluation.",
            "next_step": "Weekly check-ins with the supervisor and clear milestones.",
            "requirements": [
                _requirement("Avg reality score", "Min 3.5 within 3 months", False),
                _requirement("Tenure", f"< {GRACE_PERIOD_MONTHS} months", True),
            ],
        }
    return {
        **base,
        "recommendation": DEMOSI,
        "reason": "Sustained critical zone; the role does not match current capability.",
        "consequence": "Move to a lower position with an improvement plan and 6 months of monitoring.",
        "next_step": "One-on-one discussion on role transition and a commitment plan.",
        "requirements": [
            _requirement("Avg reality score", "Min 3.0 in the new role", False),
            _requirement("Tenure", f">= {GRACE_PERIOD_MONTHS} months", True),
        ],
    }


def score_pillars(
    answers: list[dict[str, Any]], metrics: QuarterMetrics, targets: Targets
) -> tuple[ScoredPillar, ...]:
    scored = []
    for answer in sorted(answers, key=lambda a: a["pillar_id"]):
        pillar = PILLARS_BY_ID[answer["pillar_id"]]
        self_score = int(answer["score"])
        reality = reality_score(pillar.category, self_score, metrics, targets)
        gap = reality - self_score
        scored.append(
            ScoredPillar(
                pillar_id=pillar.id,
                category=pillar.category,
                name=pillar.name,
                self_score=self_score,
                reality_score=_q2(reality),
                gap=_q2(gap),
                insight=pillar_insight(gap),
                notes=answer.get("notes") or "",
            )
        )
    return tuple(scored)


def classify(  # noqa: PLR0913
    answers: list[dict[str, Any]],
    metrics: QuarterMetrics,
    targets: Targets,
    *,
    tenure_months: int,
    current_position: str,
    next_position: str | None = None,
) -> Classification:
    """Classify a complete set of 18 answers. Callers validate completeness first."""
    pillars = score_pillars(answers, metrics, targets)

    def scores(category: str) -> list[Decimal]:
        return [p.reality_score for p in pillars if p.category == category]

    kinerja_score = _mean(scores(CATEGORY_A)) * Decimal("0.6") + _mean(
        scores(CATEGORY_B)
    ) * Decimal("0.4")
    perilaku_score = _mean(scores(CATEGORY_C))
    zona_kinerja = score_to_zone(kinerja_score)
    zona_perilaku = score_to_zone(perilaku_score)
    zona_final = combine_zones(zona_kinerja, zona_perilaku, kinerja_score, perilaku_score)

    avg_reality = _mean([p.reality_score for p in pillars])
    avg_abs_gap = _mean([abs(p.gap) for p in pillars])
    profile = classify_profile(avg_reality, avg_abs_gap)

    prodem = recommend_prodem(
        zona_final,
        profile,
        pillars,
        current_position=current_position,
        next_position=next_position,
        tenure_months=tenure_months,
        margin_over_target=metrics.margin_personal > targets.margin_personal,
    )

    return Classification(
        pillars=pillars,
        zona_kinerja=zona_kinerja,
        zona_perilaku=zona_perilaku,
        zona_final=zona_final,
        profile=profile,
        prodem=prodem,
        kinerja_score=_q2(kinerja_score),
        perilaku_score=_q2(perilaku_score),
        avg_reality=_q2(avg_reality),
        avg_abs_gap=_q2(avg_abs_gap),
        total_self_score=sum(p.self_score for p in pillars),
        total_reality_score=_q2(sum((p.reality_score for p in pillars), Decimal(0))),
        total_gap=_q2(sum((abs(p.gap) for p in pillars), Decimal(0))),
    )
