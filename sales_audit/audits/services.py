from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from dataclasses import field
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING
from typing import Any

from django.db import IntegrityError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from sales_audit.activity.utils import log_action
from sales_audit.audits.classification import QuarterMetrics
from sales_audit.audits.classification import Targets
from sales_audit.audits.classification import classify
from sales_audit.audits.exceptions import AuditServiceError
from sales_audit.audits.exceptions import DuplicateAuditError
from sales_audit.audits.exceptions import IncompleteDataError
from sales_audit.audits.models import Audit
from sales_audit.audits.narrative import build_narrative
from sales_audit.audits.pillars import validate_pillar_answers
from sales_audit.audits.reports import early_warning
from sales_audit.audits.reports import quarterly_progress
from sales_audit.audits.repository import DjangoHierarchyRepository
from sales_audit.audits.repository import get_walker
from sales_audit.employees.models import MonthlyPerformance
from sales_audit.employees.models import months_for_quarter
from sales_audit.hierarchy.aggregation import TeamAggregation
from sales_audit.hierarchy.aggregation import TeamAggregator
from sales_audit.org.models import Position
from sales_audit.policies import cascade_refresh_enabled
from sales_audit.policies import default_margin_target
from sales_audit.policies import default_na_target
from sales_audit.policies import default_tenure_months

if TYPE_CHECKING:
    from sales_audit.employees.models import Employee

logger = logging.getLogger(__name__)


@dataclass
class QuarterlyPerformance:
    employee_id: int
    year: int
    quarter: int
    months_present: list[int]
    missing_months: list[int]
    margin: Decimal
    na: int

    @property
    def complete(self) -> bool:
        return not self.missing_months

    def as_dict(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "year": self.year,
            "quarter": self.quarter,
            "months_present": self.months_present,
            "missing_months": self.missing_months,
            "complete": self.complete,
            "margin_personal_q": str(self.margin),
            "na_personal_q": self.na,
        }


@dataclass
class AuditCreation:
    audit: Audit
    warnings: list[str] = field(default_factory=list)
    pending_subordinates: list[dict[str, Any]] = field(default_factory=list)


def previous_period(year: int, quarter: int) -> tuple[int, int]:
    if quarter == 1:
        return year - 1, 4
    return year, quarter - 1


def quarter_end(year: int, quarter: int) -> date:
    last_month = quarter * 3
    return date(year, last_month, calendar.monthrange(year, last_month)[1])


def tenure_months(join_date: date | None, year: int, quarter: int) -> int:
    """Whole 30-day months between joining and the end of the audited quarter.

    Anchoring on the quarter end keeps regenerated reports identical no
    matter when they are regenerated.
    """
    if join_date is None:
        return default_tenure_months()
    days = (quarter_end(year, quarter) - join_date).days
    return max(0, days // 30)


def quarterly_performance(employee_id: int, year: int, quarter: int) -> QuarterlyPerformance:
    rows = MonthlyPerformance.objects.filter(
        employee_id=employee_id, year=year, quarter=quarter
    )
    months_present = sorted(rows.values_list("month", flat=True))
    totals = rows.aggregate(margin=Sum("margin_personal"), na=Sum("na_personal"))
    return QuarterlyPerformance(
        employee_id=employee_id,
        year=year,
        quarter=quarter,
        months_present=months_present,
        missing_months=[m for m in months_for_quarter(quarter) if m not in months_present],
        margin=(totals["margin"] or Decimal("0")).quantize(Decimal("0.01")),
        na=int(totals["na"] or 0),
    )


def require_complete_quarter(employee_id: int, year: int, quarter: int) -> QuarterlyPerformance:
    perf = quarterly_performance(employee_id, year, quarter)
    if not perf.complete:
        missing = ", ".join(f"{year}-{m:02d}" for m in perf.missing_months)
        msg = (
            f"Q{quarter} {year} needs 3 months of performance data; "
            f"missing: {missing}"
        )
        raise IncompleteDataError(msg, detail={"missing_months": perf.missing_months})
    return perf


def resolve_targets(employee: Employee, year: int, quarter: int) -> Targets:
    """Targets are the previous quarter's actuals, per figure, else the policy baseline.

    A zero actual falls back to the baseline as well.
    """
    prev_year, prev_quarter = previous_period(year, quarter)
    margin_default = default_margin_target()
    na_default = default_na_target()
    used_previous = 0

    prev_perf = quarterly_performance(employee.pk, prev_year, prev_quarter)
    margin_personal, na_personal = margin_default, na_default
    if prev_perf.complete:
        if prev_perf.margin > 0:
            margin_personal = prev_perf.margin
            used_previous += 1
        if prev_perf.na > 0:
            na_personal = prev_perf.na
            used_previous += 1

    margin_team, na_team = margin_default, na_default
    prev_audit = (
        Audit.objects.active()
        .filter(employee=employee, year=prev_year, quarter=prev_quarter)
        .first()
    )
    if prev_audit is not None:
        if prev_audit.margin_team_q > 0:
            margin_team = prev_audit.margin_team_q
            used_previous += 1
        if prev_audit.na_team_q > 0:
            na_team = prev_audit.na_team_q
            used_previous += 1

    if used_previous == 0:
        source = "default"
    elif used_previous == 4:  # noqa: PLR2004
        source = "previous_quarter"
    else:
        source = "mixed"
    return Targets(
        margin_personal=Decimal(margin_personal),
        na_personal=int(na_personal),
        margin_team=Decimal(margin_team),
        na_team=int(na_team),
        source=source,
    )


def next_position_for(position: Position) -> Position | None:
    return Position.objects.filter(level__lt=position.level).order_by("-level").first()


def aggregate_team(employee_id: int, year: int, quarter: int) -> TeamAggregation:
    return TeamAggregator(DjangoHierarchyRepository()).aggregate(employee_id, year, quarter)


def _build_report(employee: Employee, period: str, classification, metrics, targets) -> dict[str, Any]:
    progress = quarterly_progress(metrics, targets)
    ews = early_warning(classification)
    classification_data = classification.as_dict()
    narrative = build_narrative(
        employee_name=employee.full_name,
        position_name=employee.position.name,
        period=period,
        classification=classification_data,
        progress=progress,
        early_warning=ews,
    )
    return {
        "scores": {
            "kinerja_score": classification_data["kinerja_score"],
            "perilaku_score": classification_data["perilaku_score"],
            "avg_reality": classification_data["avg_reality"],
            "avg_abs_gap": classification_data["avg_abs_gap"],
        },
        "progress": progress,
        "early_warning": ews,
        "narrative": narrative,
    }


def _classify_for(employee: Employee, answers, metrics, targets, tenure: int):
    next_position = next_position_for(employee.position)
    return classify(
        answers,
        metrics,
        targets,
        tenure_months=tenure,
        current_position=employee.position.name,
        next_position=next_position.name if next_position else None,
    )


def _apply_classification(audit: Audit, classification, report: dict[str, Any]) -> None:
    audit.pillar_answers = [p.as_dict() for p in classification.pillars]
    audit.total_self_score = classification.total_self_score
    audit.total_reality_score = classification.total_reality_score
    audit.total_gap = classification.total_gap
    audit.zona_kinerja = classification.zona_kinerja
    audit.zona_perilaku = classification.zona_perilaku
    audit.zona_final = classification.zona_final
    audit.profile = classification.profile
    audit.prodem = classification.prodem
    audit.report = report
    audit.report_generated_at = timezone.now()


def _team_snapshot(aggregation: TeamAggregation) -> dict[str, Any]:
    return {
        **aggregation.structure,
        "warnings": list(aggregation.warnings),
        "pending_subordinates": list(aggregation.pending_subordinates),
    }


def _enqueue_cascade(employee_id: int, year: int, quarter: int) -> None:
    if not cascade_refresh_enabled():
        return
    from sales_audit.audits.tasks import cascade_refresh_task  # noqa: PLC0415

    transaction.on_commit(
        lambda: cascade_refresh_task.delay(employee_id, year, quarter)
    )


def create_audit(
    *,
    employee: Employee,
    year: int,
    quarter: int,
    pillar_answers: list[dict[str, Any]],
    actor=None,
) -> AuditCreation:
    """Validate, aggregate, classify and persist one quarterly audit.

    The report, narrative included, is built before the write transaction
    opens; only the insert and its activity entry run inside it.
    """
    if Audit.objects.filter(employee=employee, year=year, quarter=quarter).exists():
        msg = f"An audit for Q{quarter} {year} already exists for {employee.employee_code}"
        raise DuplicateAuditError(msg)

    answer_errors = validate_pillar_answers(pillar_answers)
    if answer_errors:
        msg = "All 18 pillars must be answered with a score from 1 to 5"
        raise IncompleteDataError(msg, detail=answer_errors)

    perf = require_complete_quarter(employee.pk, year, quarter)
    targets = resolve_targets(employee, year, quarter)
    aggregation = aggregate_team(employee.pk, year, quarter)
    metrics = QuarterMetrics(
        margin_personal=perf.margin,
        na_personal=perf.na,
        margin_team=aggregation.team_margin,
        na_team=aggregation.team_count,
    )
    tenure = tenure_months(employee.join_date, year, quarter)
    classification = _classify_for(employee, pillar_answers, metrics, targets, tenure)
    period = f"Q{quarter} {year}"
    report = _build_report(employee, period, classification, metrics, targets)

    audit = Audit(
        employee=employee,
        year=year,
        quarter=quarter,
        margin_personal_q=perf.margin,
        na_personal_q=perf.na,
        margin_team_q=aggregation.team_margin,
        na_team_q=aggregation.team_count,
        team_structure=_team_snapshot(aggregation),
        targets=targets.as_dict(),
        tenure_months=tenure,
        created_by=actor if getattr(actor, "is_authenticated", False) else None,
        aggregated_at=timezone.now(),
    )
    _apply_classification(audit, classification, report)
    try:
        with transaction.atomic():
            audit.save()
            log_action(
                "audits.audit.create",
                actor=actor,
                model_name="Audit",
                record_id=audit.pk,
                after={
                    "employee": employee.employee_code,
                    "period": period,
                    "zona_final": audit.zona_final,
                    "profile": audit.profile,
                    "recommendation": audit.prodem.get("recommendation"),
                },
            )
            _enqueue_cascade(employee.pk, year, quarter)
    except IntegrityError:
        msg = f"An audit for Q{quarter} {year} already exists for {employee.employee_code}"
        raise DuplicateAuditError(msg) from None

    logger.info(
        "Audit %s created for %s %s: final=%s profile=%s",
        audit.pk,
        employee.employee_code,
        period,
        audit.zona_final,
        audit.profile,
    )
    return AuditCreation(
        audit=audit,
        warnings=list(aggregation.warnings),
        pending_subordinates=list(aggregation.pending_subordinates),
    )


@transaction.atomic
def refresh_aggregation(audit: Audit, *, actor=None) -> TeamAggregation:
    """Recompute team totals and structure from subordinates' current audits.

    Idempotent: repeated calls with unchanged subordinates write the same values.
    """
    aggregation = aggregate_team(audit.employee_id, audit.year, audit.quarter)
    before = {"margin_team_q": str(audit.margin_team_q), "na_team_q": audit.na_team_q}
    audit.margin_team_q = aggregation.team_margin
    audit.na_team_q = aggregation.team_count
    audit.team_structure = _team_snapshot(aggregation)
    audit.aggregated_at = timezone.now()
    audit.save(
        update_fields=[
            "margin_team_q",
            "na_team_q",
            "team_structure",
            "aggregated_at",
            "updated_at",
        ]
    )
    log_action(
        "audits.audit.refresh_aggregation",
        actor=actor,
        model_name="Audit",
        record_id=audit.pk,
        before=before,
        after={"margin_team_q": str(audit.margin_team_q), "na_team_q": audit.na_team_q},
    )
    return aggregation


def regenerate_report(audit: Audit, *, actor=None) -> Audit:
    """Re-run classification from the stored self scores, figures and targets."""
    answers = [
        {
            "pillar_id": p["pillar_id"],
            "category": p["category"],
            "score": p["self_score"],
            "notes": p.get("notes", ""),
        }
        for p in audit.pillar_answers
    ]
    metrics = QuarterMetrics(
        margin_personal=audit.margin_personal_q,
        na_personal=audit.na_personal_q,
        margin_team=audit.margin_team_q,
        na_team=audit.na_team_q,
    )
    targets = Targets.from_dict(audit.targets)
    employee = audit.employee
    classification = _classify_for(employee, answers, metrics, targets, audit.tenure_months)
    report = _build_report(employee, audit.period, classification, metrics, targets)
    _apply_classification(audit, classification, report)
    with transaction.atomic():
        audit.save()
        log_action(
            "audits.audit.regenerate_report",
            actor=actor,
            model_name="Audit",
            record_id=audit.pk,
            after={"zona_final": audit.zona_final, "profile": audit.profile},
        )
    return audit


@transaction.atomic
def soft_delete_audit(audit: Audit, *, actor, reason: str) -> Audit:
    reason = (reason or "").strip()
    if not reason:
        msg = "A reason is required to delete an audit"
        raise AuditServiceError(msg)
    if audit.is_deleted:
        msg = "Audit is already deleted"
        raise AuditServiceError(msg)
    audit.deleted_at = timezone.now()
    audit.deleted_by = actor if getattr(actor, "is_authenticated", False) else None
    audit.delete_reason = reason
    audit.save(update_fields=["deleted_at", "deleted_by", "delete_reason", "updated_at"])
    log_action(
        "audits.audit.soft_delete",
        actor=actor,
        message=reason,
        model_name="Audit",
        record_id=audit.pk,
    )
    _enqueue_cascade(audit.employee_id, audit.year, audit.quarter)
    return audit


@transaction.atomic
def hard_delete_audit(audit: Audit, *, actor) -> None:
    snapshot = {
        "employee": audit.employee.employee_code,
        "period": audit.period,
        "zona_final": audit.zona_final,
    }
    record_id = audit.pk
    employee_id, year, quarter = audit.employee_id, audit.year, audit.quarter
    audit.delete()
    logger.warning("Audit %s permanently deleted", record_id)
    log_action(
        "audits.audit.hard_delete",
        actor=actor,
        model_name="Audit",
        record_id=record_id,
        before=snapshot,
    )
    _enqueue_cascade(employee_id, year, quarter)


def cascade_refresh(employee_id: int, year: int, quarter: int) -> list[int]:
    """Refresh the audits of every manager above ``employee_id`` for the period.

    Walks nearest manager first so each refresh reads already-updated
    figures from the level below.
    """
    refreshed: list[int] = []
    for manager in get_walker().management_chain(employee_id):
        audit = (
            Audit.objects.active()
            .filter(employee_id=manager.id, year=year, quarter=quarter)
            .first()
        )
        if audit is None:
            continue
        refresh_aggregation(audit)
        refreshed.append(audit.pk)
    return refreshed
