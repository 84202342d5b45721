from decimal import Decimal
from http.client import RemoteDisconnected
from unittest import mock

from sales_audit.audits.classification import QuarterMetrics
from sales_audit.audits.classification import Targets
from sales_audit.audits.classification import classify
from sales_audit.audits.narrative import build_narrative
from sales_audit.audits.pillars import PILLARS
from sales_audit.audits.reports import STATUS_ABOVE
from sales_audit.audits.reports import STATUS_BELOW
from sales_audit.audits.reports import STATUS_MEET
from sales_audit.audits.reports import achievement_status
from sales_audit.audits.reports import early_warning
from sales_audit.audits.reports import quarterly_progress

TARGETS = Targets(Decimal("100"), 5, Decimal("100"), 5)


def _classification(score=3, metrics=None):
    metrics = metrics or QuarterMetrics(Decimal("600"), 6, Decimal("0"), 0)
    answers = [{"pillar_id": p.id, "category": p.category, "score": score} for p in PILLARS]
    return classify(
        answers, metrics, TARGETS, tenure_months=12, current_position="Business Manager"
    )


def test_achievement_status_tolerance():
    assert achievement_status(106, 100) == STATUS_ABOVE
    assert achievement_status(105, 100) == STATUS_MEET
    assert achievement_status(95, 100) == STATUS_MEET
    assert achievement_status(94, 100) == STATUS_BELOW
    assert achievement_status(0, 0) == STATUS_MEET


def test_quarterly_progress_summary():
    metrics = QuarterMetrics(Decimal("600"), 6, Decimal("0"), 0)
    progress = quarterly_progress(metrics, TARGETS)
    assert progress["personal_margin"] == {"actual": "600", "target": "100", "status": "above"}
    assert progress["team_na"]["status"] == "below"
    assert progress["summary"] == (
        "Strengths: personal margin above target, personal NA above target. "
        "Needs attention: team margin below target, team NA below target."
    )


def test_quarterly_progress_on_target():
    metrics = QuarterMetrics(Decimal("100"), 5, Decimal("100"), 5)
    assert quarterly_progress(metrics, TARGETS)["summary"] == "Performance is in line with targets."


def test_early_warning_critical():
    ews = early_warning(_classification())
    assert ews["level"] == "critical"
    assert ews["summary"] == (
        "CRITICAL: 6 pillar(s) below 3.0 need immediate action. "
        "Self-awareness gap on 6 pillar(s)."
    )
    assert [p["pillar_id"] for p in ews["critical_pillars"]] == [13, 14, 15, 16, 17, 18]
    assert [p["pillar_id"] for p in ews["large_gap_pillars"]] == [1, 2, 3, 4, 5, 6]


def test_early_warning_healthy():
    metrics = QuarterMetrics(Decimal("600"), 6, Decimal("600"), 6)
    ews = early_warning(_classification(score=5, metrics=metrics))
    assert ews["level"] == "good"
    assert ews["critical_pillars"] == []


def _narrative(classification):
    data = classification.as_dict()
    metrics = QuarterMetrics(Decimal("600"), 6, Decimal("0"), 0)
    return build_narrative(
        employee_name="Budi",
        position_name="Business Manager",
        period="Q1 2025",
        classification=data,
        progress=quarterly_progress(metrics, TARGETS),
        early_warning=early_warning(classification),
    )


def test_template_narrative_when_llm_disabled(settings):
    settings.AUDIT_NARRATIVE_LLM_ENABLED = False
    narrative = _narrative(_classification())
    assert narrative["source"] == "template"
    assert narrative["executive_summary"].startswith(
        "Budi (Business Manager) closes Q1 2025 in the critical zone with a Performer profile."
    )
    assert set(narrative) == {"source", "executive_summary", "strengths", "coaching", "action_plan"}


def test_llm_sections_override_template_without_touching_classification():
    classification = _classification()
    before = classification.as_dict()
    client = mock.Mock()
    client.generate_json.return_value = {"executive_summary": "  Generated.  ", "coaching": ""}
    with mock.patch(
        "sales_audit.audits.narrative.get_llm_client_from_settings", return_value=client
    ):
        narrative = _narrative(classification)
    assert narrative["source"] == "llm"
    assert narrative["executive_summary"] == "Generated."
    assert narrative["coaching"].startswith("Coaching focus:")
    assert classification.as_dict() == before


def test_unusable_llm_output_falls_back_to_template():
    client = mock.Mock()
    client.generate_json.return_value = None
    with mock.patch(
        "sales_audit.audits.narrative.get_llm_client_from_settings", return_value=client
    ):
        narrative = _narrative(_classification())
    assert narrative["source"] == "template"


def test_dropped_llm_connection_falls_back_to_template(settings):
    settings.AUDIT_NARRATIVE_LLM_ENABLED = True
    settings.LLM_PROVIDER = "gemini"
    settings.GEMINI_API_KEY = "test-key"
    with mock.patch(
        "urllib.request.urlopen",
        side_effect=RemoteDisconnected("Remote end closed connection without response"),
    ):
        narrative = _narrative(_classification())
    assert narrative["source"] == "template"
    assert narrative["coaching"].startswith("Coaching focus:")
