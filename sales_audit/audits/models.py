from django.conf import settings
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models


class Zone(models.TextChoices):
    SUCCESS = "success", "Success"
    WARNING = "warning", "Warning"
    CRITICAL = "critical", "Critical"


class Profile(models.TextChoices):
    LEADER = "Leader", "Leader"
    VISIONARY = "Visionary", "Visionary"
    PERFORMER = "Performer", "Performer"
    AT_RISK = "At-Risk", "At-Risk"


class AuditQuerySet(models.QuerySet):
    def active(self):
        return self.filter(deleted_at__isnull=True)

    def for_period(self, year: int, quarter: int):
        return self.filter(year=year, quarter=quarter)


class Audit(models.Model):
    """Quarterly audit snapshot for one employee.

    Pillar answers, figures and classification are written once at creation.
    Team figures may be refreshed and the report regenerated later; the row
    is otherwise append-only. A soft-deleted audit still occupies its period.
    """

    employee = models.ForeignKey(
        "employees.Employee", on_delete=models.PROTECT, related_name="audits"
    )
    year = models.PositiveSmallIntegerField()
    quarter = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(4)]
    )

    margin_personal_q = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    na_personal_q = models.PositiveIntegerField(default=0)
    margin_team_q = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    na_team_q = models.PositiveIntegerField(default=0)
    team_structure = models.JSONField(default=dict, blank=True)
    targets = models.JSONField(default=dict, blank=True)

    pillar_answers = models.JSONField(default=list)
    total_self_score = models.PositiveSmallIntegerField(default=0)
    total_reality_score = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    total_gap = models.DecimalField(max_digits=6, decimal_places=2, default=0)

    zona_kinerja = models.CharField(max_length=10, choices=Zone.choices)
    zona_perilaku = models.CharField(max_length=10, choices=Zone.choices)
    zona_final = models.CharField(max_length=10, choices=Zone.choices)
    profile = models.CharField(max_length=20, choices=Profile.choices)
    prodem = models.JSONField(default=dict, blank=True)
    report = models.JSONField(default=dict, blank=True)
    tenure_months = models.PositiveIntegerField(default=0)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_audits",
    )
    aggregated_at = models.DateTimeField(null=True, blank=True)
    report_generated_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deleted_audits",
    )
    delete_reason = models.TextField(blank=True)

    objects = AuditQuerySet.as_manager()

    class Meta:
        ordering = ["-year", "-quarter", "employee__full_name"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "year", "quarter"],
                name="unique_audit_per_period",
            )
        ]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Audit({self.employee_id} {self.year}-Q{self.quarter})"

    @property
    def period(self) -> str:
        return f"Q{self.quarter} {self.year}"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
