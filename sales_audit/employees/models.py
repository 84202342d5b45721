import math

from django.conf import settings
from django.core.validators import MaxValueValidator
from django.core.validators import MinValueValidator
from django.db import models


def quarter_for_month(month: int) -> int:
    return math.ceil(month / 3)


def months_for_quarter(quarter: int) -> list[int]:
    first = (quarter - 1) * 3 + 1
    return [first, first + 1, first + 2]


class Employee(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        RESIGNED = "resigned", "Resigned"
        FREELANCE = "freelance", "Freelance"

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employee",
    )
    employee_code = models.CharField(max_length=20, unique=True)
    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=30, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    join_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.ACTIVE
    )
    position = models.ForeignKey(
        "org.Position", on_delete=models.PROTECT, related_name="employees"
    )
    manager = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="subordinates",
    )
    company = models.ForeignKey(
        "org.Company",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
    )
    ceo_unit = models.ForeignKey(
        "org.CeoUnit",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
    )
    branch = models.ForeignKey(
        "org.Branch",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="employees",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name", "id"]

    def __str__(self):  # pragma: no cover - trivial
        return f"{self.employee_code} {self.full_name}"


class MonthlyPerformance(models.Model):
    """One month of personal output for an employee.

    ``quarter`` is always derived from ``month`` on save.
    """

    employee = models.ForeignKey(
        Employee, on_delete=models.CASCADE, related_name="performance"
    )
    year = models.PositiveSmallIntegerField()
    month = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(12)]
    )
    quarter = models.PositiveSmallIntegerField(editable=False)
    margin_personal = models.DecimalField(max_digits=15, decimal_places=2, default=0)
    na_personal = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["employee", "year", "month"]
        constraints = [
            models.UniqueConstraint(
                fields=["employee", "year", "month"],
                name="unique_monthly_performance",
            )
        ]
        indexes = [
            models.Index(
                fields=["employee", "year", "quarter"], name="perf_employee_period_idx"
            )
        ]

    def __str__(self):  # pragma: no cover - trivial
        return f"{self.employee_id} {self.year}-{self.month:02d}"

    def save(self, *args, **kwargs):
        self.quarter = quarter_for_month(int(self.month))
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "month" in update_fields:
            kwargs["update_fields"] = {*update_fields, "quarter"}
        super().save(*args, **kwargs)
