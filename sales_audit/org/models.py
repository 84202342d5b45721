from django.db import models

from sales_audit.org.positions import DEFAULT_POSITIONS

# Fixed sales role codes accepted on import. Levels are seeded by
# migration 0002 and are what manager rank checks compare.
POSITION_CODES = tuple(code for code, _, _ in DEFAULT_POSITIONS)


class Company(models.Model):
    """Legal entity ("PT") employees are contracted under."""

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "companies"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class CeoUnit(models.Model):
    company = models.ForeignKey(
        Company, on_delete=models.CASCADE, related_name="ceo_units"
    )
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.name


class Branch(models.Model):
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="branches",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "branches"

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code} {self.name}"


class Position(models.Model):
    """Sales rank. A lower ``level`` means higher authority (CEO is 1)."""

    code = models.CharField(max_length=10, unique=True)
    name = models.CharField(max_length=100)
    level = models.PositiveSmallIntegerField(unique=True)

    class Meta:
        ordering = ["level"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.code} ({self.name})"

    def outranks(self, other: "Position") -> bool:
        return self.level < other.level
