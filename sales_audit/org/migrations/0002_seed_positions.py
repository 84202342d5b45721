from django.db import migrations

from sales_audit.org.positions import DEFAULT_POSITIONS
from sales_audit.org.positions import ensure_default_positions


def seed_positions(apps, schema_editor):
    ensure_default_positions(apps.get_model("org", "Position"))


def unseed_positions(apps, schema_editor):
    Position = apps.get_model("org", "Position")
    Position.objects.filter(code__in=[code for code, _, _ in DEFAULT_POSITIONS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('org', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_positions, unseed_positions),
    ]
