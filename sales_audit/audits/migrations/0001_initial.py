from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('employees', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Audit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveSmallIntegerField()),
                ('quarter', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(4)])),
                ('margin_personal_q', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('na_personal_q', models.PositiveIntegerField(default=0)),
                ('margin_team_q', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                ('na_team_q', models.PositiveIntegerField(default=0)),
                ('team_structure', models.JSONField(blank=True, default=dict)),
                ('targets', models.JSONField(blank=True, default=dict)),
                ('pillar_answers', models.JSONField(default=list)),
                ('total_self_score', models.PositiveSmallIntegerField(default=0)),
                ('total_reality_score', models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ('total_gap', models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ('zona_kinerja', models.CharField(choices=[('success', 'Success'), ('warning', 'Warning'), ('critical', 'Critical')], max_length=10)),
                ('zona_perilaku', models.CharField(choices=[('success', 'Success'), ('warning', 'Warning'), ('critical', 'Critical')], max_length=10)),
                ('zona_final', models.CharField(choices=[('success', 'Success'), ('warning', 'Warning'), ('critical', 'Critical')], max_length=10)),
                ('profile', models.CharField(choices=[('Leader', 'Leader'), ('Visionary', 'Visionary'), ('Performer', 'Performer'), ('At-Risk', 'At-Risk')], max_length=20)),
                ('prodem', models.JSONField(blank=True, default=dict)),
                ('report', models.JSONField(blank=True, default=dict)),
                ('tenure_months', models.PositiveIntegerField(default=0)),
                ('aggregated_at', models.DateTimeField(blank=True, null=True)),
                ('report_generated_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('delete_reason', models.TextField(blank=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_audits', to=settings.AUTH_USER_MODEL)),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='deleted_audits', to=settings.AUTH_USER_MODEL)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='audits', to='employees.employee')),
            ],
            options={
                'ordering': ['-year', '-quarter', 'employee__full_name'],
                'constraints': [models.UniqueConstraint(fields=('employee', 'year', 'quarter'), name='unique_audit_per_period')],
            },
        ),
    ]
