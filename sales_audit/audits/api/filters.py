import django_filters

from sales_audit.audits.models import Audit
from sales_audit.audits.models import Profile
from sales_audit.audits.models import Zone


class AuditFilter(django_filters.FilterSet):
    employee = django_filters.NumberFilter(field_name="employee_id")
    year = django_filters.NumberFilter()
    quarter = django_filters.NumberFilter()
    zona_final = django_filters.ChoiceFilter(choices=Zone.choices)
    profile = django_filters.ChoiceFilter(choices=Profile.choices)
    include_deleted = django_filters.BooleanFilter(method="filter_include_deleted")

    class Meta:
        model = Audit
        fields = ["employee", "year", "quarter", "zona_final", "profile"]

    def filter_include_deleted(self, queryset, name, value):
        # applied in qs so deleted rows stay hidden when the param is absent
        return queryset

    @property
    def qs(self):
        qs = super().qs
        if not self.form.cleaned_data.get("include_deleted"):
            qs = qs.filter(deleted_at__isnull=True)
        return qs
