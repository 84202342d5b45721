from rest_framework import serializers

from sales_audit.hierarchy.decimals import parse_decimal


class NormalizedDecimalField(serializers.DecimalField):
    """DecimalField that also accepts ``1.234,56`` and ``1,234.56`` strings."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            result = parse_decimal(data)
            if not result.ok:
                self.fail("invalid")
            data = str(result.value)
        return super().to_internal_value(data)
