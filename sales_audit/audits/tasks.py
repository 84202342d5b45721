from celery import shared_task

from sales_audit.audits.services import cascade_refresh


@shared_task(name="audits.cascade_refresh")
def cascade_refresh_task(employee_id: int, year: int, quarter: int) -> list[int]:
    """Refresh manager audits above ``employee_id`` for one period."""
    return cascade_refresh(employee_id, year, quarter)
