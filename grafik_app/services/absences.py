"""Absence lifecycle: requests, overlap checks, status changes and yearly stats."""
import logging
from datetime import date
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from grafik_app.exceptions import AbsenceConflict, InvalidPeriod
from grafik_app.models import Absence, Employee
from scheduling_core.polish_holidays import count_working_days

logger = logging.getLogger(__name__)

INACTIVE_STATUSES = ('cancelled', 'rejected')


def find_conflicts(employee: Employee, start_date: date, end_date: date,
                   exclude_id: Optional[int] = None):
    """Non-cancelled, non-rejected absences of ``employee`` overlapping the range."""
    qs = (Absence.objects
          .filter(employee=employee, start_date__lte=end_date, end_date__gte=start_date)
          .exclude(status__in=INACTIVE_STATUSES))
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    return qs


@transaction.atomic
def create_absence(employee: Employee, start_date: date, end_date: date,
                   type: str = 'vacation', reason: str = '') -> Absence:
    if end_date < start_date:
        raise InvalidPeriod("Data końcowa nie może być wcześniejsza niż początkowa")
    conflicts = list(find_conflicts(employee, start_date, end_date))
    if conflicts:
        raise AbsenceConflict(conflicts)
    absence = Absence.objects.create(
        team=employee.team,
        employee=employee,
        type=type,
        start_date=start_date,
        end_date=end_date,
        status='pending',
        reason=reason or '',
    )
    logger.info("Absence %s requested for %s (%s..%s)", absence.pk, employee.full_name, start_date, end_date)
    return absence


def _set_status(absence: Absence, status: str) -> Absence:
    absence.status = status
    absence.approved_at = timezone.now() if status == 'approved' else None
    absence.save(update_fields=['status', 'approved_at', 'updated_at'])
    logger.info("Absence %s -> %s", absence.pk, status)
    return absence


def approve_absence(absence: Absence) -> Absence:
    return _set_status(absence, 'approved')


def reject_absence(absence: Absence) -> Absence:
    return _set_status(absence, 'rejected')


def cancel_absence(absence: Absence) -> Absence:
    return _set_status(absence, 'cancelled')


STATUS_TRANSITIONS = {
    'approve': approve_absence,
    'reject': reject_absence,
    'cancel': cancel_absence,
}


def absence_stats(team, year: int) -> Dict[str, Any]:
    """Counts per status and type, plus working days covered by approved absences."""
    absences = Absence.objects.filter(
        team=team,
        start_date__gte=date(year, 1, 1),
        end_date__lte=date(year, 12, 31),
    )
    stats = {'pending': 0, 'approved': 0, 'rejected': 0, 'cancelled': 0,
             'total_days': 0, 'by_type': {}}
    for absence in absences:
        stats[absence.status] += 1
        if absence.status == 'approved':
            stats['total_days'] += count_working_days(absence.start_date, absence.end_date)
        stats['by_type'][absence.type] = stats['by_type'].get(absence.type, 0) + 1
    return stats
