"""
Tests for the absence lifecycle and yearly absence statistics.
"""
from datetime import date

import pytest

from grafik_app.exceptions import AbsenceConflict, InvalidPeriod
from grafik_app.models import Employee, Team
from grafik_app.services.absences import (
    absence_stats,
    approve_absence,
    cancel_absence,
    create_absence,
    find_conflicts,
    reject_absence,
)


@pytest.fixture
def employee():
    team = Team.objects.create(name="Sklep Centrum")
    return Employee.objects.create(team=team, first_name="Anna", last_name="Nowak")


@pytest.mark.django_db
def test_create_absence_is_pending(employee):
    absence = create_absence(employee, date(2025, 6, 2), date(2025, 6, 6), reason="Wakacje")

    assert absence.status == 'pending'
    assert absence.team_id == employee.team_id
    assert absence.type == 'vacation'
    assert absence.approved_at is None


@pytest.mark.django_db
def test_end_before_start(employee):
    with pytest.raises(InvalidPeriod):
        create_absence(employee, date(2025, 6, 6), date(2025, 6, 2))


@pytest.mark.django_db
def test_overlapping_absence_is_rejected(employee):
    existing = create_absence(employee, date(2025, 6, 2), date(2025, 6, 6))

    with pytest.raises(AbsenceConflict) as excinfo:
        create_absence(employee, date(2025, 6, 6), date(2025, 6, 10), type='sick_leave')

    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "Pracownik ma już nieobecność w tym terminie"
    assert excinfo.value.conflicting == [existing]


@pytest.mark.django_db
def test_rejected_and_cancelled_absences_do_not_conflict(employee):
    reject_absence(create_absence(employee, date(2025, 6, 2), date(2025, 6, 6)))
    cancel_absence(create_absence(employee, date(2025, 6, 2), date(2025, 6, 6)))

    assert not find_conflicts(employee, date(2025, 6, 1), date(2025, 6, 30)).exists()
    create_absence(employee, date(2025, 6, 3), date(2025, 6, 4))


@pytest.mark.django_db
def test_find_conflicts_can_exclude_an_absence(employee):
    absence = create_absence(employee, date(2025, 6, 2), date(2025, 6, 6))
    assert find_conflicts(employee, date(2025, 6, 5), date(2025, 6, 5)).count() == 1
    assert find_conflicts(employee, date(2025, 6, 5), date(2025, 6, 5), exclude_id=absence.pk).count() == 0


@pytest.mark.django_db
def test_status_changes(employee):
    absence = create_absence(employee, date(2025, 6, 2), date(2025, 6, 6))

    approve_absence(absence)
    absence.refresh_from_db()
    assert absence.status == 'approved'
    assert absence.approved_at is not None

    cancel_absence(absence)
    absence.refresh_from_db()
    assert absence.status == 'cancelled'
    assert absence.approved_at is None


@pytest.mark.django_db
def test_absence_stats(employee):
    approve_absence(create_absence(employee, date(2025, 6, 2), date(2025, 6, 6)))
    # June 19 is Corpus Christi and June 21-22 a weekend
    approve_absence(create_absence(employee, date(2025, 6, 16), date(2025, 6, 22), type='sick_leave'))
    create_absence(employee, date(2025, 7, 1), date(2025, 7, 2))
    reject_absence(create_absence(employee, date(2025, 8, 1), date(2025, 8, 1), type='uz'))
    create_absence(employee, date(2026, 1, 5), date(2026, 1, 5))

    stats = absence_stats(employee.team, 2025)

    assert stats['approved'] == 2
    assert stats['pending'] == 1
    assert stats['rejected'] == 1
    assert stats['cancelled'] == 0
    assert stats['total_days'] == 5 + 4
    assert stats['by_type'] == {'vacation': 2, 'sick_leave': 1, 'uz': 1}
