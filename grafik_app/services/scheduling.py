"""Bridge between the Django models and the scheduling_core generators."""
import logging
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from grafik_app.converters import absences_to_core, employees_to_core, templates_to_core
from grafik_app.exceptions import GrafikError
from grafik_app.models import Absence, Schedule, Shift, ShiftTemplate
from scheduling_core.algorithm import StaffingRequirement, StaffingScheduler
from scheduling_core.base import GeneratorResult, SchedulingAlgorithm, SchedulingProblem
from scheduling_core.generator import TemplateScheduleGenerator
from scheduling_core.utils import month_bounds
from scheduling_core.work_hours import month_name

logger = logging.getLogger(__name__)

GENERATOR_CREATED_BY = 'generator'
ALGORITHMS = ('templates', 'staffing')


def build_problem(team, year: int, month: int) -> SchedulingProblem:
    first_day, last_day = month_bounds(year, month)
    employees = team.employees.filter(is_active=True)
    absences = Absence.objects.filter(
        team=team, status='approved', start_date__lte=last_day, end_date__gte=first_day,
    )
    templates = ShiftTemplate.objects.filter(team=team)
    return SchedulingProblem(
        team_id=team.id,
        start_date=first_day,
        end_date=last_day,
        settings=team.team_settings(),
        employees=employees_to_core(list(employees)),
        absences=absences_to_core(list(absences)),
        templates=templates_to_core(list(templates)),
    )


def parse_requirements(raw: Optional[Dict[Any, Dict[str, Any]]]) -> Dict[int, StaffingRequirement]:
    """``{"0": {"min_employees": 2, "max_employees": 4}, ...}`` keyed by weekday (0 = Monday)."""
    requirements = {}
    for weekday, values in (raw or {}).items():
        try:
            requirements[int(weekday)] = StaffingRequirement(
                min_employees=int(values.get('min_employees', 1)),
                max_employees=int(values.get('max_employees', 5)),
            )
        except (AttributeError, TypeError, ValueError):
            raise GrafikError("Nieprawidłowe wymagania obsady")
    return requirements


def get_algorithm(name: str = 'templates', seed: Optional[int] = None,
                  requirements: Optional[Dict[Any, Dict[str, Any]]] = None) -> SchedulingAlgorithm:
    if name == 'templates':
        return TemplateScheduleGenerator(seed=seed)
    if name == 'staffing':
        return StaffingScheduler(parse_requirements(requirements))
    raise GrafikError(f"Nieznany algorytm: {name}")


def generate_for_team(team, year: int, month: int, algorithm: str = 'templates',
                      seed: Optional[int] = None,
                      requirements: Optional[Dict[Any, Dict[str, Any]]] = None) -> GeneratorResult:
    scheduler = get_algorithm(algorithm, seed, requirements)
    problem = build_problem(team, year, month)
    result = scheduler.generate(problem)
    logger.info("Generated %d shifts for team %s %d-%02d with %s (%d warnings)",
                len(result.shifts), team.id, year, month, scheduler.name, len(result.warnings))
    return result


@transaction.atomic
def save_generated_shifts(team, result: GeneratorResult, year: int, month: int,
                          replace: bool = False) -> List[Shift]:
    """Persist the generated shifts; ``replace`` clears the month's shifts first."""
    if replace:
        first_day, last_day = month_bounds(year, month)
        deleted, _ = Shift.objects.filter(team=team, date__gte=first_day, date__lte=last_day).delete()
        logger.info("Cleared %d shifts of team %s %d-%02d", deleted, team.id, year, month)

    shifts = [
        Shift(
            team=team,
            employee_id=s.employee_id,
            date=s.date,
            start_time=s.start_time,
            end_time=s.end_time,
            break_duration=s.break_duration,
            type=s.type,
            status='scheduled',
            created_by=GENERATOR_CREATED_BY,
        )
        for s in result.shifts
    ]
    return Shift.objects.bulk_create(shifts)


def generate_and_save(team, year: int, month: int, replace: bool = False,
                      **kwargs) -> Tuple[GeneratorResult, List[Shift]]:
    result = generate_for_team(team, year, month, **kwargs)
    if not result.success:
        return result, []
    return result, save_generated_shifts(team, result, year, month, replace=replace)


def notification_recipients(team) -> List[Dict[str, Any]]:
    """Active employees with an email address who want publication notices."""
    recipients = []
    for employee in team.employees.filter(is_active=True).exclude(email__isnull=True).exclude(email=''):
        prefs = employee.notification_preferences or {}
        if prefs.get('schedule_published', True):
            recipients.append({'id': employee.id, 'name': employee.full_name, 'email': employee.email})
    return recipients


@transaction.atomic
def publish_schedule(team, year: int, month: int) -> Dict[str, Any]:
    now = timezone.now()
    schedule, _ = Schedule.objects.get_or_create(team=team, year=year, month=month)
    schedule.is_published = True
    schedule.published_at = now
    schedule.save(update_fields=['is_published', 'published_at'])

    first_day, last_day = month_bounds(year, month)
    published = (Shift.objects
                 .filter(team=team, date__gte=first_day, date__lte=last_day)
                 .exclude(status='cancelled')
                 .update(is_published=True, published_at=now))

    recipients = notification_recipients(team)
    logger.info("Published schedule %s (%d shifts, %d recipients)", schedule, published, len(recipients))
    return {
        'schedule_id': schedule.id,
        'published_shifts': published,
        'recipients': recipients,
        'message': f"Grafik {month_name(month)} {year} opublikowany",
    }
