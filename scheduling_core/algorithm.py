"""Staffing-requirement scheduler.

Unlike the template generator, this allocator works from a required head
count per weekday. Each scheduled day gets the default shift template, and
the best scored candidates are picked until the minimum head count is met.
Managers follow stricter limits: at most 6h on weekdays, 12h on weekends
and 35h per week.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .base import (
    Absence,
    Employee,
    EmployeePreferences,
    GeneratedShift,
    GeneratorResult,
    SchedulingAlgorithm,
    SchedulingProblem,
    ShiftTemplate,
    UnfilledSlot,
)
from .polish_holidays import is_non_trading_sunday, is_public_holiday
from .utils import (
    each_day,
    is_weekend,
    minutes_to_time,
    shift_bounds,
    time_to_minutes,
    to_date,
    week_bounds,
    week_key,
)

logger = logging.getLogger(__name__)

MANAGER_MAX_HOURS_WEEKDAY = 6
MANAGER_MAX_HOURS_WEEKEND = 12
MANAGER_MAX_HOURS_WEEKLY = 35
EMPLOYEE_MAX_HOURS_WEEKLY = 40
MIN_REST_HOURS = 11
CONTRACT_DEVIATION_RATIO = 0.10

FALLBACK_TEMPLATE = ShiftTemplate(id=0, name="Domyślna", start_time=time(9, 0),
                                  end_time=time(17, 0), break_duration=30)


@dataclass
class StaffingRequirement:
    """Head count wanted on one weekday."""
    min_employees: int = 1
    max_employees: int = 5


@dataclass
class Workload:
    employee_id: int
    total_hours: float = 0.0
    shifts_count: int = 0
    weekend_shifts: int = 0
    last_shift_end: Optional[datetime] = None
    assigned_days: Set[date] = field(default_factory=set)
    weekly_hours: Dict[Tuple[int, int], float] = field(default_factory=lambda: defaultdict(float))

    def consecutive_days_before(self, day: date) -> int:
        count = 0
        current = day - timedelta(days=1)
        while current in self.assigned_days:
            count += 1
            current -= timedelta(days=1)
        return count


def manager_max_hours(day: date) -> int:
    return MANAGER_MAX_HOURS_WEEKEND if is_weekend(day) else MANAGER_MAX_HOURS_WEEKDAY


def weekly_limit(employee: Employee) -> float:
    return MANAGER_MAX_HOURS_WEEKLY if employee.is_manager else EMPLOYEE_MAX_HOURS_WEEKLY


class StaffingScheduler(SchedulingAlgorithm):
    """Greedy scorer filling a per-weekday head count with the default template."""

    def __init__(self, requirements: Optional[Dict[int, StaffingRequirement]] = None,
                 default_template: Optional[ShiftTemplate] = None):
        self.requirements = requirements or {}
        self.default_template = default_template

    @property
    def name(self) -> str:
        return "Obsada dzienna"

    def requirement_for(self, day: date) -> StaffingRequirement:
        return self.requirements.get(day.weekday(), StaffingRequirement())

    def _template(self, problem: SchedulingProblem) -> ShiftTemplate:
        if self.default_template is not None:
            return self.default_template
        for template in problem.templates:
            if template.is_default:
                return template
        return FALLBACK_TEMPLATE

    def generate(self, problem: SchedulingProblem) -> GeneratorResult:
        result = GeneratorResult()
        employees = problem.active_employees
        if not employees:
            return result.fail("Brak aktywnych pracowników")

        settings = problem.settings
        template = self._template(problem)
        workloads = {e.id: Workload(e.id) for e in employees}
        weekend_stats = {e.id: 0 for e in employees}

        for day in each_day(problem.start_date, problem.end_date):
            if is_public_holiday(day) or is_non_trading_sunday(day):
                continue
            requirement = self.requirement_for(day)
            if requirement.min_employees <= 0:
                continue

            candidates = []
            for emp in employees:
                prefs = emp.preferences or EmployeePreferences()
                workload = workloads[emp.id]
                start, end, hours, _ = self._shift_times(emp, day, template)
                if not self._can_work(emp, prefs, day, start, end, hours, workload, problem,
                                      settings.max_consecutive_work_days, settings.min_rest_between_shifts):
                    continue
                score = self._score(emp, prefs, day, workload, workloads, settings.max_weekends_per_month)
                candidates.append((score, emp))

            # stable sort keeps input order on equal scores
            candidates.sort(key=lambda c: c[0], reverse=True)
            to_create = min(requirement.min_employees, len(candidates))
            if to_create < requirement.min_employees:
                result.warnings.append(
                    f"{day.isoformat()}: Brak wystarczającej liczby pracowników "
                    f"(potrzeba: {requirement.min_employees}, dostępnych: {len(candidates)})"
                )
                result.unfilled_slots.append(UnfilledSlot(
                    date=day,
                    reason=f"Brak {requirement.min_employees - to_create} pracowników",
                    template_id=template.id or None,
                ))

            for _, emp in candidates[:to_create]:
                start, end, hours, shortened_to = self._shift_times(emp, day, template)
                if shortened_to is not None:
                    result.warnings.append(
                        f"{day.isoformat()}: Zmiana kierownika {emp.full_name} skrócona do {shortened_to}h"
                    )
                result.shifts.append(GeneratedShift(
                    employee_id=emp.id, date=day, start_time=start,
                    end_time=end, break_duration=template.break_duration,
                ))
                workload = workloads[emp.id]
                workload.total_hours += hours
                workload.shifts_count += 1
                workload.assigned_days.add(day)
                workload.weekly_hours[week_key(day)] += hours
                _, workload.last_shift_end = shift_bounds(day, start, end)
                if is_weekend(day):
                    workload.weekend_shifts += 1
                    weekend_stats[emp.id] += 1

        logger.info("Staffing schedule %s..%s: %d shifts", problem.start_date,
                    problem.end_date, len(result.shifts))
        self._final_warnings(result, employees, workloads)
        result.statistics = {
            'total_shifts': len(result.shifts),
            'hours_per_employee': {eid: round(w.total_hours, 2) for eid, w in workloads.items()},
            'weekend_shifts_per_employee': weekend_stats,
        }
        return result

    @staticmethod
    def _shift_times(emp: Employee, day: date, template: ShiftTemplate):
        """Start, end, net hours and the manager cap applied (or None)."""
        hours = template.net_hours
        if emp.is_manager:
            max_hours = manager_max_hours(day)
            if hours > max_hours:
                end_minutes = time_to_minutes(template.start_time) + max_hours * 60 + template.break_duration
                end = time.fromisoformat(minutes_to_time(end_minutes))
                return template.start_time, end, float(max_hours), max_hours
        return template.start_time, template.end_time, hours, None

    @staticmethod
    def _can_work(emp: Employee, prefs: EmployeePreferences, day: date, start: time, end: time,
                  hours: float, workload: Workload, problem: SchedulingProblem,
                  max_consecutive: int, min_rest: float) -> bool:
        if problem.is_absent(emp.id, day):
            return False
        if day in workload.assigned_days:
            return False
        if workload.consecutive_days_before(day) >= (max_consecutive or 6):
            return False
        if workload.last_shift_end is not None:
            shift_start, _ = shift_bounds(day, start, end)
            if (shift_start - workload.last_shift_end).total_seconds() / 3600 < (min_rest or MIN_REST_HOURS):
                return False

        week_hours = workload.weekly_hours[week_key(day)]
        if week_hours + hours > weekly_limit(emp):
            return False
        if prefs.max_hours_per_week and week_hours + hours > prefs.max_hours_per_week:
            return False
        return True

    @staticmethod
    def _score(emp: Employee, prefs: EmployeePreferences, day: date, workload: Workload,
               workloads: Dict[int, Workload], max_weekends: int) -> float:
        score = 100.0
        weekday = day.weekday()

        avg_hours = sum(w.total_hours for w in workloads.values()) / len(workloads)
        if workload.total_hours > avg_hours:
            score -= (workload.total_hours - avg_hours) * 5
        else:
            score += (avg_hours - workload.total_hours) * 3

        if weekday in prefs.preferred_days:
            score += 20
        if weekday in prefs.avoided_days:
            score -= 15

        if is_weekend(day):
            if workload.weekend_shifts >= (max_weekends or 2):
                score -= 50
            else:
                avg_weekends = sum(w.weekend_shifts for w in workloads.values()) / len(workloads)
                if workload.weekend_shifts > avg_weekends:
                    score -= 20

        hours_needed = emp.contract_hours - workload.total_hours
        if hours_needed > 0:
            score += min(hours_needed, 20)
        return score

    @staticmethod
    def _final_warnings(result: GeneratorResult, employees: List[Employee],
                        workloads: Dict[int, Workload]) -> None:
        for emp in employees:
            workload = workloads[emp.id]
            limit = weekly_limit(emp)
            for (_, week), hours in sorted(workload.weekly_hours.items()):
                if hours > limit:
                    suffix = " (kierownik)" if emp.is_manager else ""
                    result.warnings.append(
                        f"{emp.full_name}: {hours:.1f}h w tygodniu {week} przekracza limit {limit}h{suffix}"
                    )

            target = emp.contract_hours
            if not target:
                continue
            actual = workload.total_hours
            if abs(actual - target) / target > CONTRACT_DEVIATION_RATIO:
                label = "niedogodziny" if actual < target else "nadgodziny"
                result.warnings.append(f"{emp.full_name}: Przypisano {actual:.1f}h z {target:g}h ({label})")


def _field(obj: Any, name: str):
    return obj[name] if isinstance(obj, dict) else getattr(obj, name)


def validate_shift_assignment(shift: Any, employee: Employee, existing_shifts: Iterable[Any],
                              absences: Iterable[Absence]) -> Tuple[bool, List[str]]:
    """Check a single proposed shift; returns ``(valid, errors)`` with Polish messages.

    ``shift`` and the existing shifts may be objects or dicts exposing
    ``employee_id``, ``date``, ``start_time`` and ``end_time``.
    """
    errors: List[str] = []
    try:
        day = to_date(_field(shift, 'date'))
        start = _field(shift, 'start_time')
        end = _field(shift, 'end_time')
    except (KeyError, AttributeError, TypeError, ValueError):
        return False, ["Brakuje wymaganych pól"]
    if not start or not end:
        return False, ["Brakuje wymaganych pól"]

    if is_public_holiday(day):
        errors.append("Dzień jest świętem publicznym")
    if is_non_trading_sunday(day):
        errors.append("Niedziela niehandlowa - sklepy zamknięte")
    if any(a.blocks(employee.id, day) for a in absences):
        errors.append("Pracownik ma zaplanowaną nieobecność")

    own = [s for s in existing_shifts if _field(s, 'employee_id') == employee.id]
    if any(to_date(_field(s, 'date')) == day for s in own):
        errors.append("Pracownik ma już zmianę w tym dniu")

    previous_day = day - timedelta(days=1)
    for prev in own:
        if to_date(_field(prev, 'date')) != previous_day:
            continue
        _, prev_end = shift_bounds(previous_day, _field(prev, 'start_time'), _field(prev, 'end_time'))
        new_start, _ = shift_bounds(day, start, end)
        rest = (new_start - prev_end).total_seconds() / 3600
        if rest < MIN_REST_HOURS:
            errors.append(f"Za krótki odpoczynek ({rest:.1f}h zamiast min. {MIN_REST_HOURS}h)")
        break

    return not errors, errors


def find_best_employee_for_slot(day: Any, employees: Iterable[Employee], existing_shifts: Iterable[Any],
                                absences: Iterable[Absence]) -> Optional[Tuple[Employee, float]]:
    """Quick-assign helper: the best available active employee and its score."""
    day = to_date(day)
    existing_shifts = list(existing_shifts)
    absences = list(absences)
    monday, sunday = week_bounds(day)

    best: Optional[Tuple[Employee, float]] = None
    for emp in employees:
        if not emp.is_active:
            continue
        if any(a.blocks(emp.id, day) for a in absences):
            continue
        own_days = [to_date(_field(s, 'date')) for s in existing_shifts if _field(s, 'employee_id') == emp.id]
        if day in own_days:
            continue

        prefs = emp.preferences or EmployeePreferences()
        score = 100.0
        if day.weekday() in prefs.preferred_days:
            score += 20
        if day.weekday() in prefs.avoided_days:
            score -= 20
        score -= 10 * sum(1 for d in own_days if monday <= d <= sunday)

        if best is None or score > best[1]:
            best = (emp, score)
    return best
