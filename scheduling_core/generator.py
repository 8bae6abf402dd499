"""Monthly schedule generator driven by shift templates.

Every open day of the month is walked in order, and each shift template
(sorted by start time) is filled up to its capacity with the eligible
employees who still miss the most contract hours. The result carries the
generated shifts plus warnings for unfilled slots and for employees whose
assigned hours deviate from their monthly target.
"""
from __future__ import annotations

import logging
import random
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Set, Tuple

from .base import (
    Absence,
    Employee,
    EmployeePreferences,
    GeneratedShift,
    GeneratorResult,
    SchedulingAlgorithm,
    SchedulingProblem,
    ShiftTemplate,
    TeamSettings,
    UnfilledSlot,
)
from .polish_holidays import is_non_trading_sunday, is_public_holiday
from .utils import each_day, month_bounds, shift_bounds, shift_period, time_to_minutes, week_key

logger = logging.getLogger(__name__)

STANDARD_HOURS_PER_DAY = 8
UNDERTIME_WARNING_RATIO = 0.10
OVERTIME_WARNING_RATIO = 0.05
AVOIDED_DAY_NEED_RATIO = 0.2

# Representative start hour for each non-flexible preference
PREFERENCE_START_HOUR = {'morning': 6, 'afternoon': 14, 'evening': 18}

NO_ACTIVE_EMPLOYEES = "Brak aktywnych pracowników do zaplanowania"
NO_TEMPLATES = "Brak szablonów zmian - dodaj szablony w zakładce Szablony"


def is_day_open(day: date, settings: TeamSettings) -> bool:
    """Whether the shop is open on ``day`` under the team settings and Polish law."""
    if is_public_holiday(day):
        return False
    if day.weekday() == 6 and settings.respect_polish_trading_sundays and is_non_trading_sunday(day):
        return False
    if not settings.hours_for(day.weekday()):
        return False
    if settings.working_days and day.weekday() not in settings.working_days:
        return False
    return True


@dataclass
class EmployeeState:
    """Running assignment state of one employee during generation."""
    employee: Employee
    preferences: EmployeePreferences
    target_hours: float
    assigned_hours: float = 0.0
    assigned_days: Set[date] = field(default_factory=set)
    last_shift_end: Optional[datetime] = None
    weekly_hours: Dict[Tuple[int, int], float] = field(default_factory=lambda: defaultdict(float))

    @property
    def remaining_hours(self) -> float:
        return self.target_hours - self.assigned_hours

    def consecutive_days_before(self, day: date) -> int:
        count = 0
        current = day - timedelta(days=1)
        while current in self.assigned_days:
            count += 1
            current -= timedelta(days=1)
        return count

    def record(self, day: date, template: ShiftTemplate) -> None:
        hours = template.net_hours
        self.assigned_hours += hours
        self.assigned_days.add(day)
        self.weekly_hours[week_key(day)] += hours
        _, self.last_shift_end = shift_bounds(day, template.start_time, template.end_time)


class TemplateScheduleGenerator(SchedulingAlgorithm):

    def __init__(self, *, seed: Optional[int] = None, preference_tolerance: float = 0.3) -> None:
        self.seed = seed
        # chance of assigning despite a mismatching shift preference
        self.preference_tolerance = preference_tolerance

    @property
    def name(self) -> str:
        return "Szablony zmian"

    # ---------------------------------------------------------------------
    #                               GENERATE
    # ---------------------------------------------------------------------
    def generate(self, problem: SchedulingProblem) -> GeneratorResult:
        result = GeneratorResult()
        self.rng = random.Random(self.seed)

        employees = problem.active_employees
        if not employees:
            return result.fail(NO_ACTIVE_EMPLOYEES)
        if not problem.templates:
            return result.fail(NO_TEMPLATES)

        open_days = [d for d in each_day(problem.start_date, problem.end_date)
                     if is_day_open(d, problem.settings)]
        full_time_hours = len(open_days) * STANDARD_HOURS_PER_DAY
        logger.info("Generating %s..%s: %d open days, full time %sh, %d templates",
                    problem.start_date, problem.end_date, len(open_days),
                    full_time_hours, len(problem.templates))

        states: Dict[int, EmployeeState] = {}
        for emp in employees:
            states[emp.id] = EmployeeState(
                employee=emp,
                preferences=emp.preferences or EmployeePreferences(),
                target_hours=emp.contract_hours or full_time_hours,
            )

        templates = sorted(problem.templates, key=lambda t: time_to_minutes(t.start_time))
        slots_filled = {t.id: 0 for t in templates}

        for day in open_days:
            for template in templates:
                assigned = self._fill_slot(day, template, problem, states, result)
                slots_filled[template.id] += assigned

        self._validate(result, states)
        result.statistics = {
            'total_shifts': len(result.shifts),
            'open_days': len(open_days),
            'full_time_hours': full_time_hours,
            'hours_per_employee': {eid: round(s.assigned_hours, 2) for eid, s in states.items()},
            'target_hours_per_employee': {eid: s.target_hours for eid, s in states.items()},
            'slots_filled_per_template': slots_filled,
        }
        return result

    # ───────────────────────── internal helpers ───────────────────────────

    def _fill_slot(self, day: date, template: ShiftTemplate, problem: SchedulingProblem,
                   states: Dict[int, EmployeeState], result: GeneratorResult) -> int:
        min_required = max(template.capacity or 1, 1)
        available = [s for s in states.values() if self._is_available(s, day, template, problem)]
        # most hours still missing first; ties keep input order
        available.sort(key=lambda s: s.remaining_hours, reverse=True)

        assigned = 0
        for state in available:
            if assigned >= min_required:
                break
            if state.assigned_hours >= state.target_hours:
                continue
            result.shifts.append(GeneratedShift(
                employee_id=state.employee.id,
                date=day,
                start_time=template.start_time,
                end_time=template.end_time,
                break_duration=template.break_duration,
            ))
            state.record(day, template)
            assigned += 1
            logger.debug("%s %s -> %s (%.1fh / %sh)", day, template.name,
                         state.employee.full_name, state.assigned_hours, state.target_hours)

        if assigned < min_required:
            result.warnings.append(
                f"{day.isoformat()} {template.name}: brak pracowników ({assigned}/{min_required} min.)"
            )
            result.unfilled_slots.append(UnfilledSlot(
                date=day,
                reason=f"Brak {min_required - assigned} pracowników",
                template_id=template.id,
            ))
        return assigned

    def _is_available(self, state: EmployeeState, day: date, template: ShiftTemplate,
                      problem: SchedulingProblem) -> bool:
        emp = state.employee
        prefs = state.preferences

        if problem.is_absent(emp.id, day):
            return False
        if day in state.assigned_days:
            return False

        if state.last_shift_end is not None:
            shift_start, _ = shift_bounds(day, template.start_time, template.end_time)
            rest_hours = (shift_start - state.last_shift_end).total_seconds() / 3600
            if rest_hours < (prefs.min_hours_between_shifts or 11):
                return False

        if state.consecutive_days_before(day) >= (prefs.max_consecutive_days or 6):
            return False

        if prefs.max_hours_per_week and \
                state.weekly_hours[week_key(day)] + template.net_hours > prefs.max_hours_per_week:
            return False

        if prefs.shift_preference in PREFERENCE_START_HOUR:
            wanted = shift_period(PREFERENCE_START_HOUR[prefs.shift_preference])
            if wanted != shift_period(template.start_time.hour) and \
                    self.rng.random() > self.preference_tolerance:
                return False

        if day.weekday() in prefs.avoided_days:
            needs_hours = state.target_hours > 0 and \
                state.remaining_hours / state.target_hours > AVOIDED_DAY_NEED_RATIO
            if not needs_hours:
                return False

        return True

    @staticmethod
    def _validate(result: GeneratorResult, states: Dict[int, EmployeeState]) -> None:
        for state in states.values():
            name = state.employee.full_name
            assigned = state.assigned_hours
            target = state.target_hours
            diff = target - assigned
            ratio = abs(diff) / target if target > 0 else 0

            if diff > 0 and ratio > UNDERTIME_WARNING_RATIO:
                result.warnings.append(f"{name}: {assigned:.0f}h / {target:.0f}h (brakuje {diff:.0f}h)")
            elif diff < 0 and ratio > OVERTIME_WARNING_RATIO:
                result.warnings.append(f"{name}: {assigned:.0f}h / {target:.0f}h (nadgodziny: {-diff:.0f}h)")


def generate_monthly_schedule(team_id: int, year: int, month: int, settings: TeamSettings,
                              employees: List[Employee], absences: List[Absence],
                              templates: List[ShiftTemplate], seed: Optional[int] = None) -> GeneratorResult:
    first_day, last_day = month_bounds(year, month)
    problem = SchedulingProblem(
        team_id=team_id,
        start_date=first_day,
        end_date=last_day,
        settings=settings,
        employees=employees,
        absences=absences,
        templates=templates,
    )
    return TemplateScheduleGenerator(seed=seed).generate(problem)
