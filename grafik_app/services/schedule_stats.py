"""
Schedule Statistics Service

Hour totals, fairness of the hour distribution and conflict detection for a
team's shifts over a date range. All rules read the team's settings
(overtime thresholds, rest time, trading-Sunday law).
"""
from collections import defaultdict
from datetime import date
from itertools import combinations
from typing import Any, Dict, List, Optional

import numpy as np

from grafik_app.models import Employee, Shift
from scheduling_core.polish_holidays import is_non_trading_sunday
from scheduling_core.utils import month_bounds, shift_bounds, week_key
from scheduling_core.work_hours import required_hours, worked_hours

ERROR = 'error'
WARNING = 'warning'


def fairness_metrics(hours: List[float]) -> Dict[str, float]:
    """Mean, sample standard deviation, coefficient of variation (%) and Gini."""
    hrs = np.array(hours, dtype=float)
    if hrs.size == 0:
        return {'mean': 0.0, 'std': 0.0, 'cv': 0.0, 'gini': 0.0}
    mean = float(hrs.mean())
    std = float(np.std(hrs, ddof=1)) if hrs.size > 1 else 0.0
    cv = std / mean * 100 if mean > 0 else 0.0
    return {'mean': mean, 'std': std, 'cv': cv, 'gini': gini_coefficient(hrs)}


def gini_coefficient(values) -> float:
    arr = np.sort(np.asarray(values, dtype=float))
    n = arr.size
    total = arr.sum()
    if n <= 1 or total == 0:
        return 0.0
    ranks = np.arange(1, n + 1)
    return float(2 * np.sum(ranks * arr) / (n * total) - (n + 1) / n)


class ScheduleStatistics:
    """Statistics and conflict checks for one team."""

    def __init__(self, team):
        self.team = team
        self.settings = team.team_settings()

    def shifts_in_range(self, start_date: date, end_date: date):
        return (Shift.objects
                .filter(team=self.team, date__gte=start_date, date__lte=end_date)
                .exclude(status='cancelled')
                .select_related('employee')
                .order_by('date', 'start_time'))

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------
    def calculate(self, start_date: date, end_date: date) -> Dict[str, Any]:
        shifts = list(self.shifts_in_range(start_date, end_date))
        weekly_limit = self.settings.overtime_threshold_weekly

        per_employee: Dict[int, Dict[str, Any]] = {}
        weekly_hours = defaultdict(lambda: defaultdict(float))
        per_day = defaultdict(lambda: {'shifts': 0, 'hours': 0.0})

        for shift in shifts:
            hours = shift.hours
            emp_stats = per_employee.setdefault(shift.employee_id, {
                'name': shift.employee.full_name,
                'shifts': 0,
                'hours': 0.0,
                'overtime_hours': 0.0,
            })
            emp_stats['shifts'] += 1
            emp_stats['hours'] += hours
            weekly_hours[shift.employee_id][week_key(shift.date)] += hours

            day_stats = per_day[shift.date.isoformat()]
            day_stats['shifts'] += 1
            day_stats['hours'] += hours

        for emp_id, weeks in weekly_hours.items():
            per_employee[emp_id]['overtime_hours'] = sum(
                max(hours - weekly_limit, 0) for hours in weeks.values()
            )

        hours_list = [s['hours'] for s in per_employee.values()]
        return {
            'start_date': start_date.isoformat(),
            'end_date': end_date.isoformat(),
            'total_shifts': len(shifts),
            'total_hours': sum(hours_list),
            'employees': per_employee,
            'days': dict(per_day),
            'fairness': fairness_metrics(hours_list),
        }

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------
    def detect_conflicts(self, start_date: date, end_date: date) -> List[Dict[str, Any]]:
        conflicts: List[Dict[str, Any]] = []
        by_employee = defaultdict(list)
        for shift in self.shifts_in_range(start_date, end_date):
            by_employee[shift.employee_id].append(shift)

        for emp_shifts in by_employee.values():
            by_day = defaultdict(list)
            for shift in emp_shifts:
                by_day[shift.date].append(shift)

            for day, day_shifts in sorted(by_day.items()):
                for a, b in combinations(day_shifts, 2):
                    a_start, a_end = shift_bounds(a.date, a.start_time, a.end_time)
                    b_start, b_end = shift_bounds(b.date, b.start_time, b.end_time)
                    if a_start < b_end and b_start < a_end:
                        conflicts.append(self._conflict(ERROR, 'overlap', a, "Nakładające się zmiany"))

                day_hours = sum(s.hours for s in day_shifts)
                if day_hours > self.settings.overtime_threshold_daily:
                    conflicts.append(self._conflict(
                        WARNING, 'daily_overtime', day_shifts[0],
                        f"Przekroczono dzienny limit godzin ({day_hours:g}h > "
                        f"{self.settings.overtime_threshold_daily:g}h)",
                    ))

                if self.settings.respect_polish_trading_sundays and is_non_trading_sunday(day):
                    conflicts.append(self._conflict(
                        ERROR, 'non_trading_sunday', day_shifts[0], "Zmiana w niedzielę niehandlową",
                    ))

            ordered = sorted(emp_shifts, key=lambda s: shift_bounds(s.date, s.start_time, s.end_time)[0])
            for prev, nxt in zip(ordered, ordered[1:]):
                if prev.date == nxt.date:
                    continue
                _, prev_end = shift_bounds(prev.date, prev.start_time, prev.end_time)
                next_start, _ = shift_bounds(nxt.date, nxt.start_time, nxt.end_time)
                rest = (next_start - prev_end).total_seconds() / 3600
                if rest < self.settings.min_rest_between_shifts:
                    conflicts.append(self._conflict(
                        WARNING, 'rest_period', nxt,
                        f"Za krótki odpoczynek ({rest:.1f}h zamiast min. "
                        f"{self.settings.min_rest_between_shifts:g}h)",
                    ))
        return conflicts

    @staticmethod
    def _conflict(severity: str, kind: str, shift: Shift, message: str) -> Dict[str, Any]:
        return {
            'severity': severity,
            'type': kind,
            'employee_id': shift.employee_id,
            'employee_name': shift.employee.full_name,
            'date': shift.date.isoformat(),
            'shift_id': shift.id,
            'message': message,
        }

    # ------------------------------------------------------------------
    # Per employee
    # ------------------------------------------------------------------
    def employee_month_hours(self, employee: Employee, year: int, month: int,
                             holidays: Optional[list] = None) -> Dict[str, float]:
        """Worked hours in the month against the contractual requirement."""
        first_day, last_day = month_bounds(year, month)
        worked = worked_hours(self.shifts_in_range(first_day, last_day).filter(employee=employee))
        required = required_hours(year, month, employee.employment_type, employee.custom_hours, holidays)
        return {
            'worked_hours': worked,
            'required_hours': required,
            'difference': worked - required,
        }
