"""Contractual working-hour arithmetic for a month or a year."""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Dict, Any, Union

from .polish_holidays import public_holidays, Holiday
from .utils import each_day, month_bounds, shift_hours

FULL_TIME_HOURS = 8
HALF_TIME_HOURS = 4

MONTH_NAMES = [
    "Styczeń", "Luty", "Marzec", "Kwiecień", "Maj", "Czerwiec",
    "Lipiec", "Sierpień", "Wrzesień", "Październik", "Listopad", "Grudzień",
]

EMPLOYMENT_TYPE_LABELS = {
    'full': "Pełny etat",
    'half': "½ etatu",
    'custom': "Niestandardowy",
}

HolidayLike = Union[Holiday, date]


@dataclass
class WorkingHoursResult:
    total_working_days: int
    total_working_hours: float
    holidays: List[date] = field(default_factory=list)
    weekends: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_working_days': self.total_working_days,
            'total_working_hours': self.total_working_hours,
            'holidays': [d.isoformat() for d in self.holidays],
            'weekends': self.weekends,
        }


def _holiday_dates(holidays: Optional[Iterable[HolidayLike]], year: int) -> List[date]:
    if holidays is None:
        holidays = public_holidays(year)
    return sorted({h.date if isinstance(h, Holiday) else h for h in holidays})


def calculate_working_hours(year: int, month: int,
                            holidays: Optional[Iterable[HolidayLike]] = None,
                            hours_per_day: float = FULL_TIME_HOURS) -> WorkingHoursResult:
    """Working days are weekdays that are not holidays; weekends are counted separately."""
    first_day, last_day = month_bounds(year, month)
    month_holidays = [d for d in _holiday_dates(holidays, year) if first_day <= d <= last_day]
    holiday_set = set(month_holidays)

    working_days = 0
    weekends = 0
    for day in each_day(first_day, last_day):
        if day.weekday() >= 5:
            weekends += 1
        elif day not in holiday_set:
            working_days += 1

    return WorkingHoursResult(
        total_working_days=working_days,
        total_working_hours=working_days * hours_per_day,
        holidays=month_holidays,
        weekends=weekends,
    )


def hours_per_day_for(employment_type: str, custom_hours: Optional[float] = None) -> float:
    if employment_type == 'half':
        return HALF_TIME_HOURS
    if employment_type == 'custom':
        return custom_hours or FULL_TIME_HOURS
    return FULL_TIME_HOURS


def required_hours(year: int, month: int, employment_type: str = 'full',
                   custom_hours: Optional[float] = None,
                   holidays: Optional[Iterable[HolidayLike]] = None) -> float:
    per_day = hours_per_day_for(employment_type, custom_hours)
    return calculate_working_hours(year, month, holidays, per_day).total_working_hours


def yearly_working_hours(year: int, employment_type: str = 'full',
                         custom_hours: Optional[float] = None,
                         holidays: Optional[Iterable[HolidayLike]] = None) -> Dict[str, Any]:
    holiday_dates = _holiday_dates(holidays, year)
    per_day = hours_per_day_for(employment_type, custom_hours)
    monthly = []
    total = 0.0
    for month in range(1, 13):
        result = calculate_working_hours(year, month, holiday_dates, per_day)
        monthly.append({
            'month': month,
            'month_name': MONTH_NAMES[month - 1],
            'hours': result.total_working_hours,
            'working_days': result.total_working_days,
        })
        total += result.total_working_hours
    return {'monthly': monthly, 'total': total}


def worked_hours(shifts: Iterable[Any]) -> float:
    """Sum of net hours; items need ``start_time``, ``end_time`` and ``break_duration``."""
    return sum(
        shift_hours(s.start_time, s.end_time, getattr(s, 'break_duration', 0) or 0)
        for s in shifts
    )


def employment_type_label(employment_type: str) -> str:
    return EMPLOYMENT_TYPE_LABELS.get(employment_type, employment_type)


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1] if 1 <= month <= 12 else ''


def format_hours(hours: float) -> str:
    """7.5 -> '7h 30min'."""
    h = int(hours)
    m = round((hours - h) * 60)
    if m == 60:
        h, m = h + 1, 0
    if m == 0:
        return f"{h}h"
    return f"{h}h {m}min"
