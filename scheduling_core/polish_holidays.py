"""Polish public holidays and trading Sundays (niedziele handlowe)."""
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import List, Dict, Optional, Tuple, Any

from dateutil.easter import easter, EASTER_WESTERN
from dateutil.relativedelta import relativedelta, SU

from .utils import DateLike, to_date, each_day, month_bounds

PUBLIC = 'public'
TRADING_SUNDAY = 'trading_sunday'
NON_TRADING_SUNDAY = 'non_trading_sunday'

FIXED_HOLIDAYS: List[Tuple[int, int, str]] = [
    (1, 1, "Nowy Rok"),
    (1, 6, "Święto Trzech Króli"),
    (5, 1, "Święto Pracy"),
    (5, 3, "Święto Konstytucji 3 Maja"),
    (8, 15, "Wniebowzięcie Najświętszej Maryi Panny"),
    (11, 1, "Wszystkich Świętych"),
    (11, 11, "Narodowe Święto Niepodległości"),
    (12, 25, "Boże Narodzenie (pierwszy dzień)"),
    (12, 26, "Boże Narodzenie (drugi dzień)"),
]

# Offsets from Easter Sunday
MOVABLE_HOLIDAYS: List[Tuple[int, str]] = [
    (0, "Wielkanoc"),
    (1, "Poniedziałek Wielkanocny"),
    (49, "Zielone Świątki"),
    (60, "Boże Ciało"),
]

# Published trading Sundays; other years are computed.
TRADING_SUNDAYS: Dict[int, List[str]] = {
    2024: ["2024-01-28", "2024-03-24", "2024-04-28", "2024-06-30",
           "2024-08-25", "2024-12-15", "2024-12-22"],
    2025: ["2025-01-26", "2025-04-13", "2025-04-27", "2025-06-29",
           "2025-08-31", "2025-12-14", "2025-12-21"],
    2026: ["2026-01-25", "2026-03-29", "2026-04-26", "2026-06-28",
           "2026-08-30", "2026-12-13", "2026-12-20"],
}

TRADING_MONTHS = (1, 4, 6, 8)


@dataclass(frozen=True)
class Holiday:
    date: date
    name: str
    type: str = PUBLIC

    def to_dict(self) -> Dict[str, Any]:
        return {'date': self.date.isoformat(), 'name': self.name, 'type': self.type}


def easter_sunday(year: int) -> date:
    return easter(year, EASTER_WESTERN)


@lru_cache(maxsize=64)
def _holidays_by_date(year: int) -> Dict[date, str]:
    holidays: Dict[date, str] = {}
    for month, day, name in FIXED_HOLIDAYS:
        holidays[date(year, month, day)] = name
    easter_day = easter_sunday(year)
    for offset, name in MOVABLE_HOLIDAYS:
        holidays.setdefault(easter_day + timedelta(days=offset), name)
    return holidays


def public_holidays(year: int) -> List[Holiday]:
    """All public holidays of ``year`` sorted by date."""
    return [Holiday(d, name) for d, name in sorted(_holidays_by_date(year).items())]


def _last_sunday(year: int, month: int) -> date:
    return date(year, month, 1) + relativedelta(day=31, weekday=SU(-1))


def calculate_trading_sundays(year: int) -> List[date]:
    sundays = [easter_sunday(year) - timedelta(days=7)]
    sundays.extend(_last_sunday(year, month) for month in TRADING_MONTHS)
    before_christmas = date(year, 12, 24) + relativedelta(weekday=SU(-1))
    sundays.append(before_christmas)
    sundays.append(before_christmas - timedelta(days=7))
    return sorted(set(sundays))


@lru_cache(maxsize=64)
def _trading_sundays(year: int) -> Tuple[date, ...]:
    if year in TRADING_SUNDAYS:
        return tuple(date.fromisoformat(d) for d in TRADING_SUNDAYS[year])
    return tuple(calculate_trading_sundays(year))


def trading_sundays(year: int) -> List[date]:
    return list(_trading_sundays(year))


def is_trading_sunday(day: DateLike) -> bool:
    d = to_date(day)
    return d.weekday() == 6 and d in _trading_sundays(d.year)


def is_non_trading_sunday(day: DateLike) -> bool:
    d = to_date(day)
    return d.weekday() == 6 and not is_trading_sunday(d)


def is_public_holiday(day: DateLike) -> bool:
    d = to_date(day)
    return d in _holidays_by_date(d.year)


def holiday_name(day: DateLike) -> Optional[str]:
    d = to_date(day)
    return _holidays_by_date(d.year).get(d)


def is_working_day(day: DateLike, respect_trading_sundays: bool = True) -> bool:
    """Working day under Polish rules: no holidays, no Saturdays, Sundays only when trading."""
    d = to_date(day)
    if is_public_holiday(d):
        return False
    if d.weekday() == 5:
        return False
    if d.weekday() == 6:
        return respect_trading_sundays and is_trading_sunday(d)
    return True


def count_working_days(start: DateLike, end: DateLike, respect_trading_sundays: bool = True) -> int:
    return sum(
        1 for d in each_day(to_date(start), to_date(end))
        if is_working_day(d, respect_trading_sundays)
    )


def classify_day(day: DateLike) -> Optional[Holiday]:
    """Special-day record for ``day``; holidays win over Sunday classification."""
    d = to_date(day)
    name = holiday_name(d)
    if name:
        return Holiday(d, name, PUBLIC)
    if is_trading_sunday(d):
        return Holiday(d, "Niedziela handlowa", TRADING_SUNDAY)
    if is_non_trading_sunday(d):
        return Holiday(d, "Niedziela niehandlowa", NON_TRADING_SUNDAY)
    return None


def special_days(start: DateLike, end: DateLike) -> List[Holiday]:
    days = (classify_day(d) for d in each_day(to_date(start), to_date(end)))
    return [d for d in days if d is not None]


def month_calendar(year: int, month: int) -> List[Dict[str, Any]]:
    first_day, last_day = month_bounds(year, month)
    return [
        {
            'date': d.isoformat(),
            'day_of_month': d.day,
            'weekday': d.weekday(),
            'is_weekend': d.weekday() >= 5,
            'is_public_holiday': is_public_holiday(d),
            'holiday_name': holiday_name(d),
            'is_trading_sunday': is_trading_sunday(d),
            'is_non_trading_sunday': is_non_trading_sunday(d),
            'is_working_day': is_working_day(d),
        }
        for d in each_day(first_day, last_day)
    ]
