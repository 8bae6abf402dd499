"""Utility functions for the grafik app."""
from datetime import date
from typing import List

from scheduling_core.generator import is_day_open
from scheduling_core.polish_holidays import classify_day
from scheduling_core.utils import each_day, month_bounds, to_date
from grafik_app.exceptions import GrafikError, InvalidPeriod


def get_working_days_in_range(start_date: date, end_date: date, team) -> List[date]:
    settings = team.team_settings()
    return [d for d in each_day(start_date, end_date) if is_day_open(d, settings)]


def workdays_in_month(year: int, month: int, team) -> int:
    first_day, last_day = month_bounds(year, month)
    return len(get_working_days_in_range(first_day, last_day, team))


def parse_period(year, month) -> tuple:
    """Validate a year/month pair coming from a request or a command line."""
    try:
        year, month = int(year), int(month)
    except (TypeError, ValueError):
        raise InvalidPeriod("Nieprawidłowy rok lub miesiąc")
    if not 2000 <= year <= 2100:
        raise InvalidPeriod("Nieprawidłowy rok")
    if not 1 <= month <= 12:
        raise InvalidPeriod("Nieprawidłowy miesiąc")
    return year, month


def parse_date_range(start, end) -> tuple:
    try:
        start_date, end_date = to_date(start), to_date(end)
    except (TypeError, ValueError):
        raise InvalidPeriod("Nieprawidłowy format daty (oczekiwano RRRR-MM-DD)")
    if end_date < start_date:
        raise InvalidPeriod("Data końcowa nie może być wcześniejsza niż początkowa")
    return start_date, end_date


def parse_id(value, message: str = "Nieprawidłowy identyfikator") -> int:
    """Primary key from a query string parameter."""
    try:
        pk = int(value)
    except (TypeError, ValueError):
        raise GrafikError(message)
    if pk < 1:
        raise GrafikError(message)
    return pk


def day_label(check_date: date) -> str:
    special = classify_day(check_date)
    return special.name if special else ''
