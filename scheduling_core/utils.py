"""Shared utilities for scheduling algorithms."""
import calendar
from datetime import datetime, timedelta, date, time
from typing import Tuple, Iterator, Union

DateLike = Union[date, str]
TimeLike = Union[time, str]


def to_date(value: DateLike) -> date:
    """Accept a date, datetime or ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def parse_time(value: TimeLike) -> time:
    """Accept a time or an ``HH:MM[:SS]`` string."""
    if isinstance(value, time):
        return value
    parts = [int(p) for p in str(value).split(':')]
    if len(parts) < 2:
        raise ValueError(f"Cannot convert {value!r} to time object")
    return time(*parts[:3])


def format_time(value: TimeLike) -> str:
    return parse_time(value).strftime('%H:%M')


def time_to_minutes(value: TimeLike) -> int:
    t = parse_time(value)
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> str:
    minutes %= 24 * 60
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def shift_hours(start: TimeLike, end: TimeLike, break_minutes: int = 0) -> float:
    """Net hours of a shift; an end before the start wraps past midnight."""
    start_minutes = time_to_minutes(start)
    end_minutes = time_to_minutes(end)
    if end_minutes < start_minutes:
        end_minutes += 24 * 60
    return (end_minutes - start_minutes - (break_minutes or 0)) / 60


def shift_bounds(day: date, start: TimeLike, end: TimeLike) -> Tuple[datetime, datetime]:
    """Start and end datetimes of a shift starting on ``day``."""
    start_dt = datetime.combine(day, parse_time(start))
    end_dt = datetime.combine(day, parse_time(end))
    if end_dt < start_dt:
        end_dt += timedelta(days=1)
    return start_dt, end_dt


def shift_period(start_hour: int) -> str:
    if start_hour < 12:
        return 'morning'
    if start_hour < 18:
        return 'afternoon'
    return 'evening'


def each_day(start_date: date, end_date: date) -> Iterator[date]:
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def week_bounds(day: date) -> Tuple[date, date]:
    """Monday and Sunday of the week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def week_key(day: date) -> Tuple[int, int]:
    iso = day.isocalendar()
    return iso[0], iso[1]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5
