"""
Tests for Polish public holidays and trading Sundays.
"""
from datetime import date

import pytest

from scheduling_core.polish_holidays import (
    NON_TRADING_SUNDAY,
    PUBLIC,
    TRADING_SUNDAY,
    TRADING_SUNDAYS,
    calculate_trading_sundays,
    classify_day,
    count_working_days,
    easter_sunday,
    holiday_name,
    is_non_trading_sunday,
    is_public_holiday,
    is_trading_sunday,
    is_working_day,
    month_calendar,
    public_holidays,
    special_days,
    trading_sundays,
)


@pytest.mark.parametrize("year, expected", [
    (2024, date(2024, 3, 31)),
    (2025, date(2025, 4, 20)),
    (2026, date(2026, 4, 5)),
    (2027, date(2027, 3, 28)),
])
def test_easter_sunday(year, expected):
    assert easter_sunday(year) == expected


def test_public_holidays_2025():
    holidays = public_holidays(2025)
    dates = [h.date for h in holidays]

    assert len(holidays) == 13
    assert dates == sorted(dates)
    assert date(2025, 1, 1) in dates
    assert date(2025, 4, 21) in dates      # Easter Monday
    assert date(2025, 6, 8) in dates       # Pentecost
    assert date(2025, 6, 19) in dates      # Corpus Christi
    assert date(2025, 12, 26) in dates
    assert all(h.type == PUBLIC for h in holidays)


def test_holiday_lookup_accepts_strings():
    assert is_public_holiday("2024-11-11")
    assert not is_public_holiday("2024-11-12")
    assert holiday_name(date(2025, 4, 21)) == "Poniedziałek Wielkanocny"
    assert holiday_name(date(2025, 5, 3)) == "Święto Konstytucji 3 Maja"
    assert holiday_name(date(2025, 5, 4)) is None


@pytest.mark.parametrize("year", sorted(TRADING_SUNDAYS))
def test_calculated_trading_sundays_match_published_list(year):
    published = [date.fromisoformat(d) for d in TRADING_SUNDAYS[year]]
    assert calculate_trading_sundays(year) == published


def test_trading_sundays_computed_outside_published_years():
    assert trading_sundays(2027) == [
        date(2027, 1, 31),
        date(2027, 3, 21),
        date(2027, 4, 25),
        date(2027, 6, 27),
        date(2027, 8, 29),
        date(2027, 12, 12),
        date(2027, 12, 19),
    ]


def test_sunday_classification():
    assert is_trading_sunday(date(2024, 12, 15))
    assert not is_non_trading_sunday(date(2024, 12, 15))
    assert is_non_trading_sunday(date(2024, 12, 8))
    # Monday is neither
    assert not is_trading_sunday(date(2024, 12, 9))
    assert not is_non_trading_sunday(date(2024, 12, 9))


def test_is_working_day():
    assert is_working_day(date(2024, 12, 9))               # Monday
    assert not is_working_day(date(2024, 12, 7))           # Saturday
    assert not is_working_day(date(2024, 12, 25))          # Christmas
    assert not is_working_day(date(2024, 12, 8))           # non-trading Sunday
    assert is_working_day(date(2024, 12, 15))              # trading Sunday
    assert not is_working_day(date(2024, 12, 15), respect_trading_sundays=False)


def test_count_working_days_december_2024():
    # 22 weekdays - 2 Christmas days + 2 trading Sundays
    assert count_working_days(date(2024, 12, 1), date(2024, 12, 31)) == 22
    assert count_working_days("2024-12-01", "2024-12-31", respect_trading_sundays=False) == 20


def test_classify_day():
    assert classify_day(date(2024, 12, 25)).type == PUBLIC
    assert classify_day(date(2024, 12, 15)).type == TRADING_SUNDAY
    assert classify_day(date(2024, 12, 8)).type == NON_TRADING_SUNDAY
    assert classify_day(date(2024, 12, 9)) is None


def test_holiday_on_sunday_wins_over_sunday_classification():
    special = classify_day(date(2024, 3, 31))
    assert special.type == PUBLIC
    assert special.name == "Wielkanoc"


def test_special_days_in_range():
    days = special_days(date(2024, 5, 1), date(2024, 5, 5))
    assert [(d.date.day, d.type) for d in days] == [
        (1, PUBLIC),
        (3, PUBLIC),
        (5, NON_TRADING_SUNDAY),
    ]
    assert days[0].to_dict() == {'date': '2024-05-01', 'name': "Święto Pracy", 'type': PUBLIC}


def test_month_calendar():
    days = month_calendar(2024, 5)
    assert len(days) == 31

    may_3 = days[2]
    assert may_3['date'] == '2024-05-03'
    assert may_3['is_public_holiday']
    assert not may_3['is_working_day']

    may_5 = days[4]
    assert may_5['weekday'] == 6
    assert may_5['is_weekend']
    assert may_5['is_non_trading_sunday']
