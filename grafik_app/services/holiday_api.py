"""Client for the public holiday API (date.nager.at) with a database cache."""
from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import httpx
from django.conf import settings

from grafik_app.exceptions import HolidayApiError
from grafik_app.models import HolidayCache
from grafik_app.utils import parse_period
from scheduling_core.utils import to_date

logger = logging.getLogger(__name__)

UPCOMING_LIMIT = 5


class HolidayApiClient:
    """Read-only client for ``/PublicHolidays/{year}/{country}``."""

    def __init__(self, *, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or settings.HOLIDAY_API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.HOLIDAY_API_TIMEOUT
        self.transport = transport

    def fetch_public_holidays(self, year: int, country_code: str) -> List[Dict[str, Any]]:
        url = f"{self.base_url}/PublicHolidays/{year}/{country_code}"
        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            resp = client.get(url, headers={"Accept": "application/json"})
            resp.raise_for_status()
            data = resp.json()
        if not isinstance(data, list):
            raise HolidayApiError(f"Nieoczekiwana odpowiedź API świąt dla {year}/{country_code}")
        return data


def get_holidays(year, country_code: Optional[str] = None,
                 client: Optional[HolidayApiClient] = None) -> Tuple[List[Dict[str, Any]], bool]:
    """Holidays of ``year`` and whether they came from the cache.

    A failed fetch is logged and yields an empty list that is not cached,
    so the next call tries the API again.
    """
    year, _ = parse_period(year, 1)
    country_code = (country_code or settings.HOLIDAY_COUNTRY_CODE).upper()

    cached = HolidayCache.objects.filter(year=year, country_code=country_code).first()
    if cached is not None:
        return cached.holidays, True

    client = client or HolidayApiClient()
    try:
        holidays = client.fetch_public_holidays(year, country_code)
    except (httpx.HTTPError, ValueError, HolidayApiError) as exc:
        logger.warning("Fetching holidays %s/%s failed: %s", year, country_code, exc)
        return [], False

    HolidayCache.objects.update_or_create(
        year=year, country_code=country_code, defaults={"holidays": holidays},
    )
    logger.info("Cached %d holidays for %s/%s", len(holidays), year, country_code)
    return holidays, False


def find_holiday(day, holidays: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    key = to_date(day).isoformat()
    return next((h for h in holidays if h.get("date") == key), None)


def upcoming_holidays(holidays: List[Dict[str, Any]], from_date: Optional[date] = None,
                      limit: int = UPCOMING_LIMIT) -> List[Dict[str, Any]]:
    today = (from_date or date.today()).isoformat()
    upcoming = sorted((h for h in holidays if h.get("date", "") >= today), key=lambda h: h["date"])
    return upcoming[:limit]


def group_by_month(holidays: List[Dict[str, Any]]) -> Dict[int, List[Dict[str, Any]]]:
    grouped = defaultdict(list)
    for holiday in holidays:
        grouped[to_date(holiday["date"]).month].append(holiday)
    return dict(grouped)
