"""Calendar helpers evaluated in the app timezone"""

import calendar
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from ..config import APP_TIMEZONE


def local_now() -> datetime:
    return datetime.now(ZoneInfo(APP_TIMEZONE))


def local_today() -> date:
    return local_now().date()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores"""
    return datetime.utcnow()


def week_bounds(day: date) -> tuple[date, date]:
    """Monday..Sunday of the week containing ``day``"""
    start = day - timedelta(days=day.weekday())
    return start, start + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def age_on(born: date, today: date) -> int:
    return today.year - born.year - ((today.month, today.day) < (born.month, born.day))
