from datetime import date, datetime, timedelta
from typing import Iterator, Tuple, Union

import pytz

DateLike = Union[date, str]


def get_timezone(name: str = "UTC"):
    return pytz.timezone(name)


def now_local(tz_name: str = "UTC") -> datetime:
    return datetime.now(get_timezone(tz_name))


def today_local(tz_name: str = "UTC") -> date:
    return now_local(tz_name).date()


def parse_date(date_str: str, fmt: str = "%Y-%m-%d") -> date:
    return datetime.strptime(date_str, fmt).date()


def as_date(value: DateLike) -> date:
    """Принимает date или строку YYYY-MM-DD"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Все календарные дни от start до end включительно"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: date, end: date) -> int:
    """Количество дней в диапазоне [start, end]; 0 для пустого диапазона"""
    return max(0, (end - start).days + 1)


def start_of_week(d: date) -> date:
    # ISO-неделя, понедельник
    return d - timedelta(days=d.weekday())


def start_of_month(d: date) -> date:
    return d.replace(day=1)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def range_ending(days: int, end: date) -> Tuple[date, date]:
    """Диапазон из `days` дней, заканчивающийся на end"""
    return end - timedelta(days=days - 1), end
