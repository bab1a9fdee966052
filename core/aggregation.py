"""
Агрегация ежедневных значений привычки в корзины: день, неделя, месяц
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Tuple, Union

from core.models import AnalyticsPeriod, Entry, Granularity, Habit, SeriesPoint
from utils.datetime_utils import as_date, iter_days, range_ending, start_of_month, start_of_week
from utils.text_utils import percent, round_half_up

logger = logging.getLogger(__name__)

_NUMERIC_META = {
    Granularity.DAILY: "day",
    Granularity.WEEKLY: "week",
    Granularity.MONTHLY: "month",
}


@dataclass
class _Bucket:
    start: date
    days: int = 0
    done: int = 0
    total: float = 0.0


def bucket_key(day: date, granularity: Granularity) -> date:
    """Начало корзины, в которую попадает день"""
    if granularity is Granularity.WEEKLY:
        return start_of_week(day)
    if granularity is Granularity.MONTHLY:
        return start_of_month(day)
    return day


def bucket_label(start: date, granularity: Granularity) -> str:
    if granularity is Granularity.MONTHLY:
        return start.strftime("%b")
    return f"{start.strftime('%b')} {start.day}"


def _index_by_date(observations: Iterable[Entry], habit_id: str) -> Dict[str, Entry]:
    by_date: Dict[str, Entry] = {}
    for entry in observations:
        if entry.habit_id == habit_id:
            by_date[entry.date] = entry
    return by_date


def aggregate(observations: Iterable[Entry], habit: Habit,
              start: Union[date, str], end: Union[date, str],
              granularity: Granularity = Granularity.DAILY) -> List[SeriesPoint]:
    """
    Ряд корзин за [start, end] включительно.

    Для toggle значение корзины - процент дней с True, для числовых привычек -
    сумма за корзину с округлением до 2 знаков. День без записи учитывается в
    days как пропуск. Записи вне диапазона и чужих привычек отбрасываются.
    """
    start, end = as_date(start), as_date(end)
    by_date = _index_by_date(observations, habit.habit_id)
    buckets: Dict[date, _Bucket] = {}

    for day in iter_days(start, end):
        key = bucket_key(day, granularity)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = _Bucket(start=key)
        bucket.days += 1

        entry = by_date.get(day.isoformat())
        if entry is None:
            continue
        if habit.is_toggle:
            if entry.value_bool:
                bucket.done += 1
        else:
            bucket.total += entry.value_num or 0

    points = []
    for key in sorted(buckets):
        bucket = buckets[key]
        label = bucket_label(bucket.start, granularity)
        if habit.is_toggle:
            points.append(SeriesPoint(
                start=bucket.start,
                label=label,
                days=bucket.days,
                value=percent(bucket.done, bucket.days),
                meta=f"{bucket.done}/{bucket.days} days",
            ))
        else:
            points.append(SeriesPoint(
                start=bucket.start,
                label=label,
                days=bucket.days,
                value=round_half_up(bucket.total, 2),
                meta=_NUMERIC_META[granularity],
            ))
    return points


def normalize_granularity(period: AnalyticsPeriod, granularity: Granularity) -> Granularity:
    """Недели и месяцы доступны только для годового окна"""
    if period is not AnalyticsPeriod.YEAR:
        return Granularity.DAILY
    return granularity


def analytics_window(day: Union[date, str], period: AnalyticsPeriod) -> Tuple[date, date]:
    """Окно аналитики, заканчивающееся просматриваемым днем"""
    return range_ending(period.value, as_date(day))


def tick_interval(points: int) -> int:
    """Сколько подписей оси пропускать для читаемости"""
    if points <= 12:
        return 0
    if points <= 24:
        return 1
    if points <= 60:
        return 3
    return 6
