"""
Сервис аналитики: ряды по привычке, годовые цели, сводка за период
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

from config import config
from core.aggregation import aggregate, analytics_window, normalize_granularity, tick_interval
from core.goals import RangeScore, nutrition_summary, range_toggle_score, top_year_goals
from core.models import AnalyticsPeriod, Granularity, Habit, SeriesPoint, YearProgress
from database.base import EntryStore, HabitNotFoundError
from services.habit_service import nutrition_habit_ids, visible_habits
from utils.datetime_utils import as_date, year_bounds

logger = logging.getLogger(__name__)

DateLike = Union[date, str]


@dataclass
class HabitSeries:
    habit: Habit
    period: AnalyticsPeriod
    granularity: Granularity
    start: date
    end: date
    points: List[SeriesPoint] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "habit_id": self.habit.habit_id,
            "habit_name": self.habit.name,
            "type": self.habit.kind.value,
            "period": self.period.label,
            "granularity": self.granularity.value,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "y_max": 100 if self.habit.is_toggle else None,
            "tick_interval": tick_interval(len(self.points)),
            "points": [p.to_dict() for p in self.points],
        }


@dataclass
class YearGoal:
    habit: Habit
    progress: YearProgress

    def to_dict(self) -> Dict[str, Any]:
        return {"habit_name": self.habit.name, "percent": self.progress.percent, **self.progress.to_dict()}


@dataclass
class PeriodSummary:
    start: date
    end: date
    score: Optional[RangeScore]
    nutrition: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "score": self.score.to_dict() if self.score else None,
            "nutrition": self.nutrition,
        }


class AnalyticsService:
    """Чтение данных из хранилища и расчет показателей экрана аналитики"""

    def __init__(self, store: EntryStore, goals_top_n: Optional[int] = None):
        self.store = store
        self.goals_top_n = goals_top_n or config.GOALS_TOP_N

    async def habits(self, owner: str) -> List[Habit]:
        return visible_habits(await self.store.get_habits(owner))

    async def habit_series(self, owner: str, day: DateLike, period: AnalyticsPeriod,
                           granularity: Granularity = Granularity.WEEKLY,
                           habit_id: Optional[str] = None) -> HabitSeries:
        """Ряд по привычке; без habit_id берется первая видимая привычка"""
        habits = await self.habits(owner)
        if habit_id is None:
            if not habits:
                raise HabitNotFoundError("Нет привычек для аналитики")
            habit = habits[0]
        else:
            habit = next((h for h in habits if h.habit_id == habit_id), None)
            if habit is None:
                raise HabitNotFoundError(f"Привычка {habit_id} не найдена")

        start, end = analytics_window(day, period)
        effective = normalize_granularity(period, granularity)
        entries = await self.store.read_range(owner, start, end)
        points = aggregate(entries, habit, start, end, effective)
        return HabitSeries(habit=habit, period=period, granularity=effective,
                           start=start, end=end, points=points)

    async def year_goals(self, owner: str, day: DateLike, limit: Optional[int] = None) -> List[YearGoal]:
        """Лучшие годовые цели за год просматриваемого дня вместе с самой привычкой"""
        year = as_date(day).year
        start, end = year_bounds(year)
        habits = await self.habits(owner)
        entries = await self.store.read_range(owner, start, end)
        by_id = {h.habit_id: h for h in habits}
        top = top_year_goals(entries, habits, year, limit=limit or self.goals_top_n)
        return [YearGoal(habit=by_id[p.habit_id], progress=p) for p in top]

    async def summary(self, owner: str, day: DateLike, period: AnalyticsPeriod) -> PeriodSummary:
        """Доля выполненных toggle-привычек и суммы питания за период"""
        start, end = analytics_window(day, period)
        all_habits = await self.store.get_habits(owner)
        settings = await self.store.ensure_settings(owner)
        entries = await self.store.read_range(owner, start, end)

        score = range_toggle_score(entries, visible_habits(all_habits), start, end)
        ids = nutrition_habit_ids(h for h in all_habits if h.enabled)
        nutrition = nutrition_summary(entries, ids if settings.nutrition_enabled else {})
        return PeriodSummary(start=start, end=end, score=score, nutrition=nutrition)
