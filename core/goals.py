"""
Годовые цели и сводные показатели по привычкам
"""

from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Union

from core.models import Entry, Habit, YearProgress
from utils.datetime_utils import as_date, days_between, iter_days, year_bounds

NUTRITION_KEYS = ("calories", "protein", "fat", "carbs")


def observation_value(entry: Entry, habit: Habit) -> float:
    """Вклад записи в накопление: 1/0 для toggle, число для остальных"""
    if habit.is_toggle:
        return 1 if entry.value_bool else 0
    return entry.value_num or 0


def year_done(observations: Iterable[Entry], habit: Habit, year: int) -> float:
    start, end = year_bounds(year)
    first, last = start.isoformat(), end.isoformat()
    done: float = 0
    for entry in observations:
        if entry.habit_id != habit.habit_id:
            continue
        if first <= entry.date <= last:
            done += observation_value(entry, habit)
    return done


def year_progress(observations: Iterable[Entry], habit: Habit, year: int) -> YearProgress:
    """
    Накопление за календарный год против годовой цели.

    ratio ограничен сверху единицей; без цели ratio равен 0, такие привычки
    вызывающий код в список целей не включает. Округления здесь нет.
    """
    done = year_done(observations, habit, year)
    goal = habit.year_goal or 0
    ratio = min(1.0, done / goal) if goal > 0 else 0.0
    return YearProgress(habit_id=habit.habit_id, done=done, goal=goal, ratio=ratio)


def year_progress_map(observations: Sequence[Entry], habits: Iterable[Habit],
                      year: int) -> Dict[str, YearProgress]:
    return {habit.habit_id: year_progress(observations, habit, year) for habit in habits}


def top_year_goals(observations: Sequence[Entry], habits: Iterable[Habit],
                   year: int, limit: int = 6) -> List[YearProgress]:
    """Лучшие N целей по ratio; при равенстве сохраняется исходный порядок"""
    progress = [
        year_progress(observations, habit, year)
        for habit in habits
        if habit.has_year_goal
    ]
    progress.sort(key=lambda p: p.ratio, reverse=True)
    return progress[:limit]


@dataclass(frozen=True)
class RangeScore:
    """Доля выполненных toggle-привычек за диапазон"""
    done: int
    total: int
    ratio: float

    def to_dict(self) -> Dict[str, Union[int, float]]:
        return {"done": self.done, "total": self.total, "ratio": self.ratio}


def range_toggle_score(observations: Iterable[Entry], habits: Iterable[Habit],
                       start: Union[date, str], end: Union[date, str]) -> Optional[RangeScore]:
    """Все toggle-привычки x все дни диапазона; None если toggle-привычек нет"""
    toggles = [h for h in habits if h.is_toggle]
    if not toggles:
        return None
    start, end = as_date(start), as_date(end)

    done_keys = set()
    for entry in observations:
        if entry.value_bool is None:
            continue
        if entry.value_bool:
            done_keys.add(entry.key)
        else:
            done_keys.discard(entry.key)

    done = 0
    for day in iter_days(start, end):
        iso = day.isoformat()
        for habit in toggles:
            if (habit.habit_id, iso) in done_keys:
                done += 1

    total = days_between(start, end) * len(toggles)
    return RangeScore(done=done, total=total, ratio=done / total if total else 0.0)


def nutrition_summary(observations: Iterable[Entry], habit_ids: Dict[str, str]) -> Dict[str, float]:
    """Суммы по нутриентам; habit_ids: ключ нутриента -> id привычки"""
    sums: Dict[str, float] = {key: 0 for key in NUTRITION_KEYS}
    by_habit = {habit_id: key for key, habit_id in habit_ids.items()}
    for entry in observations:
        key = by_habit.get(entry.habit_id)
        if key is not None:
            sums[key] += entry.value_num or 0
    return sums
