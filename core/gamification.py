# core/gamification.py

from datetime import date, timedelta
from typing import Iterable, Optional, Tuple

from core.models import Entry, ScoreSnapshot

LEVELS = [
    "Новичок", "Начинающий", "Исследователь", "Планировщик",
    "Гуру привычек", "Лидер", "Наставник", "Пример для подражания",
    "Чемпион", "Вдохновитель", "Эксперт", "Тренер", "Легенда",
    "Герой дня", "Король продуктивности", "Железный человек"
]

XP_PER_LEVEL = 100


def get_level(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def get_rank(xp: int) -> str:
    level_index = min(xp // XP_PER_LEVEL, len(LEVELS) - 1)
    return LEVELS[level_index]


def is_completed(entry: Entry) -> bool:
    return bool(entry.value_bool) or (entry.value_num or 0) > 0


def compute_streaks(days: Iterable[date], today: Optional[date] = None) -> Tuple[int, int]:
    """(текущий, лучший) стрик по дням с выполнением"""
    done = set(days)
    if not done:
        return 0, 0

    # текущий стрик считается от последнего активного дня, не позже today
    cursor = today or max(done)
    if cursor not in done:
        cursor -= timedelta(days=1)
    current = 0
    while cursor in done:
        current += 1
        cursor -= timedelta(days=1)

    longest = run = 0
    previous = None
    for day in sorted(done):
        run = run + 1 if previous is not None and day == previous + timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day
    return current, longest


def build_score(entries: Iterable[Entry], today: Optional[date] = None) -> ScoreSnapshot:
    """Локальный расчет очков: 1 XP за каждое выполнение"""
    completed = [e for e in entries if is_completed(e)]
    xp = len(completed)
    current, best = compute_streaks((e.day for e in completed), today=today)
    return ScoreSnapshot(
        xp=xp,
        level=get_level(xp),
        rank=get_rank(xp),
        streak=current,
        best_streak=best,
    )
