"""
Сервис каталога привычек: шаблон, привычки питания, модули
"""

import logging
from typing import Dict, Iterable, List, Optional

from core.models import (
    Habit, HabitKind, NUTRITION_HABIT_NAMES, UserSettings, is_nutrition_habit, make_habit,
)
from database.base import EntryStore

logger = logging.getLogger(__name__)

# Стартовый набор: (название, тип, дневная цель, годовая цель)
TEMPLATE_HABITS = [
    ("Workout", HabitKind.TOGGLE, None, 156),
    ("Prayer", HabitKind.TOGGLE, None, 365),
    ("Programming (2h)", HabitKind.HOURS, 2, 730),
    ("English (30m)", HabitKind.MINUTES, 30, 180),
    ("Screen before bed", HabitKind.TOGGLE, None, 300),
    ("Screen after wake", HabitKind.TOGGLE, None, 300),
    ("Service", HabitKind.MINUTES, 30, 6000),
    ("Sleep (hours)", HabitKind.HOURS, 8, 2920),
    ("Communication", HabitKind.HOURS, 1, 365),
]


def visible_habits(habits: Iterable[Habit]) -> List[Habit]:
    """Включенные привычки без служебных привычек питания"""
    return [h for h in habits if h.enabled and not is_nutrition_habit(h)]


def group_habits(habits: Iterable[Habit]) -> Dict[str, List[Habit]]:
    """Группы экрана дня: toggle, время, количество"""
    visible = visible_habits(habits)
    return {
        "toggle": [h for h in visible if h.kind is HabitKind.TOGGLE],
        "time": [h for h in visible if h.kind in (HabitKind.MINUTES, HabitKind.HOURS)],
        "count": [h for h in visible if h.kind is HabitKind.COUNT],
    }


def nutrition_habit_ids(habits: Iterable[Habit]) -> Dict[str, str]:
    """Ключ нутриента -> id привычки для существующих привычек питания"""
    by_name = {h.name: h for h in habits if is_nutrition_habit(h)}
    return {
        key: by_name[name].habit_id
        for key, name in NUTRITION_HABIT_NAMES.items()
        if name in by_name
    }


def _max_sort(habits: Iterable[Habit]) -> int:
    return max((h.sort or 0 for h in habits), default=0)


async def apply_template(store: EntryStore, owner: str) -> List[Habit]:
    """Добавить стартовые привычки, которых еще нет (по имени без учета регистра)"""
    existing = await store.get_habits(owner)
    names = {h.name.strip().lower() for h in existing}
    max_sort = _max_sort(existing)

    to_insert = []
    for name, kind, target_daily, year_goal in TEMPLATE_HABITS:
        if name.lower() in names:
            continue
        to_insert.append(make_habit(
            name, kind,
            target_daily=target_daily,
            year_goal=year_goal,
            sort=max_sort + len(to_insert) + 1,
            enabled=True,
        ))

    if not to_insert:
        return []
    created = await store.insert_habits(owner, to_insert)
    logger.info(f"📋 Шаблон применен для {owner}: {len(created)} привычек")
    return created


async def ensure_nutrition_habits(store: EntryStore, owner: str,
                                  habits: Optional[List[Habit]] = None) -> List[Habit]:
    """Создать отключенные привычки питания, если их нет"""
    if habits is None:
        habits = await store.get_habits(owner)
    existing = {h.name for h in habits}
    missing = [name for name in NUTRITION_HABIT_NAMES.values() if name not in existing]
    if not missing:
        return []

    max_sort = _max_sort(habits)
    payload = [
        make_habit(name, HabitKind.COUNT, sort=max_sort + i + 1, enabled=False)
        for i, name in enumerate(missing)
    ]
    return await store.insert_habits(owner, payload)


async def set_modules(store: EntryStore, owner: str, nutrition: Optional[bool] = None,
                      sleep: Optional[bool] = None) -> UserSettings:
    """Включение/выключение модулей питания и сна"""
    patch = {}
    if nutrition is not None:
        patch["nutrition_enabled"] = nutrition
    if sleep is not None:
        patch["sleep_enabled"] = sleep
    settings = await store.update_settings(owner, **patch)
    if settings.nutrition_enabled:
        await ensure_nutrition_habits(store, owner)
    return settings
