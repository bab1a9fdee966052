from datetime import date

import pytest

from core.models import AnalyticsPeriod, DailyNote, Entry, Granularity, HabitKind, make_habit
from database import HabitNotFoundError
from services import ServiceManager
from services.analytics import AnalyticsService
from services.habit_service import set_modules
from services.notifications import NotificationCenter, NotificationKind
from services.reflection import ReflectionService, search_notes


@pytest.fixture
async def analytics(store, owner, workout, reading):
    await store.insert_habits(owner, [workout, reading])
    await store.upsert_entries(owner, [
        Entry(habit_id=workout.habit_id, date="2024-06-10", value_bool=True),
        Entry(habit_id=workout.habit_id, date="2024-06-09", value_bool=True),
        Entry(habit_id=reading.habit_id, date="2024-06-10", value_num=40),
        Entry(habit_id=reading.habit_id, date="2024-02-01", value_num=60),
    ])
    return AnalyticsService(store, goals_top_n=6)


async def test_series_defaults_to_first_visible_habit(analytics, owner, workout):
    series = await analytics.habit_series(owner, "2024-06-10", AnalyticsPeriod.WEEK, Granularity.WEEKLY)

    assert series.habit.habit_id == workout.habit_id
    assert series.granularity is Granularity.DAILY
    assert len(series.points) == 7
    assert series.points[-1].value == 100
    data = series.to_dict()
    assert data["y_max"] == 100
    assert data["period"] == "7d"


async def test_series_year_monthly(analytics, owner, reading):
    series = await analytics.habit_series(
        owner, date(2024, 6, 10), AnalyticsPeriod.YEAR, Granularity.MONTHLY, reading.habit_id,
    )
    assert series.granularity is Granularity.MONTHLY
    assert sum(p.days for p in series.points) == 365
    assert sum(p.value for p in series.points) == 100
    assert series.to_dict()["y_max"] is None


async def test_series_unknown_habit(analytics, owner):
    with pytest.raises(HabitNotFoundError):
        await analytics.habit_series(owner, "2024-06-10", AnalyticsPeriod.WEEK, habit_id="missing")


async def test_year_goals(analytics, owner, workout, reading):
    goals = await analytics.year_goals(owner, "2024-06-10")

    assert [g.habit.habit_id for g in goals] == [reading.habit_id, workout.habit_id]
    assert goals[0].habit.name == reading.name
    assert goals[0].progress.done == 100
    assert goals[0].progress.ratio == 1.0
    assert goals[0].to_dict()["percent"] == 100


async def test_year_goals_hidden_habit_not_listed(analytics, store, owner, workout, reading):
    await store.update_habit(owner, workout.habit_id, enabled=False)

    goals = await analytics.year_goals(owner, "2024-06-10")

    assert [(g.habit.name, g.progress.habit_id) for g in goals] == [(reading.name, reading.habit_id)]


async def test_summary_nutrition_only_when_enabled(analytics, store, owner):
    summary = await analytics.summary(owner, "2024-06-10", AnalyticsPeriod.WEEK)
    assert summary.score.done == 2
    assert summary.score.total == 7
    assert summary.nutrition["calories"] == 0

    await set_modules(store, owner, nutrition=True)
    habits = {h.name: h for h in await store.get_habits(owner)}
    calories = habits["Nutrition • Calories"]
    await store.update_habit(owner, calories.habit_id, enabled=True)
    await store.upsert_entries(owner, [Entry(habit_id=calories.habit_id, date="2024-06-10", value_num=2000)])

    summary = await analytics.summary(owner, "2024-06-10", AnalyticsPeriod.WEEK)
    assert summary.nutrition["calories"] == 2000
    assert summary.score.total == 7


def test_search_notes():
    notes = [
        DailyNote(date="2024-06-10", gratitude="Sunny walk", improve=""),
        DailyNote(date="2024-05-01", gratitude="", improve="Go to bed earlier"),
    ]
    assert [n.date for n in search_notes(notes, "WALK")] == ["2024-06-10"]
    assert [n.date for n in search_notes(notes, "2024-05")] == ["2024-05-01"]
    assert len(search_notes(notes, "  ")) == 2


async def test_reflection_history_window(store, owner):
    for day in ("2024-06-10", "2024-01-01", "2023-10-01"):
        await store.upsert_daily_note(owner, DailyNote(date=day, gratitude=f"note {day}"))

    service = ReflectionService(store, history_days=180)
    notes = await service.history(owner, "2024-06-10")

    assert [n.date for n in notes] == ["2024-06-10", "2024-01-01"]
    assert [n.date for n in await service.history(owner, "2024-06-10", "01-01")] == ["2024-01-01"]


def test_notification_center_listeners():
    center = NotificationCenter(max_history=2)
    received = []

    def broken(_):
        raise RuntimeError("listener failure")

    center.subscribe(broken)
    center.subscribe(received.append)
    center.success("Сохранено")
    center.error("Ошибка сохранения", ConnectionError("timeout"), day="2024-06-10")
    center.success("Сохранено")

    assert len(received) == 3
    assert len(center.history) == 2
    assert center.of_kind(NotificationKind.ERROR)[0].detail == "timeout"

    center.unsubscribe(received.append)
    center.success("Сохранено")
    assert len(received) == 3


async def test_service_manager_controllers(store, owner):
    manager = ServiceManager(store)
    assert manager.initialize_services() is True

    first = manager.controller_for(owner, delay=0)
    assert manager.controller_for(owner) is first
    assert first.store is store

    await manager.close_services()
    assert manager.controllers == {}
