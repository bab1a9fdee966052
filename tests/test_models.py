from datetime import date, datetime

import pytest

from core.models import (
    Entry, HabitKind, NumericHabit, ToggleHabit, ValidationError, change_habit_kind,
    habit_from_dict, is_nutrition_habit, make_habit,
)


def test_toggle_habit_has_no_daily_target():
    habit = make_habit("Workout", "toggle", target_daily=5)
    assert isinstance(habit, ToggleHabit)
    assert not hasattr(habit, "target_daily")
    assert habit.kind is HabitKind.TOGGLE


def test_numeric_habit_round_trip():
    habit = make_habit("English", HabitKind.MINUTES, target_daily=30, year_goal=180)
    data = habit.to_dict()

    assert data["type"] == "minutes"
    assert "value_kind" not in data
    restored = habit_from_dict(data)
    assert isinstance(restored, NumericHabit)
    assert restored == habit


def test_invalid_kind_rejected():
    with pytest.raises(ValidationError):
        make_habit("Workout", "weekly")


def test_empty_name_rejected():
    with pytest.raises(ValidationError):
        make_habit("   ", HabitKind.TOGGLE)


def test_change_kind_keeps_identity():
    habit = make_habit("Service", HabitKind.MINUTES, target_daily=30, year_goal=6000)
    changed = change_habit_kind(habit, HabitKind.TOGGLE)

    assert isinstance(changed, ToggleHabit)
    assert changed.habit_id == habit.habit_id
    assert changed.year_goal == 6000


def test_entry_single_channel():
    with pytest.raises(ValidationError):
        Entry(habit_id="h", date="2024-01-01", value_bool=True, value_num=1)


def test_entry_rejects_negative_and_bad_date():
    with pytest.raises(ValidationError):
        Entry(habit_id="h", date="2024-01-01", value_num=-1)
    with pytest.raises(ValidationError):
        Entry(habit_id="h", date="01/02/2024", value_bool=True)


def test_entry_for_habit_uses_kind_channel():
    toggle = make_habit("Workout", HabitKind.TOGGLE)
    count = make_habit("Pushups", HabitKind.COUNT)

    assert Entry.for_habit(toggle, "2024-01-01", 1).value_bool is True
    entry = Entry.for_habit(count, "2024-01-01", 3)
    assert entry.value_num == 3.0
    assert entry.value_bool is None


def test_nutrition_habit_detection():
    assert is_nutrition_habit(make_habit("Nutrition • Calories", HabitKind.COUNT))
    assert not is_nutrition_habit(make_habit("Calories", HabitKind.COUNT))


@pytest.mark.parametrize("value", ["20240105", "2024-W01-1", "2024-1-5", "2024-02-30", "2024-01-05T00:00"])
def test_entry_rejects_non_canonical_dates(value):
    with pytest.raises(ValidationError):
        Entry(habit_id="h", date=value, value_num=30)


def test_entry_date_objects_normalized():
    assert Entry(habit_id="h", date=date(2024, 1, 5), value_num=1).date == "2024-01-05"
    assert Entry(habit_id="h", date=datetime(2024, 1, 5, 23, 59), value_num=1).date == "2024-01-05"


@pytest.mark.parametrize("goal", [0, -10, True, 12.5])
def test_year_goal_must_be_positive_integer(goal):
    with pytest.raises(ValidationError):
        make_habit("Workout", HabitKind.TOGGLE, year_goal=goal)


def test_year_goal_optional():
    assert make_habit("Workout", HabitKind.TOGGLE).has_year_goal is False
    assert make_habit("Workout", HabitKind.TOGGLE, year_goal=156).has_year_goal is True
