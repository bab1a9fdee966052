import asyncio

import pytest

from core.models import ValidationError
from services.autosave import AutosaveController, DraftLoadError, DraftSaveError, DraftState
from services.notifications import NotificationCenter, NotificationKind

DAY = "2024-06-10"
NEXT_DAY = "2024-06-11"
DELAY = 0.05


@pytest.fixture
def notifications():
    return NotificationCenter()


@pytest.fixture
async def controller(seeded_store, owner, notifications):
    ctrl = AutosaveController(seeded_store, owner, notifications=notifications, delay=DELAY)
    await ctrl.load(DAY)
    yield ctrl
    await ctrl.close()


async def _entry_value(store, owner, habit, day=DAY):
    entries = {e.habit_id: e for e in await store.read_day(owner, day)}
    entry = entries.get(habit.habit_id)
    if entry is None:
        return None
    return entry.value_bool if habit.is_toggle else entry.value_num


async def test_load_builds_clean_draft(controller, workout, reading):
    assert controller.state is DraftState.CLEAN
    assert controller.day == DAY
    assert set(controller.draft.values) == {workout.habit_id, reading.habit_id}


async def test_mutations_within_window_flush_once(controller, seeded_store, owner, reading):
    controller.set_number(reading.habit_id, 10)
    controller.set_number(reading.habit_id, 25)
    assert controller.state is DraftState.DIRTY

    await controller.drain()

    assert len(seeded_store.upsert_calls) == 1
    assert await _entry_value(seeded_store, owner, reading) == 25
    assert controller.dirty is False


async def test_failed_flush_keeps_dirty_and_manual_retry_clears(
        controller, seeded_store, owner, workout, notifications):
    seeded_store.fail_writes = True
    controller.set_toggle(workout.habit_id, True)
    await controller.drain()

    assert controller.dirty is True
    errors = notifications.of_kind(NotificationKind.ERROR)
    assert len(errors) == 1
    assert isinstance(errors[0].error, DraftSaveError)
    assert errors[0].day == DAY

    seeded_store.fail_writes = False
    assert await controller.save(manual=True) is True

    assert controller.dirty is False
    assert await _entry_value(seeded_store, owner, workout) is True
    assert [n.title for n in notifications.of_kind(NotificationKind.SUCCESS)] == ["Сохранено"]


async def test_autosave_is_silent(controller, workout, notifications):
    controller.set_toggle(workout.habit_id, True)
    await controller.drain()
    assert list(notifications.history) == []


async def test_offline_suppresses_flush(controller, seeded_store, workout):
    controller.set_online(False)
    controller.set_toggle(workout.habit_id, True)
    await controller.drain()

    assert seeded_store.upsert_calls == []
    assert await controller.save(manual=True) is False
    assert controller.dirty is True

    controller.set_online(True)
    await controller.drain()
    assert seeded_store.upsert_calls == []

    assert await controller.save(manual=True) is True
    assert controller.dirty is False


async def test_manual_save_writes_clean_draft(controller, seeded_store, owner, workout, reading):
    assert await controller.save() is False
    assert await controller.save(manual=True) is True

    assert await _entry_value(seeded_store, owner, workout) is False
    assert await _entry_value(seeded_store, owner, reading) == 0


async def test_score_failure_is_swallowed(controller, seeded_store, workout, notifications):
    seeded_store.fail_score = True
    controller.set_toggle(workout.habit_id, True)

    assert await controller.save(manual=True) is True
    assert controller.dirty is False
    assert notifications.of_kind(NotificationKind.ERROR) == []


async def test_score_refreshed_after_save(controller, workout):
    controller.set_toggle(workout.habit_id, True)
    await controller.save(manual=True)
    assert controller.score.xp == 1


async def test_year_progress_recomputed_after_save(controller, workout):
    assert controller.year_progress[workout.habit_id].done == 0
    controller.set_toggle(workout.habit_id, True)
    await controller.save(manual=True)

    progress = controller.year_progress[workout.habit_id]
    assert progress.done == 1
    assert progress.goal == 156


async def test_date_change_discards_unsaved_edits(controller, seeded_store, owner, workout):
    controller.set_toggle(workout.habit_id, True)
    await controller.load(NEXT_DAY)
    await controller.drain()

    assert seeded_store.upsert_calls == []
    assert controller.day == NEXT_DAY
    assert controller.dirty is False
    assert controller.draft.values[workout.habit_id].value_bool is False


async def test_stale_load_is_discarded(seeded_store, owner):
    ctrl = AutosaveController(seeded_store, owner, delay=DELAY)
    seeded_store.read_delays[DAY] = 0.1

    slow = asyncio.create_task(ctrl.load(DAY))
    await asyncio.sleep(0)
    assert await ctrl.load(NEXT_DAY) is True
    assert await slow is False

    assert ctrl.day == NEXT_DAY
    assert ctrl.draft.day == NEXT_DAY
    assert ctrl.state is DraftState.CLEAN


async def test_load_failure_leaves_empty_draft(seeded_store, owner, notifications):
    ctrl = AutosaveController(seeded_store, owner, notifications=notifications, delay=DELAY)
    seeded_store.fail_reads = True

    assert await ctrl.load(DAY) is False

    assert ctrl.draft.day == DAY
    assert ctrl.draft.values == {}
    assert ctrl.state is DraftState.CLEAN
    errors = notifications.of_kind(NotificationKind.ERROR)
    assert isinstance(errors[0].error, DraftLoadError)


async def test_mutation_during_flush_stays_dirty(controller, seeded_store, owner, workout, reading):
    seeded_store.write_delay = 0.05
    controller.set_toggle(workout.habit_id, True)
    saving = asyncio.create_task(controller.save(manual=True))
    await asyncio.sleep(0.01)
    assert controller.state is DraftState.SAVING

    controller.set_number(reading.habit_id, 15)
    assert await saving is True
    assert controller.dirty is True

    await controller.drain()
    assert controller.dirty is False
    assert await _entry_value(seeded_store, owner, reading) == 15


async def test_flush_for_previous_day_does_not_touch_new_draft(
        controller, seeded_store, owner, workout, notifications):
    seeded_store.write_delay = 0.05
    controller.set_toggle(workout.habit_id, True)
    saving = asyncio.create_task(controller.save(manual=True))
    await asyncio.sleep(0.01)

    await controller.load(NEXT_DAY)
    assert await saving is True

    assert controller.day == NEXT_DAY
    assert controller.state is DraftState.CLEAN
    assert await _entry_value(seeded_store, owner, workout, DAY) is True
    assert notifications.of_kind(NotificationKind.SUCCESS)[0].day == DAY


async def test_increment_and_quick_stats(controller, reading, workout):
    assert controller.increment(reading.habit_id) == 5
    controller.set_toggle(workout.habit_id, True)

    stats = controller.quick_stats()
    assert stats.habit_score == 100
    assert stats.momentum == 2


async def test_mutation_before_load_rejected(seeded_store, owner):
    ctrl = AutosaveController(seeded_store, owner, delay=DELAY)
    with pytest.raises(ValidationError):
        ctrl.set_notes(gratitude="coffee")


async def test_reload_recovers_after_load_failure(seeded_store, owner, workout, reading, notifications):
    ctrl = AutosaveController(seeded_store, owner, notifications=notifications, delay=DELAY)
    seeded_store.fail_reads = True
    assert await ctrl.load(DAY) is False
    assert ctrl.draft.values == {}

    seeded_store.fail_reads = False
    assert await ctrl.reload() is True

    assert ctrl.day == DAY
    assert set(ctrl.draft.values) == {workout.habit_id, reading.habit_id}
    assert ctrl.state is DraftState.CLEAN
    assert len(notifications.of_kind(NotificationKind.ERROR)) == 1


async def test_reload_before_any_load_rejected(seeded_store, owner):
    ctrl = AutosaveController(seeded_store, owner, delay=DELAY)
    with pytest.raises(ValidationError):
        await ctrl.reload()
