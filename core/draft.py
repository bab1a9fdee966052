"""
Черновик дня: несохраненные значения привычек, заметки и сон
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, List, Optional

from core.models import (
    DailyNote, Entry, Habit, HabitKind, QUICK_ADD_STEP, SleepLog, UserSettings,
    ValidationError, is_nutrition_habit, validate_iso_date,
)
from utils.text_utils import percent, round_half_up

logger = logging.getLogger(__name__)


def calc_sleep_hours(bed: str, wake: str) -> Optional[float]:
    """
    Часы сна по времени отхода и подъема HH:MM с переходом через полночь.
    Некорректная строка дает None, а не ошибку.
    """
    try:
        bed_h, bed_m = (int(part) for part in bed.split(":"))
        wake_h, wake_m = (int(part) for part in wake.split(":"))
    except (AttributeError, ValueError):
        return None

    bed_minutes = bed_h * 60 + bed_m
    wake_minutes = wake_h * 60 + wake_m
    if wake_minutes >= bed_minutes:
        elapsed = wake_minutes - bed_minutes
    else:
        elapsed = 1440 - bed_minutes + wake_minutes
    return round_half_up(elapsed / 60, 1)


@dataclass
class HabitDraft:
    """Значение одной привычки в черновике"""
    habit_id: str
    kind: HabitKind
    value_bool: bool = False
    value_num: Optional[float] = 0

    def should_persist(self) -> bool:
        # toggle пишется всегда, включая False; число - если оно >= 0, включая 0
        if self.kind is HabitKind.TOGGLE:
            return True
        return self.value_num is not None and self.value_num >= 0

    def to_entry(self, day: str) -> Entry:
        if self.kind is HabitKind.TOGGLE:
            return Entry(habit_id=self.habit_id, date=day, value_bool=self.value_bool)
        return Entry(habit_id=self.habit_id, date=day, value_num=float(self.value_num or 0))


@dataclass
class NotesDraft:
    gratitude: str = ""
    improve: str = ""


@dataclass
class SleepDraft:
    bed_time: str = ""
    wake_time: str = ""
    screen_before_bed: bool = False
    screen_after_wake: bool = False

    @property
    def sleep_hours(self) -> Optional[float]:
        if self.bed_time and self.wake_time:
            return calc_sleep_hours(self.bed_time, self.wake_time)
        return None


_SLEEP_FIELDS = {f.name for f in fields(SleepDraft)}


@dataclass
class QuickStats:
    toggle_done: int
    toggle_total: int
    habit_score: Optional[int]
    momentum: int


@dataclass
class FlushBatch:
    """Одна пачка записи: записи привычек, заметки и (опционально) сон"""
    day: str
    entries: List[Entry]
    note: DailyNote
    sleep: Optional[SleepLog] = None


@dataclass
class DayDraft:
    """Рабочий набор значений за один день"""
    day: str
    habits: List[Habit] = field(default_factory=list)
    values: Dict[str, HabitDraft] = field(default_factory=dict)
    notes: NotesDraft = field(default_factory=NotesDraft)
    sleep: SleepDraft = field(default_factory=SleepDraft)
    settings: UserSettings = field(default_factory=UserSettings)
    revision: int = 0

    def __post_init__(self):
        self.day = validate_iso_date(self.day)

    @classmethod
    def from_state(cls, day: str, habits: Iterable[Habit], entries: Iterable[Entry],
                   note: Optional[DailyNote] = None, sleep: Optional[SleepLog] = None,
                   settings: Optional[UserSettings] = None) -> "DayDraft":
        """Черновик по сохраненному состоянию дня; включенные привычки без записи получают нули"""
        enabled = [h for h in habits if h.enabled]
        by_habit = {e.habit_id: e for e in entries}
        values = {}
        for habit in enabled:
            entry = by_habit.get(habit.habit_id)
            values[habit.habit_id] = HabitDraft(
                habit_id=habit.habit_id,
                kind=habit.kind,
                value_bool=bool(entry and entry.value_bool),
                value_num=entry.value_num if entry and entry.value_num is not None else 0,
            )

        return cls(
            day=day,
            habits=enabled,
            values=values,
            notes=NotesDraft(
                gratitude=note.gratitude if note else "",
                improve=note.improve if note else "",
            ),
            sleep=SleepDraft(
                bed_time=(sleep.bed_time or "") if sleep else "",
                wake_time=(sleep.wake_time or "") if sleep else "",
                screen_before_bed=bool(sleep and sleep.screen_before_bed),
                screen_after_wake=bool(sleep and sleep.screen_after_wake),
            ),
            settings=settings or UserSettings(),
        )

    # ===== МУТАЦИИ =====

    def _value(self, habit_id: str) -> HabitDraft:
        try:
            return self.values[habit_id]
        except KeyError:
            raise ValidationError(f"Привычка {habit_id} не входит в черновик {self.day}")

    def _touch(self) -> None:
        self.revision += 1

    def set_toggle(self, habit_id: str, value: bool) -> None:
        draft = self._value(habit_id)
        if draft.kind is not HabitKind.TOGGLE:
            raise ValidationError(f"Привычка {habit_id} не является toggle")
        draft.value_bool = bool(value)
        self._touch()

    def set_number(self, habit_id: str, value: float) -> None:
        draft = self._value(habit_id)
        if draft.kind is HabitKind.TOGGLE:
            raise ValidationError(f"Привычка {habit_id} не числовая")
        if value is None or value < 0:
            raise ValidationError("Значение не может быть отрицательным")
        draft.value_num = value
        self._touch()

    def increment(self, habit_id: str) -> float:
        """Быстрое добавление: +5 минут, +1 час, +1 раз"""
        draft = self._value(habit_id)
        if draft.kind is HabitKind.TOGGLE:
            raise ValidationError(f"Привычка {habit_id} не числовая")
        draft.value_num = (draft.value_num or 0) + QUICK_ADD_STEP[draft.kind]
        self._touch()
        return draft.value_num

    def set_notes(self, gratitude: Optional[str] = None, improve: Optional[str] = None) -> None:
        if gratitude is not None:
            self.notes.gratitude = gratitude
        if improve is not None:
            self.notes.improve = improve
        self._touch()

    def set_sleep(self, **fields) -> None:
        for name, value in fields.items():
            if name not in _SLEEP_FIELDS:
                raise ValidationError(f"Неизвестное поле сна: {name}")
            setattr(self.sleep, name, value)
        self._touch()

    # ===== ПРОИЗВОДНЫЕ =====

    @property
    def visible_habits(self) -> List[Habit]:
        return [h for h in self.habits if not is_nutrition_habit(h)]

    def quick_stats(self) -> QuickStats:
        """Сводка дня: toggle выполнено/всего, процент, импульс"""
        visible = self.visible_habits
        toggles = [h for h in visible if h.is_toggle]
        done = sum(1 for h in toggles if self.values[h.habit_id].value_bool)
        momentum = done + sum(
            1 for h in visible
            if not h.is_toggle and (self.values[h.habit_id].value_num or 0) > 0
        )
        return QuickStats(
            toggle_done=done,
            toggle_total=len(toggles),
            habit_score=percent(done, len(toggles)) if toggles else None,
            momentum=momentum,
        )


def build_flush_batch(draft: DayDraft) -> FlushBatch:
    """Собрать пачку записи из всего черновика"""
    entries = [
        value.to_entry(draft.day)
        for value in draft.values.values()
        if value.should_persist()
    ]
    note = DailyNote(date=draft.day, gratitude=draft.notes.gratitude, improve=draft.notes.improve)

    sleep = None
    if draft.settings.sleep_enabled:
        sleep = SleepLog(
            date=draft.day,
            bed_time=draft.sleep.bed_time or None,
            wake_time=draft.sleep.wake_time or None,
            sleep_hours=draft.sleep.sleep_hours,
            screen_before_bed=draft.sleep.screen_before_bed,
            screen_after_wake=draft.sleep.screen_after_wake,
        )
    return FlushBatch(day=draft.day, entries=entries, note=note, sleep=sleep)
