"""
Хранилище в памяти процесса
"""

import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from core.gamification import build_score
from core.models import (
    DailyNote, Entry, Habit, ScoreSnapshot, SleepLog, UserSettings, habit_from_dict,
)
from database.base import DateLike, EntryStore, HabitNotFoundError
from utils.datetime_utils import as_date

logger = logging.getLogger(__name__)


@dataclass
class OwnerData:
    """Все данные одного владельца"""
    habits: Dict[str, Habit] = field(default_factory=dict)
    entries: Dict[Tuple[str, str], Entry] = field(default_factory=dict)
    notes: Dict[str, DailyNote] = field(default_factory=dict)
    sleep: Dict[str, SleepLog] = field(default_factory=dict)
    settings: Optional[UserSettings] = None

    def to_dict(self) -> Dict:
        return {
            "habits": [h.to_dict() for h in self.habits.values()],
            "entries": [e.to_dict() for e in self.entries.values()],
            "notes": [n.to_dict() for n in self.notes.values()],
            "sleep": [s.to_dict() for s in self.sleep.values()],
            "settings": self.settings.to_dict() if self.settings else None,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "OwnerData":
        habits = [habit_from_dict(h) for h in data.get("habits", [])]
        entries = [Entry.from_dict(e) for e in data.get("entries", [])]
        notes = [DailyNote.from_dict(n) for n in data.get("notes", [])]
        sleep = [SleepLog.from_dict(s) for s in data.get("sleep", [])]
        settings = data.get("settings")
        return cls(
            habits={h.habit_id: h for h in habits},
            entries={e.key: e for e in entries},
            notes={n.date: n for n in notes},
            sleep={s.date: s for s in sleep},
            settings=UserSettings.from_dict(settings) if settings else None,
        )


def _iso(day: DateLike) -> str:
    return as_date(day).isoformat()


class MemoryEntryStore(EntryStore):
    """Реализация контракта хранилища в памяти: upsert по естественным ключам"""

    def __init__(self):
        self._owners: Dict[str, OwnerData] = {}
        self._lock = asyncio.Lock()

    async def _data(self, owner: str) -> OwnerData:
        return self._owners.setdefault(owner, OwnerData())

    async def _commit(self, owner: str) -> None:
        """Точка сохранения после изменения данных владельца"""

    # ===== HABITS =====

    async def get_habits(self, owner: str) -> List[Habit]:
        data = await self._data(owner)
        return sorted((replace(h) for h in data.habits.values()), key=lambda h: h.sort)

    async def insert_habits(self, owner: str, habits: Sequence[Habit]) -> List[Habit]:
        async with self._lock:
            data = await self._data(owner)
            for habit in habits:
                data.habits[habit.habit_id] = replace(habit)
            await self._commit(owner)
        logger.debug(f"➕ Добавлено привычек для {owner}: {len(habits)}")
        return [replace(h) for h in habits]

    async def update_habit(self, owner: str, habit_id: str, **patch) -> Habit:
        async with self._lock:
            data = await self._data(owner)
            if habit_id not in data.habits:
                raise HabitNotFoundError(f"Привычка {habit_id} не найдена")
            payload = data.habits[habit_id].to_dict()
            payload.update(patch)
            # смена типа не трогает сохраненные записи
            habit = habit_from_dict(payload)
            data.habits[habit_id] = habit
            await self._commit(owner)
        return replace(habit)

    async def delete_habit(self, owner: str, habit_id: str) -> None:
        async with self._lock:
            data = await self._data(owner)
            if data.habits.pop(habit_id, None) is None:
                raise HabitNotFoundError(f"Привычка {habit_id} не найдена")
            for key in [k for k in data.entries if k[0] == habit_id]:
                del data.entries[key]
            await self._commit(owner)

    # ===== SETTINGS =====

    async def get_settings(self, owner: str) -> Optional[UserSettings]:
        data = await self._data(owner)
        return replace(data.settings) if data.settings else None

    async def update_settings(self, owner: str, **patch) -> UserSettings:
        async with self._lock:
            data = await self._data(owner)
            data.settings = replace(data.settings or UserSettings(), **patch)
            await self._commit(owner)
        return replace(data.settings)

    # ===== ENTRIES =====

    async def read_range(self, owner: str, start: DateLike, end: DateLike) -> List[Entry]:
        data = await self._data(owner)
        first, last = _iso(start), _iso(end)
        return [replace(e) for e in data.entries.values() if first <= e.date <= last]

    async def upsert_entries(self, owner: str, entries: Sequence[Entry]) -> None:
        async with self._lock:
            data = await self._data(owner)
            for entry in entries:
                data.entries[entry.key] = replace(entry)
            await self._commit(owner)

    # ===== NOTES / SLEEP =====

    async def get_daily_note(self, owner: str, day: DateLike) -> Optional[DailyNote]:
        data = await self._data(owner)
        note = data.notes.get(_iso(day))
        return replace(note) if note else None

    async def upsert_daily_note(self, owner: str, note: DailyNote) -> None:
        async with self._lock:
            data = await self._data(owner)
            data.notes[note.date] = replace(note)
            await self._commit(owner)

    async def get_daily_notes_range(self, owner: str, start: DateLike, end: DateLike) -> List[DailyNote]:
        data = await self._data(owner)
        first, last = _iso(start), _iso(end)
        notes = [replace(n) for n in data.notes.values() if first <= n.date <= last]
        return sorted(notes, key=lambda n: n.date, reverse=True)

    async def get_sleep_log(self, owner: str, day: DateLike) -> Optional[SleepLog]:
        data = await self._data(owner)
        log = data.sleep.get(_iso(day))
        return replace(log) if log else None

    async def upsert_sleep_log(self, owner: str, log: SleepLog) -> SleepLog:
        async with self._lock:
            data = await self._data(owner)
            data.sleep[log.date] = replace(log)
            await self._commit(owner)
        return replace(log)

    # ===== SCORE =====

    async def recalc_score(self, owner: str) -> ScoreSnapshot:
        data = await self._data(owner)
        return build_score(data.entries.values(), today=date.today())
