#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - Entry Store Contract
Контракт хранилища: привычки, записи по (owner, habit, date), заметки, сон, очки

Версия: 1.0.0
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional, Sequence, Union

from core.models import DailyNote, Entry, Habit, ScoreSnapshot, SleepLog, UserSettings

DateLike = Union[date, str]

# ===== EXCEPTIONS =====

class StoreError(Exception):
    """Базовое исключение для ошибок хранилища"""
    pass


class StoreConnectionError(StoreError):
    """Хранилище недоступно"""
    pass


class StoreCorruptionError(StoreError):
    """Ошибка повреждения данных"""
    pass


class HabitNotFoundError(StoreError):
    """Привычка не найдена"""
    pass

# ===== CONTRACT =====

class EntryStore(ABC):
    """
    Асинхронный адаптер хранения.

    Все записи адресуются естественными ключами: (owner, habit, date) для
    значений привычек и (owner, date) для заметок и сна. Запись - всегда
    идемпотентный upsert, последняя запись по ключу побеждает.
    """

    # ----- habits -----

    @abstractmethod
    async def get_habits(self, owner: str) -> List[Habit]:
        """Привычки владельца в порядке sort"""

    @abstractmethod
    async def insert_habits(self, owner: str, habits: Sequence[Habit]) -> List[Habit]:
        ...

    @abstractmethod
    async def update_habit(self, owner: str, habit_id: str, **patch) -> Habit:
        ...

    @abstractmethod
    async def delete_habit(self, owner: str, habit_id: str) -> None:
        ...

    # ----- settings -----

    @abstractmethod
    async def get_settings(self, owner: str) -> Optional[UserSettings]:
        ...

    @abstractmethod
    async def update_settings(self, owner: str, **patch) -> UserSettings:
        ...

    async def ensure_settings(self, owner: str) -> UserSettings:
        """Настройки с созданием строки по умолчанию"""
        settings = await self.get_settings(owner)
        if settings is not None:
            return settings
        return await self.update_settings(owner)

    # ----- entries -----

    @abstractmethod
    async def read_range(self, owner: str, start: DateLike, end: DateLike) -> List[Entry]:
        """Записи за [start, end] включительно, порядок не гарантируется"""

    async def read_day(self, owner: str, day: DateLike) -> List[Entry]:
        return await self.read_range(owner, day, day)

    @abstractmethod
    async def upsert_entries(self, owner: str, entries: Sequence[Entry]) -> None:
        """Пакетный upsert по (habit_id, date): либо все, либо StoreError"""

    # ----- notes / sleep -----

    @abstractmethod
    async def get_daily_note(self, owner: str, day: DateLike) -> Optional[DailyNote]:
        ...

    @abstractmethod
    async def upsert_daily_note(self, owner: str, note: DailyNote) -> None:
        ...

    @abstractmethod
    async def get_daily_notes_range(self, owner: str, start: DateLike, end: DateLike) -> List[DailyNote]:
        """Заметки за диапазон, новые сначала"""

    @abstractmethod
    async def get_sleep_log(self, owner: str, day: DateLike) -> Optional[SleepLog]:
        ...

    @abstractmethod
    async def upsert_sleep_log(self, owner: str, log: SleepLog) -> SleepLog:
        ...

    # ----- score -----

    @abstractmethod
    async def recalc_score(self, owner: str) -> ScoreSnapshot:
        """Пересчет очков на стороне хранилища. Может упасть, вызывающий это игнорирует."""
        ...

    def close(self) -> None:
        """Освобождение ресурсов хранилища"""
