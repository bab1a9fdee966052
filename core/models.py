#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - Core Data Models
Модели данных с валидацией и типизацией

Версия: 1.0.0
"""

import uuid
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union
import logging

from utils.text_utils import percent as to_percent
from utils.validators import is_valid_date

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class HabitKind(Enum):
    """Тип значения привычки"""
    TOGGLE = "toggle"
    MINUTES = "minutes"
    HOURS = "hours"
    COUNT = "count"

    @property
    def is_numeric(self) -> bool:
        return self is not HabitKind.TOGGLE


class Granularity(Enum):
    """Размер корзины при агрегации"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class AnalyticsPeriod(Enum):
    """Окна аналитики в днях"""
    WEEK = 7
    MONTH = 30
    YEAR = 365

    @property
    def label(self) -> str:
        return f"{self.value}d"


# Шаг быстрого добавления для числовых привычек
QUICK_ADD_STEP = {
    HabitKind.MINUTES: 5,
    HabitKind.HOURS: 1,
    HabitKind.COUNT: 1,
}

# Служебные привычки модуля питания
NUTRITION_PREFIX = "Nutrition •"
NUTRITION_HABIT_NAMES = {
    "calories": "Nutrition • Calories",
    "protein": "Nutrition • Protein",
    "fat": "Nutrition • Fat",
    "carbs": "Nutrition • Carbs",
}

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Ошибка валидации данных"""
    pass


def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Валидация текстовых полей"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} должен быть строкой")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} должен содержать минимум {min_length} символов")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} должен содержать максимум {max_length} символов")

    return text


def validate_iso_date(value: Union[str, date], field_name: str = "date") -> str:
    """Валидация даты строго в виде YYYY-MM-DD; объект date приводится к строке"""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str) or not is_valid_date(value):
        raise ValidationError(f"Неверный формат {field_name}: {value}")
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ValidationError(f"Несуществующая дата {field_name}: {value}")


def parse_kind(value: Union[str, HabitKind]) -> HabitKind:
    if isinstance(value, HabitKind):
        return value
    try:
        return HabitKind(value)
    except ValueError:
        valid_values = [k.value for k in HabitKind]
        raise ValidationError(f"type должен быть одним из: {valid_values}")


def _now_iso() -> str:
    return datetime.now().isoformat()

# ===== HABITS =====

@dataclass
class HabitBase:
    """Общие поля привычки"""
    name: str
    habit_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    sort: int = 0
    enabled: bool = True
    year_goal: Optional[int] = None
    created_at: str = field(default_factory=_now_iso)

    kind: ClassVar[HabitKind]

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")
        if self.year_goal is not None:
            if isinstance(self.year_goal, bool) or not isinstance(self.year_goal, int):
                raise ValidationError("year_goal должен быть целым числом")
            if self.year_goal <= 0:
                raise ValidationError("year_goal должен быть положительным")

    @property
    def is_toggle(self) -> bool:
        return self.kind is HabitKind.TOGGLE

    @property
    def has_year_goal(self) -> bool:
        return bool(self.year_goal) and self.year_goal > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.kind.value
        return data


@dataclass
class ToggleHabit(HabitBase):
    """Привычка да/нет"""
    kind: ClassVar[HabitKind] = HabitKind.TOGGLE


@dataclass
class NumericHabit(HabitBase):
    """Привычка с числовым значением: минуты, часы или количество"""
    value_kind: HabitKind = HabitKind.COUNT
    target_daily: Optional[float] = None

    def __post_init__(self):
        super().__post_init__()
        self.value_kind = parse_kind(self.value_kind)
        if not self.value_kind.is_numeric:
            raise ValidationError("NumericHabit не может иметь тип toggle")
        if self.target_daily is not None and self.target_daily < 0:
            raise ValidationError("target_daily не может быть отрицательным")

    @property
    def kind(self) -> HabitKind:  # type: ignore[override]
        return self.value_kind

    @property
    def quick_step(self) -> int:
        return QUICK_ADD_STEP[self.value_kind]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data.pop("value_kind")
        data["type"] = self.kind.value
        return data


Habit = Union[ToggleHabit, NumericHabit]


def habit_from_dict(data: Dict[str, Any]) -> Habit:
    """Создание привычки нужного варианта по полю type"""
    payload = dict(data)
    kind = parse_kind(payload.pop("type", HabitKind.TOGGLE.value))
    target_daily = payload.pop("target_daily", None)
    if kind is HabitKind.TOGGLE:
        return ToggleHabit(**payload)
    return NumericHabit(value_kind=kind, target_daily=target_daily, **payload)


def make_habit(name: str, kind: Union[str, HabitKind], target_daily: Optional[float] = None,
               **kwargs) -> Habit:
    """Фабрика привычки: для toggle дневная цель не хранится"""
    kind = parse_kind(kind)
    if kind is HabitKind.TOGGLE:
        return ToggleHabit(name=name, **kwargs)
    return NumericHabit(name=name, value_kind=kind, target_daily=target_daily, **kwargs)


def change_habit_kind(habit: Habit, kind: Union[str, HabitKind]) -> Habit:
    """Новый вариант привычки с другим типом. История записей не переписывается."""
    kind = parse_kind(kind)
    data = habit.to_dict()
    data["type"] = kind.value
    return habit_from_dict(data)

# ===== OBSERVATIONS =====

@dataclass
class Entry:
    """Значение привычки за день. Ключ: (habit_id, date)"""
    habit_id: str
    date: str  # YYYY-MM-DD
    value_bool: Optional[bool] = None
    value_num: Optional[float] = None
    updated_at: str = field(default_factory=_now_iso)

    def __post_init__(self):
        self.date = validate_iso_date(self.date)
        if self.value_bool is not None and self.value_num is not None:
            raise ValidationError("Запись должна содержать только одно значение")
        if self.value_num is not None and self.value_num < 0:
            raise ValidationError("value_num не может быть отрицательным")

    @property
    def key(self) -> tuple:
        return self.habit_id, self.date

    @property
    def day(self) -> date:
        return date.fromisoformat(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        return cls(**data)

    @classmethod
    def for_habit(cls, habit: Habit, day: Union[date, str], value: Union[bool, float]) -> "Entry":
        """Запись с заполненным каналом, соответствующим типу привычки"""
        if habit.is_toggle:
            return cls(habit_id=habit.habit_id, date=day, value_bool=bool(value))
        return cls(habit_id=habit.habit_id, date=day, value_num=float(value))


@dataclass
class DailyNote:
    """Заметки дня. Ключ: (owner, date)"""
    date: str
    gratitude: str = ""
    improve: str = ""
    updated_at: str = field(default_factory=_now_iso)

    def __post_init__(self):
        self.date = validate_iso_date(self.date)

    @property
    def text(self) -> str:
        return f"{self.gratitude} {self.improve}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyNote":
        return cls(**data)


@dataclass
class SleepLog:
    """Сон. date - дата пробуждения"""
    date: str
    bed_time: Optional[str] = None  # HH:MM
    wake_time: Optional[str] = None  # HH:MM
    sleep_hours: Optional[float] = None
    screen_before_bed: bool = False
    screen_after_wake: bool = False
    updated_at: str = field(default_factory=_now_iso)

    def __post_init__(self):
        self.date = validate_iso_date(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SleepLog":
        return cls(**data)


@dataclass
class UserSettings:
    """Включенные модули пользователя"""
    nutrition_enabled: bool = False
    sleep_enabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserSettings":
        return cls(**data)


@dataclass
class ScoreSnapshot:
    """Очки и стрик, рассчитанные хранилищем"""
    xp: int = 0
    level: int = 1
    rank: str = ""
    streak: int = 0
    best_streak: int = 0
    updated_at: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

# ===== DERIVED =====

@dataclass(frozen=True)
class SeriesPoint:
    """Точка ряда: одна корзина агрегации"""
    start: date
    label: str
    days: int
    value: float
    meta: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "name": self.label,
            "days": self.days,
            "value": self.value,
            "meta": self.meta,
        }


@dataclass(frozen=True)
class YearProgress:
    """Прогресс годовой цели"""
    habit_id: str
    done: float
    goal: int
    ratio: float

    @property
    def percent(self) -> int:
        return to_percent(self.ratio, 1)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def is_nutrition_habit(habit: Habit) -> bool:
    return habit.name.startswith(NUTRITION_PREFIX)
