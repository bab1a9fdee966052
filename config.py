#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - Configuration
Централизованная конфигурация с валидацией

Версия: 1.0.0
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import pytz
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logger import setup_logger


class Environment(str, Enum):
    """Среды выполнения"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    """Реализация хранилища записей"""
    MEMORY = "memory"
    JSON = "json"


class HabitLifeConfig(BaseSettings):
    """Настройки HabitLife"""

    model_config = SettingsConfigDict(
        env_prefix="HABITLIFE_",
        env_file=".env",
        extra="ignore",
    )

    # ===== ОСНОВНЫЕ НАСТРОЙКИ =====

    APP_NAME: str = Field(default="HabitLife", description="Название приложения")
    VERSION: str = Field(default="1.0.0", description="Версия")
    ENVIRONMENT: Environment = Field(default=Environment.DEVELOPMENT, description="Среда выполнения")
    DEBUG: bool = Field(default=False, description="Режим отладки")

    # ===== ЛОГИРОВАНИЕ =====

    LOG_LEVEL: str = Field(default="INFO", description="Уровень логирования")
    LOG_DIR: Path = Field(default=Path("logs"), description="Директория логов")
    LOG_TO_FILE: bool = Field(default=False, description="Писать логи в файл")

    # ===== ХРАНИЛИЩЕ =====

    STORE_BACKEND: StoreBackend = Field(default=StoreBackend.MEMORY, description="memory или json")
    DATA_DIR: Path = Field(default=Path("data"), description="Директория с данными пользователей")

    # ===== ЧЕРНОВИК И АВТОСОХРАНЕНИЕ =====

    AUTOSAVE_DELAY_MS: int = Field(default=450, ge=0, description="Задержка debounce перед автосохранением")
    TIMEZONE: str = Field(default="UTC", description="Часовой пояс для определения текущего дня")

    # ===== АНАЛИТИКА =====

    GOALS_TOP_N: int = Field(default=6, ge=1, description="Сколько годовых целей показывать")
    REFLECTION_HISTORY_DAYS: int = Field(default=180, ge=1, description="Глубина истории заметок")

    # ===== ДАШБОРД =====

    DASHBOARD_HOST: str = Field(default="0.0.0.0", description="Хост дашборда")
    DASHBOARD_PORT: int = Field(default=8000, description="Порт дашборда")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Неизвестный уровень логирования: {v}")
        return level

    @field_validator("TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Неизвестный часовой пояс: {v}")
        return v

    @field_validator("DASHBOARD_PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"Порт {v} вне диапазона 1-65535")
        return v

    @property
    def autosave_delay(self) -> float:
        """Задержка автосохранения в секундах"""
        return self.AUTOSAVE_DELAY_MS / 1000

    @property
    def log_file(self) -> Optional[Path]:
        return self.LOG_DIR / "habitlife.log" if self.LOG_TO_FILE else None

    def ensure_directories(self) -> None:
        """Создание рабочих директорий"""
        directories = [self.DATA_DIR]
        if self.LOG_TO_FILE:
            directories.append(self.LOG_DIR)
        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)


def setup_logging(cfg: HabitLifeConfig) -> logging.Logger:
    """Настройка логирования по конфигурации"""
    log_file = str(cfg.log_file) if cfg.log_file else None
    return setup_logger(log_file=log_file, level=cfg.LOG_LEVEL)


config = HabitLifeConfig()
