#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - Dashboard Dependencies
Провайдеры сервисов для FastAPI приложения

Версия: 1.0.0
"""

import logging
from datetime import date
from typing import Optional

from fastapi import Depends

from config import config
from database import EntryStore
from services import AnalyticsService, ReflectionService, ServiceManager
from utils.datetime_utils import today_local

logger = logging.getLogger(__name__)

# ===== ГЛОБАЛЬНЫЕ ПЕРЕМЕННЫЕ =====

# Менеджер сервисов (синглтон)
_service_manager: Optional[ServiceManager] = None

# ===== ИНИЦИАЛИЗАЦИЯ КОМПОНЕНТОВ =====

def init_service_manager(store: Optional[EntryStore] = None) -> ServiceManager:
    """Инициализация менеджера сервисов"""
    global _service_manager

    if _service_manager is None or (store is not None and _service_manager.store is not store):
        logger.info("🔄 Инициализация ServiceManager...")
        manager = ServiceManager(store)
        manager.initialize_services(config)
        _service_manager = manager
        logger.info("✅ ServiceManager инициализирован")

    return _service_manager


async def shutdown_service_manager() -> None:
    global _service_manager

    if _service_manager is not None:
        await _service_manager.close_services()
        _service_manager = None

# ===== ПРОВАЙДЕРЫ =====

def get_service_manager() -> ServiceManager:
    return init_service_manager()


def get_analytics_service(manager: ServiceManager = Depends(get_service_manager)) -> AnalyticsService:
    return manager.analytics


def get_reflection_service(manager: ServiceManager = Depends(get_service_manager)) -> ReflectionService:
    return manager.reflection


def resolve_day(day: Optional[date]) -> date:
    """Просматриваемый день: переданный или сегодняшний в часовом поясе конфигурации"""
    return day or today_local(config.TIMEZONE)
