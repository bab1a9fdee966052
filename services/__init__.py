# services/__init__.py

"""
Модуль сервисов HabitLife

Сервисы бизнес-логики поверх хранилища: автосохранение черновика,
аналитика, рефлексия, каталог привычек.
"""

import logging
from typing import Dict, Optional

from database import EntryStore, create_store
from .analytics import AnalyticsService
from .autosave import AutosaveController, DraftState
from .notifications import NotificationCenter
from .reflection import ReflectionService

logger = logging.getLogger(__name__)


class ServiceManager:
    """
    Менеджер сервисов

    Обеспечивает:
    - Создание хранилища по конфигурации
    - Один контроллер автосохранения на владельца
    - Корректное закрытие всех сервисов
    """

    def __init__(self, store: Optional[EntryStore] = None):
        self.store = store
        self.analytics: Optional[AnalyticsService] = None
        self.reflection: Optional[ReflectionService] = None
        self.controllers: Dict[str, AutosaveController] = {}
        self.initialized = False

    def initialize_services(self, cfg=None) -> bool:
        """Инициализация всех сервисов"""
        try:
            logger.info("🔧 Инициализация сервисов HabitLife...")
            if self.store is None:
                self.store = create_store(cfg)
            self.analytics = AnalyticsService(self.store)
            self.reflection = ReflectionService(self.store)
            self.initialized = True
            logger.info("✅ Все сервисы инициализированы успешно!")
            return True
        except Exception as e:
            logger.error(f"❌ Ошибка инициализации сервисов: {e}")
            return False

    def controller_for(self, owner: str, notifications: Optional[NotificationCenter] = None,
                       **kwargs) -> AutosaveController:
        """Контроллер черновика владельца (создается один раз)"""
        if owner not in self.controllers:
            self.controllers[owner] = AutosaveController(
                self.store, owner, notifications=notifications, **kwargs
            )
        return self.controllers[owner]

    async def close_services(self) -> None:
        """Закрытие всех сервисов"""
        for owner, controller in list(self.controllers.items()):
            try:
                await controller.close()
            except Exception as e:
                logger.error(f"❌ Ошибка закрытия контроллера {owner}: {e}")
        self.controllers.clear()

        if self.store is not None:
            self.store.close()
        self.initialized = False
        logger.info("🔒 Сервисы закрыты")


__all__ = [
    "AnalyticsService",
    "AutosaveController",
    "DraftState",
    "NotificationCenter",
    "ReflectionService",
    "ServiceManager",
]
