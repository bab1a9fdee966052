"""
Хранилища HabitLife
"""

import logging
from typing import Optional

from database.base import (
    EntryStore,
    HabitNotFoundError,
    StoreConnectionError,
    StoreCorruptionError,
    StoreError,
)
from database.json_store import JsonEntryStore
from database.memory import MemoryEntryStore

logger = logging.getLogger(__name__)


def create_store(cfg=None) -> EntryStore:
    """Хранилище по настройке STORE_BACKEND"""
    from config import StoreBackend, config as default_config

    cfg = cfg or default_config
    if cfg.STORE_BACKEND is StoreBackend.JSON:
        logger.info(f"💾 Хранилище: JSON в {cfg.DATA_DIR}")
        return JsonEntryStore(cfg.DATA_DIR)
    logger.info("💾 Хранилище: память процесса")
    return MemoryEntryStore()


__all__ = [
    "EntryStore",
    "MemoryEntryStore",
    "JsonEntryStore",
    "StoreError",
    "StoreConnectionError",
    "StoreCorruptionError",
    "HabitNotFoundError",
    "create_store",
]
