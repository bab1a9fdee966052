#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HabitLife - JSON Entry Store
Хранилище на JSON-файлах: один документ на владельца, атомарная запись

Версия: 1.0.0
"""

import asyncio
import json
import logging
import re
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Optional

from core.models import ValidationError
from database.base import StoreConnectionError, StoreCorruptionError
from database.memory import MemoryEntryStore, OwnerData

logger = logging.getLogger(__name__)

_SAFE_OWNER = re.compile(r"[^A-Za-z0-9_.-]")


class JsonEntryStore(MemoryEntryStore):
    """Хранилище с кэшем в памяти и сохранением каждого изменения в файл"""

    def __init__(self, data_dir: Path, max_workers: int = 2):
        super().__init__()
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

    def _owner_file(self, owner: str) -> Path:
        return self.data_dir / f"user_{_SAFE_OWNER.sub('_', owner)}.json"

    async def _data(self, owner: str) -> OwnerData:
        if owner not in self._owners:
            loop = asyncio.get_running_loop()
            loaded = await loop.run_in_executor(self.executor, self._load_sync, owner)
            self._owners.setdefault(owner, loaded or OwnerData())
        return self._owners[owner]

    async def _commit(self, owner: str) -> None:
        payload = self._owners[owner].to_dict()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(self.executor, self._save_sync, owner, payload)

    def _load_sync(self, owner: str) -> Optional[OwnerData]:
        """Синхронная загрузка документа владельца"""
        path = self._owner_file(owner)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return OwnerData.from_dict(json.load(f))
        except (json.JSONDecodeError, ValidationError, TypeError) as e:
            logger.error(f"❌ Файл данных {path} поврежден: {e}")
            raise StoreCorruptionError(f"Файл данных {path.name} поврежден: {e}")
        except OSError as e:
            logger.error(f"❌ Ошибка чтения {path}: {e}")
            raise StoreConnectionError(f"Не удалось прочитать {path.name}: {e}")

    def _save_sync(self, owner: str, data: Dict[str, Any]) -> None:
        """Атомарное сохранение через временный файл"""
        path = self._owner_file(owner)
        temp_file = path.with_suffix(".tmp")
        try:
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            shutil.move(str(temp_file), str(path))
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            logger.error(f"❌ Ошибка сохранения {path}: {e}")
            raise StoreConnectionError(f"Не удалось сохранить {path.name}: {e}")

    def close(self) -> None:
        self.executor.shutdown(wait=True)
