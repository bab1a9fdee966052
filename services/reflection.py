"""
Сервис рефлексии: история заметок и поиск
"""

import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional, Union

from config import config
from core.models import DailyNote
from database.base import EntryStore
from utils.datetime_utils import as_date

logger = logging.getLogger(__name__)


def search_notes(notes: Iterable[DailyNote], query: str) -> List[DailyNote]:
    """Поиск по тексту заметок без учета регистра или по дате"""
    notes = list(notes)
    if not query or not query.strip():
        return notes
    needle = query.lower()
    return [n for n in notes if needle in n.text.lower() or needle in n.date]


class ReflectionService:
    def __init__(self, store: EntryStore, history_days: Optional[int] = None):
        self.store = store
        self.history_days = history_days or config.REFLECTION_HISTORY_DAYS

    async def history(self, owner: str, today: Union[date, str], query: str = "") -> List[DailyNote]:
        end = as_date(today)
        start = end - timedelta(days=self.history_days)
        notes = await self.store.get_daily_notes_range(owner, start, end)
        return search_notes(notes, query)
