"""
Сервис автосохранения черновика дня

Один писатель на просматриваемый день: изменения помечают черновик грязным и
перезапускают debounce-таймер, таймер запускает сохранение, сохранения
сериализуются блокировкой.
"""

import asyncio
import logging
from datetime import date
from enum import Enum
from typing import Dict, Optional, Set, Union

from config import config
from core.draft import DayDraft, FlushBatch, QuickStats, build_flush_batch
from core.goals import year_progress_map
from core.models import ScoreSnapshot, SleepLog, ValidationError, YearProgress
from database.base import EntryStore
from services.habit_service import ensure_nutrition_habits
from services.notifications import NotificationCenter
from utils.datetime_utils import as_date, year_bounds

logger = logging.getLogger(__name__)


class DraftState(Enum):
    """Состояния черновика"""
    LOADING = "loading"
    CLEAN = "clean"
    DIRTY = "dirty"
    SAVING = "saving"


class DraftSyncError(Exception):
    """Ошибка синхронизации черновика с хранилищем"""

    def __init__(self, day: str, cause: Exception):
        super().__init__(str(cause) or type(cause).__name__)
        self.day = day
        self.cause = cause


class DraftLoadError(DraftSyncError):
    """Не удалось загрузить день"""
    pass


class DraftSaveError(DraftSyncError):
    """Не удалось сохранить черновик"""
    pass


class AutosaveController:
    """Контроллер черновика: загрузка дня, debounce, сохранение, пересчет прогресса"""

    def __init__(self, store: EntryStore, owner: str,
                 notifications: Optional[NotificationCenter] = None,
                 delay: Optional[float] = None, online: bool = True):
        self.store = store
        self.owner = owner
        self.notifications = notifications or NotificationCenter()
        self.delay = config.autosave_delay if delay is None else delay

        self.year_progress: Dict[str, YearProgress] = {}
        self.score: Optional[ScoreSnapshot] = None

        self._draft: Optional[DayDraft] = None
        self._day: Optional[str] = None
        self._load_seq = 0
        self._loading = False
        self._dirty = False
        self._offline = not online
        self._saving_draft: Optional[DayDraft] = None
        self._timer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()
        self._flush_lock = asyncio.Lock()

    # ===== СОСТОЯНИЕ =====

    @property
    def draft(self) -> Optional[DayDraft]:
        return self._draft

    @property
    def day(self) -> Optional[str]:
        return self._day

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def offline(self) -> bool:
        return self._offline

    @property
    def state(self) -> DraftState:
        if self._loading:
            return DraftState.LOADING
        if self._saving_draft is not None and self._saving_draft is self._draft:
            return DraftState.SAVING
        if self._dirty:
            return DraftState.DIRTY
        return DraftState.CLEAN

    def quick_stats(self) -> QuickStats:
        return self._require_draft().quick_stats()

    # ===== ЗАГРУЗКА =====

    async def load(self, day: Union[date, str]) -> bool:
        """
        Загрузить день и заменить черновик целиком.

        Несохраненные изменения предыдущего дня отбрасываются. Ответ на
        устаревший запрос (день сменился еще раз) игнорируется.
        """
        day = as_date(day).isoformat()
        self._load_seq += 1
        seq = self._load_seq
        if self._dirty and self._draft is not None:
            logger.info(f"🗑️ Несохраненные изменения за {self._draft.day} отброшены")
        self._day = day
        self._loading = True
        self._dirty = False
        self._cancel_timer()

        try:
            habits, entries, note, sleep, settings = await self._fetch_day(day)
        except Exception as e:
            if seq != self._load_seq:
                logger.debug(f"⏭️ Ошибка устаревшей загрузки {day} проигнорирована: {e}")
                return False
            logger.error(f"❌ Ошибка загрузки дня {day}: {e}")
            self.notifications.error("Ошибка загрузки", DraftLoadError(day, e), day=day)
            self._draft = DayDraft(day=day)
            self._loading = False
            return False

        if seq != self._load_seq:
            logger.debug(f"⏭️ Результат загрузки {day} устарел и отброшен")
            return False

        self._draft = DayDraft.from_state(day, habits, entries, note, sleep, settings)
        self._dirty = False
        self._loading = False
        logger.info(f"📅 Загружен день {day}: {len(self._draft.values)} привычек")

        await self.refresh_year_progress()
        return True

    async def reload(self) -> bool:
        if self._day is None:
            raise ValidationError("День еще не выбран")
        return await self.load(self._day)

    async def _fetch_day(self, day: str):
        settings = await self.store.ensure_settings(self.owner)
        habits, entries, note, sleep = await asyncio.gather(
            self.store.get_habits(self.owner),
            self.store.read_day(self.owner, day),
            self.store.get_daily_note(self.owner, day),
            self.store.get_sleep_log(self.owner, day),
        )
        if settings.nutrition_enabled:
            created = await ensure_nutrition_habits(self.store, self.owner, habits)
            if created:
                habits = await self.store.get_habits(self.owner)
        return habits, entries, note, sleep, settings

    # ===== ИЗМЕНЕНИЯ =====

    def _require_draft(self) -> DayDraft:
        if self._draft is None:
            raise ValidationError("Черновик не загружен")
        return self._draft

    def set_toggle(self, habit_id: str, value: bool) -> None:
        self._require_draft().set_toggle(habit_id, value)
        self._mark_dirty()

    def set_number(self, habit_id: str, value: float) -> None:
        self._require_draft().set_number(habit_id, value)
        self._mark_dirty()

    def increment(self, habit_id: str) -> float:
        value = self._require_draft().increment(habit_id)
        self._mark_dirty()
        return value

    def set_notes(self, gratitude: Optional[str] = None, improve: Optional[str] = None) -> None:
        self._require_draft().set_notes(gratitude=gratitude, improve=improve)
        self._mark_dirty()

    def set_sleep(self, **fields) -> None:
        self._require_draft().set_sleep(**fields)
        self._mark_dirty()

    def _mark_dirty(self) -> None:
        self._dirty = True
        self._schedule()

    # ===== СЕТЬ =====

    def set_online(self, online: bool) -> None:
        """Офлайн блокирует новые сохранения; возврат в онлайн сам ничего не сохраняет"""
        if self._offline == (not online):
            return
        self._offline = not online
        if online:
            logger.info("🌐 Соединение восстановлено")
        else:
            logger.warning("📴 Офлайн: автосохранение приостановлено")

    # ===== ТАЙМЕР =====

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _schedule(self) -> None:
        if self._offline:
            return
        self._cancel_timer()
        self._timer = self._spawn(self._timer_worker())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _timer_worker(self) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            logger.debug("⏹️ Таймер автосохранения перезапущен")
            return

        if self._timer is asyncio.current_task():
            self._timer = None
        await self.save(manual=False)

    # ===== СОХРАНЕНИЕ =====

    def _can_flush(self, manual: bool) -> bool:
        if self._offline or self._loading or self._draft is None:
            return False
        return manual or self._dirty

    async def save(self, manual: bool = False) -> bool:
        """
        Сохранить черновик.

        Автосохранение выполняется только для грязного черновика; ручное
        сохранение пишет в любом случае. Офлайн и загрузка блокируют оба.
        """
        if not self._can_flush(manual):
            return False
        async with self._flush_lock:
            if not self._can_flush(manual):
                return False
            return await self._flush(self._draft, manual)

    async def _flush(self, draft: DayDraft, manual: bool) -> bool:
        revision = draft.revision
        batch = build_flush_batch(draft)
        self._saving_draft = draft
        try:
            await self._write(batch)
        except Exception as e:
            logger.error(f"❌ Ошибка сохранения дня {batch.day}: {e}")
            self.notifications.error("Ошибка сохранения", DraftSaveError(batch.day, e), day=batch.day)
            return False
        finally:
            self._saving_draft = None

        is_current = draft is self._draft
        if is_current and draft.revision == revision:
            self._dirty = False
        logger.info(f"💾 Сохранен день {batch.day}: {len(batch.entries)} записей")

        await self._trigger_score()
        if manual:
            self.notifications.success("Сохранено", "Изменения сохранены", day=batch.day)
        if is_current:
            await self.refresh_year_progress()
        return True

    async def _write(self, batch: FlushBatch) -> None:
        """Три независимые записи параллельно; ошибка любой - ошибка всего сохранения"""
        await asyncio.gather(
            self.store.upsert_entries(self.owner, batch.entries),
            self.store.upsert_daily_note(self.owner, batch.note),
            self._write_sleep(batch.sleep),
        )

    async def _write_sleep(self, sleep: Optional[SleepLog]) -> None:
        if sleep is not None:
            await self.store.upsert_sleep_log(self.owner, sleep)

    async def _trigger_score(self) -> None:
        try:
            self.score = await self.store.recalc_score(self.owner)
        except Exception as e:
            logger.warning(f"⚠️ Пересчет очков не удался: {e}")

    # ===== ГОДОВОЙ ПРОГРЕСС =====

    async def refresh_year_progress(self) -> Dict[str, YearProgress]:
        """Полный пересчет накопления за год просматриваемого дня"""
        draft = self._draft
        if draft is None:
            return self.year_progress
        year = as_date(draft.day).year
        start, end = year_bounds(year)
        try:
            entries = await self.store.read_range(self.owner, start, end)
        except Exception as e:
            logger.warning(f"⚠️ Не удалось пересчитать прогресс за {year}: {e}")
            return self.year_progress

        if draft is self._draft:
            self.year_progress = year_progress_map(entries, draft.habits, year)
        return self.year_progress

    # ===== ЗАВЕРШЕНИЕ =====

    async def drain(self) -> None:
        """Дождаться таймера и всех запущенных сохранений"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self._cancel_timer()
        await self.drain()
        logger.info("🧹 Автосохранение остановлено")
