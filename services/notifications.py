"""
Сервис уведомлений
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


class NotificationKind(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Notification:
    """Всплывающее уведомление для экрана"""
    kind: NotificationKind
    title: str
    detail: str = ""
    day: Optional[str] = None
    error: Optional[Exception] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())


Listener = Callable[[Notification], None]


class NotificationCenter:
    """Очередь уведомлений с подписчиками"""

    def __init__(self, max_history: int = 50):
        self.history: Deque[Notification] = deque(maxlen=max_history)
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def push(self, kind: NotificationKind, title: str, detail: str = "",
             day: Optional[str] = None, error: Optional[Exception] = None) -> Notification:
        notification = Notification(kind=kind, title=title, detail=detail, day=day, error=error)
        self.history.append(notification)

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"❌ Ошибка обработчика уведомлений: {e}")
        return notification

    def success(self, title: str, detail: str = "", day: Optional[str] = None) -> Notification:
        return self.push(NotificationKind.SUCCESS, title, detail, day=day)

    def error(self, title: str, error: Exception, day: Optional[str] = None) -> Notification:
        detail = str(error) or "Неизвестная ошибка"
        return self.push(NotificationKind.ERROR, title, detail, day=day, error=error)

    def of_kind(self, kind: NotificationKind) -> List[Notification]:
        return [n for n in self.history if n.kind is kind]

    def clear(self) -> None:
        self.history.clear()
