"""Transient user-facing notices raised by the admin controllers."""
import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    level: str
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class NoticeBoard:
    """Keeps the most recent notices and forwards each one to an optional listener."""

    def __init__(self, listener: Optional[Callable[[Notice], None]] = None, keep: int = 50):
        self.listener = listener
        self._notices: Deque[Notice] = deque(maxlen=keep)

    def success(self, message: str) -> Notice:
        logger.info(message)
        return self._push(Notice("success", message))

    def error(self, message: str) -> Notice:
        logger.warning(message)
        return self._push(Notice("error", message))

    def _push(self, notice: Notice) -> Notice:
        self._notices.append(notice)
        if self.listener is not None:
            self.listener(notice)
        return notice

    @property
    def latest(self) -> Optional[Notice]:
        return self._notices[-1] if self._notices else None

    @property
    def errors(self) -> List[str]:
        return [n.message for n in self._notices if n.level == "error"]

    def __iter__(self):
        return iter(list(self._notices))

    def __len__(self):
        return len(self._notices)
