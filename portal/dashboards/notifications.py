import logging
from dataclasses import dataclass
from typing import List

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    level: str
    message: str


class Notifier:
    """One-shot notifications: each is handed out by drain() exactly once."""

    def __init__(self) -> None:
        self._pending: List[Notification] = []

    def success(self, message: str) -> None:
        logger.info(message)
        self._pending.append(Notification(SUCCESS, message))

    def error(self, message: str) -> None:
        logger.warning(message)
        self._pending.append(Notification(ERROR, message))

    def drain(self) -> List[Notification]:
        pending, self._pending = self._pending, []
        return pending
