"""
Operator log.

The human-facing progress log, relayed live over SSE, plus the single
dismissible error notification.
"""

import time
from collections import deque
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from shared.logging import get_logger
from control_api.services.sse_manager import OPERATOR_CHANNEL, SSEManager, sse_manager

logger = get_logger(__name__)

MAX_LINES = 1000


class LogLine(BaseModel):
    level: Literal["info", "warning", "error"]
    message: str
    timestamp: float = Field(default_factory=time.time)


class OperatorLog:
    """Bounded in-memory log with live relay."""

    def __init__(self, manager: Optional[SSEManager] = None, max_lines: int = MAX_LINES):
        self.manager = manager or sse_manager
        self._lines = deque(maxlen=max_lines)
        self.notification: Optional[str] = None

    @property
    def lines(self) -> List[LogLine]:
        return list(self._lines)

    def messages(self) -> List[str]:
        return [line.message for line in self._lines]

    async def _append(self, level: str, message: str) -> LogLine:
        line = LogLine(level=level, message=message)
        self._lines.append(line)
        await self.manager.broadcast_event(OPERATOR_CHANNEL, "log", line.model_dump())
        return line

    async def info(self, message: str) -> None:
        logger.info(message, extra={"operator": True})
        await self._append("info", message)

    async def warning(self, message: str) -> None:
        logger.warning(message, extra={"operator": True})
        await self._append("warning", message)

    async def error(self, message: str, notify: bool = True) -> None:
        """Append an error line and raise the dismissible notification."""
        logger.error(message, extra={"operator": True})
        await self._append("error", message)
        if notify:
            self.notification = message
            await self.manager.broadcast_event(OPERATOR_CHANNEL, "notification", {"message": message})

    def dismiss_notification(self) -> bool:
        """Clear the notification. Returns False if there was none."""
        had_notification = self.notification is not None
        self.notification = None
        return had_notification
