"""
Notification Dispatcher

Fire-and-forget delivery of emails. The request path hands over a coroutine
and moves on; delivery failures are logged and never reach the caller.
"""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Runs notification coroutines as background tasks."""

    def __init__(self) -> None:
        # Strong references so pending tasks are not garbage collected
        self._pending: set[asyncio.Task] = set()

    def dispatch(self, name: str, coro: Coroutine[Any, Any, bool]) -> asyncio.Task:
        """Schedule a send without awaiting it."""
        task = asyncio.create_task(self._run(name, coro), name=f"notify:{name}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _run(self, name: str, coro: Coroutine[Any, Any, bool]) -> None:
        try:
            delivered = await coro
        except Exception:
            logger.exception(f"Notification '{name}' raised during delivery")
            return

        if delivered is False:
            logger.error(f"Notification '{name}' was not delivered")
        else:
            logger.debug(f"Notification '{name}' delivered")

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every pending notification (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


_notifier = NotificationDispatcher()


def get_notifier() -> NotificationDispatcher:
    """FastAPI dependency returning the process-wide dispatcher."""
    return _notifier
