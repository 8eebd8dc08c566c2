"""Fire-and-forget notifications to timeline and inbox collaborators."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from typing import Any, Protocol, runtime_checkable

import structlog

from skillgate.models import Award

logger = structlog.get_logger()


@runtime_checkable
class Notifier(Protocol):
    """Receives engine events. Failures never affect the submission."""

    async def award_granted(self, award: Award) -> None: ...

    async def member_admitted(self, project_id: str, user_id: str) -> None: ...


class LoggingNotifier:
    """Default notifier that only logs events."""

    async def award_granted(self, award: Award) -> None:
        logger.info(
            "notify_award_granted",
            user_id=award.user_id,
            project_id=award.project_id,
            award_type=award.award_type,
        )

    async def member_admitted(self, project_id: str, user_id: str) -> None:
        logger.info("notify_member_admitted", project_id=project_id, user_id=user_id)


class NotificationDispatcher:
    """Schedule notifier calls as background tasks.

    References to pending tasks are held until they finish so they are not
    garbage collected mid-flight.
    """

    def __init__(self, notifier: Notifier | None = None) -> None:
        self.notifier: Notifier = notifier or LoggingNotifier()
        self._pending: set[asyncio.Task[None]] = set()

    def _schedule(self, event: str, call: Callable[[], Coroutine[Any, Any, None]]) -> None:
        try:
            task = asyncio.create_task(call(), name=f"notify:{event}")
        except Exception as exc:
            logger.warning("notification_failed", notification=event, error=str(exc))
            return
        self._pending.add(task)
        task.add_done_callback(lambda t: self._finished(event, t))

    def _finished(self, event: str, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        if exc := task.exception():
            logger.warning("notification_failed", notification=event, error=str(exc))

    def award_granted(self, award: Award) -> None:
        self._schedule("award_granted", lambda: self.notifier.award_granted(award))

    def member_admitted(self, project_id: str, user_id: str) -> None:
        self._schedule(
            "member_admitted", lambda: self.notifier.member_admitted(project_id, user_id)
        )

    async def drain(self) -> None:
        """Wait for pending notifications. Used at shutdown and in tests."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
