"""Notification service — deliver wallet events to subscribers.

One input queue feeds many subscriber queues.  A subscriber may restrict
itself to certain event types (a password prompt only cares about
``auth_failed``); full queues drop the event with a warning.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ethwallet.notifications.events import RawEvent

logger = logging.getLogger(__name__)

_INPUT_BUFFER = 100


@dataclass
class _Subscriber:
    queue: asyncio.Queue[RawEvent]
    types: frozenset[str] | None

    def wants(self, event: RawEvent) -> bool:
        return self.types is None or event.type in self.types


class NotificationService:
    """Asyncio-based notification fan-out service.

    Usage::

        svc = NotificationService()
        q = svc.add_subscriber("prompt", types=["auth_failed"])
        await svc.start()
        await svc.notify(RawEvent(type="auth_failed"))
        event = await q.get()
        await svc.stop()
    """

    def __init__(self) -> None:
        self._input: asyncio.Queue[RawEvent] = asyncio.Queue(maxsize=_INPUT_BUFFER)
        self._subscribers: dict[str, _Subscriber] = {}
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def subscribers(self) -> list[str]:
        return list(self._subscribers)

    def add_subscriber(
        self,
        key: str,
        *,
        types: Iterable[str] | None = None,
        buffer: int = _INPUT_BUFFER,
    ) -> asyncio.Queue[RawEvent]:
        """Register a subscriber and return its queue.

        Args:
            key: Subscriber name; re-using a key replaces the old subscriber.
            types: Event types to deliver; all types when omitted.
            buffer: Queue capacity.
        """
        q: asyncio.Queue[RawEvent] = asyncio.Queue(maxsize=buffer)
        self._subscribers[key] = _Subscriber(
            queue=q,
            types=frozenset(types) if types is not None else None,
        )
        return q

    def remove_subscriber(self, key: str) -> None:
        self._subscribers.pop(key, None)

    async def notify(self, event: RawEvent) -> None:
        """Enqueue an event for delivery."""
        try:
            self._input.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning("Notification input queue full, dropping event %s", event.type)

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._exchange())

    async def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._task:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    async def _exchange(self) -> None:
        while self._running:
            event = await self._input.get()
            for key, sub in list(self._subscribers.items()):
                if not sub.wants(event):
                    continue
                try:
                    sub.queue.put_nowait(event)
                except asyncio.QueueFull:
                    logger.warning("Subscriber %s queue full, dropping %s event", key, event.type)
