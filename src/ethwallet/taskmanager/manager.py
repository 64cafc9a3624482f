"""Task manager lifecycle — register, start, trigger, stop.

Each ``CronJob`` runs on its own asyncio task: sleep ``period`` seconds, run
the handler, repeat.  A failing run is logged and the loop carries on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ethwallet.metrics.collector import WalletMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronJob:
    """A recurring background job."""

    handler: Callable[[], Awaitable[None]]
    period: float  # seconds
    name: str = ""


class TaskManager:
    """Runs registered cron jobs on asyncio background tasks.

    Usage::

        tm = TaskManager(metrics=wallet_metrics)
        tm.register("reconcile_transactions", CronJob(handler=..., period=30))
        await tm.start()
        ...
        await tm.stop()
    """

    def __init__(self, *, metrics: WalletMetrics | None = None) -> None:
        self._jobs: dict[str, CronJob] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._running = False
        self._metrics = metrics

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def jobs(self) -> dict[str, CronJob]:
        """Registered jobs (name → CronJob)."""
        return dict(self._jobs)

    def register(self, name: str, job: CronJob) -> None:
        """Register *job* under *name*; starts it at once if already running.

        Raises:
            ValueError: If the period is not positive.
        """
        if job.period <= 0:
            msg = f"cron job {name!r} needs a positive period, got {job.period}"
            raise ValueError(msg)
        named = replace(job, name=name)
        previous = self._tasks.pop(name, None)
        if previous is not None:
            previous.cancel()
        self._jobs[name] = named
        if self._running:
            self._tasks[name] = asyncio.create_task(self._loop(named))

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        for name, job in self._jobs.items():
            self._tasks[name] = asyncio.create_task(self._loop(job))
        logger.info("TaskManager started with %d jobs", len(self._jobs))

    async def stop(self) -> None:
        """Cancel every job loop and wait for them to finish."""
        if not self._running:
            return
        self._running = False
        for task in self._tasks.values():
            task.cancel()
        results = await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        for result in results:
            if isinstance(result, Exception) and not isinstance(result, asyncio.CancelledError):
                logger.error("Task error during shutdown: %s", result)
        self._tasks.clear()
        logger.info("TaskManager stopped")

    async def trigger(self, name: str) -> None:
        """Run the job registered as *name* once, outside its schedule.

        Raises:
            KeyError: If no such job is registered.
        """
        await self._run(self._jobs[name])

    async def _run(self, job: CronJob) -> None:
        name = job.name or "unnamed"
        try:
            if self._metrics:
                with self._metrics.track_cron(name):
                    await job.handler()
            else:
                await job.handler()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Cron job %r failed", name)

    async def _loop(self, job: CronJob) -> None:
        while self._running:
            await asyncio.sleep(job.period)
            if not self._running:
                break
            await self._run(job)
