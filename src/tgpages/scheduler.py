"""Idle-expiry scheduler.

Keeps at most one pending delayed action per event key. Scheduling again
for a key cancels the previous task first, so expiry is replaced, never
stacked. Tasks run on the asyncio event loop that scheduled them (the
loop is the single worker); ``schedule`` must be called from inside it.

An action that has already started cannot be cancelled any more; its
failures are logged and never propagated.

Key classes: TaskScheduler, ScheduledTask.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

ExpiryAction = Callable[[], Awaitable[None]]


@dataclass
class ScheduledTask:
    """A pending delayed action for one key."""

    key: str
    delay: float
    task: asyncio.Task[None] | None = field(default=None, repr=False)
    started: bool = False

    def cancel(self) -> bool:
        """Cancel unless the action already started. Returns True if cancelled."""
        if self.started or self.task is None or self.task.done():
            return False
        # Tasks left over from a closed loop (e.g. a finished test) are dead
        if self.task.get_loop().is_closed():
            return False
        self.task.cancel()
        return True

    def done(self) -> bool:
        return self.task is None or self.task.done()


class TaskScheduler:
    """Per-key delayed tasks with replace-on-schedule semantics."""

    def __init__(self) -> None:
        self._tasks: dict[str, ScheduledTask] = {}

    def schedule(
        self, key: str, action: ExpiryAction, delay: float
    ) -> ScheduledTask | None:
        """Run ``action`` after ``delay`` seconds, replacing any pending task.

        A delay of 0 (or less) only cancels what is pending: no expiry.
        """
        self.cancel(key)
        if delay <= 0:
            return None

        entry = ScheduledTask(key=key, delay=delay)
        entry.task = asyncio.get_running_loop().create_task(
            self._run(entry, action), name=f"tgpages-expiry-{key}"
        )
        self._tasks[key] = entry
        logger.debug("Scheduled expiry for %s in %.1fs", key, delay)
        return entry

    async def _run(self, entry: ScheduledTask, action: ExpiryAction) -> None:
        await asyncio.sleep(entry.delay)
        if self._tasks.get(entry.key) is entry:
            del self._tasks[entry.key]
        entry.started = True
        logger.debug("Expiry fired for %s", entry.key)
        try:
            await action()
        except Exception:
            logger.exception("Expiry action failed for %s", entry.key)

    def cancel(self, key: str) -> bool:
        """Cancel the pending task of a key. Returns True if one was cancelled."""
        entry = self._tasks.pop(key, None)
        if entry is None:
            return False
        cancelled = entry.cancel()
        if cancelled:
            logger.debug("Cancelled expiry for %s", key)
        return cancelled

    def pending(self, key: str) -> bool:
        entry = self._tasks.get(key)
        return entry is not None and not entry.done()

    def __len__(self) -> int:
        return sum(1 for entry in self._tasks.values() if not entry.done())

    def clear(self) -> None:
        """Cancel every pending task."""
        for key in list(self._tasks):
            self.cancel(key)
        self._tasks.clear()


# Singleton cache
_scheduler: TaskScheduler | None = None


def get_scheduler() -> TaskScheduler:
    """Return the process-wide scheduler, creating it on first use."""
    global _scheduler
    if _scheduler is None:
        _scheduler = TaskScheduler()
    return _scheduler
