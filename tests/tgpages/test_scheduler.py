"""Tests for TaskScheduler replace-on-schedule semantics."""

import asyncio

import pytest

from tgpages.scheduler import TaskScheduler, get_scheduler


@pytest.fixture
def scheduler() -> TaskScheduler:
    sched = TaskScheduler()
    yield sched
    sched.clear()


class TestSchedule:
    async def test_action_runs_after_delay(self, scheduler) -> None:
        fired: list[str] = []

        async def action() -> None:
            fired.append("x")

        scheduler.schedule("k", action, 0.02)
        assert scheduler.pending("k")
        assert fired == []
        await asyncio.sleep(0.08)
        assert fired == ["x"]
        assert not scheduler.pending("k")
        assert len(scheduler) == 0

    async def test_reschedule_replaces_not_stacks(self, scheduler) -> None:
        fired: list[str] = []

        async def first() -> None:
            fired.append("first")

        async def second() -> None:
            fired.append("second")

        scheduler.schedule("k", first, 0.1)
        await asyncio.sleep(0.01)
        scheduler.schedule("k", second, 0.1)
        assert len(scheduler) == 1

        await asyncio.sleep(0.15)
        assert fired == ["second"]

    async def test_zero_delay_cancels_and_installs_nothing(self, scheduler) -> None:
        fired: list[str] = []

        async def action() -> None:
            fired.append("x")

        scheduler.schedule("k", action, 0.05)
        assert scheduler.schedule("k", action, 0) is None
        assert not scheduler.pending("k")
        await asyncio.sleep(0.08)
        assert fired == []

    async def test_cancel(self, scheduler) -> None:
        fired: list[str] = []

        async def action() -> None:
            fired.append("x")

        scheduler.schedule("k", action, 0.05)
        assert scheduler.cancel("k") is True
        assert scheduler.cancel("k") is False
        await asyncio.sleep(0.08)
        assert fired == []

    async def test_started_action_not_cancelled(self, scheduler) -> None:
        started = asyncio.Event()
        release = asyncio.Event()
        finished: list[bool] = []

        async def action() -> None:
            started.set()
            await release.wait()
            finished.append(True)

        entry = scheduler.schedule("k", action, 0.01)
        await started.wait()
        assert entry.cancel() is False
        scheduler.schedule("k", action, 0)
        release.set()
        await asyncio.sleep(0.01)
        assert finished == [True]

    async def test_failing_action_is_logged(self, scheduler, caplog) -> None:
        async def action() -> None:
            raise RuntimeError("boom")

        scheduler.schedule("k", action, 0.01)
        await asyncio.sleep(0.05)
        assert "Expiry action failed for k" in caplog.text

    async def test_keys_independent(self, scheduler) -> None:
        fired: list[str] = []

        async def make(name: str) -> None:
            fired.append(name)

        scheduler.schedule("a", lambda: make("a"), 0.02)
        scheduler.schedule("b", lambda: make("b"), 0.02)
        assert len(scheduler) == 2
        await asyncio.sleep(0.08)
        assert sorted(fired) == ["a", "b"]

    async def test_clear(self, scheduler) -> None:
        async def action() -> None:
            pass

        scheduler.schedule("a", action, 1)
        scheduler.schedule("b", action, 1)
        scheduler.clear()
        assert len(scheduler) == 0


def test_get_scheduler_singleton() -> None:
    assert get_scheduler() is get_scheduler()
