import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.features.scan.workers.periodic import PeriodicTask, ScanTriggers


class VirtualSleep:
    """Sleep replacement that only returns when the test calls tick()."""

    def __init__(self):
        self.calls = []
        self._ticks = asyncio.Queue()

    async def __call__(self, interval):
        self.calls.append(interval)
        await self._ticks.get()

    def tick(self, times=1):
        for _ in range(times):
            self._ticks.put_nowait(None)


async def settle():
    for _ in range(10):
        await asyncio.sleep(0)


class TestPeriodicTask:
    @pytest.mark.asyncio
    async def test_job_runs_after_each_interval(self):
        sleep = VirtualSleep()
        job = AsyncMock()
        task = PeriodicTask("Process pending scans", 300, job, sleep=sleep)

        task.start()
        await settle()
        assert task.running
        assert sleep.calls == [300]
        job.assert_not_awaited()

        sleep.tick()
        await settle()
        assert job.await_count == 1

        sleep.tick()
        await settle()
        assert job.await_count == 2
        assert sleep.calls == [300, 300, 300]

        await task.stop()
        assert not task.running

    @pytest.mark.asyncio
    async def test_failing_job_keeps_schedule(self):
        sleep = VirtualSleep()
        job = AsyncMock(side_effect=RuntimeError("database is locked"))
        task = PeriodicTask("Schedule new scans", 3600, job, sleep=sleep)

        task.start()
        sleep.tick(2)
        await settle()

        assert job.await_count == 2
        assert task.runs == 2
        assert task.running
        await task.stop()

    @pytest.mark.asyncio
    async def test_runs_never_overlap(self):
        sleep = VirtualSleep()
        release = asyncio.Event()
        in_flight = []

        async def slow_job():
            in_flight.append(1)
            await release.wait()
            in_flight.pop()

        task = PeriodicTask("Process pending scans", 300, slow_job, sleep=sleep)
        task.start()
        sleep.tick(5)
        await settle()

        # the loop is blocked inside the first run, later ticks wait their turn
        assert in_flight == [1]
        assert task.runs == 0

        release.set()
        await settle()
        assert task.runs == 5
        await task.stop()

    @pytest.mark.asyncio
    async def test_run_once_logs_and_counts(self):
        job = AsyncMock(side_effect=ValueError("bad"))
        task = PeriodicTask("Process pending scans", 300, job)

        await task.run_once()

        assert task.runs == 1

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_without_start(self):
        sleep = VirtualSleep()
        task = PeriodicTask("Process pending scans", 300, AsyncMock(), sleep=sleep)

        await task.stop()

        task.start()
        task.start()
        await settle()
        assert sleep.calls == [300]
        await task.stop()


class TestScanTriggers:
    def make_triggers(self, sleep, **kwargs):
        processor = MagicMock()
        processor.drain_pending = AsyncMock(return_value=0)
        scheduler = MagicMock()
        scheduler.schedule_due_scans = AsyncMock(return_value=[])
        return ScanTriggers(processor, scheduler, sleep=sleep, **kwargs), processor, scheduler

    @pytest.mark.asyncio
    async def test_default_intervals(self):
        triggers, _, _ = self.make_triggers(VirtualSleep())

        assert triggers.drain_task.interval == 300
        assert triggers.schedule_task.interval == 3600
        assert [t.name for t in triggers.tasks] == ["Process pending scans", "Schedule new scans"]

    @pytest.mark.asyncio
    async def test_both_timers_fire(self):
        sleep = VirtualSleep()
        triggers, processor, scheduler = self.make_triggers(
            sleep, drain_interval=1, schedule_interval=2
        )

        triggers.start()
        await settle()
        assert sorted(sleep.calls) == [1, 2]

        sleep.tick(2)
        await settle()
        processor.drain_pending.assert_awaited_once()
        scheduler.schedule_due_scans.assert_awaited_once()

        await triggers.stop()
        assert not any(task.running for task in triggers.tasks)
