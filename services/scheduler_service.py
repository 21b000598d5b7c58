import asyncio
from collections.abc import Awaitable, Callable
from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from core.utils import utcnow


class SyncScheduler:
    """周期同步调度

    - start(interval) 立即执行一次并按间隔重复；
    - trigger_now() 手动执行：取消当前计划，运行结束后从当前时间重新计时；
    - 同一时刻最多一个周期在运行，运行中的手动请求直接拒绝（不排队、不打断）。
    """
    JOB_ID = 'periodic_sync'

    def __init__(self, cycle: Callable[[], Awaitable[object]], scheduler: AsyncIOScheduler | None = None):
        self.cycle = cycle
        self.scheduler = scheduler or AsyncIOScheduler()
        self.interval_minutes: int | None = None
        self._in_flight = False
        self._stopped = False
        self._background: set[asyncio.Task] = set()

    @property
    def is_running(self) -> bool:
        return self._in_flight

    def start(self, interval_minutes: int, run_immediately: bool = True) -> None:
        self.interval_minutes = interval_minutes
        self._stopped = False
        delay = timedelta() if run_immediately else timedelta(minutes=interval_minutes)
        self._arm(delay)
        if not self.scheduler.running:
            self.scheduler.start()
        logger.info("同步调度已启动，间隔 {} 分钟", interval_minutes)

    async def stop(self) -> None:
        """取消计划任务与后台手动同步；停止后运行中的周期结束时不再重新计时"""
        self._stopped = True
        self._cancel_schedule()
        for task in self._background:
            task.cancel()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
            self._background.clear()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("同步调度已停止")

    async def trigger_now(self) -> bool:
        """手动执行一次同步并等待完成；已有同步在运行时返回 False"""
        if not self._acquire():
            return False
        self._cancel_schedule()
        await self._manual_run()
        return True

    def trigger_in_background(self) -> bool:
        """手动触发同步但不等待完成（供 HTTP 接口使用）"""
        if not self._acquire():
            return False
        self._cancel_schedule()
        task = asyncio.create_task(self._manual_run())
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return True

    def _acquire(self) -> bool:
        if self._in_flight:
            logger.info("同步正在进行中，忽略本次触发")
            return False
        self._in_flight = True
        return True

    def _arm(self, delay: timedelta) -> None:
        if self.interval_minutes is None or self._stopped:
            return
        self.scheduler.add_job(
            self._run_job,
            'interval',
            minutes=self.interval_minutes,
            id=self.JOB_ID,
            replace_existing=True,
            next_run_time=utcnow() + delay,
            coalesce=True,
            max_instances=1,
        )

    def _cancel_schedule(self) -> None:
        if self.scheduler.get_job(self.JOB_ID):
            self.scheduler.remove_job(self.JOB_ID)

    async def _run_guarded(self) -> None:
        try:
            await self.cycle()
        except Exception:
            logger.exception("同步周期异常中止，已提交的快照保持不变")
        finally:
            self._in_flight = False

    async def _run_job(self) -> None:
        if not self._acquire():
            return
        await self._run_guarded()

    async def _manual_run(self) -> None:
        try:
            await self._run_guarded()
        finally:
            if self.interval_minutes is not None:
                self._arm(timedelta(minutes=self.interval_minutes))
