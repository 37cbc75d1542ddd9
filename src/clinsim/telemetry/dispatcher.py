"""BatchDispatcher -- 事件批量投递调度

三种刷新触发：
1. 周期刷新：每 flush_interval_s 秒，队列非空时刷新
2. 阈值刷新：log() 发现队列长度达到 batch_size 时调度（不等待）
3. 卸载刷新：进程退出或页面隐藏时走 beacon 通道，不受事件循环取消影响

刷新算法为 swap-then-send：先同步取出并清空队列，再投递快照；
失败时把快照放回队首，等待下个周期重试（至少一次语义）。

同一时刻最多一个批次在投递：swap 与失败后的重新入队都在投递锁内完成，
因此重新入队的批次总是排在之后到达的事件之前。
"""

import asyncio
import contextlib

import structlog

from .exceptions import TelemetryError
from .queue import EventQueue
from .sink import EventSink

log = structlog.get_logger()


class BatchDispatcher:
    """批量投递调度器

    与 EventLogger 共享同一个 EventQueue；队列的 swap 与重新入队只在这里发生。
    """

    def __init__(
        self,
        queue: EventQueue,
        sink: EventSink,
        flush_interval_s: float = 5.0,
    ) -> None:
        """
        Args:
            queue: EventLogger 持有的事件队列
            sink: 事件接收端
            flush_interval_s: 周期刷新间隔（秒）
        """
        self._queue = queue
        self._sink = sink
        self._flush_interval_s = flush_interval_s
        self._periodic_task: asyncio.Task | None = None
        self._inflight: set[asyncio.Task] = set()
        self._send_lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        """周期刷新是否在运行"""
        return self._periodic_task is not None and not self._periodic_task.done()

    @property
    def inflight_count(self) -> int:
        """已调度但尚未完成的刷新数"""
        return len(self._inflight)

    @property
    def is_sending(self) -> bool:
        """是否有批次正在投递"""
        return self._send_lock.locked()

    def start(self) -> None:
        """启动周期刷新（需在运行中的事件循环内调用）；重复调用会重启计时"""
        if self._periodic_task is not None:
            self._periodic_task.cancel()
        self._periodic_task = asyncio.get_running_loop().create_task(
            self._periodic_flush(), name="event-periodic-flush"
        )

    async def stop(self) -> None:
        """取消周期刷新，并等待已调度的刷新完成"""
        if self._periodic_task is not None:
            self._periodic_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._periodic_task
            self._periodic_task = None
        if self._inflight:
            await asyncio.gather(*self._inflight, return_exceptions=True)

    async def _periodic_flush(self) -> None:
        while True:
            await asyncio.sleep(self._flush_interval_s)
            if len(self._queue) > 0:
                await self.flush()

    def schedule_flush(self) -> asyncio.Task | None:
        """调度一次后台刷新（fire-and-forget）

        已有刷新在排队或投递中时不再调度，新事件由那次刷新
        （未开始时）或下个周期（已 swap 时）带走。

        Returns:
            刷新任务；已有刷新进行中，或当前线程没有运行中的事件循环时返回 None
        """
        if self._inflight or self._send_lock.locked():
            log.debug("event_flush_coalesced", queue_length=len(self._queue))
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("event_flush_deferred", queue_length=len(self._queue))
            return None
        task = loop.create_task(self.flush())
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)
        return task

    async def flush(self, immediate: bool = False) -> bool:
        """把当前队列作为一个批次投递

        已有批次在投递时先等待其结束，再 swap 剩余事件。

        Args:
            immediate: True 时走 beacon 通道（卸载场景）

        Returns:
            True 如果批次已投递（或队列为空），False 如果已重新入队
        """
        if immediate:
            return self.flush_on_unload()

        async with self._send_lock:
            return await self._send_swapped()

    async def _send_swapped(self) -> bool:
        # swap 与 send 之间没有其他 await
        batch = self._queue.swap()
        if not batch:
            return True

        try:
            await self._sink.send_batch(batch)
        except asyncio.CancelledError:
            # 被取消的请求结果未知，按失败处理
            self._queue.requeue(batch)
            raise
        except TelemetryError as e:
            self._queue.requeue(batch)
            log.warning(
                "event_flush_failed",
                error=str(e),
                status_code=getattr(e, "status_code", None),
                batch_size=len(batch),
                queue_length=len(self._queue),
            )
            return False
        except Exception as e:
            self._queue.requeue(batch)
            log.warning(
                "event_flush_failed",
                error=str(e),
                error_type=type(e).__name__,
                batch_size=len(batch),
                queue_length=len(self._queue),
            )
            return False

        log.debug("event_batch_flushed", batch_size=len(batch))
        return True

    def flush_on_unload(self) -> bool:
        """卸载安全刷新（同步）

        beacon 交付成功后不再持有批次；交付失败时放回队首。
        正在投递的批次不在队列中，它的结果由常规路径处理。
        """
        batch = self._queue.swap()
        if not batch:
            return True
        if self._sink.send_beacon(batch):
            log.debug("event_beacon_dispatched", batch_size=len(batch))
            return True
        self._queue.requeue(batch)
        log.warning("event_beacon_rejected", batch_size=len(batch))
        return False
