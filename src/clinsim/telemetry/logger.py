"""EventLogger -- 学习事件记录服务

进程启动时按注入的配置构造一次，以引用传递给所有调用点；
测试中可以创建相互隔离的实例。

log() 流程：
1. 全局关闭时直接返回（不查分类表）
2. 解析 severity/category：显式参数优先，否则取分类表默认值
3. 低于最低级别则丢弃（不入队、不计数）
4. timing_mark 结束计时作为 duration_ms；标记不存在时才使用显式 duration_ms
5. 累加 verb:object_type 计数
6. 用当前上下文构造事件并入队
7. 队列长度达到 batch_size 时调度后台刷新（不等待）
8. 返回构造的事件
"""

import asyncio
import atexit
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any

import structlog
from clinsim.core.models.enums import Severity, severity_at_least
from clinsim.core.models.event import Event
from clinsim.core.taxonomy import get_verb_metadata

from .actions import LearningActionsMixin
from .config import TelemetryConfig
from .context import LoggerStatus, LoggingContext
from .dispatcher import BatchDispatcher
from .options import LogOptions
from .queue import EventQueue
from .sink import BEACON_TIMEOUT_S, EventSink, HttpEventSink
from .timing import TimingTracker

log = structlog.get_logger()

# set_context 中"未传入"的占位
_UNSET: Any = object()


class EventLogger(LearningActionsMixin):
    """学习事件记录服务

    持有事件队列、上下文、计时标记与计数；批量投递委托给 BatchDispatcher。
    """

    def __init__(
        self,
        sink: EventSink,
        batch_size: int = 10,
        flush_interval_s: float = 5.0,
        max_queue_size: int = 5000,
        minimum_severity: Severity = Severity.DEBUG,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """初始化 EventLogger

        Args:
            sink: 事件接收端
            batch_size: 触发阈值刷新的队列长度
            flush_interval_s: 周期刷新间隔（秒）
            max_queue_size: 队列上限，溢出丢弃最旧事件
            minimum_severity: 最低记录级别
            enabled: 全局开关
            clock: 计时用单调时钟（秒）
            now: 事件时间戳来源，默认当前 UTC 时间
        """
        self._sink = sink
        self._batch_size = batch_size
        self._context = LoggingContext(
            minimum_severity=Severity(minimum_severity),
            enabled=enabled,
        )
        self._queue = EventQueue(max_size=max_queue_size)
        self._dispatcher = BatchDispatcher(self._queue, sink, flush_interval_s)
        self._timings = TimingTracker(clock)
        self._event_counts: dict[str, int] = {}
        self._now = now or (lambda: datetime.now(UTC))
        self._unload_hook_installed = False

    @classmethod
    def from_config(
        cls,
        config: TelemetryConfig,
        sink: EventSink | None = None,
        token_provider: Callable[[], str | None] | None = None,
    ) -> "EventLogger":
        """按 TelemetryConfig 创建实例，未提供 sink 时创建 HttpEventSink"""
        if sink is None:
            sink = HttpEventSink(
                config.sink_url,
                token_provider=token_provider,
                timeout_s=config.timeout_s,
            )
        return cls(
            sink,
            batch_size=config.batch_size,
            flush_interval_s=config.flush_interval_s,
            max_queue_size=config.max_queue_size,
            minimum_severity=config.minimum_severity,
            enabled=config.enabled,
        )

    # ============================================================
    # 上下文与过滤
    # ============================================================

    @property
    def context(self) -> LoggingContext:
        """当前上下文的只读副本"""
        return self._context.model_copy()

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    def pending_events(self) -> list[Event]:
        """待投递事件副本（按入队顺序）"""
        return self._queue.snapshot()

    def set_context(
        self,
        *,
        session_id: int | str | None = _UNSET,
        user_id: int | str | None = _UNSET,
        case_id: int | str | None = _UNSET,
    ) -> None:
        """部分更新关联键；未传入的字段保留原值"""
        if session_id is not _UNSET:
            self._context.session_id = session_id
        if user_id is not _UNSET:
            self._context.user_id = user_id
        if case_id is not _UNSET:
            self._context.case_id = case_id

    def clear_context(self) -> None:
        """清除 session/case；user 可能仍在登录状态，保留"""
        self._context.session_id = None
        self._context.case_id = None

    def set_enabled(self, enabled: bool) -> None:
        self._context.enabled = bool(enabled)

    def set_minimum_severity(self, severity: Severity | str) -> None:
        """设置最低记录级别

        Raises:
            ValueError: 非法级别名
        """
        self._context.minimum_severity = Severity(severity)

    def should_log(self, severity: Severity) -> bool:
        """severity 是否达到最低记录级别"""
        return severity_at_least(severity, self._context.minimum_severity)

    # ============================================================
    # 计时
    # ============================================================

    def start_timing(self, mark_name: str) -> None:
        self._timings.start(mark_name)

    def end_timing(self, mark_name: str) -> int | None:
        """结束计时，返回毫秒数；未开始或已结束返回 None"""
        return self._timings.end(mark_name)

    # ============================================================
    # 记录
    # ============================================================

    def log(
        self,
        verb: str,
        object_type: str,
        options: LogOptions | Mapping[str, Any] | None = None,
        **fields: Any,
    ) -> Event | None:
        """记录一个学习事件

        Args:
            verb: 动作动词（Verb 成员，未知字符串按 INFO/NAVIGATION 处理）
            object_type: 对象类型（ObjectType 成员或任意字符串）
            options: LogOptions 或等价映射
            **fields: LogOptions 字段，覆盖 options 中的同名字段

        Returns:
            构造的 Event；关闭、低于最低级别或构造失败时返回 None。
            此方法不抛出异常。
        """
        if not self._context.enabled:
            return None
        try:
            return self._log(verb, object_type, options, fields)
        except Exception as e:
            log.warning(
                "event_log_failed",
                verb=str(verb),
                object_type=str(object_type),
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    def _log(
        self,
        verb: str,
        object_type: str,
        options: LogOptions | Mapping[str, Any] | None,
        fields: dict[str, Any],
    ) -> Event | None:
        raw: dict[str, Any] = {}
        if isinstance(options, LogOptions):
            raw.update(options.model_dump(exclude_none=True))
        elif isinstance(options, Mapping):
            raw.update(options)
        raw.update(fields)
        opts = LogOptions.coerce(raw)

        verb = str(verb)
        object_type = str(object_type)

        # 分类表先于显式覆盖
        metadata = get_verb_metadata(verb)
        severity = opts.severity or metadata.severity
        category = opts.category or metadata.category

        if not self.should_log(severity):
            return None

        duration_ms = opts.duration_ms
        if opts.timing_mark:
            measured = self._timings.end(opts.timing_mark)
            if measured is not None:
                duration_ms = measured

        count_key = f"{verb}:{object_type}"
        self._event_counts[count_key] = self._event_counts.get(count_key, 0) + 1

        event = Event(
            timestamp=self._now(),
            session_id=self._context.session_id,
            user_id=self._context.user_id,
            case_id=self._context.case_id,
            verb=verb,
            object_type=object_type,
            severity=severity,
            category=category,
            object_id=opts.object_id,
            object_name=opts.object_name,
            component=opts.component,
            parent_component=opts.parent_component,
            result=opts.result,
            duration_ms=duration_ms,
            context=opts.context,
            message_content=opts.message_content,
            message_role=opts.message_role,
        )
        self._queue.append(event)

        log.debug(
            "event_logged",
            severity=severity.value,
            verb=verb,
            object_type=object_type,
            object=opts.object_name or opts.object_id,
            duration_ms=duration_ms,
        )

        if len(self._queue) >= self._batch_size:
            self._dispatcher.schedule_flush()

        return event

    # ============================================================
    # 本地统计
    # ============================================================

    def get_event_counts(self) -> dict[str, int]:
        """verb:object_type -> 次数"""
        return dict(self._event_counts)

    def reset_event_counts(self) -> None:
        self._event_counts.clear()

    def get_status(self) -> LoggerStatus:
        """队列与上下文状态（调试用）"""
        return LoggerStatus(
            queue_length=len(self._queue),
            session_id=self._context.session_id,
            user_id=self._context.user_id,
            case_id=self._context.case_id,
            is_enabled=self._context.enabled,
            minimum_severity=self._context.minimum_severity,
            pending_timings=self._timings.pending(),
            inflight_flushes=self._dispatcher.inflight_count,
            dropped_events=self._queue.dropped,
            periodic_flush_running=self._dispatcher.is_running,
        )

    # ============================================================
    # 投递
    # ============================================================

    def start(self) -> None:
        """启动周期刷新（需在运行中的事件循环内调用）"""
        self._dispatcher.start()

    async def flush(self, immediate: bool = False) -> bool:
        """立即刷新队列

        Args:
            immediate: True 时走卸载安全的 beacon 通道

        Returns:
            True 如果已投递或队列为空，False 如果批次已重新入队
        """
        return await self._dispatcher.flush(immediate=immediate)

    def flush_on_unload(self) -> bool:
        """卸载安全刷新（同步，可在 atexit / 信号处理中调用）"""
        return self._dispatcher.flush_on_unload()

    def handle_visibility_change(self, visibility_state: str) -> None:
        """页面可见性变化；变为 hidden 时立即 beacon 刷新"""
        if visibility_state == "hidden":
            self.flush_on_unload()

    def flush_on_exit(self) -> bool:
        """进程退出时的刷新：beacon 投递后等待发送线程结束

        atexit 回调运行时解释器已经等待过非 daemon 线程，
        之后启动的 beacon 线程必须在这里 join，否则随解释器一起终止。
        """
        delivered = self.flush_on_unload()
        self._join_beacons()
        return delivered

    def _join_beacons(self) -> None:
        join_beacons = getattr(self._sink, "join_beacons", None)
        if join_beacons is not None:
            join_beacons(BEACON_TIMEOUT_S)

    def install_unload_hooks(self) -> None:
        """注册进程退出时的 beacon 刷新（幂等）"""
        if self._unload_hook_installed:
            return
        atexit.register(self.flush_on_exit)
        self._unload_hook_installed = True

    def uninstall_unload_hooks(self) -> None:
        if self._unload_hook_installed:
            atexit.unregister(self.flush_on_exit)
            self._unload_hook_installed = False

    async def aclose(self) -> None:
        """停止周期刷新并投递剩余事件

        常规投递失败时改走 beacon，保证退出前交出队列。
        """
        await self._dispatcher.stop()
        if len(self._queue) > 0 and not await self._dispatcher.flush():
            self._dispatcher.flush_on_unload()
            await asyncio.to_thread(self._join_beacons)
        aclose = getattr(self._sink, "aclose", None)
        if aclose is not None:
            await aclose()
