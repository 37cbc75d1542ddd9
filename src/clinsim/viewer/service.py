"""SessionLogViewer -- 事件流读侧服务

加载一个事件窗口（单会话全部事件，或跨会话最近 N 条），
在本地完成分面、筛选、统计与导出。

错误处理：查询失败只设置 error 状态并保留上次加载的事件，
调用方通过 refresh() 手动重试；自动刷新按固定间隔继续尝试。
"""

import asyncio
import contextlib
from datetime import date, datetime

import structlog
from clinsim.core.models.stored import StoredEvent

from .client import LearningEventsClient
from .config import ViewerConfig
from .exceptions import EventFetchError
from .export import clipboard_summary, export_csv, export_filename, export_json
from .facets import EventFacets, derive_facets
from .filters import EventFilter
from .render import render_entry
from .stats import EventStatistics, compute_statistics

log = structlog.get_logger()


class SessionLogViewer:
    """会话日志查看器"""

    def __init__(
        self,
        client: LearningEventsClient,
        session_id: int | str | None = None,
        user_id: int | str | None = None,
        fetch_limit: int = 500,
        refresh_interval_s: float = 5.0,
        auto_refresh: bool = False,
    ) -> None:
        """
        Args:
            client: 事件查询端客户端
            session_id: 指定会话；None 时查看跨会话最近事件
            user_id: 当前用户（仅写入导出文档）
            fetch_limit: 跨会话查询条数上限
            refresh_interval_s: 自动刷新间隔（秒）
            auto_refresh: 进入 async with 时是否开启自动刷新
        """
        self._client = client
        self._session_id = session_id
        self._user_id = user_id
        self._fetch_limit = fetch_limit
        self._refresh_interval_s = refresh_interval_s
        self._auto_refresh_on_enter = auto_refresh

        self._events: list[StoredEvent] = []
        self._error: str | None = None
        self._loading = True
        self._filter = EventFilter()
        self._expanded: set[str] = set()
        self._refresh_task: asyncio.Task | None = None
        # set_session 时递增；结果返回时代数已变化则丢弃
        self._generation = 0

    @classmethod
    def from_config(
        cls,
        config: ViewerConfig,
        client: LearningEventsClient,
        session_id: int | str | None = None,
        user_id: int | str | None = None,
        auto_refresh: bool | None = None,
    ) -> "SessionLogViewer":
        """按 ViewerConfig 创建；auto_refresh 缺省取 config.auto_refresh"""
        return cls(
            client,
            session_id=session_id,
            user_id=user_id,
            fetch_limit=config.fetch_limit,
            refresh_interval_s=config.refresh_interval_s,
            auto_refresh=config.auto_refresh if auto_refresh is None else auto_refresh,
        )

    # ============================================================
    # 状态
    # ============================================================

    @property
    def session_id(self) -> int | str | None:
        return self._session_id

    @property
    def events(self) -> list[StoredEvent]:
        return list(self._events)

    @property
    def error(self) -> str | None:
        """最近一次查询的错误描述，成功后清空"""
        return self._error

    @property
    def loading(self) -> bool:
        """首次加载是否仍未完成"""
        return self._loading

    @property
    def auto_refresh(self) -> bool:
        return self._refresh_task is not None and not self._refresh_task.done()

    # ============================================================
    # 加载
    # ============================================================

    async def refresh(self) -> bool:
        """重新查询事件窗口

        Returns:
            True 如果加载成功；失败时设置 error 并保留原事件，不抛出异常。
            查询期间切换了会话时丢弃结果并返回 False
        """
        generation = self._generation
        session_id = self._session_id
        try:
            events = await self._client.fetch_events(
                session_id=session_id,
                limit=self._fetch_limit,
            )
        except EventFetchError as e:
            if generation != self._generation:
                return False
            self._error = e.message
            log.warning(
                "session_log_fetch_failed",
                session_id=session_id,
                status_code=e.status_code,
                error=e.message,
            )
            return False
        finally:
            self._loading = False

        if generation != self._generation:
            log.debug("session_log_stale_result_discarded", session_id=session_id)
            return False

        self._events = events
        self._error = None
        log.debug("session_log_loaded", session_id=session_id, count=len(events))
        return True

    async def set_session(self, session_id: int | str | None) -> bool:
        """切换查看的会话并立即重新加载"""
        self._session_id = session_id
        self._generation += 1
        self._expanded.clear()
        return await self.refresh()

    def start_auto_refresh(self) -> None:
        """开启自动刷新（需在运行中的事件循环内调用）"""
        if self.auto_refresh:
            return
        self._refresh_task = asyncio.get_running_loop().create_task(
            self._auto_refresh_loop(), name="session-log-auto-refresh"
        )

    async def stop_auto_refresh(self) -> None:
        if self._refresh_task is None:
            return
        self._refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._refresh_task
        self._refresh_task = None

    async def set_auto_refresh(self, enabled: bool) -> None:
        """自动刷新开关"""
        if enabled:
            self.start_auto_refresh()
        else:
            await self.stop_auto_refresh()

    async def _auto_refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._refresh_interval_s)
            await self.refresh()

    # ============================================================
    # 筛选与展开
    # ============================================================

    @property
    def filter(self) -> EventFilter:
        return self._filter

    def set_filter(self, event_filter: EventFilter) -> None:
        self._filter = event_filter

    def update_filter(self, **changes) -> EventFilter:
        """部分更新筛选条件"""
        self._filter = EventFilter.model_validate(
            {**self._filter.model_dump(), **changes}
        )
        return self._filter

    def clear_filters(self) -> None:
        self._filter = EventFilter()

    @property
    def filtered_events(self) -> list[StoredEvent]:
        return self._filter.apply(self._events)

    @property
    def active_filter_count(self) -> int:
        return self._filter.active_count

    def toggle_expanded(self, event_key: str) -> bool:
        """切换单条事件的展开状态，返回切换后是否展开"""
        if event_key in self._expanded:
            self._expanded.discard(event_key)
            return False
        self._expanded.add(event_key)
        return True

    def is_expanded(self, event_key: str) -> bool:
        return event_key in self._expanded

    # ============================================================
    # 派生视图
    # ============================================================

    def facets(self) -> EventFacets:
        """分面来自全部已加载事件，不受当前筛选影响"""
        return derive_facets(self._events)

    def statistics(self) -> EventStatistics:
        return compute_statistics(self.filtered_events)

    def render(self) -> str:
        """按当前筛选与展开状态渲染日志文本"""
        return "\n".join(
            render_entry(event, expanded=self.is_expanded(event.event_key))
            for event in self.filtered_events
        )

    def export_json(self, exported_at: datetime | None = None) -> str:
        return export_json(
            self.filtered_events,
            session_id=self._session_id,
            user_id=self._user_id,
            exported_at=exported_at,
        )

    def export_csv(self) -> str:
        return export_csv(self.filtered_events)

    def clipboard_summary(self) -> str:
        return clipboard_summary(self.filtered_events)

    def export_filename(self, extension: str, today: date | None = None) -> str:
        return export_filename(self._session_id, extension, today)

    # ============================================================
    # 生命周期
    # ============================================================

    async def aclose(self) -> None:
        await self.stop_auto_refresh()
        await self._client.aclose()

    async def __aenter__(self) -> "SessionLogViewer":
        if self._auto_refresh_on_enter:
            self.start_auto_refresh()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
