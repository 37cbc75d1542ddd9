"""LearningEventsClient -- 事件查询端 HTTP 客户端

GET /api/learning-events/session/{session_id}  单会话全部事件
GET /api/learning-events/all?limit=N          跨会话最近 N 条

两者都需要 Bearer 认证，响应体为 {"events": [...]}。
"""

from collections.abc import Callable, Iterable
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from clinsim.core.config import RECENT_EVENTS_PATH, SESSION_EVENTS_PATH
from clinsim.core.models.stored import StoredEvent
from clinsim.core.taxonomy import get_verb_metadata
from pydantic import ValidationError

from .exceptions import EventFetchError

log = structlog.get_logger()

# 查询超时（秒）
FETCH_TIMEOUT_S = 30


def parse_stored_events(rows: Iterable[Any]) -> list[StoredEvent]:
    """解析存储端返回的事件行

    缺少 severity/category 的旧数据按分类表补齐；无法解析的行被跳过。
    """
    events: list[StoredEvent] = []
    for row in rows:
        if not isinstance(row, dict):
            log.warning("stored_event_skipped", reason="not_an_object")
            continue
        try:
            event = StoredEvent.model_validate(row)
        except ValidationError as e:
            log.warning(
                "stored_event_skipped",
                reason="invalid",
                event_id=row.get("id"),
                error_count=e.error_count(),
            )
            continue
        if not event.severity or not event.category:
            metadata = get_verb_metadata(event.verb)
            event = event.model_copy(
                update={
                    "severity": event.severity or metadata.severity.value,
                    "category": event.category or metadata.category.value,
                }
            )
        events.append(event)
    return events


class LearningEventsClient:
    """事件查询端客户端（基于 httpx.AsyncClient）"""

    def __init__(
        self,
        base_url: str,
        token_provider: Callable[[], str | None] | None = None,
        timeout_s: float = FETCH_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            base_url: 后端 API 基础 URL
            token_provider: 返回 Bearer 令牌的回调
            timeout_s: 请求超时（秒）
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout_s,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def fetch_events(
        self,
        session_id: int | str | None = None,
        limit: int = 500,
    ) -> list[StoredEvent]:
        """查询事件

        Args:
            session_id: 指定时查询该会话全部事件，否则查询最近 limit 条
            limit: 跨会话查询条数上限

        Returns:
            解析后的事件列表（按服务端顺序）

        Raises:
            EventFetchError: 连接失败或服务端返回非 2xx
        """
        if session_id not in (None, ""):
            path = SESSION_EVENTS_PATH.format(session_id=quote(str(session_id), safe=""))
            params = None
        else:
            path = RECENT_EVENTS_PATH
            params = {"limit": limit}

        try:
            response = await self._client.get(path, params=params, headers=self._headers())
        except httpx.HTTPError as e:
            raise EventFetchError(str(e) or type(e).__name__) from e

        if not response.is_success:
            raise EventFetchError(_error_message(response), status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise EventFetchError("Invalid response body", status_code=response.status_code) from e

        rows = data.get("events") if isinstance(data, dict) else None
        return parse_stored_events(rows or [])

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_message(response: httpx.Response) -> str | None:
    """提取服务端 {"error": "..."} 中的错误描述"""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, str):
        return error or None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"] or None
    return None
