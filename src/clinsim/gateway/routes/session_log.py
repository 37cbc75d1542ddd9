"""会话日志路由

GET /api/session-log: 查询事件窗口，返回筛选后的事件、分面与统计。
GET /api/session-log/export: 以 json / csv / text 下载筛选后的事件。
GET /api/session-log/stream: SSE 自动刷新，按刷新间隔推送统计快照。

事件查询端失败时返回 502 与错误体，SSE 流中以 error 事件推送。
"""

import asyncio
import json
from typing import Literal

import structlog
from clinsim.core.models.stored import StoredEvent
from clinsim.viewer import (
    EventFetchError,
    EventFilter,
    LearningEventsClient,
    ViewerConfig,
    build_export_document,
    clipboard_summary,
    compute_statistics,
    derive_facets,
    export_csv,
    export_filename,
)
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response
from sse_starlette.sse import EventSourceResponse

from ..deps import get_events_client, get_viewer_config

log = structlog.get_logger()

router = APIRouter()

_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "text": "text/plain",
}


def event_filter_params(
    search: str = Query(default="", description="全文搜索词"),
    verb: list[str] | None = Query(default=None, description="verb 允许列表"),
    component: list[str] | None = Query(default=None, description="组件允许列表"),
    session: list[str] | None = Query(default=None, description="会话 ID 允许列表"),
    severity: list[str] | None = Query(default=None, description="严重级别允许列表"),
    category: list[str] | None = Query(default=None, description="分类允许列表"),
) -> EventFilter:
    """从查询参数构造 EventFilter；重复参数表示维度内 OR"""
    return EventFilter(
        search=search,
        verbs=verb or [],
        components=component or [],
        sessions=session or [],
        severities=severity or [],
        categories=category or [],
    )


def _fetch_error_response(error: EventFetchError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "error": {
                "code": "EVENT_FETCH_FAILED",
                "message": error.message,
                "upstream_status": error.status_code,
            }
        },
    )


async def _load_events(
    client: LearningEventsClient,
    config: ViewerConfig,
    session_id: str | None,
    limit: int | None,
) -> list[StoredEvent]:
    try:
        return await client.fetch_events(
            session_id=session_id,
            limit=limit or config.fetch_limit,
        )
    except EventFetchError as e:
        log.warning(
            "session_log_fetch_failed",
            session_id=session_id,
            status_code=e.status_code,
            error=e.message,
        )
        raise


@router.get("/api/session-log")
async def get_session_log(
    session_id: str | None = Query(default=None, description="会话 ID，缺省查询最近事件"),
    limit: int | None = Query(default=None, ge=1, description="跨会话查询条数上限"),
    event_filter: EventFilter = Depends(event_filter_params),
    client: LearningEventsClient = Depends(get_events_client),
    config: ViewerConfig = Depends(get_viewer_config),
):
    """查询会话日志

    分面来自全部已加载事件，统计只覆盖筛选后的事件。
    """
    try:
        events = await _load_events(client, config, session_id, limit)
    except EventFetchError as e:
        return _fetch_error_response(e)

    filtered = event_filter.apply(events)
    return {
        "session_id": session_id,
        "total_loaded": len(events),
        "active_filter_count": event_filter.active_count,
        "events": [event.model_dump(mode="json") for event in filtered],
        "facets": derive_facets(events).model_dump(mode="json"),
        "statistics": compute_statistics(filtered).model_dump(mode="json"),
    }


@router.get("/api/session-log/export")
async def export_session_log(
    export_format: Literal["json", "csv", "text"] = Query(
        default="json", alias="format", description="导出格式"
    ),
    session_id: str | None = Query(default=None, description="会话 ID"),
    user_id: str | None = Query(default=None, description="写入 JSON 文档的用户 ID"),
    limit: int | None = Query(default=None, ge=1),
    event_filter: EventFilter = Depends(event_filter_params),
    client: LearningEventsClient = Depends(get_events_client),
    config: ViewerConfig = Depends(get_viewer_config),
):
    """导出筛选后的事件为下载文件"""
    try:
        events = await _load_events(client, config, session_id, limit)
    except EventFetchError as e:
        return _fetch_error_response(e)

    filtered = event_filter.apply(events)
    if export_format == "json":
        document = build_export_document(filtered, session_id=session_id, user_id=user_id)
        content = json.dumps(document, indent=2, ensure_ascii=False)
        extension = "json"
    elif export_format == "csv":
        content = export_csv(filtered)
        extension = "csv"
    else:
        content = clipboard_summary(filtered)
        extension = "txt"

    filename = export_filename(session_id, extension)
    return Response(
        content=content,
        media_type=_MEDIA_TYPES[export_format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/api/session-log/stream")
async def stream_session_log(
    request: Request,
    session_id: str | None = Query(default=None, description="会话 ID"),
    limit: int | None = Query(default=None, ge=1),
    updates: int | None = Query(default=None, ge=1, description="推送次数上限，缺省不限"),
    event_filter: EventFilter = Depends(event_filter_params),
    client: LearningEventsClient = Depends(get_events_client),
    config: ViewerConfig = Depends(get_viewer_config),
):
    """SSE 自动刷新

    每个刷新间隔重新查询一次，推送 statistics 事件；查询失败推送 error 事件，
    下个间隔继续重试。客户端断开或达到 updates 次数即停止。
    """

    async def event_generator():
        sent = 0
        while True:
            if await request.is_disconnected():
                return
            try:
                events = await _load_events(client, config, session_id, limit)
            except EventFetchError as e:
                yield {
                    "event": "error",
                    "data": json.dumps(
                        {"message": e.message, "upstream_status": e.status_code},
                        ensure_ascii=False,
                    ),
                }
            else:
                filtered = event_filter.apply(events)
                snapshot = {
                    "session_id": session_id,
                    "total_loaded": len(events),
                    "filtered": len(filtered),
                    "statistics": compute_statistics(filtered).model_dump(mode="json"),
                }
                yield {
                    "event": "statistics",
                    "data": json.dumps(snapshot, ensure_ascii=False),
                }
            sent += 1
            if updates is not None and sent >= updates:
                return
            await asyncio.sleep(config.refresh_interval_s)

    return EventSourceResponse(event_generator())
