"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，包含 EventLogger 状态；
         profile=sink 时额外探测事件接收端可达性。
"""

import structlog
from fastapi import APIRouter, Query, Request
from starlette.responses import JSONResponse

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    request: Request,
    profile: str | None = Query(
        default=None,
        description="检查配置文件：core（默认）仅本地检查；sink 额外探测事件接收端",
    ),
):
    """Readiness 检查

    检查项：
    1. event_logger: 已初始化，附带队列长度与丢弃数
    2. event_sink: 根据 profile 决定是否探测
    """
    effective_profile = profile or "core"

    checks: dict = {}
    all_ok = True

    event_logger = getattr(request.app.state, "event_logger", None)
    if event_logger is None:
        checks["event_logger"] = "error: not initialized"
        all_ok = False
    else:
        status = event_logger.get_status()
        checks["event_logger"] = "ok" if status.is_enabled else "disabled"
        checks["queue_length"] = status.queue_length
        checks["dropped_events"] = status.dropped_events

    if effective_profile == "sink":
        event_sink = getattr(request.app.state, "event_sink", None)
        if event_sink is not None:
            try:
                if await event_sink.health_check():
                    checks["event_sink"] = "ok"
                else:
                    checks["event_sink"] = "unreachable"
                    all_ok = False
            except Exception as e:
                log.warning("health_check_error", error=str(e))
                checks["event_sink"] = "unreachable"
                all_ok = False
        else:
            checks["event_sink"] = "skipped"
    else:
        checks["event_sink"] = "skipped"

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "profile": effective_profile,
            "checks": checks,
        },
    )
