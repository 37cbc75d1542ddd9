"""LoggingMiddleware -- 请求级日志与错误上报

为每个 HTTP 请求生成 request_id（ULID），绑定到 structlog contextvars，
并通过 X-Request-ID 响应头返回。

5xx 响应与未处理异常作为 API_ERROR 事件写入学习事件管线（CRITICAL）。
"""

import time

import structlog
from clinsim.core.models.enums import Component
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID


def _report_api_error(request: Request, status_code: int, message: str) -> None:
    event_logger = getattr(request.app.state, "event_logger", None)
    if event_logger is None:
        return
    event_logger.api_error(
        request.url.path,
        status_code,
        message,
        Component.GATEWAY,
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件 -- 为每个请求生成 request_id"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = str(ULID())
        started = time.perf_counter()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        log = structlog.get_logger()
        await log.ainfo("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            await log.aerror("request_failed", error=str(e), error_type=type(e).__name__)
            _report_api_error(request, 500, str(e) or type(e).__name__)
            raise

        await log.ainfo(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000),
        )

        if response.status_code >= 500:
            _report_api_error(request, response.status_code, f"HTTP {response.status_code}")

        response.headers["X-Request-ID"] = request_id
        return response
