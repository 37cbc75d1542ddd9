"""FastAPI 应用主文件

app 创建 + lifespan 管理：EventLogger 与事件查询端客户端的初始化/关闭 + 路由注册。
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from clinsim.core.config import get_api_token
from clinsim.telemetry import EventLogger, HttpEventSink, load_telemetry_config
from clinsim.viewer import LearningEventsClient, load_viewer_config
from fastapi import FastAPI

from .middleware.logging_config import setup_logfire, setup_logging
from .middleware.logging_mw import LoggingMiddleware
from .routes import health, session_log

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时创建 EventLogger 并开始周期刷新，关闭时投递剩余事件"""
    telemetry_config = load_telemetry_config()
    event_sink = HttpEventSink(
        telemetry_config.sink_url,
        token_provider=get_api_token,
        timeout_s=telemetry_config.timeout_s,
    )
    event_logger = EventLogger.from_config(telemetry_config, sink=event_sink)
    event_logger.start()
    event_logger.install_unload_hooks()
    app.state.event_sink = event_sink
    app.state.event_logger = event_logger
    log.info(
        "event_logger_initialized",
        sink_url=telemetry_config.sink_url,
        batch_size=telemetry_config.batch_size,
        flush_interval_s=telemetry_config.flush_interval_s,
        minimum_severity=telemetry_config.minimum_severity.value,
        enabled=telemetry_config.enabled,
    )

    viewer_config = load_viewer_config()
    app.state.viewer_config = viewer_config
    app.state.events_client = LearningEventsClient(
        viewer_config.api_base_url,
        token_provider=get_api_token,
    )

    yield

    # 关闭：先投递剩余事件，再注销退出钩子
    await event_logger.aclose()
    event_logger.uninstall_unload_hooks()
    await app.state.events_client.aclose()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="ClinSim Session Log Gateway",
        version="0.1.0",
        description="学习事件会话日志查询、统计与导出 API",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(session_log.router, tags=["session-log"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口）
app = create_app()
