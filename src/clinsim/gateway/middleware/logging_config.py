"""日志配置 -- structlog 渲染与可选 Logfire APM

CLINSIM_LOG_FORMAT=json 时输出结构化 JSON，否则为 dev 控制台格式。
EventLogger 的周期刷新与 Viewer 的自动刷新会持续发出 HTTP 请求，
httpx/httpcore 的逐请求日志默认压到 WARNING，DEBUG 级别时才放开。
"""

import logging
import os

import structlog
from fastapi import FastAPI

# 每次投递/查询都会记录一条 INFO 的第三方 logger
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """初始化 structlog 与标准库 logging

    Args:
        log_format: "json" 或 "dev"，缺省读取 CLINSIM_LOG_FORMAT
        log_level: 根 logger 级别，缺省读取 CLINSIM_LOG_LEVEL（默认 INFO）；
            DEBUG 时可看到每条学习事件的 event_logged 回显
    """
    log_format = log_format or os.environ.get("CLINSIM_LOG_FORMAT", "dev")
    level = _resolve_level(log_level or os.environ.get("CLINSIM_LOG_LEVEL", "INFO"))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer_chain: list[structlog.types.Processor] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
    ]
    if log_format == "json":
        renderer_chain += [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        renderer_chain.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=renderer_chain,
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    chatty_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)


def setup_logfire(app: FastAPI) -> None:
    """Logfire 可选初始化（需安装 apm extra）

    LOGFIRE_SEND_TO_LOGFIRE=true 时启用（需要 LOGFIRE_TOKEN），
    同时追踪 gateway 请求和事件接收端/查询端的 httpx 调用。
    """
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure(service_name="clinsim-gateway")
        logfire.instrument_fastapi(app)
        logfire.instrument_httpx()
    except Exception as e:
        # 初始化失败时退回纯本地日志
        structlog.get_logger().warning(
            "logfire_init_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
