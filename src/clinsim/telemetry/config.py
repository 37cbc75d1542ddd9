"""TelemetryConfig -- EventLogger 配置加载

从环境变量加载批量大小、刷新间隔、接收端地址等配置。
非法值记录 warning 后回退默认值，不阻塞启动。
"""

import os

import structlog
from clinsim.core.config import EVENT_BATCH_PATH, get_api_base_url
from clinsim.core.models.enums import Severity
from pydantic import BaseModel, Field

log = structlog.get_logger()

_TRUE_VALUES = {"1", "true", "yes", "on"}


class TelemetryConfig(BaseModel):
    """EventLogger 配置 -- 从环境变量加载

    环境变量:
        CLINSIM_SINK_URL: 事件批量投递地址
        CLINSIM_EVENT_BATCH_SIZE: 触发刷新的队列长度（默认 10）
        CLINSIM_EVENT_FLUSH_INTERVAL_S: 周期刷新间隔（秒，默认 5）
        CLINSIM_EVENT_QUEUE_MAX: 队列上限（默认 5000）
        CLINSIM_EVENT_MIN_SEVERITY: 最低记录级别（默认 DEBUG）
        CLINSIM_EVENT_LOGGING_ENABLED: 全局开关（默认 true）
        CLINSIM_SINK_TIMEOUT_S: 投递超时（秒，默认不设超时）
    """

    sink_url: str = Field(
        default="http://localhost:3000" + EVENT_BATCH_PATH,
        description="事件批量投递地址",
    )
    batch_size: int = Field(default=10, ge=1, description="触发阈值刷新的队列长度")
    flush_interval_s: float = Field(default=5.0, gt=0, description="周期刷新间隔（秒）")
    max_queue_size: int = Field(default=5000, ge=1, description="待投递队列上限")
    minimum_severity: Severity = Field(default=Severity.DEBUG, description="最低记录级别")
    enabled: bool = Field(default=True, description="全局开关")
    timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="投递请求超时（秒），None 表示不设超时",
    )


def _parse_number(env_var: str, value: str, cast, fallback):
    try:
        return cast(value)
    except ValueError:
        log.warning(
            "invalid_telemetry_config",
            env_var=env_var,
            value=value,
            fallback=fallback,
        )
        return None


def load_telemetry_config() -> TelemetryConfig:
    """从环境变量加载 Telemetry 配置

    Returns:
        TelemetryConfig 实例
    """
    defaults = TelemetryConfig()
    kwargs: dict = {}

    if val := os.environ.get("CLINSIM_SINK_URL"):
        kwargs["sink_url"] = val
    else:
        kwargs["sink_url"] = get_api_base_url() + EVENT_BATCH_PATH

    if val := os.environ.get("CLINSIM_EVENT_BATCH_SIZE"):
        parsed = _parse_number("CLINSIM_EVENT_BATCH_SIZE", val, int, defaults.batch_size)
        if parsed is not None and parsed >= 1:
            kwargs["batch_size"] = parsed

    if val := os.environ.get("CLINSIM_EVENT_FLUSH_INTERVAL_S"):
        parsed = _parse_number(
            "CLINSIM_EVENT_FLUSH_INTERVAL_S", val, float, defaults.flush_interval_s
        )
        if parsed is not None and parsed > 0:
            kwargs["flush_interval_s"] = parsed

    if val := os.environ.get("CLINSIM_EVENT_QUEUE_MAX"):
        parsed = _parse_number("CLINSIM_EVENT_QUEUE_MAX", val, int, defaults.max_queue_size)
        if parsed is not None and parsed >= 1:
            kwargs["max_queue_size"] = parsed

    if val := os.environ.get("CLINSIM_EVENT_MIN_SEVERITY"):
        try:
            kwargs["minimum_severity"] = Severity(val.upper())
        except ValueError:
            log.warning(
                "invalid_telemetry_config",
                env_var="CLINSIM_EVENT_MIN_SEVERITY",
                value=val,
                fallback=defaults.minimum_severity.value,
            )

    if val := os.environ.get("CLINSIM_EVENT_LOGGING_ENABLED"):
        kwargs["enabled"] = val.strip().lower() in _TRUE_VALUES

    if val := os.environ.get("CLINSIM_SINK_TIMEOUT_S"):
        parsed = _parse_number("CLINSIM_SINK_TIMEOUT_S", val, float, None)
        if parsed is not None and parsed > 0:
            kwargs["timeout_s"] = parsed

    return TelemetryConfig(**kwargs)
