"""ViewerConfig -- Session Log Viewer 配置加载

非法值记录 warning 后回退默认值。
"""

import os

import structlog
from clinsim.core.config import get_api_base_url
from pydantic import BaseModel, Field

log = structlog.get_logger()


class ViewerConfig(BaseModel):
    """Viewer 配置 -- 从环境变量加载

    环境变量:
        CLINSIM_API_BASE_URL: 事件查询端地址
        CLINSIM_VIEWER_FETCH_LIMIT: 跨会话查询的最近事件数（默认 500）
        CLINSIM_VIEWER_REFRESH_INTERVAL_S: 自动刷新间隔（秒，默认 5）
    """

    api_base_url: str = Field(default="http://localhost:3000", description="事件查询端地址")
    fetch_limit: int = Field(default=500, ge=1, description="跨会话查询条数上限")
    refresh_interval_s: float = Field(default=5.0, gt=0, description="自动刷新间隔（秒）")
    auto_refresh: bool = Field(default=True, description="是否默认开启自动刷新")


def load_viewer_config() -> ViewerConfig:
    """从环境变量加载 Viewer 配置"""
    defaults = ViewerConfig()
    kwargs: dict = {"api_base_url": get_api_base_url()}

    if val := os.environ.get("CLINSIM_VIEWER_FETCH_LIMIT"):
        try:
            limit = int(val)
            if limit < 1:
                raise ValueError(val)
            kwargs["fetch_limit"] = limit
        except ValueError:
            log.warning(
                "invalid_viewer_config",
                env_var="CLINSIM_VIEWER_FETCH_LIMIT",
                value=val,
                fallback=defaults.fetch_limit,
            )

    if val := os.environ.get("CLINSIM_VIEWER_REFRESH_INTERVAL_S"):
        try:
            interval = float(val)
            if interval <= 0:
                raise ValueError(val)
            kwargs["refresh_interval_s"] = interval
        except ValueError:
            log.warning(
                "invalid_viewer_config",
                env_var="CLINSIM_VIEWER_REFRESH_INTERVAL_S",
                value=val,
                fallback=defaults.refresh_interval_s,
            )

    return ViewerConfig(**kwargs)
