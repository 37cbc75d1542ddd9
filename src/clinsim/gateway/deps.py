"""依赖注入模块 -- 通过 FastAPI Depends 注入服务实例

实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from clinsim.telemetry import EventLogger
from clinsim.viewer import LearningEventsClient, ViewerConfig
from fastapi import Request


def get_event_logger(request: Request) -> EventLogger:
    """从 app.state 获取 EventLogger 实例"""
    return request.app.state.event_logger


def get_events_client(request: Request) -> LearningEventsClient:
    """从 app.state 获取事件查询端客户端"""
    return request.app.state.events_client


def get_viewer_config(request: Request) -> ViewerConfig:
    """从 app.state 获取 Viewer 配置"""
    return request.app.state.viewer_config
