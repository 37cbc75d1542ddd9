"""LoggingContext -- 事件关联键与过滤状态

由 session 开始/结束调用设置；session 结束时清除 session/case，保留 user。
"""

from clinsim.core.models.enums import Severity
from pydantic import BaseModel, Field


class LoggingContext(BaseModel):
    """EventLogger 当前上下文"""

    session_id: int | str | None = Field(default=None, description="当前会话 ID")
    user_id: int | str | None = Field(default=None, description="当前用户 ID")
    case_id: int | str | None = Field(default=None, description="当前病例 ID")
    minimum_severity: Severity = Field(default=Severity.DEBUG, description="最低记录级别")
    enabled: bool = Field(default=True, description="全局开关")


class LoggerStatus(BaseModel):
    """EventLogger 状态快照（调试/健康检查用）"""

    queue_length: int
    session_id: int | str | None = None
    user_id: int | str | None = None
    case_id: int | str | None = None
    is_enabled: bool
    minimum_severity: Severity
    pending_timings: list[str] = Field(default_factory=list)
    inflight_flushes: int = 0
    dropped_events: int = 0
    periodic_flush_running: bool = False
