"""StoredEvent -- 从事件存储读回的学习事件

存储端在写入时附加 id，查询时 JOIN 出 case_name / username 等展示字段。
旧数据可能缺少 severity/category，context 可能以 JSON 字符串形式返回。
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StoredEvent(BaseModel):
    """存储端返回的事件行（读侧模型，宽松解析）"""

    model_config = ConfigDict(extra="allow")

    id: int | str | None = Field(default=None, description="存储端分配的事件 ID")
    timestamp: str = Field(default="", description="ISO-8601 时间戳")
    session_id: int | str | None = None
    user_id: int | str | None = None
    case_id: int | str | None = None
    verb: str = ""
    object_type: str = ""
    severity: str | None = None
    category: str | None = None
    object_id: str | None = None
    object_name: str | None = None
    component: str | None = None
    parent_component: str | None = None
    result: str | None = None
    duration_ms: int | None = None
    context: dict[str, Any] | None = None
    message_content: str | None = None
    message_role: str | None = None

    # JOIN 出的展示字段
    case_name: str | None = None
    username: str | None = None
    session_start: str | None = None

    @field_validator(
        "object_id",
        "object_name",
        "component",
        "parent_component",
        "result",
        "message_content",
        mode="before",
    )
    @classmethod
    def _stringify(cls, value: Any) -> str | None:
        if value is None or value == "":
            return None
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(value) if value >= 0 else None
        return None

    @field_validator("context", mode="before")
    @classmethod
    def _decode_context(cls, value: Any) -> dict[str, Any] | None:
        # 存储端以 JSON 文本保存 context
        if value is None or value == "":
            return None
        if isinstance(value, str):
            try:
                decoded = json.loads(value)
            except ValueError:
                return {"raw": value}
            return decoded if isinstance(decoded, dict) else {"value": decoded}
        return value

    @property
    def event_key(self) -> str:
        """事件身份标识，用于展开/折叠状态"""
        if self.id is not None:
            return str(self.id)
        return f"{self.timestamp}|{self.verb}|{self.object_id or ''}"
