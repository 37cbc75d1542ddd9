"""LogOptions -- EventLogger.log() 的结构化可选参数

每个字段都宽松解析：格式不合法的值降级为 None，而不是抛出 ValidationError。
未识别的字段被忽略。
"""

import json
import math
from collections.abc import Mapping
from typing import Any

from clinsim.core.models.enums import Category, Severity
from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogOptions(BaseModel):
    """log() 可选参数

    字段:
        object_id / object_name: 被操作对象标识，数字转为字符串
        component / parent_component: 来源组件
        result: 操作结果描述
        duration_ms: 耗时（毫秒），非负数取整
        context: 附加上下文，仅接受映射
        message_content / message_role: 对话事件专用
        severity / category: 覆盖分类表默认值
        timing_mark: 结束同名计时标记并作为 duration_ms
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    object_id: str | None = Field(default=None)
    object_name: str | None = Field(default=None)
    component: str | None = Field(default=None)
    parent_component: str | None = Field(default=None)
    result: str | None = Field(default=None)
    duration_ms: int | None = Field(default=None)
    context: dict[str, Any] | None = Field(default=None)
    message_content: str | None = Field(default=None)
    message_role: str | None = Field(default=None)
    severity: Severity | None = Field(default=None)
    category: Category | None = Field(default=None)
    timing_mark: str | None = Field(default=None)

    @field_validator(
        "object_id",
        "object_name",
        "component",
        "parent_component",
        "result",
        "message_content",
        "message_role",
        "timing_mark",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            return value or None
        if isinstance(value, (int, float)):
            return str(value)
        return None

    @field_validator("duration_ms", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> int | None:
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, (int, float)) and math.isfinite(value) and value >= 0:
            return round(value)
        return None

    @field_validator("context", mode="before")
    @classmethod
    def _coerce_context(cls, value: Any) -> dict[str, Any] | None:
        # context 需要可 JSON 序列化，无法序列化的值转为字符串
        if not isinstance(value, Mapping):
            return None
        try:
            return json.loads(json.dumps(dict(value), default=str, skipkeys=True))
        except (TypeError, ValueError):
            return None

    @field_validator("severity", mode="before")
    @classmethod
    def _coerce_severity(cls, value: Any) -> Severity | None:
        try:
            return Severity(value) if value else None
        except (ValueError, TypeError):
            return None

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Category | None:
        try:
            return Category(value) if value else None
        except (ValueError, TypeError):
            return None

    @classmethod
    def coerce(cls, raw: "LogOptions | Mapping[str, Any] | None") -> "LogOptions":
        """把任意输入规整为 LogOptions，不合法的输入得到全空选项"""
        if isinstance(raw, LogOptions):
            return raw
        if isinstance(raw, Mapping):
            return cls.model_validate(dict(raw))
        return cls()
