"""Event Domain Model -- 学习事件遥测的原子单元

事件一经构造不可修改（frozen）。
severity/category 总是有值：显式指定或由 verb 查分类表得到。
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import Category, Severity


class Event(BaseModel):
    """学习事件

    由 EventLogger.log() 同步创建，入队后等待批量投递；
    投递成功（或被丢弃）后生产端不再持有。
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="事件创建时间")
    session_id: int | str | None = Field(default=None, description="会话关联键")
    user_id: int | str | None = Field(default=None, description="用户 ID")
    case_id: int | str | None = Field(default=None, description="病例 ID")
    verb: str = Field(description="动作动词，通常取自 Verb")
    object_type: str = Field(description="对象类型，通常取自 ObjectType")
    severity: Severity = Field(description="严重级别")
    category: Category = Field(description="事件分类")
    object_id: str | None = Field(default=None, description="被操作对象 ID")
    object_name: str | None = Field(default=None, description="被操作对象名称")
    component: str | None = Field(default=None, description="来源组件")
    parent_component: str | None = Field(default=None, description="父组件")
    result: str | None = Field(default=None, description="操作结果")
    duration_ms: int | None = Field(default=None, ge=0, description="耗时（毫秒）")
    context: dict[str, Any] | None = Field(default=None, description="附加上下文")
    message_content: str | None = Field(default=None, description="对话消息内容")
    message_role: str | None = Field(default=None, description="对话消息角色")

    def to_wire(self) -> dict[str, Any]:
        """序列化为投递到事件接收端的 JSON 结构"""
        return self.model_dump(mode="json")
