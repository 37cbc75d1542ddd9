"""clinsim Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    SEVERITY_ORDER,
    Category,
    Component,
    MessageRole,
    ObjectType,
    Severity,
    Verb,
    severity_at_least,
)
from .event import Event
from .stored import StoredEvent

__all__ = [
    # 枚举
    "Severity",
    "Category",
    "Verb",
    "ObjectType",
    "Component",
    "MessageRole",
    # 严重级别全序
    "SEVERITY_ORDER",
    "severity_at_least",
    # Event
    "Event",
    "StoredEvent",
]
