"""EventFilter -- Viewer 事件筛选

匹配规则：
- search: 不区分大小写的子串匹配，覆盖 verb、object_name、message_content、
  component、case_name、username、severity、category
- 各维度（verb / component / session / severity / category）为允许列表，
  维度内 OR，维度间 AND；空列表表示不限制
"""

from collections.abc import Sequence
from typing import Any

from clinsim.core.models.stored import StoredEvent
from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventFilter(BaseModel):
    """Viewer 筛选条件"""

    model_config = ConfigDict(frozen=True)

    search: str = Field(default="", description="全文搜索词")
    verbs: list[str] = Field(default_factory=list)
    components: list[str] = Field(default_factory=list)
    sessions: list[str] = Field(default_factory=list, description="会话 ID，统一按字符串比较")
    severities: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)

    @field_validator("sessions", mode="before")
    @classmethod
    def _stringify_sessions(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set)):
            return [str(v) for v in value]
        return value

    @property
    def active_count(self) -> int:
        """已选中的维度值总数（不含搜索词）"""
        return (
            len(self.verbs)
            + len(self.components)
            + len(self.sessions)
            + len(self.severities)
            + len(self.categories)
        )

    def _matches_search(self, event: StoredEvent) -> bool:
        query = self.search.lower()
        fields = (
            event.verb,
            event.object_name,
            event.message_content,
            event.component,
            event.case_name,
            event.username,
            event.severity,
            event.category,
        )
        return any(value and query in value.lower() for value in fields)

    def matches(self, event: StoredEvent) -> bool:
        """事件是否满足全部已启用的维度"""
        if self.search and not self._matches_search(event):
            return False
        if self.verbs and event.verb not in self.verbs:
            return False
        if self.components and event.component not in self.components:
            return False
        if self.sessions and (
            event.session_id is None or str(event.session_id) not in self.sessions
        ):
            return False
        if self.severities and event.severity not in self.severities:
            return False
        if self.categories and event.category not in self.categories:
            return False
        return True

    def apply(self, events: Sequence[StoredEvent]) -> list[StoredEvent]:
        """筛选，保持原顺序"""
        return [event for event in events if self.matches(event)]
