"""筛选分面 -- 从当前已加载的事件集合推导，不单独查询"""

from collections.abc import Sequence

from clinsim.core.models.stored import StoredEvent
from pydantic import BaseModel, Field


class SessionFacet(BaseModel):
    """会话分面项"""

    id: int | str
    case_name: str | None = None
    username: str | None = None


class EventFacets(BaseModel):
    """可选筛选值"""

    verbs: list[str] = Field(default_factory=list, description="去重并排序的 verb")
    components: list[str] = Field(default_factory=list, description="去重并排序的组件")
    severities: list[str] = Field(default_factory=list, description="按首次出现顺序")
    categories: list[str] = Field(default_factory=list, description="按首次出现顺序")
    sessions: list[SessionFacet] = Field(default_factory=list, description="按会话去重")


def derive_facets(events: Sequence[StoredEvent]) -> EventFacets:
    """推导分面

    会话按 session_id 去重：保留首次出现的位置，展示字段取最后一次出现的值。
    """
    sessions: dict[int | str, SessionFacet] = {}
    for event in events:
        if event.session_id in (None, ""):
            continue
        sessions[event.session_id] = SessionFacet(
            id=event.session_id,
            case_name=event.case_name,
            username=event.username,
        )

    return EventFacets(
        verbs=sorted({e.verb for e in events}),
        components=sorted({e.component for e in events if e.component}),
        severities=list(dict.fromkeys(e.severity for e in events if e.severity)),
        categories=list(dict.fromkeys(e.category for e in events if e.category)),
        sessions=list(sessions.values()),
    )
