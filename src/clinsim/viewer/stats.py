"""事件统计聚合

- 按 severity 计数：五个级别全部列出（含 0），顺序固定
- 按 category / verb / component 计数
- Top verbs：按次数降序，同次数按首次出现顺序
- 平均耗时：只统计带 duration_ms 的事件，四舍五入取整
"""

import math
from collections.abc import Sequence

from clinsim.core.config import TOP_VERBS_LIMIT
from clinsim.core.models.enums import SEVERITY_ORDER
from clinsim.core.models.stored import StoredEvent
from pydantic import BaseModel, Field


class VerbCount(BaseModel):
    verb: str
    count: int


class EventStatistics(BaseModel):
    """统计快照"""

    total: int = 0
    severity_counts: dict[str, int] = Field(default_factory=dict)
    category_counts: dict[str, int] = Field(default_factory=dict)
    verb_counts: dict[str, int] = Field(default_factory=dict)
    top_verbs: list[VerbCount] = Field(default_factory=list)
    component_counts: dict[str, int] = Field(default_factory=dict)
    events_with_duration: int = 0
    total_duration_ms: int = 0
    avg_duration_ms: int = 0


def _increment(counts: dict[str, int], key: str) -> None:
    counts[key] = counts.get(key, 0) + 1


def compute_statistics(
    events: Sequence[StoredEvent],
    top_n: int = TOP_VERBS_LIMIT,
) -> EventStatistics:
    """聚合统计

    Args:
        events: 通常为筛选后的事件
        top_n: Top verbs 数量

    Returns:
        EventStatistics
    """
    severity_counts = {severity.value: 0 for severity in SEVERITY_ORDER}
    category_counts: dict[str, int] = {}
    verb_counts: dict[str, int] = {}
    component_counts: dict[str, int] = {}
    total_duration = 0
    with_duration = 0

    for event in events:
        if event.severity:
            _increment(severity_counts, event.severity)
        if event.category:
            _increment(category_counts, event.category)
        _increment(verb_counts, event.verb)
        if event.component:
            _increment(component_counts, event.component)
        if event.duration_ms is not None:
            total_duration += event.duration_ms
            with_duration += 1

    # sorted 是稳定排序，同次数保持 dict 插入（首次出现）顺序
    ranked = sorted(verb_counts.items(), key=lambda item: item[1], reverse=True)
    avg = math.floor(total_duration / with_duration + 0.5) if with_duration else 0

    return EventStatistics(
        total=len(events),
        severity_counts=severity_counts,
        category_counts=category_counts,
        verb_counts=verb_counts,
        top_verbs=[VerbCount(verb=verb, count=count) for verb, count in ranked[:top_n]],
        component_counts=component_counts,
        events_with_duration=with_duration,
        total_duration_ms=total_duration,
        avg_duration_ms=avg,
    )
