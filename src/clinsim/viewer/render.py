"""日志条目文本渲染 -- 时间戳、耗时格式化与单条事件的行文本

时间按事件时间戳自带的时区展示（存储端返回 UTC）。
"""

import json
from datetime import datetime

from clinsim.core.config import MESSAGE_PREVIEW_LENGTH
from clinsim.core.models.stored import StoredEvent
from pydantic import BaseModel


class TimestampParts(BaseModel):
    """时间戳展示形式"""

    time: str  # 02:05:09 PM
    date: str  # Oct 19
    full: str  # 10/19/2026, 2:05:09 PM


def _parse_timestamp(ts: str) -> datetime | None:
    try:
        return datetime.fromisoformat(ts)
    except (TypeError, ValueError):
        return None


def format_timestamp(ts: str) -> TimestampParts:
    """格式化时间戳；无法解析时三种形式都返回原文"""
    dt = _parse_timestamp(ts)
    if dt is None:
        return TimestampParts(time=ts, date=ts, full=ts)
    hour12 = dt.hour % 12 or 12
    return TimestampParts(
        time=dt.strftime("%I:%M:%S %p"),
        date=f"{dt:%b} {dt.day}",
        full=f"{dt.month}/{dt.day}/{dt.year}, {hour12}:{dt:%M:%S %p}",
    )


def format_duration(ms: int | None) -> str | None:
    """耗时格式化：<1s 为 ms，<1min 为 s，其余为 m；0 或 None 不展示"""
    if not ms:
        return None
    if ms < 1000:
        return f"{ms}ms"
    if ms < 60000:
        return f"{ms / 1000:.1f}s"
    return f"{ms / 60000:.1f}m"


def message_preview(content: str, limit: int = MESSAGE_PREVIEW_LENGTH) -> str:
    """截断消息，超长时追加省略号"""
    if len(content) > limit:
        return content[:limit] + "..."
    return content


def has_details(event: StoredEvent) -> bool:
    """是否有可展开的详情"""
    return bool(event.context or event.message_content or event.result or event.duration_ms)


def render_entry(event: StoredEvent, expanded: bool = False) -> str:
    """渲染单条事件

    首行依次为时间、严重级别、分类、会话/用户、verb、对象、病例、组件、耗时；
    折叠时附加结果与消息预览，展开时附加完整详情。
    """
    ts = format_timestamp(event.timestamp)
    parts = [f"[{ts.time}]"]
    if event.severity:
        parts.append(event.severity)
    if event.category:
        parts.append(event.category)
    if event.session_id not in (None, ""):
        badge = f"#{event.session_id}"
        if event.username:
            badge += f" @{event.username}"
        parts.append(badge)
    parts.append(event.verb.replace("_", " "))
    if event.object_name:
        parts.append(event.object_name)
    if event.case_name:
        parts.append(f"[{event.case_name}]")
    if event.component:
        parts.append(f"<{event.component}>")
    duration = format_duration(event.duration_ms)
    if duration:
        parts.append(f"({duration})")

    lines = [" ".join(parts)]

    if not expanded:
        if event.result:
            lines.append(f"    {event.result}")
        if event.message_content:
            lines.append(f'    "{message_preview(event.message_content)}"')
        return "\n".join(lines)

    if not has_details(event):
        return lines[0]

    if event.message_content:
        label = "User Message" if event.message_role == "user" else "Assistant Response"
        lines.append(f"    {label}:")
        lines.extend(f"      {line}" for line in event.message_content.splitlines())
    if event.result:
        lines.append(f"    Result: {event.result}")
    if duration:
        lines.append(f"    Duration: {duration}")
    if event.context:
        lines.append("    Context:")
        context_text = json.dumps(event.context, indent=2, ensure_ascii=False)
        lines.extend(f"      {line}" for line in context_text.splitlines())
    lines.append(f"    Event ID: {event.id} | Full timestamp: {ts.full}")
    return "\n".join(lines)
