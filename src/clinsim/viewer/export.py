"""导出 -- JSON 文档、CSV 表格、剪贴板纯文本摘要

JSON 文档: {exportedAt, sessionId, userId, totalEvents, events}
CSV 表头: Timestamp, Verb, Object Type, Object Name, Component, Result,
          Duration (ms), Message Content
"""

import csv
import io
import json
import re
from collections.abc import Sequence
from datetime import UTC, date, datetime
from typing import Any

from clinsim.core.config import CLIPBOARD_PREVIEW_LENGTH
from clinsim.core.models.stored import StoredEvent

from .render import format_timestamp

# 文件名中只保留字母、数字、下划线与连字符
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")

CSV_HEADER = (
    "Timestamp",
    "Verb",
    "Object Type",
    "Object Name",
    "Component",
    "Result",
    "Duration (ms)",
    "Message Content",
)


def _iso_utc(moment: datetime) -> str:
    """2026-10-19T08:30:00.000Z 形式"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_export_document(
    events: Sequence[StoredEvent],
    session_id: int | str | None = None,
    user_id: int | str | None = None,
    exported_at: datetime | None = None,
) -> dict[str, Any]:
    """构造 JSON 导出文档"""
    return {
        "exportedAt": _iso_utc(exported_at or datetime.now(UTC)),
        "sessionId": session_id,
        "userId": user_id,
        "totalEvents": len(events),
        "events": [event.model_dump(mode="json") for event in events],
    }


def export_json(
    events: Sequence[StoredEvent],
    session_id: int | str | None = None,
    user_id: int | str | None = None,
    exported_at: datetime | None = None,
) -> str:
    document = build_export_document(events, session_id, user_id, exported_at)
    return json.dumps(document, indent=2, ensure_ascii=False)


def export_csv(events: Sequence[StoredEvent]) -> str:
    """导出 CSV

    耗时为原始毫秒数；含逗号、引号或换行的文本字段按 RFC 4180 加引号转义。
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for event in events:
        writer.writerow(
            (
                event.timestamp,
                event.verb,
                event.object_type,
                event.object_name or "",
                event.component or "",
                event.result or "",
                "" if event.duration_ms is None else event.duration_ms,
                event.message_content or "",
            )
        )
    return buffer.getvalue()


def clipboard_summary(events: Sequence[StoredEvent]) -> str:
    """每条事件一行：[时间] VERB - 对象 (组件)，有消息时换行附加预览"""
    lines = []
    for event in events:
        line = f"[{format_timestamp(event.timestamp).time}] {event.verb}"
        if event.object_name:
            line += f" - {event.object_name}"
        if event.component:
            line += f" ({event.component})"
        if event.message_content:
            line += f'\n    "{event.message_content[:CLIPBOARD_PREVIEW_LENGTH]}"'
        lines.append(line)
    return "\n".join(lines)


def export_filename(
    session_id: int | str | None,
    extension: str,
    today: date | None = None,
) -> str:
    """session-log-<session|all>-<YYYY-MM-DD>.<ext>"""
    day = today or datetime.now(UTC).date()
    scope = session_id if session_id not in (None, "") else "all"
    scope = _UNSAFE_FILENAME_CHARS.sub("_", str(scope))
    return f"session-log-{scope}-{day.isoformat()}.{extension}"
