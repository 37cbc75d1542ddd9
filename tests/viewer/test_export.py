"""导出测试 -- JSON 文档、CSV、剪贴板摘要、文件名"""

import csv
import io
import json
from datetime import UTC, date, datetime

from clinsim.viewer import (
    CSV_HEADER,
    EventFilter,
    build_export_document,
    clipboard_summary,
    export_csv,
    export_filename,
    export_json,
)


class TestJsonExport:
    def test_document_fields(self, make_stored_event):
        events = [make_stored_event(), make_stored_event()]
        document = build_export_document(
            events,
            session_id=42,
            user_id=9,
            exported_at=datetime(2026, 10, 19, 8, 30, tzinfo=UTC),
        )
        assert document["exportedAt"] == "2026-10-19T08:30:00.000Z"
        assert document["sessionId"] == 42
        assert document["userId"] == 9
        assert document["totalEvents"] == 2
        assert [e["id"] for e in document["events"]] == [1, 2]

    def test_export_json_is_parseable(self, make_stored_event):
        text = export_json([make_stored_event(message_content="héllo")])
        parsed = json.loads(text)
        assert parsed["sessionId"] is None
        assert parsed["events"][0]["message_content"] == "héllo"


class TestCsvExport:
    def test_header(self):
        assert export_csv([]) == ",".join(CSV_HEADER) + "\n"

    def test_round_trip_row_count(self, make_stored_event):
        """筛选后导出再解析，行数 = 事件数 + 表头"""
        events = [
            make_stored_event(severity="CRITICAL", category="ERROR"),
            make_stored_event(severity="INFO"),
            make_stored_event(severity="CRITICAL", category="ERROR",
                              message_content='He said "stop",\nthen left'),
        ]
        filtered = EventFilter(severities=["CRITICAL"]).apply(events)
        rows = list(csv.reader(io.StringIO(export_csv(filtered))))
        assert len(rows) == len(filtered) + 1

    def test_quoting_and_raw_duration(self, make_stored_event):
        event = make_stored_event(
            verb="SENT_MESSAGE",
            object_type="chat_message",
            object_name="Lab, urgent",
            duration_ms=1500,
            message_content='say "hi"',
        )
        rows = list(csv.reader(io.StringIO(export_csv([event]))))
        assert rows[1] == [
            "2026-10-19T14:05:09+00:00",
            "SENT_MESSAGE",
            "chat_message",
            "Lab, urgent",
            "",
            "",
            "1500",
            'say "hi"',
        ]

    def test_missing_duration_is_empty(self, make_stored_event):
        rows = list(csv.reader(io.StringIO(export_csv([make_stored_event()]))))
        assert rows[1][6] == ""


class TestClipboardSummary:
    def test_lines(self, make_stored_event):
        events = [
            make_stored_event(verb="ORDERED_LAB", object_name="CBC", component="OrdersDrawer"),
            make_stored_event(verb="SENT_MESSAGE", message_content="x" * 250),
        ]
        lines = clipboard_summary(events).split("\n")
        assert lines[0] == "[02:05:09 PM] ORDERED_LAB - CBC (OrdersDrawer)"
        assert lines[1] == "[02:05:09 PM] SENT_MESSAGE"
        assert lines[2] == '    "' + "x" * 200 + '"'

    def test_empty(self):
        assert clipboard_summary([]) == ""


class TestExportFilename:
    def test_session_scope(self):
        assert export_filename(42, "csv", date(2026, 10, 19)) == "session-log-42-2026-10-19.csv"

    def test_all_scope(self):
        assert export_filename(None, "json", date(2026, 1, 2)) == "session-log-all-2026-01-02.json"

    def test_unsafe_characters_replaced(self):
        name = export_filename('42"; x', "csv", date(2026, 10, 19))
        assert name == "session-log-42___x-2026-10-19.csv"

    def test_path_separators_replaced(self):
        name = export_filename("../etc", "json", date(2026, 10, 19))
        assert name == "session-log-___etc-2026-10-19.json"
