"""SessionLogViewer 测试 -- 加载、错误保留、筛选、展开与自动刷新"""

import asyncio
import json
from datetime import UTC, date, datetime

import httpx
from clinsim.viewer import EventFilter, LearningEventsClient, SessionLogViewer, ViewerConfig


def _row(event_id, **fields):
    row = {
        "id": event_id,
        "timestamp": "2026-10-19T14:05:09+00:00",
        "session_id": 42,
        "verb": "CLICKED",
        "object_type": "button",
        "severity": "ACTION",
        "category": "NAVIGATION",
    }
    row.update(fields)
    return row


class FakeBackend:
    """可切换响应的事件查询端"""

    def __init__(self, rows=None) -> None:
        self.rows = rows or []
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "Database unavailable"})
        return httpx.Response(200, json={"events": self.rows})


def _viewer(backend: FakeBackend, **kwargs) -> SessionLogViewer:
    client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(backend))
    return SessionLogViewer(client, **kwargs)


class TestRefresh:
    async def test_initial_load(self):
        backend = FakeBackend([_row(1), _row(2)])
        viewer = _viewer(backend, session_id=42)
        assert viewer.loading is True

        assert await viewer.refresh() is True
        assert viewer.loading is False
        assert viewer.error is None
        assert [e.id for e in viewer.events] == [1, 2]
        await viewer.aclose()

    async def test_failure_keeps_previous_events(self):
        backend = FakeBackend([_row(1)])
        viewer = _viewer(backend, session_id=42)
        await viewer.refresh()

        backend.status_code = 500
        assert await viewer.refresh() is False
        assert viewer.error == "Database unavailable"
        assert [e.id for e in viewer.events] == [1]

        backend.status_code = 200
        backend.rows = [_row(1), _row(2)]
        assert await viewer.refresh() is True
        assert viewer.error is None
        assert len(viewer.events) == 2
        await viewer.aclose()

    async def test_first_load_failure_clears_loading(self):
        backend = FakeBackend()
        backend.status_code = 503
        viewer = _viewer(backend)
        assert await viewer.refresh() is False
        assert viewer.loading is False
        assert viewer.events == []
        await viewer.aclose()

    async def test_set_session_reloads(self):
        backend = FakeBackend([_row(1)])
        viewer = _viewer(backend)
        await viewer.set_session(7)
        assert viewer.session_id == 7
        assert backend.requests[-1].url.path == "/api/learning-events/session/7"
        await viewer.aclose()

    async def test_from_config(self):
        backend = FakeBackend()
        client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(backend))
        viewer = SessionLogViewer.from_config(ViewerConfig(fetch_limit=20), client)
        await viewer.refresh()
        assert backend.requests[0].url.params["limit"] == "20"
        await viewer.aclose()

    async def test_stale_refresh_discarded_after_session_switch(self):
        """切换会话后，旧会话较晚返回的结果不覆盖新会话"""
        gates = {"1": asyncio.Event(), "2": asyncio.Event()}

        async def handler(request: httpx.Request) -> httpx.Response:
            session = request.url.path.rsplit("/", 1)[-1]
            await gates[session].wait()
            rows = [_row(int(session), session_id=int(session))]
            return httpx.Response(200, json={"events": rows})

        client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(handler))
        viewer = SessionLogViewer(client, session_id=1)
        stale = asyncio.create_task(viewer.refresh())
        await asyncio.sleep(0)
        switch = asyncio.create_task(viewer.set_session(2))
        await asyncio.sleep(0)

        gates["2"].set()
        assert await switch is True
        gates["1"].set()
        assert await stale is False

        assert viewer.session_id == 2
        assert [e.session_id for e in viewer.events] == [2]
        assert viewer.error is None
        await viewer.aclose()

    async def test_stale_refresh_error_not_reported(self):
        """旧会话的查询失败不写入新会话的错误状态"""
        gate = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/1"):
                await gate.wait()
                return httpx.Response(500, json={"error": "Database unavailable"})
            return httpx.Response(200, json={"events": [_row(5, session_id=2)]})

        client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(handler))
        viewer = SessionLogViewer(client, session_id=1)
        stale = asyncio.create_task(viewer.refresh())
        await asyncio.sleep(0)
        assert await viewer.set_session(2) is True

        gate.set()
        assert await stale is False
        assert viewer.error is None
        assert [e.id for e in viewer.events] == [5]
        await viewer.aclose()

class TestFiltersAndExpansion:
    async def test_filters_apply_to_statistics_not_facets(self):
        backend = FakeBackend(
            [
                _row(1, verb="API_ERROR", severity="CRITICAL", category="ERROR"),
                _row(2),
                _row(3, verb="ORDERED_LAB", severity="IMPORTANT", category="CLINICAL"),
            ]
        )
        viewer = _viewer(backend)
        await viewer.refresh()

        viewer.update_filter(severities=["CRITICAL"])
        assert viewer.active_filter_count == 1
        assert [e.id for e in viewer.filtered_events] == [1]
        assert viewer.statistics().total == 1
        assert viewer.facets().verbs == ["API_ERROR", "CLICKED", "ORDERED_LAB"]

        viewer.update_filter(search="lab")
        assert viewer.filtered_events == []
        assert viewer.filter.severities == ["CRITICAL"]

        viewer.clear_filters()
        assert viewer.active_filter_count == 0
        assert len(viewer.filtered_events) == 3
        await viewer.aclose()

    async def test_set_filter(self):
        viewer = _viewer(FakeBackend([_row(1)]))
        await viewer.refresh()
        viewer.set_filter(EventFilter(verbs=["OPENED"]))
        assert viewer.filtered_events == []
        await viewer.aclose()

    async def test_toggle_expanded_is_per_event(self):
        viewer = _viewer(FakeBackend([_row(1, result="ok"), _row(2, result="ok")]))
        await viewer.refresh()

        assert viewer.toggle_expanded("1") is True
        assert viewer.is_expanded("1")
        assert not viewer.is_expanded("2")
        assert "Event ID: 1" in viewer.render()
        assert "Event ID: 2" not in viewer.render()

        assert viewer.toggle_expanded("1") is False
        assert not viewer.is_expanded("1")
        await viewer.aclose()


class TestExports:
    async def test_exports_use_filtered_events(self):
        viewer = _viewer(
            FakeBackend([_row(1), _row(2, verb="OPENED")]),
            session_id=42,
            user_id=9,
        )
        await viewer.refresh()
        viewer.update_filter(verbs=["OPENED"])

        document = json.loads(viewer.export_json(datetime(2026, 10, 19, tzinfo=UTC)))
        assert document["totalEvents"] == 1
        assert document["sessionId"] == 42
        assert document["userId"] == 9
        assert viewer.export_csv().count("\n") == 2
        assert viewer.clipboard_summary() == "[02:05:09 PM] OPENED"
        assert viewer.export_filename("csv", date(2026, 10, 19)) == "session-log-42-2026-10-19.csv"
        await viewer.aclose()


class TestAutoRefresh:
    async def test_start_and_stop(self):
        backend = FakeBackend([_row(1)])
        viewer = _viewer(backend, refresh_interval_s=0.01)
        viewer.start_auto_refresh()
        viewer.start_auto_refresh()
        assert viewer.auto_refresh is True

        await asyncio.sleep(0.05)
        assert len(backend.requests) >= 2

        await viewer.set_auto_refresh(False)
        assert viewer.auto_refresh is False
        count = len(backend.requests)
        await asyncio.sleep(0.03)
        assert len(backend.requests) == count
        await viewer.aclose()

    async def test_context_manager_stops_refresh(self):
        backend = FakeBackend()
        async with _viewer(backend, refresh_interval_s=0.01) as viewer:
            await viewer.set_auto_refresh(True)
        assert viewer.auto_refresh is False

    async def test_config_enables_refresh_on_enter(self):
        backend = FakeBackend([_row(1)])
        client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(backend))
        config = ViewerConfig(auto_refresh=True, refresh_interval_s=0.01)
        async with SessionLogViewer.from_config(config, client, session_id=42) as viewer:
            assert viewer.auto_refresh is True
            await asyncio.sleep(0.05)
            assert len(backend.requests) >= 2
        assert viewer.auto_refresh is False

    async def test_auto_refresh_override(self):
        backend = FakeBackend()
        client = LearningEventsClient("http://api.test", transport=httpx.MockTransport(backend))
        config = ViewerConfig(auto_refresh=True, refresh_interval_s=0.01)
        viewer = SessionLogViewer.from_config(config, client, auto_refresh=False)
        async with viewer:
            assert viewer.auto_refresh is False

    async def test_plain_viewer_does_not_refresh_on_enter(self):
        backend = FakeBackend()
        async with _viewer(backend, refresh_interval_s=0.01) as viewer:
            assert viewer.auto_refresh is False
