"""HttpEventSink 测试 -- httpx.MockTransport 模拟事件接收端"""

import json
from datetime import UTC, datetime

import httpx
import pytest
from clinsim.core.models import Category, Event, Severity
from clinsim.telemetry import (
    HttpEventSink,
    SinkDeliveryError,
    SinkUnreachableError,
    encode_batch,
)

SINK_URL = "http://sink.test/api/learning-events/batch"


def _event(object_id: str = "a") -> Event:
    return Event(
        timestamp=datetime(2026, 10, 19, 8, 30, tzinfo=UTC),
        session_id=42,
        verb="ORDERED_LAB",
        object_type="lab_test",
        severity=Severity.IMPORTANT,
        category=Category.CLINICAL,
        object_id=object_id,
    )


class Recorder:
    """记录请求并返回预设状态码"""

    def __init__(self, status_code: int = 200) -> None:
        self.status_code = status_code
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json={"success": True})


class TestEncodeBatch:
    def test_body_shape(self):
        body = json.loads(encode_batch([_event("a"), _event("b")]))
        assert list(body) == ["events"]
        assert [e["object_id"] for e in body["events"]] == ["a", "b"]
        assert body["events"][0]["severity"] == "IMPORTANT"


class TestSendBatch:
    async def test_success_posts_events(self):
        recorder = Recorder(201)
        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(recorder))
        await sink.send_batch([_event()])
        await sink.aclose()

        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == SINK_URL
        assert request.headers["content-type"] == "application/json"
        assert "authorization" not in request.headers
        assert json.loads(request.content)["events"][0]["session_id"] == 42

    async def test_bearer_token(self):
        recorder = Recorder()
        sink = HttpEventSink(
            SINK_URL,
            token_provider=lambda: "tok-123",
            transport=httpx.MockTransport(recorder),
        )
        await sink.send_batch([_event()])
        await sink.aclose()
        assert recorder.requests[0].headers["authorization"] == "Bearer tok-123"

    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    async def test_non_2xx_raises_delivery_error(self, status_code):
        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(Recorder(status_code)))
        with pytest.raises(SinkDeliveryError) as exc_info:
            await sink.send_batch([_event()])
        await sink.aclose()
        assert exc_info.value.status_code == status_code
        assert exc_info.value.recoverable is True

    async def test_connection_error_raises_unreachable(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(SinkUnreachableError) as exc_info:
            await sink.send_batch([_event()])
        await sink.aclose()
        assert exc_info.value.sink_url == SINK_URL
        assert isinstance(exc_info.value.original_error, httpx.ConnectError)


class TestSendBeacon:
    def test_beacon_posts_on_background_thread(self):
        recorder = Recorder()
        sink = HttpEventSink(
            SINK_URL,
            token_provider=lambda: "tok",
            transport=httpx.MockTransport(recorder),
        )
        assert sink.send_beacon([_event("a"), _event("b")]) is True
        sink.join_beacons(timeout=5)

        request = recorder.requests[0]
        assert request.headers["authorization"] == "Bearer tok"
        assert [e["object_id"] for e in json.loads(request.content)["events"]] == ["a", "b"]

    def test_beacon_failure_is_swallowed(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(refuse))
        assert sink.send_beacon([_event()]) is True
        sink.join_beacons(timeout=5)


class TestHealthCheck:
    async def test_reachable(self):
        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(Recorder(204)))
        assert await sink.health_check() is True

    async def test_server_error_is_unreachable(self):
        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(Recorder(503)))
        assert await sink.health_check() is False

    async def test_connection_error_never_raises(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("down", request=request)

        sink = HttpEventSink(SINK_URL, transport=httpx.MockTransport(refuse))
        assert await sink.health_check() is False
