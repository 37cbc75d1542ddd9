"""gateway 测试配置 -- FastAPI app（绕过 lifespan 手动初始化）+ httpx AsyncClient"""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

STORED_ROWS = [
    {
        "id": 1,
        "timestamp": "2026-10-19T14:05:09+00:00",
        "session_id": 42,
        "verb": "ORDERED_LAB",
        "object_type": "lab_test",
        "object_name": "CBC",
        "component": "OrdersDrawer",
        "severity": "IMPORTANT",
        "category": "CLINICAL",
        "duration_ms": 1200,
        "case_name": "Sepsis",
        "username": "alice",
    },
    {
        "id": 2,
        "timestamp": "2026-10-19T14:06:00+00:00",
        "session_id": 42,
        "verb": "ALARM_TRIGGERED",
        "object_type": "alarm",
        "object_name": "HR Alarm",
        "component": "PatientMonitor",
        "case_name": "Sepsis",
        "username": "alice",
    },
    {
        "id": 3,
        "timestamp": "2026-10-19T14:07:30+00:00",
        "session_id": 42,
        "verb": "SENT_MESSAGE",
        "object_type": "chat_message",
        "component": "ChatInterface",
        "severity": "ACTION",
        "category": "COMMUNICATION",
        "message_content": "What is the BP, now?",
        "message_role": "user",
        "case_name": "Sepsis",
        "username": "alice",
    },
]


class EventsBackend:
    """事件查询端替身，记录请求并可切换为失败"""

    def __init__(self) -> None:
        self.rows = list(STORED_ROWS)
        self.status_code = 200
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "Database unavailable"})
        return httpx.Response(200, json={"events": self.rows})


@pytest_asyncio.fixture
async def events_backend() -> EventsBackend:
    return EventsBackend()


@pytest_asyncio.fixture
async def test_app(event_logger, events_backend):
    """创建测试用 FastAPI app"""
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from clinsim.gateway.main import create_app
    from clinsim.viewer import LearningEventsClient, ViewerConfig

    app = create_app()

    @app.get("/boom")
    async def boom():
        raise RuntimeError("kaboom")

    # 手动初始化（绕过 lifespan）
    app.state.event_logger = event_logger
    app.state.event_sink = AsyncMock()
    app.state.event_sink.health_check.return_value = True
    app.state.viewer_config = ViewerConfig(
        api_base_url="http://api.test",
        fetch_limit=50,
        refresh_interval_s=0.01,
    )
    app.state.events_client = LearningEventsClient(
        "http://api.test",
        transport=httpx.MockTransport(events_backend),
    )

    yield app

    await app.state.events_client.aclose()
    os.environ.pop("LOGFIRE_SEND_TO_LOGFIRE", None)


@pytest_asyncio.fixture
async def client(test_app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=test_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture(autouse=True)
def reset_sse_exit_event(monkeypatch):
    """sse-starlette 的退出事件绑定在首个事件循环上，每个测试重置"""
    from sse_starlette.sse import AppStatus

    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)
