"""全局 pytest 配置 -- 记录型事件接收端、可控时钟与存储事件工厂"""

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest
from clinsim.core.models.event import Event
from clinsim.core.models.stored import StoredEvent
from clinsim.telemetry import EventLogger


class RecordingSink:
    """记录投递批次的事件接收端

    fail_with 非空时 send_batch 抛出该异常；gate 非空时 send_batch 在其 set 之前挂起。
    """

    def __init__(self) -> None:
        self.batches: list[list[Event]] = []
        self.beacons: list[list[Event]] = []
        self.calls = 0
        self.fail_with: Exception | None = None
        self.beacon_result = True
        self.gate: asyncio.Event | None = None
        self.closed = False
        self.joins: list[float | None] = []

    async def send_batch(self, events: Sequence[Event]) -> None:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with
        self.batches.append(list(events))

    def send_beacon(self, events: Sequence[Event]) -> bool:
        self.beacons.append(list(events))
        return self.beacon_result

    def join_beacons(self, timeout: float | None = None) -> None:
        self.joins.append(timeout)

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """手动推进的单调时钟（秒）"""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def event_logger(sink: RecordingSink, clock: FakeClock) -> EventLogger:
    """batch_size=10 的隔离 EventLogger"""
    return EventLogger(sink, batch_size=10, flush_interval_s=60, clock=clock)


@pytest.fixture
def make_stored_event():
    """存储事件工厂，id 自增"""
    counter = {"next": 1}

    def _make(**fields: Any) -> StoredEvent:
        data: dict[str, Any] = {
            "id": counter["next"],
            "timestamp": "2026-10-19T14:05:09+00:00",
            "session_id": 42,
            "verb": "CLICKED",
            "object_type": "button",
            "severity": "ACTION",
            "category": "NAVIGATION",
        }
        data.update(fields)
        counter["next"] += 1
        return StoredEvent.model_validate(data)

    return _make


async def drain_loop(rounds: int = 5) -> None:
    """让出事件循环若干轮，使已调度的任务运行完毕"""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def drain():
    return drain_loop


@pytest.fixture
def recording_sink_factory():
    """创建额外的 RecordingSink（同一测试需要多个接收端时使用）"""
    return RecordingSink
