"""EventQueue 测试 -- swap / 重新入队 / 有界丢弃"""

from datetime import UTC, datetime

from clinsim.core.models import Category, Event, Severity
from clinsim.telemetry import EventQueue


def _event(object_id: str) -> Event:
    return Event(
        timestamp=datetime.now(UTC),
        verb="CLICKED",
        object_type="button",
        severity=Severity.DEBUG,
        category=Category.NAVIGATION,
        object_id=object_id,
    )


def _ids(events) -> list[str]:
    return [e.object_id for e in events]


class TestEventQueue:
    def test_swap_empties_queue(self):
        queue = EventQueue()
        queue.append(_event("a"))
        queue.append(_event("b"))
        batch = queue.swap()
        assert _ids(batch) == ["a", "b"]
        assert len(queue) == 0

    def test_requeue_puts_batch_first(self):
        queue = EventQueue()
        queue.append(_event("a"))
        batch = queue.swap()
        queue.append(_event("new"))
        queue.requeue(batch)
        assert _ids(queue.snapshot()) == ["a", "new"]

    def test_overflow_drops_oldest(self):
        queue = EventQueue(max_size=3)
        for object_id in "abcde":
            queue.append(_event(object_id))
        assert _ids(queue.snapshot()) == ["c", "d", "e"]
        assert queue.dropped == 2

    def test_requeue_overflow_drops_oldest(self):
        queue = EventQueue(max_size=2)
        queue.append(_event("a"))
        queue.append(_event("b"))
        batch = queue.swap()
        queue.append(_event("c"))
        queue.requeue(batch)
        assert _ids(queue.snapshot()) == ["b", "c"]
        assert queue.dropped == 1

    def test_snapshot_is_copy(self):
        queue = EventQueue()
        queue.append(_event("a"))
        queue.snapshot().clear()
        assert len(queue) == 1
