"""EventQueue -- 待投递事件缓冲区

仅由 EventLogger（入队）与 BatchDispatcher（swap / 重新入队）修改，
不对外暴露。所有操作都是同步的，在同一个事件循环线程内天然互斥。
"""

import structlog
from clinsim.core.models.event import Event

log = structlog.get_logger()


class EventQueue:
    """有界 FIFO 事件队列

    超出上限时丢弃最旧的事件。
    """

    def __init__(self, max_size: int = 5000) -> None:
        self._events: list[Event] = []
        self._max_size = max_size
        self._dropped = 0

    def __len__(self) -> int:
        return len(self._events)

    @property
    def dropped(self) -> int:
        """累计因溢出被丢弃的事件数"""
        return self._dropped

    def append(self, event: Event) -> None:
        """入队（生产者）"""
        self._events.append(event)
        self._enforce_bound()

    def swap(self) -> list[Event]:
        """取出当前全部事件并清空队列

        快照与清空在一次同步调用内完成，之后到达的事件进入新一代队列。
        """
        batch, self._events = self._events, []
        return batch

    def requeue(self, batch: list[Event]) -> None:
        """把投递失败的批次放回队首

        失败批次中的旧事件排在投递期间新到达的事件之前。
        """
        if not batch:
            return
        self._events = [*batch, *self._events]
        self._enforce_bound()

    def snapshot(self) -> list[Event]:
        """只读副本"""
        return list(self._events)

    def _enforce_bound(self) -> None:
        overflow = len(self._events) - self._max_size
        if overflow <= 0:
            return
        del self._events[:overflow]
        self._dropped += overflow
        log.warning(
            "event_queue_overflow",
            dropped=overflow,
            max_size=self._max_size,
        )
