"""TimingTracker -- 命名秒表

start() 记录起点，end() 取出并删除起点，返回整数毫秒；
每个起点最多被消费一次，未开始或已消费返回 None。
"""

import time
from collections.abc import Callable


class TimingTracker:
    """命名计时标记表"""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """
        Args:
            clock: 单调时钟（秒），测试时可注入
        """
        self._clock = clock
        self._marks: dict[str, float] = {}

    def start(self, mark_name: str) -> None:
        """开始计时；同名标记会被覆盖"""
        self._marks[mark_name] = self._clock()

    def end(self, mark_name: str) -> int | None:
        """结束计时

        Returns:
            经过的毫秒数（>= 0），标记不存在时返回 None
        """
        start_time = self._marks.pop(mark_name, None)
        if start_time is None:
            return None
        return max(0, round((self._clock() - start_time) * 1000))

    def pending(self) -> list[str]:
        """尚未结束的标记名"""
        return list(self._marks)

    def clear(self) -> None:
        self._marks.clear()
