from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from Decido.share.TimeUtils import TimeUtils


class Clock(ABC):
    """
    墙上时钟的抽象。
    引擎中所有依赖时间的计算都通过 Clock 取得“当前时间”，以便在测试中模拟任意时刻。
    """

    @abstractmethod
    def now(self) -> datetime:
        """当前的朴素 UTC 时间。"""


class SystemClock(Clock):
    """系统时钟，返回朴素的 UTC 当前时间。"""

    def now(self) -> datetime:
        return TimeUtils.utcnow()


class FixedClock(Clock):
    """
    固定时钟，时间只会在显式调用 set/advance 时变化。
    """

    def __init__(self, current: datetime):
        self._current = TimeUtils.to_naive_utc(current)

    def now(self) -> datetime:
        assert self._current is not None
        return self._current

    def set(self, current: datetime) -> None:
        self._current = TimeUtils.to_naive_utc(current)

    def advance(self, delta: timedelta) -> datetime:
        assert self._current is not None
        self._current = self._current + delta
        return self._current
