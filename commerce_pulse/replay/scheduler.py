"""
回放调度器模块
为回放引擎提供定时触发抽象：生产环境用 asyncio 定时器，测试中手动推进
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional


class Scheduler(ABC):
    """
    定时调度器基类

    约束：同一时刻最多一个活动定时器；stop() 返回后不再触发回调
    """

    @abstractmethod
    def start(self, interval: float, callback: Callable[[], None]) -> None:
        """以固定间隔重复调用 callback（已在运行时先取消旧定时器）"""
        pass

    @abstractmethod
    def stop(self) -> None:
        """取消定时器"""
        pass

    @property
    @abstractmethod
    def running(self) -> bool:
        pass


class ManualScheduler(Scheduler):
    """手动调度器，调用 advance() 模拟经过的定时周期"""

    def __init__(self):
        self.interval: Optional[float] = None
        self._callback: Optional[Callable[[], None]] = None
        self.start_count = 0

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        self.stop()
        self.interval = interval
        self._callback = callback
        self.start_count += 1

    def stop(self) -> None:
        self._callback = None

    @property
    def running(self) -> bool:
        return self._callback is not None

    def advance(self, periods: int = 1) -> int:
        """
        推进若干个定时周期

        Args:
            periods: 周期数

        Returns:
            实际触发回调的次数（回调中停止后不再触发）
        """
        fired = 0
        for _ in range(periods):
            if self._callback is None:
                break
            self._callback()
            fired += 1
        return fired


class AsyncioScheduler(Scheduler):
    """基于事件循环 call_later 的调度器（单线程协作式）"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        """
        Args:
            loop: 固定使用的事件循环；为 None 时每次 start() 取当前运行中的循环
        """
        self._fixed_loop = loop
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._interval = 0.0
        self._callback: Optional[Callable[[], None]] = None

    def start(self, interval: float, callback: Callable[[], None]) -> None:
        """
        Raises:
            RuntimeError: 未注入事件循环且当前没有运行中的循环
        """
        self.stop()
        self._loop = self._fixed_loop or asyncio.get_running_loop()
        self._interval = interval
        self._callback = callback
        self._schedule()

    def _schedule(self) -> None:
        self._handle = self._loop.call_later(self._interval, self._fire)

    def _fire(self) -> None:
        self._handle = None
        callback = self._callback
        if callback is None:
            return
        callback()
        # 回调内部可能已调用 stop()
        if self._callback is callback and self._handle is None:
            self._schedule()

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._callback = None

    @property
    def running(self) -> bool:
        return self._callback is not None
