"""
重试装饰器模块
远程洞察调用使用的异步重试，指数退避并限制单次等待上限
"""

import asyncio
import functools
from typing import Callable, Iterator, Optional, Tuple, Type

from commerce_pulse.utils.logger import get_logger


def backoff_delays(max_attempts: int, delay: float, backoff: float, max_delay: float) -> Iterator[float]:
    """
    生成各次重试前的等待时间

    Args:
        max_attempts: 最大尝试次数（产生 max_attempts - 1 个间隔）
        delay: 初始间隔（秒）
        backoff: 退避倍数
        max_delay: 单次间隔上限（秒）
    """
    current = delay
    for _ in range(max(max_attempts - 1, 0)):
        yield min(current, max_delay)
        current *= backoff


def retry_async(
    max_attempts: int = 3,
    delay: float = 0.5,
    backoff: float = 2.0,
    max_delay: float = 5.0,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    logger=None
):
    """
    异步重试装饰器

    外层的 asyncio.wait_for 超时取消会直接穿透（CancelledError 不在重试范围内）。

    Args:
        max_attempts: 最大尝试次数
        delay: 初始间隔（秒）
        backoff: 退避倍数
        max_delay: 单次间隔上限（秒）
        exceptions: 触发重试的异常类型
        logger: 日志实例，默认使用全局实例

    Example:
        @retry_async(max_attempts=2, delay=0.5)
        async def request():
            ...
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts 必须 >= 1: {max_attempts}")

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            log = logger or get_logger()
            delays = backoff_delays(max_attempts, delay, backoff, max_delay)
            attempt = 0

            while True:
                attempt += 1
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    wait: Optional[float] = next(delays, None)
                    if wait is None:
                        log.error(f"[Retry] {func.__qualname__} 已重试 {max_attempts} 次仍失败: {e}")
                        raise
                    log.warning(f"[Retry] {func.__qualname__} 第 {attempt} 次失败: {e}，{wait:.1f}s 后重试")
                    await asyncio.sleep(wait)

        return wrapper
    return decorator
