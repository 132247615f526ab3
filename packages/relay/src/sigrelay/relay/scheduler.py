"""ReconnectScheduler -- 统一的重连调度

连接出错和连接关闭共用同一个调度器，避免两个定时器同时触发重复重连。
固定延迟，无重试上限，无指数退避。
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

log = structlog.get_logger()


class ReconnectScheduler:
    """固定延迟重连调度器

    由连接监督任务串行调用 wait()；stop() 通过取消监督任务来取消待执行的重连。
    """

    def __init__(
        self,
        delay_s: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            delay_s: 每次重连前的等待时间（秒）
            sleep: 等待函数（测试可注入假时钟）
        """
        self._delay_s = delay_s
        self._sleep = sleep
        self.attempts = 0

    @property
    def delay_s(self) -> float:
        return self._delay_s

    async def wait(self, reason: str) -> None:
        """等待重连延迟

        Args:
            reason: 触发原因（"error" / "close"），仅用于日志
        """
        self.attempts += 1
        log.info(
            "reconnect_scheduled",
            reason=reason,
            delay_ms=int(self._delay_s * 1000),
            attempt=self.attempts,
        )
        await self._sleep(self._delay_s)
