"""EventHub -- 内存中事件广播器，中继的下游消费方

每个订阅者持有一个 asyncio.Queue，支持 subscribe/unsubscribe/publish。
publish() 是同步且不阻塞的，可直接作为 InboundRelay 的 EventConsumer。
"""

import asyncio
from collections.abc import Sequence

import structlog
from sigrelay.core.config import HUB_QUEUE_MAXSIZE
from sigrelay.core.models import NormalizedEvent

log = structlog.get_logger()

# 订阅被移除的通知：队列中出现该值后不会再有新事件
DROPPED = None


class EventHub:
    """事件广播器 -- 基于 asyncio.Queue 的发布/订阅模式"""

    def __init__(self, queue_maxsize: int = HUB_QUEUE_MAXSIZE) -> None:
        self._subscribers: set[asyncio.Queue] = set()
        self._queue_maxsize = queue_maxsize
        self.published_count = 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """订阅事件流

        Returns:
            asyncio.Queue 实例，元素为 NormalizedEvent；
            取到 DROPPED 表示订阅已被移除，应结束消费
        """
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """取消订阅

        Args:
            queue: 之前订阅时返回的队列
        """
        self._subscribers.discard(queue)

    def publish(self, events: Sequence[NormalizedEvent]) -> None:
        """向所有订阅者广播事件

        队列已满的订阅者被移除：清空其积压并放入 DROPPED，
        等待中的消费方随即被唤醒并结束（慢消费者不拖慢中继）。

        Args:
            events: 中继投递的事件序列
        """
        dropped: list[asyncio.Queue] = []
        for event in events:
            self.published_count += 1
            for queue in self._subscribers:
                if queue in dropped:
                    continue
                try:
                    queue.put_nowait(event)
                except asyncio.QueueFull:
                    dropped.append(queue)

        for queue in dropped:
            self._subscribers.discard(queue)
            self._close_queue(queue)
        if dropped:
            log.warning("slow_subscribers_dropped", count=len(dropped))

    @staticmethod
    def _close_queue(queue: asyncio.Queue) -> None:
        while not queue.empty():
            queue.get_nowait()
        queue.put_nowait(DROPPED)

    # InboundRelay 以 consumer(events) 方式调用
    __call__ = publish
