"""InboundRelay -- 入站消息中继

维持到 signal-cli-rest-api 的 WebSocket 长连接，对每一帧执行
FrameProcessor 流水线，将通过的事件投递给下游消费方；
连接出错或关闭后按固定延迟无限重连，直到 stop()。
开启 mark_as_read 时，对 Incoming 事件异步发送已读回执（fire-and-forget）。
"""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol

import structlog
from sigrelay.core.models import Classification, ConnectionState, NormalizedEvent
from websockets.asyncio.client import connect as websocket_connect

from .config import RelayConfig
from .exceptions import FrameParseError, ReceiptError, StreamConnectionError
from .processor import ContentFilter, FrameProcessor
from .receipts import ReceiptClient
from .scheduler import ReconnectScheduler

log = structlog.get_logger()


class EventConsumer(Protocol):
    """下游消费方 -- 每个通过的帧调用一次，参数为单元素序列

    调用是同步的，消费方不得阻塞；中继不等待消费方确认。
    """

    def __call__(self, events: Sequence[NormalizedEvent]) -> None: ...


# connect(url, additional_headers=...) -> 异步上下文管理器，产出可异步迭代的连接
ConnectFactory = Callable[..., contextlib.AbstractAsyncContextManager[Any]]


class InboundRelay:
    """入站消息中继

    每个实例独占一个连接和一个去重窗口，实例之间不共享可变状态。
    """

    def __init__(
        self,
        config: RelayConfig,
        consumer: EventConsumer,
        connect: ConnectFactory | None = None,
        receipt_client: ReceiptClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """初始化中继

        Args:
            config: 中继配置
            consumer: 下游消费方
            connect: WebSocket 连接工厂（默认 websockets.asyncio.client.connect）
            receipt_client: 回执客户端（默认按 config 构建）
            sleep: 重连等待函数（测试可注入假时钟）
        """
        self._config = config
        self._consumer = consumer
        self._connect = connect or websocket_connect
        self._processor = FrameProcessor(
            ContentFilter(
                ignore_messages=config.ignore_messages,
                ignore_attachments=config.ignore_attachments,
                ignore_reactions=config.ignore_reactions,
            )
        )
        self._scheduler = ReconnectScheduler(config.reconnect_delay_s, sleep=sleep)
        self._receipts = receipt_client or ReceiptClient(
            api_url=config.api_url,
            account=config.account,
            api_token=config.api_token.get_secret_value(),
            timeout_s=config.receipt_timeout_s,
        )
        self._receipt_semaphore = asyncio.Semaphore(config.max_pending_receipts)
        self._receipt_tasks: set[asyncio.Task] = set()

        self._state = ConnectionState.CLOSED
        self._connected = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._stopping = False

        self.connect_count = 0
        self.delivered_count = 0

    # ============================================================
    # 生命周期
    # ============================================================

    def start(self) -> "RelayHandle":
        """启动中继

        同步校验配置后创建连接监督任务，连接失败不会抛给调用方。
        必须在运行中的事件循环内调用。

        Returns:
            RelayHandle，用于停止中继和查询状态

        Raises:
            RelayConfigurationError: 缺少必填配置（在任何连接尝试之前）
            RuntimeError: 重复启动
        """
        self._config.validate_required()
        if self._task is not None or self._stopping:
            raise RuntimeError("InboundRelay 已启动或已停止，不可重复启动")

        stream_url = self._config.resolve_stream_url()
        self._task = asyncio.create_task(
            self._run(stream_url),
            name=f"inbound-relay:{self._config.account}",
        )
        log.info(
            "relay_started",
            stream_url=stream_url,
            reconnect_delay_ms=self._config.reconnect_delay_ms,
            mark_as_read=self._config.mark_as_read,
        )
        return RelayHandle(self)

    async def stop(self) -> None:
        """停止中继：关闭连接并取消待执行的重连

        可重复调用。在途的回执请求不强制取消。
        """
        if self._stopping:
            return
        self._stopping = True

        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task

        self._state = ConnectionState.STOPPED
        self._connected.clear()
        log.info(
            "relay_stopped",
            connect_count=self.connect_count,
            delivered_count=self.delivered_count,
            pending_receipts=len(self._receipt_tasks),
        )

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_attempts(self) -> int:
        return self._scheduler.attempts

    @property
    def pending_receipts(self) -> int:
        return len(self._receipt_tasks)

    @property
    def processor(self) -> FrameProcessor:
        return self._processor

    async def wait_connected(self, timeout: float | None = None) -> bool:
        """等待连接进入 OPEN

        Returns:
            True 已连接，False 超时
        """
        try:
            await asyncio.wait_for(self._connected.wait(), timeout=timeout)
            return True
        except TimeoutError:
            return False

    async def wait_receipts(self) -> None:
        """等待当前所有在途回执完成（失败仅记录日志）"""
        if self._receipt_tasks:
            await asyncio.gather(*self._receipt_tasks, return_exceptions=True)

    # ============================================================
    # 连接监督循环
    # ============================================================

    async def _run(self, stream_url: str) -> None:
        """连接监督任务：连接 -> 逐帧处理 -> 关闭/出错 -> 等待 -> 重连"""
        headers = self._config.auth_headers()
        while True:
            self._state = ConnectionState.CONNECTING
            self.connect_count += 1
            try:
                async with self._connect(stream_url, additional_headers=headers) as ws:
                    self._state = ConnectionState.OPEN
                    self._connected.set()
                    log.info("stream_connected", stream_url=stream_url)

                    # 同一连接上的帧严格串行处理
                    async for data in ws:
                        self._handle_frame(data)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                error = StreamConnectionError(stream_url, e)
                self._state = ConnectionState.ERRORED
                log.warning(
                    "stream_connection_failed",
                    stream_url=stream_url,
                    error=str(error),
                    error_type=type(e).__name__,
                )
                reason = "error"
            else:
                self._state = ConnectionState.CLOSED
                log.info("stream_closed", stream_url=stream_url)
                reason = "close"

            self._connected.clear()
            await self._scheduler.wait(reason)

    def _handle_frame(self, data: str | bytes) -> None:
        """处理单帧：解析失败、消费方异常都不影响连接"""
        try:
            event = self._processor.process(data)
        except FrameParseError as e:
            log.warning(
                "frame_parse_failed",
                error=str(e.original_error)[:200],
                frame_size=e.frame_size,
            )
            return

        if event is None:
            return

        try:
            self._consumer([event])
        except Exception as e:
            log.error(
                "consumer_failed",
                timestamp=event.timestamp,
                error=str(e),
                error_type=type(e).__name__,
            )
            return

        self.delivered_count += 1
        log.debug(
            "event_emitted",
            timestamp=event.timestamp,
            classification=event.classification,
        )

        if self._config.mark_as_read and event.classification == Classification.INCOMING:
            self._spawn_receipt(event)

    # ============================================================
    # 已读回执（fire-and-forget）
    # ============================================================

    def _spawn_receipt(self, event: NormalizedEvent) -> None:
        recipient = event.sender_id
        if not recipient:
            log.debug("read_receipt_skipped_no_sender", timestamp=event.timestamp)
            return
        task = asyncio.create_task(self._send_receipt(recipient, event.timestamp))
        # 仅保持引用，不 await
        self._receipt_tasks.add(task)
        task.add_done_callback(self._receipt_tasks.discard)

    async def _send_receipt(self, recipient: str, timestamp: int) -> None:
        async with self._receipt_semaphore:
            try:
                await self._receipts.send_read_receipt(recipient, timestamp)
            except ReceiptError as e:
                log.warning(
                    "read_receipt_failed",
                    recipient=recipient,
                    timestamp=timestamp,
                    status_code=e.status_code,
                    error=str(e),
                )
            except Exception as e:
                log.warning(
                    "read_receipt_failed",
                    recipient=recipient,
                    timestamp=timestamp,
                    error=str(e),
                    error_type=type(e).__name__,
                )


class RelayHandle:
    """start() 返回的句柄"""

    def __init__(self, relay: InboundRelay) -> None:
        self._relay = relay

    @property
    def state(self) -> ConnectionState:
        return self._relay.state

    @property
    def reconnect_attempts(self) -> int:
        return self._relay.reconnect_attempts

    @property
    def pending_receipts(self) -> int:
        return self._relay.pending_receipts

    async def stop(self) -> None:
        await self._relay.stop()

    async def wait_connected(self, timeout: float | None = None) -> bool:
        return await self._relay.wait_connected(timeout)

    async def wait_receipts(self) -> None:
        await self._relay.wait_receipts()
