"""Relay 包测试 fixtures -- 假 WebSocket 连接 + 假时钟"""

import asyncio
from collections.abc import Callable
from typing import Any

import pytest
from sigrelay.relay import RelayConfig


class FakeConnection:
    """假 WebSocket 连接

    依次产出 frames；之后按配置：抛出 error（异常关闭）、
    hold=True 时一直挂起直到被取消、否则正常结束（远端关闭）。
    """

    def __init__(
        self,
        frames: list[Any] | None = None,
        error: Exception | None = None,
        handshake_error: Exception | None = None,
        hold: bool = False,
    ) -> None:
        self.frames = list(frames or [])
        self.error = error
        self.handshake_error = handshake_error
        self.hold = hold
        self.entered = False
        self.closed = False

    async def __aenter__(self) -> "FakeConnection":
        if self.handshake_error is not None:
            raise self.handshake_error
        self.entered = True
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.closed = True

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame
        if self.error is not None:
            raise self.error
        if self.hold:
            await asyncio.Event().wait()


class FakeConnector:
    """假连接工厂 -- 按脚本依次返回 FakeConnection，脚本用尽后返回挂起的连接"""

    def __init__(
        self,
        connections: list[FakeConnection] | None = None,
        timeline: list[tuple] | None = None,
    ) -> None:
        self._connections = list(connections or [])
        self.calls: list[tuple[str, dict]] = []
        self.opened: list[FakeConnection] = []
        self.timeline = timeline if timeline is not None else []

    def __call__(self, url: str, additional_headers: dict | None = None) -> FakeConnection:
        self.calls.append((url, additional_headers or {}))
        self.timeline.append(("connect",))
        conn = self._connections.pop(0) if self._connections else FakeConnection(hold=True)
        self.opened.append(conn)
        return conn


class FakeSleep:
    """假时钟 -- 记录每次等待的时长；gated=True 时挂起直到 release()"""

    def __init__(self, timeline: list[tuple] | None = None, gated: bool = False) -> None:
        self.delays: list[float] = []
        self.timeline = timeline if timeline is not None else []
        self._gate = asyncio.Event()
        if not gated:
            self._gate.set()

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        self.timeline.append(("sleep", delay))
        await self._gate.wait()
        await asyncio.sleep(0)

    def release(self) -> None:
        self._gate.set()


class EventCollector:
    """下游消费方 -- 记录每次投递"""

    def __init__(self) -> None:
        self.calls: list[list] = []

    def __call__(self, events) -> None:
        self.calls.append(list(events))

    @property
    def events(self) -> list:
        return [event for batch in self.calls for event in batch]


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """轮询等待条件成立"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("等待条件超时")
        await asyncio.sleep(0.005)


@pytest.fixture
def relay_config() -> RelayConfig:
    """标准测试配置"""
    return RelayConfig(
        api_url="http://localhost:8080",
        account="+15550000001",
        reconnect_delay_ms=5000,
    )


@pytest.fixture
def collector() -> EventCollector:
    return EventCollector()


@pytest.fixture
def make_connector() -> Callable[..., FakeConnector]:
    return FakeConnector


@pytest.fixture
def make_connection() -> Callable[..., FakeConnection]:
    return FakeConnection


@pytest.fixture
def make_sleep() -> Callable[..., FakeSleep]:
    return FakeSleep


@pytest.fixture
def until() -> Callable:
    return wait_until
