"""集成测试 fixtures -- 本地 WebSocket 服务端模拟 signal-cli-rest-api 的 /v1/receive"""

import asyncio
from collections.abc import AsyncGenerator

import pytest_asyncio
from websockets.asyncio.server import ServerConnection, serve


class FakeSignalServer:
    """按连接脚本推送帧的 WebSocket 服务端

    scripts[i] 为第 i 次连接要推送的帧；close_after[i] 为 True 时推送完毕后由服务端关闭，
    否则保持连接直到客户端断开。脚本用尽后的连接只保持不推送。
    """

    def __init__(self) -> None:
        self.scripts: list[list[str]] = []
        self.close_after: list[bool] = []
        self.paths: list[str] = []
        self.auth_headers: list[str | None] = []
        self.port = 0

    @property
    def connection_count(self) -> int:
        return len(self.paths)

    def add_connection(self, frames: list[str], close: bool = False) -> None:
        self.scripts.append(frames)
        self.close_after.append(close)

    def url(self, account: str) -> str:
        return f"ws://127.0.0.1:{self.port}/v1/receive/{account}"

    async def handler(self, ws: ServerConnection) -> None:
        index = len(self.paths)
        self.paths.append(ws.request.path)
        self.auth_headers.append(ws.request.headers.get("Authorization"))

        frames = self.scripts[index] if index < len(self.scripts) else []
        close = self.close_after[index] if index < len(self.close_after) else False
        for frame in frames:
            await ws.send(frame)
        if close:
            await ws.close()
            return
        await ws.wait_closed()


@pytest_asyncio.fixture
async def signal_server() -> AsyncGenerator[FakeSignalServer, None]:
    fake = FakeSignalServer()
    async with serve(fake.handler, "127.0.0.1", 0) as server:
        fake.port = next(iter(server.sockets)).getsockname()[1]
        yield fake


async def fast_sleep(delay: float) -> None:
    """重连等待替身：不按配置延迟真实等待"""
    await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def reconnect_sleep():
    return fast_sleep


async def wait_until(predicate, timeout: float = 5.0) -> None:
    """轮询等待条件成立"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("等待条件超时")
        await asyncio.sleep(0.01)


@pytest_asyncio.fixture
async def until():
    return wait_until
