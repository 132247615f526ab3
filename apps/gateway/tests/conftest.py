"""apps/gateway 测试配置 -- FastAPI AsyncClient + 手动初始化的 app.state"""

import os
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sigrelay.core.models import Classification, NormalizedEvent


@pytest_asyncio.fixture
async def app():
    """创建测试用 FastAPI app 实例（绕过 lifespan，不启动中继）"""
    os.environ["SIGRELAY_RELAY_ENABLED"] = "false"
    os.environ["LOGFIRE_SEND_TO_LOGFIRE"] = "false"

    from sigrelay.gateway.main import create_app
    from sigrelay.gateway.services.event_hub import EventHub

    application = create_app()
    application.state.event_hub = EventHub()
    application.state.relay = None
    yield application

    for key in ["SIGRELAY_RELAY_ENABLED", "LOGFIRE_SEND_TO_LOGFIRE"]:
        os.environ.pop(key, None)


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def make_event() -> Callable[..., NormalizedEvent]:
    """NormalizedEvent 构造器"""

    def _make(
        timestamp: int = 100,
        message_text: str = "hi",
        classification: Classification = Classification.INCOMING,
        **fields,
    ) -> NormalizedEvent:
        return NormalizedEvent(
            timestamp=timestamp,
            message_text=message_text,
            classification=classification,
            **fields,
        )

    return _make
