"""FastAPI 应用主文件

app 创建 + lifespan 管理：EventHub 初始化 + InboundRelay 启动/停止 + 路由注册。
"""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from sigrelay.core.config import is_relay_enabled
from sigrelay.core.log_config import setup_logging
from sigrelay.relay import InboundRelay, load_relay_config

from .middleware.logging_mw import LoggingMiddleware
from .routes import health, stream
from .services.event_hub import EventHub

log = structlog.get_logger()


def setup_logfire(app: FastAPI) -> None:
    """Logfire 可选接入（LOGFIRE_SEND_TO_LOGFIRE=true 且安装 sigrelay[logfire]）"""
    if os.environ.get("LOGFIRE_SEND_TO_LOGFIRE", "false").lower() != "true":
        return
    try:
        import logfire

        logfire.configure()
        logfire.instrument_fastapi(app)
    except Exception as e:
        # Logfire 初始化失败不影响中继运行，降级为纯本地日志
        log.warning("logfire_init_failed", error=str(e), error_type=type(e).__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """应用生命周期管理：启动时创建 EventHub 并启动中继，关闭时停止中继"""
    event_hub = EventHub()
    app.state.event_hub = event_hub
    app.state.relay = None

    if is_relay_enabled():
        # 配置错误在此同步抛出，阻止应用启动
        relay_config = load_relay_config()
        relay = InboundRelay(relay_config, consumer=event_hub.publish)
        relay.start()
        app.state.relay = relay
        app.state.relay_config = relay_config
        log.info(
            "relay_service_initialized",
            stream_url=relay_config.resolve_stream_url(),
            mark_as_read=relay_config.mark_as_read,
        )
    else:
        log.info("relay_service_disabled")

    yield

    # 关闭：停止中继，再等待在途回执自行完成或失败（每个受 receipt_timeout_s 约束）
    if app.state.relay is not None:
        await app.state.relay.stop()
        await app.state.relay.wait_receipts()


def create_app() -> FastAPI:
    """创建 FastAPI 应用实例"""
    app = FastAPI(
        title="sigrelay Gateway",
        version="0.1.0",
        description="signal-cli-rest-api 入站消息中继网关",
        lifespan=lifespan,
    )

    app.add_middleware(LoggingMiddleware)

    # 初始化日志
    setup_logging()
    setup_logfire(app)

    # 注册路由
    app.include_router(stream.router, tags=["stream"])
    app.include_router(health.router, tags=["health"])

    return app


# 默认 app 实例（uvicorn 入口: uvicorn sigrelay.gateway.main:app）
app = create_app()
