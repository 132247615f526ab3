"""依赖注入模块 -- 通过 FastAPI Depends 注入网关组件

组件实例通过 app.state 管理，在 lifespan 中初始化/清理。
"""

from fastapi import Request
from sigrelay.relay import InboundRelay

from .services.event_hub import EventHub


def get_event_hub(request: Request) -> EventHub:
    """从 app.state 获取 EventHub 实例"""
    return request.app.state.event_hub


def get_relay(request: Request) -> InboundRelay | None:
    """从 app.state 获取 InboundRelay 实例（未启用中继时为 None）"""
    return getattr(request.app.state, "relay", None)
