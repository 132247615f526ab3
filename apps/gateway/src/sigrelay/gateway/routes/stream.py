"""SSE 事件流路由

GET /api/stream/events: SSE 实时推送中继投递的 NormalizedEvent。
每个事件一条 message，data 为 camelCase JSON，id 为消息时间戳；心跳保活。
"""

import asyncio
import json

from fastapi import APIRouter, Depends, Query
from sigrelay.core.config import SSE_HEARTBEAT_INTERVAL
from sigrelay.core.models import Classification, NormalizedEvent
from sse_starlette.sse import EventSourceResponse

from ..deps import get_event_hub
from ..services.event_hub import DROPPED

router = APIRouter()


def _event_to_sse(event: NormalizedEvent, include_raw: bool = False) -> dict:
    """将 NormalizedEvent 转换为 SSE 消息"""
    record = event.to_record()
    if not include_raw:
        record.pop("raw", None)
    return {
        "id": str(event.timestamp),
        "event": "message",
        "data": json.dumps(record, ensure_ascii=False),
    }


@router.get("/api/stream/events")
async def stream_events(
    classification: Classification | None = Query(
        default=None,
        description="只推送指定分类（Incoming / SelfNote）",
    ),
    include_raw: bool = Query(default=False, description="是否携带原始帧"),
    event_hub=Depends(get_event_hub),
):
    """SSE 事件流端点

    1. 注册到 EventHub 监听新事件
    2. 实时推送（可按分类过滤）
    3. 心跳保活
    4. 消费过慢被移除时发送 dropped 事件并结束
    """
    async def event_generator():
        queue = event_hub.subscribe()
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        queue.get(), timeout=SSE_HEARTBEAT_INTERVAL
                    )
                except TimeoutError:
                    yield {"comment": "heartbeat"}
                    continue
                if event is DROPPED:
                    # 消费过慢被移除：通知客户端后结束流，由客户端重连
                    yield {"event": "dropped", "data": json.dumps({"reason": "slow_subscriber"})}
                    return
                if classification is not None and event.classification != classification:
                    continue
                yield _event_to_sse(event, include_raw=include_raw)
        finally:
            event_hub.unsubscribe(queue)

    return EventSourceResponse(event_generator())
