"""健康检查路由

GET /health: Liveness 检查，永远返回 200。
GET /ready: Readiness 检查，中继连接为 OPEN（或未启用中继）时返回 200，否则 503。
"""

import structlog
from fastapi import APIRouter, Depends
from sigrelay.core.models import ConnectionState
from starlette.responses import JSONResponse

from ..deps import get_event_hub, get_relay

log = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health():
    """Liveness 检查 -- 永远返回 200"""
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    relay=Depends(get_relay),
    event_hub=Depends(get_event_hub),
):
    """Readiness 检查 -- 验证中继连接状态

    检查项：
    1. relay: 中继连接状态（disabled / OPEN / CONNECTING / ...）
    2. reconnect_attempts: 累计重连次数
    3. subscribers: 当前 SSE 订阅者数量
    """
    checks: dict = {}
    all_ok = True

    if relay is None:
        checks["relay"] = "disabled"
    else:
        checks["relay"] = str(relay.state)
        checks["reconnect_attempts"] = relay.reconnect_attempts
        if relay.state != ConnectionState.OPEN:
            all_ok = False

    checks["subscribers"] = event_hub.subscriber_count

    if not all_ok:
        log.debug("readiness_degraded", relay_state=checks["relay"])

    status_code = 200 if all_ok else 503
    status_text = "ready" if all_ok else "not_ready"

    return JSONResponse(
        status_code=status_code,
        content={
            "status": status_text,
            "checks": checks,
        },
    )
