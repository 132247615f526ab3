"""LoggingMiddleware -- 请求级日志

每个请求绑定 request_id（上游携带合法 X-Request-ID 时沿用，否则生成 ULID）到 structlog contextvars。
/health、/ready 探针请求只记 debug，避免探针刷屏；SSE 流在响应头发出时即记录完成，不等待流结束。
"""

import time

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from ulid import ULID

REQUEST_ID_HEADER = "X-Request-ID"

_PROBE_PATHS = frozenset({"/health", "/ready"})
_MAX_REQUEST_ID_LEN = 64


def _resolve_request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "")
    if incoming and len(incoming) <= _MAX_REQUEST_ID_LEN and incoming.isprintable():
        return incoming
    return str(ULID())


class LoggingMiddleware(BaseHTTPMiddleware):
    """请求级日志中间件"""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _resolve_request_id(request)
        path = request.url.path

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        log = structlog.get_logger().bind(method=request.method, path=path)
        emit = log.adebug if path in _PROBE_PATHS else log.ainfo

        start_time = time.monotonic()
        response = await call_next(request)
        await emit(
            "request_completed",
            status_code=response.status_code,
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
