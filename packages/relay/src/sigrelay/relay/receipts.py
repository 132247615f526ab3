"""ReceiptClient -- 已读回执调用封装

POST {api_url}/v1/receipts/{account}
body: {"receiptType": "read", "recipient": <uuid>, "timestamp": <int>}

每次调用使用独立的 httpx.AsyncClient 和显式超时，与帧处理主循环不共享可变状态。
"""

import time

import httpx
import structlog

from .exceptions import ReceiptError

log = structlog.get_logger()

# 回执类型（当前仅支持 read）
READ_RECEIPT_TYPE = "read"


class ReceiptClient:
    """已读回执客户端"""

    def __init__(
        self,
        api_url: str,
        account: str,
        api_token: str = "",
        timeout_s: float = 10,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """初始化回执客户端

        Args:
            api_url: signal-cli-rest-api 基础 URL
            account: 本账号（回执发送方）
            api_token: Bearer 令牌，空表示不认证
            timeout_s: 单次调用超时（秒）
            transport: 自定义 httpx transport（测试注入 MockTransport）
        """
        self._api_url = api_url.rstrip("/")
        self._account = account
        self._api_token = api_token
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self._api_url}/v1/receipts/{self._account}"

    def _headers(self) -> dict[str, str]:
        if self._api_token:
            return {"Authorization": f"Bearer {self._api_token}"}
        return {}

    async def send_read_receipt(self, recipient: str, timestamp: int) -> None:
        """发送已读回执

        Args:
            recipient: 原消息发送方 UUID（无 UUID 时为号码）
            timestamp: 原消息时间戳

        Raises:
            ReceiptError: 传输失败、超时或返回非 2xx
        """
        start_time = time.monotonic()
        body = {
            "receiptType": READ_RECEIPT_TYPE,
            "recipient": recipient,
            "timestamp": timestamp,
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._transport,
            ) as http_client:
                resp = await http_client.post(
                    self.endpoint,
                    json=body,
                    headers=self._headers(),
                )
        except httpx.HTTPError as e:
            raise ReceiptError(f"回执调用失败: {type(e).__name__}: {e}") from e

        duration_ms = int((time.monotonic() - start_time) * 1000)

        if not resp.is_success:
            raise ReceiptError(
                f"回执调用返回 HTTP {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        log.debug(
            "read_receipt_sent",
            recipient=recipient,
            timestamp=timestamp,
            duration_ms=duration_ms,
        )
