"""RelayConfig -- 中继配置加载

从环境变量加载配置，不硬编码服务地址或账号。
数值类环境变量非法时记录 warning 并使用默认值，不阻塞启动。
"""

import os
from collections.abc import Callable

import structlog
from pydantic import BaseModel, Field, SecretStr, ValidationError

from .exceptions import RelayConfigurationError

log = structlog.get_logger()

_TRUTHY = ("1", "true", "yes", "on")


class RelayConfig(BaseModel):
    """Relay 配置 -- 从环境变量加载

    环境变量:
        SIGRELAY_API_URL: signal-cli-rest-api 地址（默认 http://localhost:8080）
        SIGRELAY_ACCOUNT: 注册的账号（带国家码的手机号）
        SIGRELAY_API_TOKEN: 可选 Bearer 令牌
        SIGRELAY_STREAM_URL: 显式流地址（为空时由 api_url + account 推导）
        SIGRELAY_RECONNECT_DELAY_MS: 重连延迟（毫秒，默认 5000）
        SIGRELAY_IGNORE_MESSAGES / _ATTACHMENTS / _REACTIONS: 过滤开关
        SIGRELAY_MARK_AS_READ: 对 Incoming 事件发送已读回执
        SIGRELAY_RECEIPT_TIMEOUT_S: 回执调用超时（秒，默认 10）
    """

    api_url: str = Field(
        default="http://localhost:8080",
        description="signal-cli-rest-api 基础 URL",
    )
    account: str = Field(default="", description="账号标识（手机号）")
    api_token: SecretStr = Field(
        default=SecretStr(""),
        description="握手与回执调用使用的 Bearer 令牌",
    )
    stream_url: str = Field(default="", description="显式流地址，可选")
    reconnect_delay_ms: int = Field(
        default=5000,
        ge=1000,
        le=60000,
        description="每次重连前的固定延迟（毫秒）",
    )

    # 过滤开关：为 True 时丢弃含对应内容的事件
    ignore_messages: bool = Field(default=False)
    ignore_attachments: bool = Field(default=False)
    ignore_reactions: bool = Field(default=False)

    mark_as_read: bool = Field(
        default=False,
        description="对 Incoming 事件投递后发送已读回执",
    )
    receipt_timeout_s: float = Field(
        default=10,
        ge=1,
        le=60,
        description="单次回执调用超时（秒）",
    )
    max_pending_receipts: int = Field(
        default=32,
        ge=1,
        description="同时在途的回执请求上限",
    )

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")

    @property
    def reconnect_delay_s(self) -> float:
        return self.reconnect_delay_ms / 1000

    def resolve_stream_url(self) -> str:
        """流地址：显式配置优先，否则 http(s) -> ws(s) + /v1/receive/{account}"""
        if self.stream_url:
            return self.stream_url
        return f"{self.base_url.replace('http', 'ws', 1)}/v1/receive/{self.account}"

    def auth_headers(self) -> dict[str, str]:
        """Bearer 认证头，无令牌时为空"""
        token = self.api_token.get_secret_value()
        return {"Authorization": f"Bearer {token}"} if token else {}

    def validate_required(self) -> None:
        """启动前校验必填项

        Raises:
            RelayConfigurationError: api_url 或 account 缺失
        """
        if not self.stream_url and not self.api_url:
            raise RelayConfigurationError("缺少 api_url（SIGRELAY_API_URL）")
        if not self.account:
            raise RelayConfigurationError("缺少 account（SIGRELAY_ACCOUNT）")


def _env_flag(name: str) -> bool | None:
    val = os.environ.get(name)
    if val is None:
        return None
    return val.strip().lower() in _TRUTHY


def _env_number(
    name: str, cast: Callable[[str], int | float], fallback: int | float
) -> int | float | None:
    val = os.environ.get(name)
    if not val:
        return None
    try:
        return cast(val)
    except ValueError:
        log.warning(
            "invalid_relay_config",
            env_var=name,
            value=val,
            fallback=fallback,
        )
        # 使用默认值，不阻塞启动
        return None


def load_relay_config() -> RelayConfig:
    """从环境变量加载 Relay 配置

    Returns:
        RelayConfig 实例

    Raises:
        RelayConfigurationError: 环境变量取值越界（如重连延迟不在 [1000, 60000]）
    """
    kwargs: dict = {}

    if val := os.environ.get("SIGRELAY_API_URL"):
        kwargs["api_url"] = val

    if val := os.environ.get("SIGRELAY_ACCOUNT"):
        kwargs["account"] = val

    if val := os.environ.get("SIGRELAY_API_TOKEN"):
        kwargs["api_token"] = SecretStr(val)

    if val := os.environ.get("SIGRELAY_STREAM_URL"):
        kwargs["stream_url"] = val

    delay = _env_number("SIGRELAY_RECONNECT_DELAY_MS", int, 5000)
    if delay is not None:
        kwargs["reconnect_delay_ms"] = delay

    timeout = _env_number("SIGRELAY_RECEIPT_TIMEOUT_S", float, 10)
    if timeout is not None:
        kwargs["receipt_timeout_s"] = timeout

    for field, env_var in (
        ("ignore_messages", "SIGRELAY_IGNORE_MESSAGES"),
        ("ignore_attachments", "SIGRELAY_IGNORE_ATTACHMENTS"),
        ("ignore_reactions", "SIGRELAY_IGNORE_REACTIONS"),
        ("mark_as_read", "SIGRELAY_MARK_AS_READ"),
    ):
        flag = _env_flag(env_var)
        if flag is not None:
            kwargs[field] = flag

    try:
        return RelayConfig(**kwargs)
    except ValidationError as e:
        raise RelayConfigurationError(f"Relay 配置非法: {e}") from e
