"""sigrelay Relay -- signal-cli-rest-api 入站消息中继

packages/relay 的公开接口导出。
"""

# 配置
from .config import RelayConfig, load_relay_config

# 核心组件
from .dedup import DedupWindow

# 异常
from .exceptions import (
    FrameParseError,
    ReceiptError,
    RelayConfigurationError,
    RelayError,
    StreamConnectionError,
)
from .processor import ContentFilter, FrameProcessor
from .receipts import ReceiptClient
from .relay import EventConsumer, InboundRelay, RelayHandle
from .scheduler import ReconnectScheduler

__all__ = [
    "RelayConfig",
    "load_relay_config",
    "DedupWindow",
    "ContentFilter",
    "FrameProcessor",
    "ReceiptClient",
    "ReconnectScheduler",
    "EventConsumer",
    "InboundRelay",
    "RelayHandle",
    "RelayError",
    "FrameParseError",
    "StreamConnectionError",
    "ReceiptError",
    "RelayConfigurationError",
]
