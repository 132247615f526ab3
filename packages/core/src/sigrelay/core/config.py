"""配置常量模块 -- 可通过环境变量覆盖

包含去重窗口容量、事件广播队列大小、SSE 心跳间隔等可配置常量。
"""

import os

# 去重窗口容量（达到容量时整体清空，不做 LRU 淘汰）
DEDUP_WINDOW_CAPACITY: int = 1000

# EventHub 每个订阅者的队列上限（满则丢弃该订阅者）
HUB_QUEUE_MAXSIZE: int = int(os.environ.get("SIGRELAY_HUB_QUEUE_MAXSIZE", "100"))

# SSE 心跳间隔（秒）
SSE_HEARTBEAT_INTERVAL: int = int(
    os.environ.get("SIGRELAY_SSE_HEARTBEAT_INTERVAL", "15")
)


def is_relay_enabled() -> bool:
    """网关 lifespan 是否启动中继（SIGRELAY_RELAY_ENABLED，默认开启）"""
    return os.environ.get("SIGRELAY_RELAY_ENABLED", "true").lower() in (
        "1",
        "true",
        "yes",
        "on",
    )
