"""CLI 入口模块 -- python -m sigrelay.relay

从环境变量加载配置并启动中继，每个事件输出一行 JSON 到 stdout，Ctrl-C 退出。
日志经 setup_logging() 写入 stderr，受 SIGRELAY_LOG_LEVEL / SIGRELAY_LOG_FORMAT 控制。
"""

import asyncio
import json
import sys
from collections.abc import Sequence

import structlog
from sigrelay.core.log_config import setup_logging
from sigrelay.core.models import NormalizedEvent

from .config import load_relay_config
from .exceptions import RelayConfigurationError
from .relay import InboundRelay

log = structlog.get_logger()


def print_events(events: Sequence[NormalizedEvent]) -> None:
    """stdout 消费方：每个事件一行 JSON"""
    for event in events:
        print(json.dumps(event.to_record(), ensure_ascii=False), flush=True)


async def run_relay(
    relay: InboundRelay | None = None,
    stop_event: asyncio.Event | None = None,
) -> None:
    """启动中继并运行到 stop_event 被置位（或任务被取消）

    退出前先停止中继，再等待在途回执自行完成或失败，
    避免 asyncio.run() 收尾时把它们取消。

    Args:
        relay: 已构建的中继，默认按环境变量构建（stdout 消费方）
        stop_event: 退出信号，默认永不置位
    """
    if relay is None:
        relay = InboundRelay(load_relay_config(), consumer=print_events)
    handle = relay.start()
    try:
        await (stop_event or asyncio.Event()).wait()
    finally:
        await handle.stop()
        await handle.wait_receipts()


def main() -> None:
    """CLI 主入口"""
    # stdout 只输出事件，日志走 stderr
    setup_logging(stream=sys.stderr)
    try:
        asyncio.run(run_relay())
    except RelayConfigurationError as e:
        print(f"配置错误: {e}", file=sys.stderr)
        print("必填环境变量: SIGRELAY_ACCOUNT（可选 SIGRELAY_API_URL / SIGRELAY_API_TOKEN）", file=sys.stderr)
        sys.exit(2)
    except KeyboardInterrupt:
        log.info("relay_interrupted")


if __name__ == "__main__":
    main()
