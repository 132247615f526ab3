"""structlog 配置 -- 中继 CLI 与网关共用

SIGRELAY_LOG_FORMAT: dev（默认，彩色可读）/ json（每行一个 JSON 对象）
SIGRELAY_LOG_LEVEL: 最低输出级别（默认 INFO），低于该级别的事件在绑定阶段即被丢弃

日志写入 stderr（可注入 stream），stdout 留给中继 CLI 的事件输出。
uvicorn / websockets / httpx 的标准库日志经 ProcessorFormatter 渲染成同一格式。
"""

import logging
import os
import sys
from typing import Any, TextIO

import structlog

# 事件字典中需要遮蔽的键（令牌、认证头）
_SECRET_KEYS = frozenset({"api_token", "authorization", "token"})

# 第三方库默认只输出 WARNING 及以上（DEBUG 级别时放开）
_NOISY_LOGGERS = ("websockets", "httpx", "httpcore")


def _redact_secrets(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    for key in _SECRET_KEYS & event_dict.keys():
        event_dict[key] = "***"
    return event_dict


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(stream: TextIO | None = None) -> None:
    """初始化 structlog（可重复调用，后一次覆盖前一次）

    Args:
        stream: 日志输出流，默认 sys.stderr
    """
    stream = stream or sys.stderr
    log_format = os.environ.get("SIGRELAY_LOG_FORMAT", "dev").lower()
    level = _resolve_level(os.environ.get("SIGRELAY_LOG_LEVEL", "INFO"))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_secrets,
    ]

    renderer: structlog.types.Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=[structlog.stdlib.add_logger_name, *shared_processors],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level if level <= logging.DEBUG else logging.WARNING)
