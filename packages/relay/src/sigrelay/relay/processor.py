"""FrameProcessor -- 单帧处理流水线

解析 -> 去重 -> 分类 -> 归一 -> 空内容检查 -> 过滤。
纯同步逻辑，不做 I/O；投递与回执由 InboundRelay 负责。
"""

import json
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError
from sigrelay.core.models import (
    DELIVERABLE_CLASSIFICATIONS,
    Classification,
    Envelope,
    Frame,
    MessagePayload,
    NormalizedEvent,
)

from .dedup import DedupWindow
from .exceptions import FrameParseError

log = structlog.get_logger()


@dataclass(frozen=True)
class ContentFilter:
    """内容过滤开关 -- 为 True 时丢弃含对应内容的事件"""

    ignore_messages: bool = False
    ignore_attachments: bool = False
    ignore_reactions: bool = False

    def rejects(self, event: NormalizedEvent) -> bool:
        return (
            (self.ignore_messages and bool(event.message_text))
            or (self.ignore_attachments and bool(event.attachments))
            or (self.ignore_reactions and bool(event.reactions))
        )


def parse_frame(data: str | bytes) -> tuple[Frame, dict[str, Any]]:
    """解析 WebSocket 帧

    Returns:
        (Frame 模型, 原始 JSON 对象)

    Raises:
        FrameParseError: 非 JSON 或结构不符
    """
    try:
        raw = json.loads(data)
        return Frame.model_validate(raw), raw
    except (ValueError, ValidationError) as e:
        raise FrameParseError(e, frame_size=len(data)) from e


def classify(envelope: Envelope) -> tuple[Classification, MessagePayload] | None:
    """对信封分类

    Returns:
        (分类, 消息内容)；无法分类时返回 None
    """
    if envelope.data_message is not None:
        return Classification.INCOMING, envelope.data_message

    sync = envelope.sync_message
    if sync is None or sync.sent_message is None:
        return None

    sent = sync.sent_message
    if envelope.source_uuid and sent.destination_uuid:
        is_self = envelope.source_uuid == sent.destination_uuid
    elif envelope.source_number and sent.destination_number:
        # UUID 缺失时退化为号码比较
        is_self = envelope.source_number == sent.destination_number
    else:
        is_self = False

    if is_self:
        return Classification.SELF_NOTE, sent
    return Classification.OUTGOING, sent


def normalize(
    frame: Frame,
    payload: MessagePayload,
    classification: Classification,
    raw: dict[str, Any] | None = None,
) -> NormalizedEvent:
    """由帧和消息内容构建 NormalizedEvent，缺省字段归一"""
    envelope = frame.envelope or Envelope()
    return NormalizedEvent(
        message_text=payload.message or "",
        attachments=list(payload.attachments or []),
        reactions=payload.reaction_list(),
        source_number=envelope.source_number or "",
        source_uuid=envelope.source_uuid or "",
        source_name=envelope.source_name or "",
        timestamp=frame.timestamp,
        server_received_timestamp=envelope.server_received_timestamp or 0,
        server_delivered_timestamp=envelope.server_delivered_timestamp or 0,
        account=frame.account or "",
        has_content=bool(envelope.has_content),
        is_unidentified_sender=bool(envelope.is_unidentified_sender),
        classification=classification,
        raw=raw if raw is not None else frame.model_dump(by_alias=True, exclude_none=True),
    )


class FrameProcessor:
    """帧处理器 -- 持有去重窗口和过滤配置

    同一连接上的帧严格按到达顺序逐个调用 process()。
    """

    def __init__(
        self,
        content_filter: ContentFilter | None = None,
        dedup_window: DedupWindow | None = None,
    ) -> None:
        self._filter = content_filter or ContentFilter()
        self._dedup = dedup_window if dedup_window is not None else DedupWindow()

    @property
    def dedup_window(self) -> DedupWindow:
        return self._dedup

    def process(self, data: str | bytes) -> NormalizedEvent | None:
        """处理一帧

        Args:
            data: WebSocket 文本帧

        Returns:
            需要投递的 NormalizedEvent；被丢弃时返回 None

        Raises:
            FrameParseError: 帧无法解析
        """
        frame, raw = parse_frame(data)
        timestamp = frame.timestamp

        if not self._dedup.check_and_add(timestamp):
            log.debug("duplicate_frame_skipped", timestamp=timestamp)
            return None

        if frame.envelope is None:
            log.debug("unclassifiable_frame_skipped", timestamp=timestamp)
            return None

        classified = classify(frame.envelope)
        if classified is None:
            log.debug("unclassifiable_frame_skipped", timestamp=timestamp)
            return None

        classification, payload = classified
        if classification not in DELIVERABLE_CLASSIFICATIONS:
            log.debug("outgoing_frame_skipped", timestamp=timestamp)
            return None

        event = normalize(frame, payload, classification, raw=raw)

        if event.is_empty:
            log.debug("empty_frame_skipped", timestamp=timestamp)
            return None

        if self._filter.rejects(event):
            log.debug("filtered_frame_skipped", timestamp=timestamp)
            return None

        return event
