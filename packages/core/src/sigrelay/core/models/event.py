"""NormalizedEvent Domain Model -- 中继的输出记录

构建后不可变（frozen）。字段名使用 snake_case，序列化时输出 camelCase
（model_dump(by_alias=True)），与下游消费方约定的记录格式一致。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import Classification


class NormalizedEvent(BaseModel):
    """NormalizedEvent -- 去重、分类、过滤之后投递给下游的事件

    不持有任何外部资源。缺省字段归一为空列表 / 空字符串 / 0 / False。
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # 内容
    message_text: str = Field(default="", description="文本内容")
    attachments: list[Any] = Field(default_factory=list, description="附件列表")
    reactions: list[Any] = Field(default_factory=list, description="表情回应列表")

    # 发送方
    source_number: str = Field(default="", description="发送方号码")
    source_uuid: str = Field(default="", description="发送方 UUID")
    source_name: str = Field(default="", description="发送方名称")

    # 时间戳（毫秒）
    timestamp: int = Field(default=0, description="消息时间戳，去重键")
    server_received_timestamp: int = Field(default=0)
    server_delivered_timestamp: int = Field(default=0)

    account: str = Field(default="", description="接收账号")
    has_content: bool = Field(default=False)
    is_unidentified_sender: bool = Field(default=False)

    classification: Classification = Field(description="事件分类")
    raw: dict[str, Any] = Field(
        default_factory=dict,
        description="原始帧（透传给高级消费方）",
    )

    @property
    def is_empty(self) -> bool:
        """文本、附件、回应均为空"""
        return not self.message_text and not self.attachments and not self.reactions

    @property
    def sender_id(self) -> str:
        """回执使用的发送方标识：优先 UUID，其次号码"""
        return self.source_uuid or self.source_number

    def to_record(self) -> dict[str, Any]:
        """下游记录格式（camelCase JSON 兼容 dict）"""
        return self.model_dump(mode="json", by_alias=True)
