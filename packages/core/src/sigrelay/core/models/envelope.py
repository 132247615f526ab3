"""Frame / Envelope 解析模型 -- signal-cli-rest-api 的 WebSocket 帧格式

帧是 JSON 文本: {"envelope": {...}, "account": "+123..."}
这里只声明中继需要读取的字段，其余字段忽略（extra="ignore"）。
所有字段可缺省，缺省值在 NormalizedEvent 构建时归一。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessagePayload(BaseModel):
    """消息内容（dataMessage 或 syncMessage.sentMessage）"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message: str | None = Field(default=None, description="文本内容")
    attachments: list[Any] | None = Field(default=None, description="附件列表")
    reactions: list[Any] | None = Field(default=None, description="表情回应列表")
    reaction: dict[str, Any] | None = Field(
        default=None,
        description="signal-cli 单条 reaction 事件",
    )
    destination_number: str | None = Field(default=None, alias="destinationNumber")
    destination_uuid: str | None = Field(default=None, alias="destinationUuid")

    def reaction_list(self) -> list[Any]:
        """reactions 缺省时用单条 reaction 补齐"""
        if self.reactions:
            return list(self.reactions)
        if self.reaction:
            return [self.reaction]
        return []


class SyncMessage(BaseModel):
    """sync 包装：本账号其他设备发出的消息回声"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    sent_message: MessagePayload | None = Field(default=None, alias="sentMessage")


class Envelope(BaseModel):
    """信封 -- 帧的主体"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    timestamp: int | None = Field(default=None, description="去重键 + 回执键")
    source_number: str | None = Field(default=None, alias="sourceNumber")
    source_uuid: str | None = Field(default=None, alias="sourceUuid")
    source_name: str | None = Field(default=None, alias="sourceName")
    server_received_timestamp: int | None = Field(
        default=None, alias="serverReceivedTimestamp"
    )
    server_delivered_timestamp: int | None = Field(
        default=None, alias="serverDeliveredTimestamp"
    )
    has_content: bool | None = Field(default=None, alias="hasContent")
    is_unidentified_sender: bool | None = Field(
        default=None, alias="isUnidentifiedSender"
    )
    data_message: MessagePayload | None = Field(default=None, alias="dataMessage")
    sync_message: SyncMessage | None = Field(default=None, alias="syncMessage")


class Frame(BaseModel):
    """WebSocket 帧"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    envelope: Envelope | None = None
    account: str | None = None

    @property
    def timestamp(self) -> int:
        """帧时间戳，缺省为 0"""
        if self.envelope is None:
            return 0
        return self.envelope.timestamp or 0
