"""全局 pytest 配置 -- signal-cli 帧构造 fixture"""

import json
from collections.abc import Callable
from typing import Any

import pytest

ACCOUNT = "+15550000001"
SELF_UUID = "11111111-1111-1111-1111-111111111111"
PEER_UUID = "22222222-2222-2222-2222-222222222222"
PEER_NUMBER = "+15550000002"


def build_data_frame(
    timestamp: int | None = 100,
    message: str | None = "hi",
    attachments: list[Any] | None = None,
    reactions: list[Any] | None = None,
    **envelope_fields: Any,
) -> str:
    """构造 dataMessage 帧（他人发来的消息）"""
    data_message: dict[str, Any] = {}
    if message is not None:
        data_message["message"] = message
    if attachments is not None:
        data_message["attachments"] = attachments
    if reactions is not None:
        data_message["reactions"] = reactions

    envelope: dict[str, Any] = {
        "sourceNumber": PEER_NUMBER,
        "sourceUuid": PEER_UUID,
        "sourceName": "Peer",
        "dataMessage": data_message,
        **envelope_fields,
    }
    if timestamp is not None:
        envelope["timestamp"] = timestamp
    return json.dumps({"envelope": envelope, "account": ACCOUNT})


def build_sync_frame(
    timestamp: int = 200,
    message: str = "note to self",
    destination_uuid: str = SELF_UUID,
    source_uuid: str = SELF_UUID,
) -> str:
    """构造 syncMessage.sentMessage 帧（本账号发出的消息回声）"""
    envelope = {
        "timestamp": timestamp,
        "sourceNumber": ACCOUNT,
        "sourceUuid": source_uuid,
        "syncMessage": {
            "sentMessage": {
                "message": message,
                "destinationUuid": destination_uuid,
                "timestamp": timestamp,
            }
        },
    }
    return json.dumps({"envelope": envelope, "account": ACCOUNT})


@pytest.fixture
def data_frame() -> Callable[..., str]:
    """dataMessage 帧构造器"""
    return build_data_frame


@pytest.fixture
def sync_frame() -> Callable[..., str]:
    """syncMessage 帧构造器"""
    return build_sync_frame
