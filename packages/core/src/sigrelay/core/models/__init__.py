"""sigrelay Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import DELIVERABLE_CLASSIFICATIONS, Classification, ConnectionState
from .envelope import Envelope, Frame, MessagePayload, SyncMessage
from .event import NormalizedEvent

__all__ = [
    # 枚举
    "Classification",
    "ConnectionState",
    "DELIVERABLE_CLASSIFICATIONS",
    # 帧解析
    "Frame",
    "Envelope",
    "MessagePayload",
    "SyncMessage",
    # 输出
    "NormalizedEvent",
]
