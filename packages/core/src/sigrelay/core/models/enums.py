"""枚举定义 -- 事件分类 + 连接状态

Classification: 入站事件的分类结果（Incoming / SelfNote / Outgoing）。
ConnectionState: 流连接的生命周期状态。
"""

from enum import StrEnum


class Classification(StrEnum):
    """事件分类"""

    # 他人发来的消息（dataMessage）
    INCOMING = "Incoming"
    # 本账号发给自己的消息（sync 回声，sourceUuid == destinationUuid）
    SELF_NOTE = "SelfNote"
    # 本账号发给他人的消息（sync 回声），不向下游投递
    OUTGOING = "Outgoing"


class ConnectionState(StrEnum):
    """流连接状态

    CONNECTING -> OPEN -> (CLOSED | ERRORED) -> CONNECTING ...
    仅 stop() 进入 STOPPED。
    """

    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSED = "CLOSED"
    ERRORED = "ERRORED"
    STOPPED = "STOPPED"


# 可被下游消费的分类
DELIVERABLE_CLASSIFICATIONS: frozenset[Classification] = frozenset(
    {Classification.INCOMING, Classification.SELF_NOTE}
)
