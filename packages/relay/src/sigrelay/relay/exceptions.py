"""Relay 异常体系

ParseError / ConnectionError / AcknowledgementError 均在中继内部恢复，
只有 RelayConfigurationError 会在启动时同步抛给调用方。
"""


class RelayError(Exception):
    """Relay 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可在中继内部恢复（丢弃帧、重连、仅记录日志）
        """
        super().__init__(message)
        self.recoverable = recoverable


class FrameParseError(RelayError):
    """帧无法解析（非 JSON 或结构不符）

    丢弃该帧并记录日志，连接不受影响。
    """

    def __init__(self, original_error: Exception, frame_size: int = 0) -> None:
        """
        Args:
            original_error: 原始解析异常
            frame_size: 帧长度（字节/字符），仅用于日志
        """
        super().__init__(f"帧解析失败: {original_error}", recoverable=True)
        self.original_error = original_error
        self.frame_size = frame_size


class StreamConnectionError(RelayError):
    """流连接失败或异常关闭（握手失败、网络中断、DNS 解析失败等）

    此异常触发 ReconnectScheduler 的定时重连，不向 start() 调用方传播。
    """

    def __init__(self, stream_url: str, original_error: Exception) -> None:
        """
        Args:
            stream_url: 尝试连接的流地址
            original_error: 原始异常
        """
        super().__init__(
            f"流连接失败: {stream_url} -- {original_error}",
            recoverable=True,
        )
        self.stream_url = stream_url
        self.original_error = original_error


class ReceiptError(RelayError):
    """已读回执调用失败或返回非 2xx

    仅记录日志，不影响事件投递和连接状态。
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, recoverable=True)
        self.status_code = status_code


class RelayConfigurationError(RelayError):
    """配置错误（缺少必填凭据等）

    在任何连接尝试之前同步抛出，唯一对调用方可见的失败。
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, recoverable=False)
