"""Telemetry 异常体系

这些异常只在 sink 与 dispatcher 之间传递；
EventLogger.log() / flush() 永远不会把它们抛给调用方。
"""


class TelemetryError(Exception):
    """Telemetry 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重新入队、下个周期重试恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class SinkDeliveryError(TelemetryError):
    """事件接收端返回非 2xx 响应

    此异常触发 BatchDispatcher 的重新入队逻辑。
    """

    def __init__(self, sink_url: str, status_code: int) -> None:
        """
        Args:
            sink_url: 投递目标地址
            status_code: HTTP 状态码
        """
        super().__init__(
            f"事件接收端拒绝批次: {sink_url} -- HTTP {status_code}",
            recoverable=True,
        )
        self.sink_url = sink_url
        self.status_code = status_code


class SinkUnreachableError(TelemetryError):
    """事件接收端不可达（连接失败、超时、DNS 解析失败等）"""

    def __init__(self, sink_url: str, original_error: Exception) -> None:
        """
        Args:
            sink_url: 尝试连接的地址
            original_error: 原始异常
        """
        super().__init__(
            f"事件接收端不可达: {sink_url} -- {original_error}",
            recoverable=True,
        )
        self.sink_url = sink_url
        self.original_error = original_error
