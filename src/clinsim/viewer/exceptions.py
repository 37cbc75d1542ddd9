"""Session Log Viewer 异常体系

事件查询失败以 EventFetchError 抛出，由 SessionLogViewer 转为可见的 error 状态，
不会传播到调用方。
"""


class ViewerError(Exception):
    """Viewer 包基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过手动刷新恢复
        """
        super().__init__(message)
        self.message = message
        self.recoverable = recoverable


class EventFetchError(ViewerError):
    """事件查询失败（连接失败或非 2xx 响应）"""

    DEFAULT_MESSAGE = "Failed to fetch events"

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        """
        Args:
            message: 服务端返回的 error 字段或连接错误描述，缺省为通用提示
            status_code: HTTP 状态码，连接失败时为 None
        """
        super().__init__(message or self.DEFAULT_MESSAGE, recoverable=True)
        self.status_code = status_code
