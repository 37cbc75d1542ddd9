"""clinsim Telemetry -- 学习事件记录与批量投递

EventLogger 是唯一入口：进程启动时构造一次并注入各调用点。
"""

from .config import TelemetryConfig, load_telemetry_config
from .context import LoggerStatus, LoggingContext
from .dispatcher import BatchDispatcher
from .exceptions import SinkDeliveryError, SinkUnreachableError, TelemetryError
from .logger import EventLogger
from .options import LogOptions
from .queue import EventQueue
from .sink import EventSink, HttpEventSink, encode_batch
from .timing import TimingTracker

__all__ = [
    "EventLogger",
    "LogOptions",
    "LoggingContext",
    "LoggerStatus",
    # 投递
    "BatchDispatcher",
    "EventQueue",
    "EventSink",
    "HttpEventSink",
    "encode_batch",
    "TimingTracker",
    # 配置
    "TelemetryConfig",
    "load_telemetry_config",
    # 异常
    "TelemetryError",
    "SinkDeliveryError",
    "SinkUnreachableError",
]
