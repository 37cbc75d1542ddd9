"""EventSink -- 事件批量投递通道

两条投递路径：
- send_batch(): 常规异步请求，可被取消，失败抛出 TelemetryError 子类
- send_beacon(): 卸载安全的 fire-and-forget 发送，在独立的非 daemon 线程中完成，
  不受事件循环取消影响；在 atexit 阶段发出时需调用 join_beacons() 等待其结束
"""

import json
import threading
from collections.abc import Callable, Sequence
from typing import Protocol

import httpx
import structlog
from clinsim.core.models.event import Event

from .exceptions import SinkDeliveryError, SinkUnreachableError

log = structlog.get_logger()

# 健康检查超时（硬编码，应快速响应）
HEALTH_CHECK_TIMEOUT_S = 5

# beacon 发送超时，避免退出阶段无限挂起
BEACON_TIMEOUT_S = 10

_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.TransportError,
)


class EventSink(Protocol):
    """事件接收端接口"""

    async def send_batch(self, events: Sequence[Event]) -> None:
        """投递一个批次；失败抛出 SinkDeliveryError / SinkUnreachableError"""
        ...

    def send_beacon(self, events: Sequence[Event]) -> bool:
        """卸载安全投递；返回是否成功交给发送通道"""
        ...


def encode_batch(events: Sequence[Event]) -> bytes:
    """编码批量投递请求体 {"events": [...]}"""
    body = {"events": [event.to_wire() for event in events]}
    return json.dumps(body, ensure_ascii=False).encode("utf-8")


class HttpEventSink:
    """基于 httpx 的 HTTP 事件接收端客户端

    POST {sink_url}，请求体 {"events": Event[]}，任意 2xx 视为成功。
    """

    def __init__(
        self,
        sink_url: str,
        token_provider: Callable[[], str | None] | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | httpx.BaseTransport | None = None,
    ) -> None:
        """初始化 HTTP 事件接收端

        Args:
            sink_url: 批量投递地址（POST /api/learning-events/batch）
            token_provider: 返回 Bearer 令牌的回调，每次发送时调用
            timeout_s: 请求超时（秒），None 表示不设超时
            transport: 自定义 httpx transport（测试时注入 MockTransport）
        """
        self._sink_url = sink_url
        self._token_provider = token_provider
        self._timeout_s = timeout_s
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._beacon_threads: list[threading.Thread] = []

    @property
    def sink_url(self) -> str:
        return self._sink_url

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _async_transport(self) -> httpx.AsyncBaseTransport | None:
        if isinstance(self._transport, httpx.AsyncBaseTransport):
            return self._transport
        return None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout_s,
                transport=self._async_transport(),
            )
        return self._client

    async def send_batch(self, events: Sequence[Event]) -> None:
        """常规投递

        Raises:
            SinkUnreachableError: 连接失败或超时
            SinkDeliveryError: 接收端返回非 2xx
        """
        client = self._get_client()
        try:
            response = await client.post(
                self._sink_url,
                content=encode_batch(events),
                headers=self._headers(),
            )
        except _CONNECTION_ERROR_TYPES as e:
            raise SinkUnreachableError(self._sink_url, e) from e

        if not response.is_success:
            raise SinkDeliveryError(self._sink_url, response.status_code)

    def send_beacon(self, events: Sequence[Event]) -> bool:
        """卸载安全投递

        请求体在调用线程内编码完成，随后交给独立线程发送，调用立即返回。

        Returns:
            True 如果已交给发送线程，编码或启动线程失败返回 False
        """
        try:
            body = encode_batch(events)
            headers = self._headers()
            thread = threading.Thread(
                target=self._post_beacon,
                args=(body, headers, len(events)),
                name="event-beacon",
                daemon=False,
            )
            thread.start()
        except (RuntimeError, TypeError, ValueError) as e:
            log.warning("event_beacon_failed", error=str(e), count=len(events))
            return False
        self._beacon_threads = [t for t in self._beacon_threads if t.is_alive()]
        self._beacon_threads.append(thread)
        return True

    def _post_beacon(self, body: bytes, headers: dict[str, str], count: int) -> None:
        transport = self._transport if isinstance(self._transport, httpx.BaseTransport) else None
        try:
            with httpx.Client(timeout=BEACON_TIMEOUT_S, transport=transport) as client:
                response = client.post(self._sink_url, content=body, headers=headers)
            log.debug(
                "event_beacon_sent",
                count=count,
                status_code=response.status_code,
            )
        except Exception as e:
            # beacon 无回执，失败只记录
            log.warning("event_beacon_failed", error=str(e), count=count)

    def join_beacons(self, timeout: float | None = None) -> None:
        """等待已发出的 beacon 线程结束"""
        for thread in self._beacon_threads:
            thread.join(timeout)
        self._beacon_threads = [t for t in self._beacon_threads if t.is_alive()]

    async def health_check(self) -> bool:
        """检查事件接收端可达性

        对投递地址发送 OPTIONS 请求，任意非 5xx 响应视为可达。
        此方法不抛出异常。
        """
        try:
            async with httpx.AsyncClient(transport=self._async_transport()) as http_client:
                resp = await http_client.options(
                    self._sink_url, timeout=HEALTH_CHECK_TIMEOUT_S
                )
                return resp.status_code < 500
        except Exception as e:
            log.debug("sink_health_check_failed", url=self._sink_url, error=str(e))
            return False

    async def aclose(self) -> None:
        """关闭底层连接池"""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
