"""平台桥传输：把一次性回调式的平台 HTTP 原语适配成流式请求/响应。

Bridge transport shim.

Browser-hosted runtimes expose an atomic, callback-based HTTP primitive
instead of sockets. This module makes it look like a streaming transport:
``BridgeRequest`` offers ``on``/``write``/``end`` and ``BridgeResponse``
replays the whole body as one chunk.

There is no pooling, timeout or cancellation here; the platform owns
connection reuse and the request cannot be aborted once issued.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping
from http import HTTPStatus
from typing import TYPE_CHECKING, Any, Protocol, TypedDict

from unified_http.errors import BridgeError
from unified_http.telemetry import get_logger
from unified_http.transport.base import TransportAgent, TransportOptions
from unified_http.transport.stream import ResponseStream, StreamSink

if TYPE_CHECKING:
    from unified_http.config import AgentOptions

logger = get_logger(__name__)


class BridgeResult(TypedDict, total=False):
    """Structured success payload handed back by the bridge."""

    status: int
    headers: Mapping[str, Any]
    data: Any


SuccessCallback = Callable[[BridgeResult], None]
ErrorCallback = Callable[[Any], None]
BridgeCall = Callable[[str, Any, dict[str, str], SuccessCallback, ErrorCallback], None]


class PlatformBridge(Protocol):
    """Host HTTP primitive.

    ``request(method)`` returns the call for that verb; the call must invoke
    exactly one of its two callbacks, once.
    """

    def request(self, method: str) -> BridgeCall: ...


class PyodideFetchBridge:
    """Platform bridge backed by ``pyodide.http.pyfetch``.

    The fetch runs as a task on the current event loop; the whole body is
    read before the success callback fires.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[BridgeResult]] = set()

    def request(self, method: str) -> BridgeCall:
        def call(
            url: str,
            body: Any,
            headers: dict[str, str],
            on_success: SuccessCallback,
            on_error: ErrorCallback,
        ) -> None:
            task = asyncio.ensure_future(self._fetch(method, url, body, headers))
            self._pending.add(task)

            def _done(finished: asyncio.Task[BridgeResult]) -> None:
                self._pending.discard(finished)
                if finished.cancelled():
                    on_error(asyncio.CancelledError())
                elif (exc := finished.exception()) is not None:
                    on_error(exc)
                else:
                    on_success(finished.result())

            task.add_done_callback(_done)

        return call

    @staticmethod
    async def _fetch(
        method: str, url: str, body: Any, headers: dict[str, str]
    ) -> BridgeResult:
        from pyodide.http import pyfetch

        kwargs: dict[str, Any] = {"method": method.upper(), "headers": headers}
        if body is not None:
            kwargs["body"] = body
        response = await pyfetch(url, **kwargs)
        data = await response.bytes()
        return {"status": response.status, "headers": dict(response.headers), "data": data}


def _to_bytes(data: Any) -> bytes:
    if data is None:
        return b""
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    # Some bridges hand back already-parsed JSON
    return json.dumps(data).encode("utf-8")


class BridgeResponse(ResponseStream):
    """Normalized bridge result.

    Header names are lower-cased into one mapping. The body is delivered by
    ``pipe`` as a single ``on_data`` followed immediately by ``on_end``, and
    can be piped only once.
    """

    supports_streaming = False

    def __init__(self, result: Mapping[str, Any]) -> None:
        self._status = int(result.get("status") or 0)
        self._raw_headers: dict[str, Any] = {
            str(key).lower(): value for key, value in (result.get("headers") or {}).items()
        }
        self._data = result.get("data")
        self._piped = False

    @property
    def status_code(self) -> int:
        return self._status

    @property
    def status_message(self) -> str:
        try:
            return HTTPStatus(self._status).phrase
        except ValueError:
            return ""

    @property
    def headers(self) -> Mapping[str, str]:
        return {key: ", ".join(self.header_values(key)) for key in self._raw_headers}

    def header_values(self, name: str) -> list[str]:
        value = self._raw_headers.get(name.lower())
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return [str(value)]

    async def pipe(self, sink: StreamSink) -> None:
        if self._piped:
            raise RuntimeError("Bridge response body has already been delivered")
        self._piped = True
        sink.on_data(_to_bytes(self._data))
        sink.on_end()


class BridgeRequest:
    """Streaming-request facade over one bridge call.

    Nothing is sent until ``end()``; the body passed to ``write()`` is
    buffered (a later write replaces an earlier one).
    """

    def __init__(
        self,
        scheme: str,
        options: TransportOptions,
        bridge: PlatformBridge,
        callback: Callable[[BridgeResponse], None],
    ) -> None:
        self.scheme = scheme
        self.options = options
        self._bridge = bridge
        self._callback = callback
        self._error_callback: ErrorCallback | None = None
        self._body: Any = None
        self._ended = False

    def on(self, event: str, callback: ErrorCallback) -> None:
        """Register an event handler; only 'error' is emitted."""
        if event == "error":
            self._error_callback = callback

    def set_timeout(self, timeout_ms: int, callback: Callable[[], None] | None = None) -> None:
        """No-op: the bridge offers no way to time out or abort a call."""

    def write(self, data: Any) -> None:
        self._body = data

    @property
    def url(self) -> str:
        return self.options.url

    def outbound_headers(self) -> dict[str, str]:
        """Headers passed to the bridge, minus content-length (the bridge sets it)."""
        return {
            key: value
            for key, value in self.options.headers.items()
            if key.lower() != "content-length"
        }

    def end(self) -> None:
        if self._ended:
            raise RuntimeError("Bridge request already ended")
        self._ended = True
        try:
            call = self._bridge.request(self.options.method.lower())
            call(self.url, self._body, self.outbound_headers(), self._on_result, self._on_error)
        except Exception as exc:
            self._on_error(exc)

    def _on_result(self, result: BridgeResult) -> None:
        try:
            response = BridgeResponse(result)
        except Exception as exc:
            self._on_error(exc)
            return
        self._callback(response)

    def _on_error(self, payload: Any) -> None:
        if self._error_callback is None:
            raise BridgeError("Platform bridge request failed", url=self.url, payload=payload)
        self._error_callback(payload)


class BridgeAgent(TransportAgent):
    """Bridge transport for one scheme.

    ``options`` is kept as a plain record; keep-alive and pool size mean
    nothing to the bridge.
    """

    uses_bridge = True

    def __init__(self, scheme: str, options: AgentOptions, bridge: PlatformBridge) -> None:
        super().__init__(scheme, options)
        self.bridge = bridge

    def request(
        self, options: TransportOptions, callback: Callable[[BridgeResponse], None]
    ) -> BridgeRequest:
        return BridgeRequest(self.scheme, options, self.bridge, callback)

    async def send(self, options: TransportOptions) -> BridgeResponse:
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[BridgeResponse] = loop.create_future()
        url = options.url

        def on_result(response: BridgeResponse) -> None:
            if not outcome.done():
                outcome.set_result(response)

        def on_error(payload: Any) -> None:
            if outcome.done():
                logger.debug("bridge reported an error after completion", url=url)
                return
            outcome.set_exception(
                BridgeError(f"Platform bridge request failed: {payload}", url=url, payload=payload)
            )

        request = self.request(options, on_result)
        request.on("error", on_error)
        request.set_timeout(self.options.timeout_ms)
        if options.method == "post":
            request.write(options.body)
        request.end()
        return await outcome
