"""统一请求对象：屏蔽底层传输差异，提供一致的请求/响应结果。

Unified request/response object.

``HttpRequest`` drives one request from URL parsing to the completion
callback: it assembles headers (cookies, gzip negotiation), picks the agent
for the URL scheme, pipes the response through the raw byte counter and,
for native gzip responses, the decoder, into its own body buffer, and
finally reports timing, compression ratio and the (possibly JSON-decoded)
body.

The completion callback fires exactly once per request: ``(None, result)``
on success or ``(error, None)`` on any transport failure.
"""

from __future__ import annotations

import codecs
import copy
import json
import uuid
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError as PydanticValidationError

from unified_http.config import USE_GZIP_COMPRESSION, RequestOptions
from unified_http.cookies import CookieJar, default_cookie_jar
from unified_http.errors import TransportError, ValidationError
from unified_http.telemetry import LogContext, get_log_context, get_logger, set_log_context
from unified_http.transport import (
    ByteCounter,
    GzipDecoder,
    TransportOptions,
    get_transport_agents,
)
from unified_http.utils.timing import HrTime, compression_ratio, elapsed_ms, hrtime

if TYPE_CHECKING:
    from unified_http.transport import ResponseStream, StreamSink, TransportAgent, TransportAgents

logger = get_logger(__name__)

SUPPORTED_METHODS = ("get", "post")
JSON_CONTENT_TYPE = "application/json"
BAD_JSON_PAYLOAD: dict[str, str] = {"error": "Bad JSON"}


class RequestState(str, Enum):
    """Lifecycle of one request. COMPLETE and FAILED are terminal."""

    CREATED = "created"
    IN_FLIGHT = "in_flight"
    RECEIVING_HEADERS = "receiving_headers"
    STREAMING_BODY = "streaming_body"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestState.COMPLETE, RequestState.FAILED)


@dataclass
class HttpResult:
    """Normalized outcome of a successful request.

    Attributes:
        status_code: HTTP status code
        status_message: HTTP reason phrase
        content_type: Declared content type, if any
        response_body: Decoded text, or the parsed value for JSON responses
        cookies: Raw set-cookie header values, if any
        length: Decoded body length in bytes
        compression_ratio: Percent saved on the wire, 0 when uncompressed
        duration: Milliseconds from issuing the request to end of body
    """

    status_code: int
    status_message: str
    content_type: str | None
    response_body: Any
    cookies: list[str] | None
    length: int
    compression_ratio: int
    duration: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)


CompletionCallback = Callable[[BaseException | None, HttpResult | None], None]


def _media_type(content_type: str | None) -> str:
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def _charset(content_type: str | None) -> str:
    if content_type:
        for param in content_type.split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                candidate = value.strip().strip("\"'")
                try:
                    codecs.lookup(candidate)
                except LookupError:
                    break
                return candidate
    return "utf-8"


class HttpRequest:
    """One HTTP request executed through whichever transport is active.

    Example:
        >>> request = HttpRequest({"url": "https://example.com/api", "method": "get"})
        >>> result = await request.execute(lambda err, res: print(err or res.status_code))

    Args:
        options: Request descriptor (RequestOptions or a mapping of its fields)
        cookie_jar: Jar read for the outbound cookie header and fed with
            inbound set-cookie values (default: the process-wide jar)
        agents: Transport agents to use (default: the process-wide pair)

    Raises:
        ValidationError: If the URL is not an absolute http(s) URL, the method
            is unsupported, or the body cannot be sent
    """

    @staticmethod
    async def get(
        url: str,
        options: Mapping[str, Any] | None = None,
        callback: CompletionCallback | None = None,
        *,
        cookie_jar: CookieJar | None = None,
        agents: TransportAgents | None = None,
    ) -> HttpResult | None:
        """Issue a GET request and wait for it to finish."""
        opts = _merge_options({"url": url, "method": "get"}, options)
        request = HttpRequest(opts, cookie_jar=cookie_jar, agents=agents)
        return await request.execute(callback)

    @staticmethod
    async def post(
        url: str,
        body: Any,
        options: Mapping[str, Any] | None = None,
        callback: CompletionCallback | None = None,
        *,
        cookie_jar: CookieJar | None = None,
        agents: TransportAgents | None = None,
    ) -> HttpResult | None:
        """Issue a POST request with ``body`` and wait for it to finish."""
        opts = _merge_options({"url": url, "method": "post", "request_body": body}, options)
        request = HttpRequest(opts, cookie_jar=cookie_jar, agents=agents)
        return await request.execute(callback)

    def __init__(
        self,
        options: RequestOptions | Mapping[str, Any],
        *,
        cookie_jar: CookieJar | None = None,
        agents: TransportAgents | None = None,
    ) -> None:
        if not isinstance(options, RequestOptions):
            options = _merge_options({}, options)
        self.options = options
        self.method = options.method.lower()
        if self.method not in SUPPORTED_METHODS:
            raise ValidationError(
                f"Unsupported method: {options.method!r}",
                field="method",
                expected=list(SUPPORTED_METHODS),
                actual=options.method,
            )

        self.parsed_url = urlsplit(options.url)
        self.scheme = self.parsed_url.scheme.lower()
        if self.scheme not in ("http", "https") or not self.parsed_url.hostname:
            raise ValidationError(
                f"Not an absolute http(s) URL: {options.url!r}",
                field="url",
                actual=options.url,
            )
        try:
            self.port = self.parsed_url.port
        except ValueError as e:
            raise ValidationError(f"Invalid port in URL: {options.url!r}", field="url") from e

        body = options.request_body
        if self.method == "post" and body is not None and not isinstance(
            body, (str, bytes, bytearray)
        ):
            raise ValidationError(
                "Request body must be str or bytes",
                field="request_body",
                expected="str | bytes",
                actual=type(body).__name__,
            )

        self.request_id = str(uuid.uuid4())
        self.state = RequestState.CREATED
        self._cookie_jar = cookie_jar
        self._agents = agents
        self._callback: CompletionCallback | None = None
        self._fired = False

        # In-flight call state
        self.raw_response_length = 0
        self._buffer = bytearray()
        self._counter: ByteCounter | None = None
        self.status_code: int | None = None
        self.status_message: str | None = None
        self.content_type: str | None = None
        self.cookies: list[str] | None = None
        self.start_time: HrTime | None = None
        self.end_time: HrTime | None = None
        self.result: HttpResult | None = None
        self.error: BaseException | None = None

    @property
    def cookie_jar(self) -> CookieJar:
        if self._cookie_jar is None:
            self._cookie_jar = default_cookie_jar()
        return self._cookie_jar

    @property
    def path(self) -> str:
        path = self.parsed_url.path or "/"
        if self.parsed_url.query:
            path = f"{path}?{self.parsed_url.query}"
        return path

    def build_transport_options(self) -> TransportOptions:
        """Assemble the transport request: target, caller headers, cookie, gzip."""
        headers = httpx.Headers(self.options.headers)
        headers["cookie"] = self.cookie_jar.serialize()
        if USE_GZIP_COMPRESSION:
            headers["accept-encoding"] = "gzip"
        return TransportOptions(
            scheme=self.scheme,
            host=self.parsed_url.hostname or "",
            port=self.port,
            path=self.path,
            method=self.method,
            headers=headers,
            body=self.options.request_body if self.method == "post" else None,
        )

    async def execute(self, callback: CompletionCallback | None = None) -> HttpResult | None:
        """Run the request to completion.

        Transport failures are never raised; they are handed to ``callback``
        and ``None`` is returned. Exceptions raised by ``callback`` itself
        propagate to the caller.

        Args:
            callback: Called once with ``(error, result)``

        Returns:
            The result on success, None on failure

        Raises:
            RuntimeError: If this request has already been executed
        """
        if self.state is not RequestState.CREATED:
            raise RuntimeError("HttpRequest can only be executed once")
        self._callback = callback

        agents = self._agents or get_transport_agents()
        agent = agents.agent_for(self.scheme)
        transport_options = self.build_transport_options()

        self.state = RequestState.IN_FLIGHT
        outer_context = get_log_context()
        set_log_context(
            LogContext(
                request_id=self.request_id,
                method=self.method,
                url=transport_options.url,
                transport=agents.transport_name,
            )
        )
        try:
            logger.debug("request issued")
            self.start_time = hrtime()
            try:
                response = await agent.send(transport_options)
            except TransportError as e:
                self.on_error(e)
                return None

            self._on_response(response)
            await response.pipe(self._build_pipeline(response, agent))
            return self.result
        finally:
            set_log_context(outer_context)

    def _on_response(self, response: ResponseStream) -> None:
        self.state = RequestState.RECEIVING_HEADERS
        self.status_code = response.status_code
        self.status_message = response.status_message
        self.content_type = response.headers.get("content-type")
        self.cookies = response.header_values("set-cookie") or None
        self.cookie_jar.parse(self.cookies)
        logger.debug(
            "response received",
            status_code=self.status_code,
            streaming=response.supports_streaming,
        )
        self.state = RequestState.STREAMING_BODY

    def _build_pipeline(self, response: ResponseStream, agent: TransportAgent) -> StreamSink:
        sink: StreamSink = self
        encoding = (response.headers.get("content-encoding") or "").strip().lower()
        # Bridge responses arrive already decoded by the platform
        if not agent.uses_bridge and encoding == "gzip":
            sink = GzipDecoder(sink)
        self._counter = ByteCounter(sink)
        return self._counter

    # Body sink: the end of the pipeline

    def on_data(self, chunk: bytes) -> None:
        if self.state is RequestState.STREAMING_BODY:
            self._buffer.extend(chunk)

    def on_end(self) -> None:
        if self.state is not RequestState.STREAMING_BODY:
            return
        self.end_time = hrtime()
        self.raw_response_length = self._counter.count if self._counter else 0

        length = len(self._buffer)
        ratio = compression_ratio(self.raw_response_length, length)
        body = self._decode_body()

        self.result = HttpResult(
            status_code=self.status_code or 0,
            status_message=self.status_message or "",
            content_type=self.content_type,
            response_body=body,
            cookies=self.cookies,
            length=length,
            compression_ratio=ratio,
            duration=elapsed_ms(self.start_time or self.end_time, self.end_time),
        )
        self.state = RequestState.COMPLETE
        logger.debug(
            "request complete",
            status_code=self.result.status_code,
            length=length,
            compression_ratio=ratio,
            duration_ms=self.result.duration,
        )
        self._finish(None, self.result)

    def on_error(self, error: BaseException) -> None:
        if self.state.is_terminal:
            return
        self.state = RequestState.FAILED
        self.error = error
        logger.warning(
            "request failed",
            url=self.options.url,
            error=str(error),
        )
        self._finish(error, None)

    def _decode_body(self) -> Any:
        text = self._buffer.decode(_charset(self.content_type), errors="replace")
        if _media_type(self.content_type) != JSON_CONTENT_TYPE:
            return text
        try:
            return json.loads(text)
        except ValueError:
            return copy.copy(BAD_JSON_PAYLOAD)

    def _finish(self, error: BaseException | None, result: HttpResult | None) -> None:
        if self._fired:
            return
        self._fired = True
        if self._callback is not None:
            self._callback(error, result)

    def __repr__(self) -> str:
        return (
            f"HttpRequest(method={self.method!r}, url={self.options.url!r}, "
            f"state={self.state.value!r})"
        )


def _merge_options(
    defaults: dict[str, Any], overrides: RequestOptions | Mapping[str, Any] | None
) -> RequestOptions:
    if isinstance(overrides, RequestOptions):
        overrides = overrides.model_dump()
    try:
        return RequestOptions.merged(defaults, dict(overrides or {}))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid request options: {e}", field="options") from e


async def get(
    url: str,
    options: Mapping[str, Any] | None = None,
    callback: CompletionCallback | None = None,
    **kwargs: Any,
) -> HttpResult | None:
    """Module-level shortcut for ``HttpRequest.get``."""
    return await HttpRequest.get(url, options, callback, **kwargs)


async def post(
    url: str,
    body: Any,
    options: Mapping[str, Any] | None = None,
    callback: CompletionCallback | None = None,
    **kwargs: Any,
) -> HttpResult | None:
    """Module-level shortcut for ``HttpRequest.post``."""
    return await HttpRequest.post(url, body, options, callback, **kwargs)
