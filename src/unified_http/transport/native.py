"""原生传输：基于 httpx 的流式 HTTP 客户端，支持连接复用和超时中止。

Native transport using httpx.

Provides:
- True incremental body delivery (raw, still-encoded chunks)
- Keep-alive with a bounded idle pool per scheme
- Timeout abort at the configured ceiling
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import httpx

from unified_http.errors import RequestTimeoutError, TransportError
from unified_http.telemetry import get_logger
from unified_http.transport.base import TransportAgent, TransportOptions
from unified_http.transport.stream import ResponseStream, StreamSink

if TYPE_CHECKING:
    from unified_http.config import AgentOptions

logger = get_logger(__name__)


def _encode_body(body: Any) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


class NativeResponseStream(ResponseStream):
    """Streamed httpx response.

    ``pipe`` forwards raw wire chunks; decoding is left to the sink chain.
    The underlying response is closed once the body is drained or fails.
    """

    supports_streaming = True

    def __init__(
        self,
        response: httpx.Response,
        *,
        url: str,
        timeout_ms: int,
    ) -> None:
        self._response = response
        self._url = url
        self._timeout_ms = timeout_ms

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def status_message(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> Mapping[str, str]:
        return self._response.headers

    def header_values(self, name: str) -> list[str]:
        return self._response.headers.get_list(name)

    async def pipe(self, sink: StreamSink) -> None:
        try:
            async for chunk in self._response.aiter_raw():
                sink.on_data(chunk)
        except httpx.TimeoutException as e:
            sink.on_error(
                RequestTimeoutError(
                    f"Response stalled: {e}",
                    url=self._url,
                    timeout_ms=self._timeout_ms,
                    cause=e,
                )
            )
        except httpx.HTTPError as e:
            sink.on_error(
                TransportError(f"Response stream failed: {e}", url=self._url, cause=e)
            )
        else:
            sink.on_end()
        finally:
            await self._response.aclose()


class NativeAgent(TransportAgent):
    """Socket transport for one scheme.

    Owns a lazily created ``httpx.AsyncClient`` configured from the agent
    options: keep-alive with ``max_free_sockets`` idle connections, a
    ``timeout_ms`` ceiling on every network phase, and certificate
    validation controlled by ``verify_tls``.

    Example:
        >>> agent = NativeAgent("https", AgentOptions())
        >>> stream = await agent.send(options)
        >>> await stream.pipe(sink)
    """

    uses_bridge = False

    def __init__(self, scheme: str, options: AgentOptions) -> None:
        super().__init__(scheme, options)
        self._client: httpx.AsyncClient | None = None

    def to_httpx_limits(self) -> httpx.Limits:
        """Convert agent options to httpx limits."""
        return httpx.Limits(
            max_connections=None,
            max_keepalive_connections=(
                self.options.max_free_sockets if self.options.keep_alive else 0
            ),
        )

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Convert agent options to an httpx timeout."""
        return httpx.Timeout(self.options.timeout_seconds)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            if not self.options.verify_tls and self.scheme == "https":
                logger.warning(
                    "TLS certificate validation is disabled",
                    scheme=self.scheme,
                    hint="set UNIFIED_HTTP_VERIFY_TLS=1 to enable it",
                )
            self._client = httpx.AsyncClient(
                limits=self.to_httpx_limits(),
                timeout=self.to_httpx_timeout(),
                verify=self.options.verify_tls,
                follow_redirects=False,
            )
        return self._client

    async def send(self, options: TransportOptions) -> NativeResponseStream:
        client = self._get_client()
        url = options.url

        try:
            request = client.build_request(
                options.method.upper(),
                url,
                headers=options.headers,
                content=_encode_body(options.body) if options.method == "post" else None,
            )
            response = await client.send(request, stream=True)
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL: {e}", url=url, cause=e) from e
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(
                f"Request timed out: {e}",
                url=url,
                timeout_ms=self.options.timeout_ms,
                cause=e,
            ) from e
        except httpx.ConnectError as e:
            raise TransportError(f"Connection failed: {e}", url=url, cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", url=url, cause=e) from e

        return NativeResponseStream(response, url=url, timeout_ms=self.options.timeout_ms)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
