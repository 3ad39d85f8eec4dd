"""统一 HTTP 客户端：无论底层使用哪种网络栈，都提供一致的请求/响应对象。

unified-http: one request/response object over interchangeable transports.

Requests run over httpx sockets in a normal interpreter, or over the host's
fetch bridge in a browser-hosted runtime; either way callers get the same
streaming, timing, gzip and cookie behaviour.
"""
from __future__ import annotations

from unified_http.config import AgentOptions, RequestOptions
from unified_http.cookies import (
    CookieJar,
    MemoryCookieJar,
    default_cookie_jar,
    set_default_cookie_jar,
)
from unified_http.errors import (
    BridgeError,
    DecodeError,
    RequestTimeoutError,
    TransportError,
    UnifiedHttpError,
    ValidationError,
)
from unified_http.request import (
    BAD_JSON_PAYLOAD,
    CompletionCallback,
    HttpRequest,
    HttpResult,
    RequestState,
    get,
    post,
)
from unified_http.transport import (
    TransportAgents,
    close_transport_agents,
    get_transport_agents,
    select_transport_agents,
)

__version__ = "0.1.0"

__all__ = [
    # Request
    "BAD_JSON_PAYLOAD",
    "CompletionCallback",
    "HttpRequest",
    "HttpResult",
    "RequestState",
    "get",
    "post",
    # Configuration
    "AgentOptions",
    "RequestOptions",
    # Cookies
    "CookieJar",
    "MemoryCookieJar",
    "default_cookie_jar",
    "set_default_cookie_jar",
    # Errors
    "BridgeError",
    "DecodeError",
    "RequestTimeoutError",
    "TransportError",
    "UnifiedHttpError",
    "ValidationError",
    # Transport
    "TransportAgents",
    "close_transport_agents",
    "get_transport_agents",
    "select_transport_agents",
    # Version
    "__version__",
]
