"""
Transport layer - the network stacks behind the unified request object.

Provides:
- Native httpx transport with true streaming and keep-alive
- Bridge shim over an atomic platform HTTP primitive
- One streaming response contract for both
- One-time transport selection per process
"""

from unified_http.transport.agents import (
    TransportAgents,
    close_transport_agents,
    get_transport_agents,
    select_transport_agents,
)
from unified_http.transport.base import TransportAgent, TransportOptions
from unified_http.transport.bridge import (
    BridgeAgent,
    BridgeRequest,
    BridgeResponse,
    BridgeResult,
    PlatformBridge,
    PyodideFetchBridge,
)
from unified_http.transport.native import NativeAgent, NativeResponseStream
from unified_http.transport.stream import (
    ByteCounter,
    GzipDecoder,
    ResponseStream,
    StreamSink,
)

__all__ = [
    "BridgeAgent",
    "BridgeRequest",
    "BridgeResponse",
    "BridgeResult",
    "ByteCounter",
    "GzipDecoder",
    "NativeAgent",
    "NativeResponseStream",
    "PlatformBridge",
    "PyodideFetchBridge",
    "ResponseStream",
    "StreamSink",
    "TransportAgent",
    "TransportAgents",
    "TransportOptions",
    "close_transport_agents",
    "get_transport_agents",
    "select_transport_agents",
]
