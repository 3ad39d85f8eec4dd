"""错误分类模块：将传输层异常映射到少量稳定的错误类别。

Error classification for transport failures.

Maps library errors and the underlying httpx exceptions to a small set of
stable categories so callers can branch without importing httpx.
"""

from __future__ import annotations

from enum import Enum

import httpx

from unified_http.errors.base import (
    BridgeError,
    DecodeError,
    RequestTimeoutError,
    TransportError,
)


class TransportErrorKind(str, Enum):
    """Transport failure categories."""

    CONNECT = "connect"
    """DNS failure, connection refused or reset before a response."""

    TIMEOUT = "timeout"
    """Native transport aborted the request after the timeout ceiling."""

    PROTOCOL = "protocol"
    """Peer violated HTTP framing or closed the stream mid-body."""

    DECODE = "decode"
    """Body declared gzip but could not be inflated."""

    BRIDGE = "bridge"
    """Platform bridge reported a failure."""

    UNKNOWN = "unknown"
    """Anything else."""


def classify_transport_error(error: BaseException) -> TransportErrorKind:
    """Classify a transport failure.

    Library errors are classified by type first; a bare or wrapped httpx
    exception is classified by its httpx type.

    Args:
        error: Error delivered to the completion callback, or a raw httpx error

    Returns:
        Matching TransportErrorKind
    """
    if isinstance(error, RequestTimeoutError):
        return TransportErrorKind.TIMEOUT
    if isinstance(error, BridgeError):
        return TransportErrorKind.BRIDGE
    if isinstance(error, DecodeError):
        return TransportErrorKind.DECODE
    if isinstance(error, TransportError) and error.cause is not None:
        error = error.cause

    if isinstance(error, httpx.TimeoutException):
        return TransportErrorKind.TIMEOUT
    if isinstance(error, httpx.ConnectError):
        return TransportErrorKind.CONNECT
    if isinstance(error, (httpx.RemoteProtocolError, httpx.ReadError)):
        return TransportErrorKind.PROTOCOL
    if isinstance(error, httpx.DecodingError):
        return TransportErrorKind.DECODE
    if isinstance(error, (ConnectionError, OSError)):
        return TransportErrorKind.CONNECT
    return TransportErrorKind.UNKNOWN


def is_timeout(error: BaseException) -> bool:
    """Check whether an error came from the timeout abort."""
    return classify_transport_error(error) is TransportErrorKind.TIMEOUT
