"""错误体系：提供传输层的结构化错误类型。

Error hierarchy for unified-http.

Every failure handed to a completion callback is a TransportError subclass;
ValidationError is raised synchronously for malformed request descriptors.
"""

from unified_http.errors.base import (
    BridgeError,
    DecodeError,
    ErrorContext,
    RequestTimeoutError,
    TransportError,
    UnifiedHttpError,
    ValidationError,
)
from unified_http.errors.classification import (
    TransportErrorKind,
    classify_transport_error,
    is_timeout,
)

__all__ = [
    # Base errors
    "BridgeError",
    "DecodeError",
    "ErrorContext",
    "RequestTimeoutError",
    "TransportError",
    "UnifiedHttpError",
    "ValidationError",
    # Classification
    "TransportErrorKind",
    "classify_transport_error",
    "is_timeout",
]
