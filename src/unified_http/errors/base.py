"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for unified-http.

Provides a layered error hierarchy:
- UnifiedHttpError: Base class for all library errors
- TransportError: Network-level failures (DNS, connect, socket)
- RequestTimeoutError: Native transport timeout abort
- BridgeError: Failure reported by the platform bridge
- DecodeError: Corrupt compressed response body
- ValidationError: Invalid request descriptor
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'url')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'transport', 'bridge', 'validation')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class UnifiedHttpError(Exception):
    """Base class for all unified-http errors.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> UnifiedHttpError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class TransportError(UnifiedHttpError):
    """Error while moving request/response bytes.

    Raised when:
    - DNS resolution fails
    - Connection is refused or reset
    - Socket fails mid-stream
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.url = url
        self.cause = cause
        self.__cause__ = cause


class RequestTimeoutError(TransportError):
    """The native transport aborted a request after the timeout ceiling."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        timeout_ms: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        ctx = ErrorContext(source="timeout")
        if timeout_ms is not None:
            ctx.details["timeout_ms"] = timeout_ms
        super().__init__(message, ctx, url=url, cause=cause)
        self.timeout_ms = timeout_ms


class BridgeError(TransportError):
    """Failure reported by the platform bridge.

    The bridge hands back an arbitrary payload; it is kept untouched in
    ``payload``.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        payload: Any = None,
    ) -> None:
        ctx = ErrorContext(source="bridge")
        cause = payload if isinstance(payload, BaseException) else None
        super().__init__(message, ctx, url=url, cause=cause)
        self.payload = payload


class DecodeError(TransportError):
    """Response declared gzip but the body could not be inflated."""

    def __init__(
        self,
        message: str,
        *,
        encoding: str = "gzip",
        cause: BaseException | None = None,
    ) -> None:
        ctx = ErrorContext(source="decode")
        ctx.details["encoding"] = encoding
        super().__init__(message, ctx, cause=cause)
        self.encoding = encoding


class ValidationError(UnifiedHttpError):
    """Invalid request descriptor.

    Raised when:
    - URL is not absolute or uses an unsupported scheme
    - Method is not supported
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual
