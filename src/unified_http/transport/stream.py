"""
Streaming response contract shared by every transport.

A transport hands back a ``ResponseStream``; the request object pipes it
into a chain of ``StreamSink`` objects that ends in its own body buffer.
Native responses arrive in many chunks, bridge responses in exactly one.
"""

from __future__ import annotations

import zlib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import ClassVar, Protocol

from unified_http.errors import DecodeError


class StreamSink(Protocol):
    """Receiver of response body events.

    ``on_end`` and ``on_error`` are terminal; a well-behaved producer sends
    exactly one of them.
    """

    def on_data(self, chunk: bytes) -> None: ...

    def on_end(self) -> None: ...

    def on_error(self, error: BaseException) -> None: ...


class ResponseStream(ABC):
    """A response whose status and headers are known and whose body can be piped.

    Attributes:
        supports_streaming: True when the body arrives incrementally and the
            transport can abort it; False for atomic single-chunk delivery.
    """

    supports_streaming: ClassVar[bool] = True

    @property
    @abstractmethod
    def status_code(self) -> int:
        """HTTP status code."""

    @property
    @abstractmethod
    def status_message(self) -> str:
        """HTTP reason phrase."""

    @property
    @abstractmethod
    def headers(self) -> Mapping[str, str]:
        """Response headers, looked up case-insensitively by lower-case name."""

    @abstractmethod
    def header_values(self, name: str) -> list[str]:
        """All values of a repeatable header such as ``set-cookie``."""

    @abstractmethod
    async def pipe(self, sink: StreamSink) -> None:
        """Deliver the body to ``sink``, ending with ``on_end`` or ``on_error``."""


class _PassThrough:
    """Base for sinks that forward to a downstream sink."""

    def __init__(self, downstream: StreamSink) -> None:
        self._downstream = downstream

    def on_data(self, chunk: bytes) -> None:
        self._downstream.on_data(chunk)

    def on_end(self) -> None:
        self._downstream.on_end()

    def on_error(self, error: BaseException) -> None:
        self._downstream.on_error(error)


class ByteCounter(_PassThrough):
    """Counts bytes as they come off the wire, before any decoding."""

    def __init__(self, downstream: StreamSink) -> None:
        super().__init__(downstream)
        self.count = 0

    def on_data(self, chunk: bytes) -> None:
        self.count += len(chunk)
        super().on_data(chunk)


class GzipDecoder(_PassThrough):
    """Inflates a gzip body on its way downstream.

    Concatenated gzip members are decoded in sequence. A corrupt or
    truncated body is reported once through ``on_error`` and everything
    after it is dropped.
    """

    def __init__(self, downstream: StreamSink) -> None:
        super().__init__(downstream)
        self._decoder = self._new_decoder()
        self._received = 0
        self._failed = False

    @staticmethod
    def _new_decoder() -> zlib._Decompress:
        # wbits offset 16 selects the gzip container
        return zlib.decompressobj(16 + zlib.MAX_WBITS)

    def on_data(self, chunk: bytes) -> None:
        if self._failed or not chunk:
            return
        self._received += len(chunk)
        try:
            decoded = self._decode(chunk)
        except zlib.error as exc:
            self._fail(exc)
            return
        if decoded:
            self._downstream.on_data(decoded)

    def _decode(self, chunk: bytes) -> bytes:
        output = self._decoder.decompress(chunk)
        while self._decoder.eof and self._decoder.unused_data:
            leftover = self._decoder.unused_data
            self._decoder = self._new_decoder()
            output += self._decoder.decompress(leftover)
        return output

    def on_end(self) -> None:
        if self._failed:
            return
        if self._received and not self._decoder.eof:
            self._fail(None)
            return
        tail = self._decoder.flush()
        if tail:
            self._downstream.on_data(tail)
        self._downstream.on_end()

    def on_error(self, error: BaseException) -> None:
        if self._failed:
            return
        self._failed = True
        self._downstream.on_error(error)

    def _fail(self, cause: zlib.error | None) -> None:
        self._failed = True
        message = "unexpected end of gzip stream" if cause is None else f"invalid gzip data: {cause}"
        self._downstream.on_error(DecodeError(message, cause=cause))
