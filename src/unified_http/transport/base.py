"""
Transport agent contract.

Each agent serves one URL scheme and turns a ``TransportOptions`` record
into a ``ResponseStream``. The request object never talks to httpx or the
platform bridge directly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import httpx

from unified_http.config import DEFAULT_PORTS

if TYPE_CHECKING:
    from unified_http.config import AgentOptions
    from unified_http.transport.stream import ResponseStream


@dataclass(frozen=True)
class TransportOptions:
    """Everything a transport needs to issue one request.

    Attributes:
        scheme: 'http' or 'https'
        host: Target host name (IPv6 literals without brackets)
        port: Explicit port, or None for the scheme default
        path: Path including any query string
        method: Lower-case verb
        headers: Outbound headers
        body: Payload written for 'post'
    """

    scheme: str
    host: str
    port: int | None
    path: str
    method: str
    headers: httpx.Headers
    body: Any = None

    @property
    def default_port(self) -> int:
        return DEFAULT_PORTS[self.scheme]

    @property
    def url(self) -> str:
        """Absolute URL with the port always spelled out."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port or self.default_port}{self.path}"


class TransportAgent(ABC):
    """Per-scheme handle onto one transport family."""

    uses_bridge: ClassVar[bool] = False

    def __init__(self, scheme: str, options: AgentOptions) -> None:
        self.scheme = scheme
        self.options = options

    @abstractmethod
    async def send(self, options: TransportOptions) -> ResponseStream:
        """Issue the request and wait for the response head.

        Raises:
            TransportError: When no response could be obtained
        """

    async def aclose(self) -> None:
        """Release pooled resources, if any."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scheme={self.scheme!r})"
