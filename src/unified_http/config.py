"""
Client configuration.

Fixed limits of the client plus the pydantic option records handed to
transport agents and request objects.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Always negotiated; native responses are inflated transparently.
USE_GZIP_COMPRESSION = True
MAX_REQUEST_TIMEOUT_MS = 15 * 1000
MAX_FREE_SOCKETS = 8
NANOSECONDS_IN_SECOND = 1_000_000_000

VERIFY_TLS_ENV_VAR = "UNIFIED_HTTP_VERIFY_TLS"

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


def _verify_tls_from_env() -> bool:
    """Certificate validation stays off unless explicitly enabled."""
    return os.getenv(VERIFY_TLS_ENV_VAR, "0") == "1"


class AgentOptions(BaseModel):
    """Per-scheme agent configuration.

    The bridge transport accepts this record but has no use for it; the
    native transport turns it into httpx limits and timeouts.
    """

    model_config = ConfigDict(frozen=True)

    keep_alive: bool = Field(default=True, description="Reuse idle connections")
    max_free_sockets: int = Field(
        default=MAX_FREE_SOCKETS, ge=0, description="Idle connections kept per scheme"
    )
    timeout_ms: int = Field(
        default=MAX_REQUEST_TIMEOUT_MS, gt=0, description="Abort ceiling in milliseconds"
    )
    verify_tls: bool = Field(
        default_factory=_verify_tls_from_env,
        description="Validate server certificates (disabled unless opted in)",
    )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


class RequestOptions(BaseModel):
    """Caller-supplied request descriptor.

    Frozen: the descriptor does not change once the transport call is issued.
    Unknown keys are kept so callers can pass through extra settings.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    url: str = Field(description="Absolute http(s) URL")
    method: str = Field(default="get", description="'get' or 'post'")
    headers: dict[str, str] = Field(default_factory=dict)
    request_body: Any = Field(default=None, description="Body sent with 'post'")

    @classmethod
    def merged(cls, defaults: dict[str, Any], overrides: dict[str, Any] | None) -> RequestOptions:
        """Build options from defaults with caller overrides applied on top."""
        return cls(**{**defaults, **(overrides or {})})
