"""
Transport selection.

Chooses the transport family once per process and builds one agent per
scheme. In a browser-hosted runtime with a platform bridge both agents are
bridge-backed; everywhere else they wrap httpx.
"""

from __future__ import annotations

from dataclasses import dataclass

from unified_http._environment import detect_bridge_environment
from unified_http.config import AgentOptions
from unified_http.errors import ValidationError
from unified_http.telemetry import get_logger
from unified_http.transport.base import TransportAgent
from unified_http.transport.bridge import BridgeAgent, PlatformBridge, PyodideFetchBridge
from unified_http.transport.native import NativeAgent

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransportAgents:
    """The agent pair for 'http' and 'https'."""

    http: TransportAgent
    https: TransportAgent

    @property
    def uses_bridge(self) -> bool:
        return self.http.uses_bridge

    @property
    def transport_name(self) -> str:
        return "bridge" if self.uses_bridge else "native"

    def agent_for(self, scheme: str) -> TransportAgent:
        """Get the agent serving ``scheme``."""
        if scheme == "https":
            return self.https
        if scheme == "http":
            return self.http
        raise ValidationError(
            f"Unsupported URL scheme: {scheme!r}",
            field="url",
            expected=["http", "https"],
            actual=scheme,
        )

    async def aclose(self) -> None:
        """Release pooled connections of both agents."""
        await self.http.aclose()
        await self.https.aclose()


def select_transport_agents(
    options: AgentOptions | None = None,
    *,
    use_bridge: bool | None = None,
    bridge: PlatformBridge | None = None,
) -> TransportAgents:
    """Build the agent pair for the active environment.

    Args:
        options: Agent configuration (defaults: keep-alive, 8 idle sockets, 15 s)
        use_bridge: Force the transport family instead of detecting it
        bridge: Platform bridge to use in bridge mode (default: Pyodide fetch)

    Returns:
        TransportAgents for both schemes
    """
    options = options or AgentOptions()
    if use_bridge is None:
        use_bridge = detect_bridge_environment()

    if use_bridge:
        bridge = bridge or PyodideFetchBridge()
        agents = TransportAgents(
            http=BridgeAgent("http", options, bridge),
            https=BridgeAgent("https", options, bridge),
        )
    else:
        agents = TransportAgents(
            http=NativeAgent("http", options),
            https=NativeAgent("https", options),
        )

    logger.debug("transport selected", transport=agents.transport_name)
    return agents


# Process-wide agents, selected on first use and never re-selected
_global_agents: TransportAgents | None = None


def get_transport_agents() -> TransportAgents:
    """Get the process-wide agent pair."""
    global _global_agents
    if _global_agents is None:
        _global_agents = select_transport_agents()
    return _global_agents


async def close_transport_agents() -> None:
    """Close pooled connections held by the process-wide agents.

    The selection itself is kept; agents reopen their clients on next use.
    """
    if _global_agents is not None:
        await _global_agents.aclose()
