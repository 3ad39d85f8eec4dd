"""Root pytest fixtures for unified-http tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import pytest
import pytest_asyncio

from unified_http import AgentOptions, MemoryCookieJar
from unified_http.transport import TransportAgents, select_transport_agents


class FakeBridge:
    """Platform bridge double.

    Records every call and answers on the next loop iteration, like a host
    primitive calling back from its own event source.
    """

    def __init__(self, result: dict[str, Any] | None = None, error: Any = None) -> None:
        self.result = result or {"status": 200, "headers": {}, "data": ""}
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def request(self, method: str) -> Callable[..., None]:
        def call(url, body, headers, on_success, on_error) -> None:
            self.calls.append(
                {"method": method, "url": url, "body": body, "headers": dict(headers)}
            )
            loop = asyncio.get_running_loop()
            if self.error is not None:
                loop.call_soon(on_error, self.error)
            else:
                loop.call_soon(on_success, self.result)

        return call


class CallbackRecorder:
    """Completion callback that remembers every invocation."""

    def __init__(self) -> None:
        self.calls: list[tuple[BaseException | None, Any]] = []

    def __call__(self, error: BaseException | None, result: Any) -> None:
        self.calls.append((error, result))

    @property
    def error(self) -> BaseException | None:
        return self.calls[-1][0]

    @property
    def result(self) -> Any:
        return self.calls[-1][1]


@pytest.fixture
def cookie_jar() -> MemoryCookieJar:
    """Fresh, isolated cookie jar."""
    return MemoryCookieJar()


@pytest.fixture
def recorder() -> CallbackRecorder:
    return CallbackRecorder()


@pytest_asyncio.fixture
async def native_agents() -> AsyncIterator[TransportAgents]:
    """Native agents with default options, closed after the test."""
    agents = select_transport_agents(AgentOptions(), use_bridge=False)
    yield agents
    await agents.aclose()


@pytest.fixture
def bridge_agents_factory() -> Callable[..., tuple[TransportAgents, FakeBridge]]:
    """Build bridge-backed agents around a FakeBridge."""

    def factory(result: dict[str, Any] | None = None, error: Any = None):
        bridge = FakeBridge(result=result, error=error)
        agents = select_transport_agents(AgentOptions(), use_bridge=True, bridge=bridge)
        return agents, bridge

    return factory


@pytest.fixture
def fake_bridge() -> FakeBridge:
    """Bridge double answering 200 with an empty body; set .result/.error to change it."""
    return FakeBridge()
