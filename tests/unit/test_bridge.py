"""Tests for the bridge transport shim."""

import httpx
import pytest

from unified_http import AgentOptions
from unified_http.errors import BridgeError
from unified_http.transport import (
    BridgeAgent,
    BridgeRequest,
    BridgeResponse,
    TransportOptions,
)


def make_options(**overrides) -> TransportOptions:
    values = {
        "scheme": "https",
        "host": "api.example.com",
        "port": None,
        "path": "/v1/items?page=2",
        "method": "post",
        "headers": httpx.Headers({"content-type": "text/plain", "Content-Length": "3"}),
        "body": "abc",
    }
    values.update(overrides)
    return TransportOptions(**values)


class Sink:
    def __init__(self) -> None:
        self.events: list[tuple[str, object]] = []

    def on_data(self, chunk: bytes) -> None:
        self.events.append(("data", chunk))

    def on_end(self) -> None:
        self.events.append(("end", None))

    def on_error(self, error: BaseException) -> None:
        self.events.append(("error", error))


class TestBridgeRequest:
    """Tests for BridgeRequest."""

    def test_url_uses_default_port(self) -> None:
        assert BridgeRequest("https", make_options(), None, print).url == (
            "https://api.example.com:443/v1/items?page=2"
        )
        http_options = make_options(scheme="http", path="/")
        assert BridgeRequest("http", http_options, None, print).url == "http://api.example.com:80/"

    def test_url_keeps_explicit_port(self) -> None:
        request = BridgeRequest("http", make_options(scheme="http", port=8080), None, print)
        assert request.url.startswith("http://api.example.com:8080/")

    def test_end_passes_buffered_body_and_strips_content_length(self, fake_bridge) -> None:
        request = BridgeRequest("https", make_options(), fake_bridge, print)
        request.write("x=1")
        fake_bridge.request = _immediate(fake_bridge)
        request.end()

        call = fake_bridge.calls[0]
        assert call["method"] == "post"
        assert call["body"] == "x=1"
        assert "content-length" not in {k.lower() for k in call["headers"]}
        assert call["headers"]["content-type"] == "text/plain"

    def test_get_sends_no_body(self, fake_bridge) -> None:
        fake_bridge.request = _immediate(fake_bridge)
        request = BridgeRequest("https", make_options(method="get", body=None), fake_bridge, print)
        request.end()
        assert fake_bridge.calls[0]["method"] == "get"
        assert fake_bridge.calls[0]["body"] is None

    def test_set_timeout_is_noop(self, fake_bridge) -> None:
        fired = []
        request = BridgeRequest("https", make_options(), fake_bridge, print)
        request.set_timeout(1, lambda: fired.append(True))
        assert fired == []

    def test_error_routed_to_registered_callback(self) -> None:
        class FailingBridge:
            def request(self, method):
                def call(url, body, headers, on_success, on_error):
                    on_error("net::ERR_NAME_NOT_RESOLVED")

                return call

        errors = []
        request = BridgeRequest("https", make_options(), FailingBridge(), print)
        request.on("error", errors.append)
        request.end()
        assert errors == ["net::ERR_NAME_NOT_RESOLVED"]

    def test_unsupported_verb_becomes_error(self) -> None:
        class GetOnlyBridge:
            def request(self, method):
                if method != "get":
                    raise AttributeError(method)
                return lambda *args: None

        errors = []
        request = BridgeRequest("https", make_options(), GetOnlyBridge(), print)
        request.on("error", errors.append)
        request.end()
        assert isinstance(errors[0], AttributeError)

    def test_error_without_callback_raises(self) -> None:
        class FailingBridge:
            def request(self, method):
                return lambda url, body, headers, ok, fail: fail("boom")

        request = BridgeRequest("https", make_options(), FailingBridge(), print)
        with pytest.raises(BridgeError) as exc_info:
            request.end()
        assert exc_info.value.payload == "boom"

    def test_end_twice_raises(self, fake_bridge) -> None:
        fake_bridge.request = _immediate(fake_bridge)
        request = BridgeRequest("https", make_options(), fake_bridge, print)
        request.end()
        with pytest.raises(RuntimeError):
            request.end()


class TestBridgeResponse:
    """Tests for BridgeResponse."""

    def test_headers_lower_cased(self) -> None:
        response = BridgeResponse(
            {"status": 201, "headers": {"Content-Type": "text/html", "X-Trace": "t1"}, "data": ""}
        )
        assert response.status_code == 201
        assert response.status_message == "Created"
        assert response.headers["content-type"] == "text/html"
        assert response.header_values("X-TRACE") == ["t1"]

    def test_multi_value_header(self) -> None:
        response = BridgeResponse({"status": 200, "headers": {"Set-Cookie": ["a=1", "b=2"]}})
        assert response.header_values("set-cookie") == ["a=1", "b=2"]
        assert response.header_values("missing") == []

    def test_unknown_status_has_empty_message(self) -> None:
        assert BridgeResponse({"status": 599}).status_message == ""

    def test_not_streaming(self) -> None:
        assert BridgeResponse.supports_streaming is False

    @pytest.mark.asyncio
    async def test_pipe_delivers_single_chunk_then_end(self) -> None:
        sink = Sink()
        await BridgeResponse({"status": 200, "data": "whole body"}).pipe(sink)
        assert sink.events == [("data", b"whole body"), ("end", None)]

    @pytest.mark.asyncio
    async def test_pipe_encodes_parsed_json(self) -> None:
        sink = Sink()
        await BridgeResponse({"status": 200, "data": {"a": 1}}).pipe(sink)
        assert sink.events[0] == ("data", b'{"a": 1}')

    @pytest.mark.asyncio
    async def test_pipe_only_once(self) -> None:
        response = BridgeResponse({"status": 200, "data": b"x"})
        await response.pipe(Sink())
        with pytest.raises(RuntimeError):
            await response.pipe(Sink())


class TestBridgeAgent:
    """Tests for BridgeAgent."""

    @pytest.mark.asyncio
    async def test_send_resolves_with_response(self, fake_bridge) -> None:
        fake_bridge.result = {"status": 200, "headers": {"Content-Type": "text/plain"}, "data": "ok"}
        agent = BridgeAgent("https", AgentOptions(), fake_bridge)

        response = await agent.send(make_options())

        assert isinstance(response, BridgeResponse)
        assert response.status_code == 200
        assert fake_bridge.calls[0]["body"] == "abc"
        assert fake_bridge.calls[0]["url"] == "https://api.example.com:443/v1/items?page=2"

    @pytest.mark.asyncio
    async def test_send_raises_bridge_error(self, fake_bridge) -> None:
        fake_bridge.error = {"status": 0, "error": "offline"}
        agent = BridgeAgent("https", AgentOptions(), fake_bridge)

        with pytest.raises(BridgeError) as exc_info:
            await agent.send(make_options())
        assert exc_info.value.payload == {"status": 0, "error": "offline"}

    def test_options_are_plain_record(self, fake_bridge) -> None:
        agent = BridgeAgent("http", AgentOptions(), fake_bridge)
        assert agent.uses_bridge is True
        assert agent.options.keep_alive is True
        assert agent.options.max_free_sockets == 8


def _immediate(bridge):
    """Replace the bridge's deferred delivery with a recorder that never answers."""

    def request(method):
        def call(url, body, headers, on_success, on_error):
            bridge.calls.append({"method": method, "url": url, "body": body, "headers": headers})

        return call

    return request
