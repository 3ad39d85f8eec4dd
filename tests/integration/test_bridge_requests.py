"""End-to-end requests over the bridge transport (fake platform bridge)."""

from __future__ import annotations

import asyncio
import gzip

import pytest

from unified_http import BridgeError, HttpRequest, RequestState


class TestBridgeGet:
    """GET through the bridge shim."""

    @pytest.mark.asyncio
    async def test_json_response(self, bridge_agents_factory, cookie_jar, recorder) -> None:
        agents, bridge = bridge_agents_factory(
            result={
                "status": 200,
                "headers": {"Content-Type": "application/json", "Set-Cookie": "s=1; Path=/"},
                "data": '{"a": 1}',
            }
        )
        cookie_jar.parse("sid=abc")

        result = await HttpRequest.get(
            "https://api.test/data", None, recorder, cookie_jar=cookie_jar, agents=agents
        )

        assert len(recorder.calls) == 1
        assert recorder.error is None
        assert result.status_code == 200
        assert result.status_message == "OK"
        assert result.response_body == {"a": 1}
        assert result.cookies == ["s=1; Path=/"]
        assert result.compression_ratio == 0
        assert cookie_jar.serialize() == "sid=abc; s=1"

        call = bridge.calls[0]
        assert call["method"] == "get"
        assert call["url"] == "https://api.test:443/data"
        assert call["headers"]["cookie"] == "sid=abc"
        assert call["headers"]["accept-encoding"] == "gzip"

    @pytest.mark.asyncio
    async def test_gzip_header_does_not_trigger_decoding(self, bridge_agents_factory, cookie_jar) -> None:
        agents, _ = bridge_agents_factory(
            result={"status": 200, "headers": {"Content-Encoding": "gzip"}, "data": "already decoded"}
        )

        result = await HttpRequest.get("http://api.test/", cookie_jar=cookie_jar, agents=agents)

        assert result.response_body == "already decoded"

    @pytest.mark.asyncio
    async def test_gzip_bytes_passed_through_untouched(self, bridge_agents_factory, cookie_jar) -> None:
        compressed = gzip.compress(b"payload")
        agents, _ = bridge_agents_factory(
            result={"status": 200, "headers": {"content-encoding": "gzip"}, "data": compressed}
        )
        request = HttpRequest({"url": "http://api.test/"}, cookie_jar=cookie_jar, agents=agents)

        result = await request.execute()

        assert result.length == len(compressed)
        assert request.raw_response_length == len(compressed)

    @pytest.mark.asyncio
    async def test_bad_json(self, bridge_agents_factory, cookie_jar) -> None:
        agents, _ = bridge_agents_factory(
            result={"status": 200, "headers": {"content-type": "application/json"}, "data": "<html>"}
        )

        result = await HttpRequest.get("http://api.test/", cookie_jar=cookie_jar, agents=agents)

        assert result.response_body == {"error": "Bad JSON"}


class TestBridgePost:
    """POST through the bridge shim."""

    @pytest.mark.asyncio
    async def test_body_and_headers_reach_bridge(self, bridge_agents_factory, cookie_jar) -> None:
        agents, bridge = bridge_agents_factory(result={"status": 201, "headers": {}, "data": ""})
        cookie_jar.parse("sid=1")

        result = await HttpRequest.post(
            "http://api.test:8080/form",
            "x=1",
            {
                "headers": {
                    "content-type": "application/x-www-form-urlencoded",
                    "Content-Length": "3",
                }
            },
            cookie_jar=cookie_jar,
            agents=agents,
        )

        call = bridge.calls[0]
        assert call["method"] == "post"
        assert call["url"] == "http://api.test:8080/form"
        assert call["body"] == "x=1"
        assert call["headers"]["cookie"] == cookie_jar.serialize()
        assert call["headers"]["content-type"] == "application/x-www-form-urlencoded"
        assert "content-length" not in call["headers"]
        assert result.status_code == 201
        assert result.status_message == "Created"


class TestBridgeFailure:
    """Bridge errors reach the callback exactly once."""

    @pytest.mark.asyncio
    async def test_error_payload(self, bridge_agents_factory, cookie_jar, recorder) -> None:
        agents, _ = bridge_agents_factory(error={"status": 0, "error": "net::ERR_INTERNET_DISCONNECTED"})
        request = HttpRequest({"url": "https://api.test/"}, cookie_jar=cookie_jar, agents=agents)

        result = await request.execute(recorder)

        assert result is None
        assert len(recorder.calls) == 1
        assert recorder.result is None
        assert isinstance(recorder.error, BridgeError)
        assert recorder.error.payload == {"status": 0, "error": "net::ERR_INTERNET_DISCONNECTED"}
        assert request.state is RequestState.FAILED
        assert cookie_jar.serialize() == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {"status": "OK", "headers": {}, "data": ""},
            {"status": 200, "headers": ["content-type"], "data": ""},
        ],
    )
    async def test_malformed_result(self, bridge_agents_factory, cookie_jar, recorder, payload) -> None:
        agents, bridge = bridge_agents_factory(result=payload)
        request = HttpRequest({"url": "https://api.test/"}, cookie_jar=cookie_jar, agents=agents)

        result = await asyncio.wait_for(request.execute(recorder), timeout=2)

        assert result is None
        assert len(bridge.calls) == 1
        assert len(recorder.calls) == 1
        assert isinstance(recorder.error, BridgeError)
        assert recorder.error.payload is not None
        assert request.state is RequestState.FAILED
