#!/usr/bin/env python3
"""
Basic request example.

Shows the callback contract, the awaited result, and how the transport
selected for this interpreter shows up in the logs.

Usage:
    python examples/basic_requests.py
"""

import asyncio

import unified_http
from unified_http.telemetry import HttpLogger, LogLevel


def report(error, result) -> None:
    """Completion callback: exactly one of error/result is set."""
    if error is not None:
        print(f"Failed: {error}")
        return
    print(f"{result.status_code} {result.status_message} ({result.content_type})")
    print(f"  length={result.length} ratio={result.compression_ratio}% duration={result.duration}ms")


async def main() -> None:
    """Run basic request example."""
    HttpLogger.configure(level=LogLevel.DEBUG, format="text")

    try:
        # GET with a completion callback
        await unified_http.get("https://httpbin.org/gzip", callback=report)

        # POST, using the returned result instead of a callback
        result = await unified_http.post(
            "https://httpbin.org/post",
            "x=1",
            {"headers": {"content-type": "application/x-www-form-urlencoded"}},
        )
        if result is not None:
            print(f"Echoed form: {result.response_body.get('form')}")

        # Cookies set by one response are sent with the next request
        await unified_http.get("https://httpbin.org/cookies/set?flavour=oat")
        result = await unified_http.get("https://httpbin.org/cookies")
        if result is not None:
            print(f"Server saw cookies: {result.response_body}")
    finally:
        await unified_http.close_transport_agents()


if __name__ == "__main__":
    asyncio.run(main())
