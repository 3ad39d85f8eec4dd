"""
Cookie jar used to persist cookies across requests.

The request object only needs two operations from a jar: ``serialize()``
for the outbound ``cookie`` header and ``parse()`` for inbound
``set-cookie`` values. ``MemoryCookieJar`` is the in-process default.
"""

from __future__ import annotations

from collections.abc import Iterable
from http.cookies import CookieError, SimpleCookie
from typing import Protocol, runtime_checkable

from unified_http.telemetry import get_logger

logger = get_logger(__name__)


@runtime_checkable
class CookieJar(Protocol):
    """Cookie store consumed by the request object."""

    def serialize(self) -> str:
        """Return the value for an outbound ``cookie`` header."""
        ...

    def parse(self, set_cookie: str | Iterable[str] | None) -> None:
        """Ingest one or more ``set-cookie`` header values."""
        ...


class MemoryCookieJar:
    """In-memory cookie jar.

    Cookies are keyed by name only; domain and path scoping are not
    applied. A cookie sent with ``Max-Age=0`` is removed.

    Example:
        >>> jar = MemoryCookieJar()
        >>> jar.parse("session=abc; Path=/; HttpOnly")
        >>> jar.serialize()
        'session=abc'
    """

    def __init__(self) -> None:
        self._cookies: dict[str, str] = {}

    def serialize(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self._cookies.items())

    def parse(self, set_cookie: str | Iterable[str] | None) -> None:
        if not set_cookie:
            return
        values = [set_cookie] if isinstance(set_cookie, str) else list(set_cookie)
        for header in values:
            self._ingest(header)

    def _ingest(self, header: str) -> None:
        parsed = SimpleCookie()
        try:
            parsed.load(header)
        except CookieError:
            logger.warning("ignoring malformed set-cookie header")
            return
        for name, morsel in parsed.items():
            if morsel["max-age"] == "0":
                self._cookies.pop(name, None)
            else:
                self._cookies[name] = morsel.value

    def get(self, name: str) -> str | None:
        return self._cookies.get(name)

    def clear(self) -> None:
        self._cookies.clear()

    def __len__(self) -> int:
        return len(self._cookies)

    def __contains__(self, name: object) -> bool:
        return name in self._cookies


_default_jar: CookieJar | None = None


def default_cookie_jar() -> CookieJar:
    """Get the process-wide jar used when a request is given none."""
    global _default_jar
    if _default_jar is None:
        _default_jar = MemoryCookieJar()
    return _default_jar


def set_default_cookie_jar(jar: CookieJar) -> None:
    """Replace the process-wide jar."""
    global _default_jar
    _default_jar = jar
