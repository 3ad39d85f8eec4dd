"""运行时环境检测：判断当前进程是否运行在带平台 HTTP 桥的浏览器宿主中。

Runtime environment detection.

Decides whether the process is hosted in a browser runtime (Pyodide) that
exposes a platform fetch bridge instead of native sockets.
"""
from __future__ import annotations

import importlib.util
import os
import sys

TRANSPORT_ENV_VAR = "UNIFIED_HTTP_TRANSPORT"


def _check_import(module_name: str) -> bool:
    """Check if a module is importable."""
    try:
        return importlib.util.find_spec(module_name) is not None
    except (ImportError, ValueError):
        return False


def is_browser_hosted() -> bool:
    """Whether the interpreter runs inside a browser (no process sockets)."""
    return sys.platform == "emscripten"


def has_platform_bridge() -> bool:
    """Whether the host exposes the Pyodide fetch bridge."""
    return _check_import("pyodide.http")


def detect_bridge_environment() -> bool:
    """Decide whether the bridge transport family should be active.

    ``UNIFIED_HTTP_TRANSPORT`` may force ``native`` or ``bridge``; any other
    value falls back to detection.
    """
    forced = os.getenv(TRANSPORT_ENV_VAR, "").strip().lower()
    if forced == "native":
        return False
    if forced == "bridge":
        return True
    return is_browser_hosted() and has_platform_bridge()
