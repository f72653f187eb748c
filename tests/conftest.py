from __future__ import annotations

import asyncio
import io
import os
import socket
import sys
import threading

import pytest
from rich.console import Console

from queueprobe.mock_service import make_server


# On Windows, some libs behave better with the Selector event loop (esp. pytest + httpx).
def pytest_sessionstart(session):
    if sys.platform.startswith("win"):
        try:
            asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())  # type: ignore[attr-defined]
        except Exception:
            # If not available (older Py versions), just continue.
            pass
    # Make sure UTF-8 is used for any subprocess/file ops in tests.
    os.environ.setdefault("PYTHONUTF8", "1")


@pytest.fixture
def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture
def mock_service():
    """A stub queue service on a free localhost port; yields the port."""
    httpd = make_server("127.0.0.1", 0)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield httpd.server_address[1]
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]
