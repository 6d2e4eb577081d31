"""Pytest configuration and fixtures for fluent-request tests.

This file provides:
- RecordingTransport: httpx.MockTransport that records every outgoing request
- PortReservation: Race-free port allocation for the echo server
- EchoServer: Subprocess management for the integration echo server
- Fixtures: Shared test infrastructure (transports, executors, servers)
"""

from __future__ import annotations

import socket
import subprocess
import sys
import time
from pathlib import Path
from typing import Any, Callable, Generator

import httpx
import pytest

from fluent_request.executor import HttpExecutor

# Project root for subprocess cwd
PROJECT_ROOT = Path(__file__).parent.parent
ECHO_SERVER_MODULE = "tests.integration.echo_server"


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled.

    Usage:
        transport = RecordingTransport(json_body={"ok": True})
        executor = HttpExecutor(transport=transport)
        ...
        assert transport.last_request.method == "GET"
    """

    def __init__(
        self,
        handler: Callable[[httpx.Request], httpx.Response] | None = None,
        status_code: int = 200,
        json_body: Any = None,
        text: str | None = None,
    ) -> None:
        self.requests: list[httpx.Request] = []

        def default_handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=json_body if json_body is not None else {})

        inner = handler or default_handler

        def recording_handler(request: httpx.Request) -> httpx.Response:
            # Read the body while the stream is open
            request.read()
            self.requests.append(request)
            return inner(request)

        super().__init__(recording_handler)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]


def make_executor(
    json_body: Any = None,
    status_code: int = 200,
    text: str | None = None,
    handler: Callable[[httpx.Request], httpx.Response] | None = None,
) -> tuple[HttpExecutor, RecordingTransport]:
    """Create an executor backed by a RecordingTransport.

    Prefer this over wiring transports by hand - it documents which response
    properties are typically varied in tests.
    """
    transport = RecordingTransport(
        handler=handler, status_code=status_code, json_body=json_body, text=text
    )
    return HttpExecutor(transport=transport), transport


def slash_echo_handler(request: httpx.Request) -> httpx.Response:
    """Echo /key/value path segments back as a JSON object (like echo.jsontest.com)."""
    segments = [s for s in request.url.path.split("/") if s]
    pairs = dict(zip(segments[0::2], segments[1::2]))
    return httpx.Response(200, json=pairs)


@pytest.fixture
def recording_transport() -> RecordingTransport:
    return RecordingTransport(json_body={"ok": True})


@pytest.fixture
def recording_executor(recording_transport: RecordingTransport) -> HttpExecutor:
    return HttpExecutor(transport=recording_transport)


class PortReservation:
    """Holds a reserved port with socket kept open to prevent races.

    find_free_port() style helpers have a race window: another process can
    grab the port between finding it and the server binding. This class keeps
    the socket open until just before the server starts.
    """

    def __init__(self) -> None:
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._socket.bind(("127.0.0.1", 0))  # Port 0 = OS assigns ephemeral port
        self._port = self._socket.getsockname()[1]
        self._released = False

    @property
    def port(self) -> int:
        return self._port

    def release(self) -> int:
        """Release the socket and return the port. Safe to call multiple times."""
        if not self._released:
            self._socket.close()
            self._released = True
        return self._port

    def __enter__(self) -> PortReservation:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.release()


def wait_for_server_ready(host: str, port: int, timeout: float = 10.0) -> bool:
    """Block until server accepts TCP connections, or timeout expires."""
    start = time.time()
    while time.time() - start < timeout:
        try:
            with socket.create_connection((host, port), timeout=1.0):
                return True
        except (ConnectionRefusedError, socket.timeout, OSError):
            time.sleep(0.1)
    return False


class EchoServer:
    """Manages the echo server subprocess for integration tests.

    Runs tests/integration/echo_server.py (FastAPI under uvicorn).
    """

    def __init__(self, reservation: PortReservation) -> None:
        self._reservation = reservation
        self.port = reservation.port
        self.host = "127.0.0.1"
        self.base_url = f"http://{self.host}:{self.port}"
        # Scheme-less address, exercises URL normalization
        self.address = f"{self.host}:{self.port}"
        self._process: subprocess.Popen | None = None

    def start(self) -> None:
        """Start the echo server subprocess.

        Raises:
            RuntimeError: If server fails to start within 10 seconds.
        """
        self._reservation.release()

        self._process = subprocess.Popen(
            [
                sys.executable, "-m", ECHO_SERVER_MODULE,
                "--host", self.host,
                "--port", str(self.port),
            ],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            cwd=PROJECT_ROOT,
        )

        if not wait_for_server_ready(self.host, self.port):
            stderr = ""
            if self._process and self._process.stderr:
                stderr = self._process.stderr.read().decode(errors="replace")
            self.stop()
            raise RuntimeError(
                f"EchoServer failed to start on port {self.port}. "
                f"stderr: {stderr or '(empty)'}"
            )

    def stop(self) -> None:
        """Stop the server with SIGTERM, escalating to SIGKILL after 5s."""
        if self._process:
            self._process.terminate()
            try:
                self._process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                self._process.kill()
                self._process.wait(timeout=5)
            self._process = None

    def __enter__(self) -> EchoServer:
        self.start()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.stop()


@pytest.fixture(scope="session")
def echo_server() -> Generator[EchoServer, None, None]:
    """Session-scoped echo server on a reserved port."""
    with EchoServer(PortReservation()) as server:
        yield server
