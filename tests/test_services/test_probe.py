"""Tests for the TCP connect probe."""

import asyncio
import socket

import pytest

from gridscan.services import probe
from gridscan.services.probe import ProbeResult, connect


def closed_port() -> int:
    """Return a loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class TestConnect:
    """Tests for connect()."""

    @pytest.mark.asyncio
    async def test_open_port(self):
        """Test a successful handshake against a local listener."""

        async def handle(reader, writer):
            writer.close()

        server = await asyncio.start_server(handle, "127.0.0.1", 0)
        port = server.sockets[0].getsockname()[1]
        try:
            result = await connect("127.0.0.1", port, timeout=2.0)
        finally:
            server.close()
            await server.wait_closed()

        assert result.port == port
        assert result.succeeded is True
        assert result.elapsed_ms is not None
        assert result.elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_refused_port(self):
        """Test that a refused connection is a closed port."""
        port = closed_port()

        result = await connect("127.0.0.1", port, timeout=2.0)

        assert result == ProbeResult(port=port, succeeded=False)

    @pytest.mark.asyncio
    async def test_timeout(self, monkeypatch):
        """Test that a handshake exceeding the timeout is a closed port."""

        async def hang(host, port):
            await asyncio.sleep(10)

        monkeypatch.setattr(probe.asyncio, "open_connection", hang)

        result = await connect("192.0.2.1", 80, timeout=0.01)

        assert result.succeeded is False
        assert result.elapsed_ms is None

    @pytest.mark.asyncio
    async def test_unreachable(self, monkeypatch):
        """Test that network errors are a closed port."""

        async def unreachable(host, port):
            raise OSError(113, "No route to host")

        monkeypatch.setattr(probe.asyncio, "open_connection", unreachable)

        result = await connect("192.0.2.1", 22)

        assert result.succeeded is False
