"""Pytest configuration and shared RCON test doubles."""

from __future__ import annotations

import asyncio
import struct
import sys
from io import BytesIO
from pathlib import Path
from typing import TYPE_CHECKING, Self

import pytest

# Add the project root to Python path so tests can import mcrcon_bridge
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from mcrcon_bridge.rconclient import (  # noqa: E402
    ConnectionState,
    RCONPacket,
    RCONPacketType,
    RCONSession,
    RCONSessionConfig,
    decode_packet,
    encode_packet,
)

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

TEST_PASSWORD = "test_password"  # noqa: S105


class MockStreamWriter:
    """Mock StreamWriter collecting the frames a session writes."""

    def __init__(self) -> None:
        """Initialize the mock StreamWriter."""
        self.data = BytesIO()
        self.closed = False

    def write(self, data: bytes) -> None:
        """Write data to the mock buffer."""
        if not self.closed:
            self.data.write(data)

    async def drain(self) -> None:
        """Mock drain method."""

    def is_closing(self) -> bool:
        """Report whether close was called."""
        return self.closed

    def close(self) -> None:
        """Mark the writer as closed."""
        self.closed = True

    async def wait_closed(self) -> None:
        """Mock wait_closed method."""

    def packets(self) -> list[RCONPacket]:
        """Decode every frame written so far."""
        buffer = self.data.getvalue()
        packets = []
        while decoded := decode_packet(buffer):
            packet, consumed = decoded
            packets.append(packet)
            buffer = buffer[consumed:]
        return packets


class FakeRCONServer:
    """In-process RCON server for exercising a real TCP session.

    Authenticates against ``password`` and answers each command with
    ``responder(command)``. A responder returning None sends no reply.
    Commands in ``close_on`` make the server drop the connection instead.
    """

    def __init__(
        self,
        password: str = TEST_PASSWORD,
        responder: Callable[[str], str | None] | None = None,
        close_on: set[str] | None = None,
    ) -> None:
        self.password = password
        self.responder = responder or (lambda command: f"ran {command}")
        self.close_on = close_on or set()
        self.received: list[RCONPacket] = []
        self.port = 0
        self._server: asyncio.Server | None = None
        self._writers: list[asyncio.StreamWriter] = []

    async def __aenter__(self) -> Self:
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        self.port = self._server.sockets[0].getsockname()[1]
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        for writer in self._writers:
            writer.close()
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()

    @property
    def commands(self) -> list[str]:
        """Payloads of the command packets received so far."""
        return [
            packet.payload
            for packet in self.received
            if packet.packet_type == RCONPacketType.EXEC_COMMAND
        ]

    async def _handle(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self._writers.append(writer)
        try:
            while True:
                header = await reader.readexactly(4)
                (length,) = struct.unpack("<i", header)
                body = await reader.readexactly(length)
                packet, _ = decode_packet(header + body)
                self.received.append(packet)

                if packet.packet_type == RCONPacketType.AUTH:
                    reply_id = packet.request_id if packet.payload == self.password else -1
                    writer.write(
                        encode_packet(reply_id, RCONPacketType.AUTH_RESPONSE, ""),
                    )
                elif packet.payload in self.close_on:
                    break
                else:
                    reply = self.responder(packet.payload)
                    if reply is not None:
                        writer.write(
                            encode_packet(
                                packet.request_id,
                                RCONPacketType.RESPONSE_VALUE,
                                reply,
                            ),
                        )
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()


@pytest.fixture
def fake_rcon_server() -> type[FakeRCONServer]:
    """Provide the FakeRCONServer class for use as an async context manager."""
    return FakeRCONServer


@pytest.fixture
def session_config() -> Callable[..., RCONSessionConfig]:
    """Provide a factory for session configs pointing at a local port."""

    def make(port: int = 25575, **kwargs: object) -> RCONSessionConfig:
        kwargs.setdefault("password", TEST_PASSWORD)
        kwargs.setdefault("timeout", 1.0)
        return RCONSessionConfig(host="127.0.0.1", port=port, **kwargs)

    return make


@pytest.fixture
def mock_writer() -> MockStreamWriter:
    """Provide a MockStreamWriter."""
    return MockStreamWriter()


@pytest.fixture
def ready_session(
    session_config: Callable[..., RCONSessionConfig],
    mock_writer: MockStreamWriter,
) -> RCONSession:
    """Provide a session in the READY state writing into mock_writer.

    Replies are delivered by calling ``_handle_data`` directly.
    """
    session = RCONSession(session_config(timeout=0.2))
    session._writer = mock_writer  # noqa: SLF001
    session._state = ConnectionState.READY  # noqa: SLF001
    session.authenticated = True
    return session
