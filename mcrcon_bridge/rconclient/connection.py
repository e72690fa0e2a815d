"""RCON communication session.

One long-lived TCP connection carries any number of concurrent requests.
Each request gets its own id and future; a single reader task reassembles
frames from the socket and resolves the future whose id the reply echoes,
so replies may arrive in any order. Only that reader task mutates the
receive buffer and only the event loop touches the pending map, so no
locks are needed.

The philosophy is to bubble up socket exceptions to the caller for handling
reconnects/retries. Nothing in here retries.

Packet format reference: https://minecraft.wiki/w/RCON#Packet_format
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Self

from .packet import (
    AUTH_FAILED_REQUEST_ID,
    RCONPacket,
    RCONPacketType,
    decode_packet,
    encode_packet,
)
from .rcon_exceptions import (
    RCONClientConnectionError,
    RCONClientError,
    RCONClientIncorrectPasswordError,
    RCONClientNotConnectedError,
    RCONClientProtocolError,
    RCONClientTimeoutError,
)

if TYPE_CHECKING:
    from types import TracebackType

LOGGER = logging.getLogger(__name__)

_MAX_REQUEST_ID = 2**31 - 1


class ConnectionState(Enum):
    """Lifecycle of an :class:`RCONSession`."""

    DISCONNECTED = auto()
    CONNECTING = auto()
    AUTHENTICATING = auto()
    READY = auto()


@dataclass
class RCONSessionConfig:
    """Configuration for the RCON session.

    :param password: The RCON password
    :param host: The RCON host (default: 127.0.0.1)
    :param port: The RCON port (default: 25575)
    :param timeout: Seconds to wait for the TCP connect, the handshake,
        and each command reply (default: 5.0)
    :param read_chunk_size: Maximum bytes read from the socket at once
    """

    password: str
    host: str = "127.0.0.1"
    port: int = 25575
    timeout: float = 5.0
    read_chunk_size: int = 4096


class RCONSession:
    """Authenticated RCON connection multiplexing concurrent commands.

    Supports single event loop access only.
    """

    def __init__(self, config: RCONSessionConfig) -> None:
        """Initialize a disconnected session.

        :param config: The RCONSessionConfig instance
        """
        self._config = config
        self._state = ConnectionState.DISCONNECTED
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._buffer = bytearray()
        self._pending: dict[int, asyncio.Future[str]] = {}
        self._request_id = 0
        self.authenticated = False

    async def __aenter__(self) -> Self:
        """Connect and authenticate."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    @property
    def state(self) -> ConnectionState:
        """Current connection state."""
        return self._state

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a reply."""
        return len(self._pending)

    def is_connected(self) -> bool:
        """Check whether commands can be sent.

        :return: True if authenticated and the socket is open
        """
        return (
            self.authenticated
            and self._writer is not None
            and not self._writer.is_closing()
        )

    async def connect(self) -> None:
        """Open the TCP connection and authenticate with the password.

        Does nothing if the session is already ready.

        :raises RCONClientIncorrectPasswordError: if the password is rejected
        :raises RCONClientTimeoutError: if connecting or authenticating takes
            longer than the configured timeout
        :raises RCONClientConnectionError: if the socket fails or closes first
        """
        if self._state is ConnectionState.READY:
            return
        if self._state is not ConnectionState.DISCONNECTED:
            msg = f"Cannot connect while {self._state.name.lower()}"
            raise RCONClientConnectionError(msg)

        host, port = self._config.host, self._config.port
        LOGGER.info("Connecting to RCON server at %s:%d", host, port)
        self._state = ConnectionState.CONNECTING

        try:
            await self._open_and_authenticate(host, port)
        except BaseException:
            # cancellation included; every failed attempt ends disconnected
            await self.disconnect()
            raise

        self._state = ConnectionState.READY
        self.authenticated = True
        LOGGER.info("RCON client authenticated")

    async def _open_and_authenticate(self, host: str, port: int) -> None:
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                self._config.timeout,
            )
        except asyncio.TimeoutError as e:
            LOGGER.error("Connection to RCON server at %s:%d timed out", host, port)
            msg = "Connection timed out"
            raise RCONClientTimeoutError(msg) from e
        except OSError as e:
            LOGGER.error("Could not connect to RCON server at %s:%d: %s", host, port, e)
            msg = f"Could not connect to {host}:{port}: {e}"
            raise RCONClientConnectionError(msg) from e

        self._buffer.clear()
        self._reader_task = asyncio.create_task(self._read_loop())
        self._state = ConnectionState.AUTHENTICATING

        await self._request(RCONPacketType.AUTH, self._config.password)

        if self._writer is None:
            msg = "Connection closed during authentication"
            raise RCONClientConnectionError(msg)

    async def send(self, command: str) -> str:
        """Send a command to the RCON server and return the reply body.

        :param command: The RCON command to send
        :return: The payload of the matching reply packet

        :raises RCONClientNotConnectedError: if the session is not ready
        :raises RCONClientTimeoutError: if no reply arrives in time
        :raises RCONClientConnectionError: if the connection drops first
        """
        if self._state is not ConnectionState.READY:
            msg = "Not connected to RCON server"
            raise RCONClientNotConnectedError(msg)

        return await self._request(RCONPacketType.EXEC_COMMAND, command)

    async def disconnect(self) -> None:
        """Close the socket and reject every request still in flight."""
        task, self._reader_task = self._reader_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

        writer = self._writer
        self._mark_disconnected(RCONClientConnectionError("Session disconnected"))

        if writer is not None:
            try:
                await writer.wait_closed()
            except OSError as e:
                LOGGER.debug("Error while closing RCON socket: %s", e)
            LOGGER.info("RCON client disconnected")

    def _next_request_id(self) -> int:
        self._request_id += 1
        if self._request_id > _MAX_REQUEST_ID:
            self._request_id = 1
        while self._request_id in self._pending:
            self._request_id += 1
        return self._request_id

    async def _request(self, packet_type: RCONPacketType, payload: str) -> str:
        """Register a pending reply, write the packet, and await the reply.

        :param packet_type: AUTH or EXEC_COMMAND
        :param payload: The password or command
        :return: The reply payload
        """
        request_id = self._next_request_id()
        future: asyncio.Future[str] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future

        LOGGER.debug("Request ID: %d", request_id)
        LOGGER.debug("Packet type: %s", packet_type.name)
        if packet_type is RCONPacketType.EXEC_COMMAND:
            LOGGER.debug("Payload: %s", payload)

        try:
            await self._write(encode_packet(request_id, packet_type, payload))
            return await asyncio.wait_for(future, self._config.timeout)
        except asyncio.TimeoutError as e:
            LOGGER.warning(
                "Request %d timed out after %.3fs",
                request_id,
                self._config.timeout,
            )
            msg = f"Request {request_id} timed out"
            raise RCONClientTimeoutError(msg) from e
        finally:
            self._pending.pop(request_id, None)

    async def _write(self, frame: bytes) -> None:
        writer = self._writer
        if writer is None or writer.is_closing():
            msg = "Not connected to RCON server"
            raise RCONClientNotConnectedError(msg)
        try:
            writer.write(frame)
            await writer.drain()
        except ConnectionError as e:
            msg = f"Connection lost while writing: {e}"
            raise RCONClientConnectionError(msg) from e

    async def _read_loop(self) -> None:
        """Feed socket bytes into the receive buffer until the connection ends."""
        reader = self._reader
        if reader is None:
            return

        try:
            while True:
                data = await reader.read(self._config.read_chunk_size)
                if not data:
                    error = RCONClientConnectionError("Connection closed by server")
                    break
                self._handle_data(data)
        except RCONClientProtocolError as e:
            LOGGER.error("Closing desynchronized RCON stream: %s", e)
            error = RCONClientConnectionError(str(e))
        except OSError as e:
            LOGGER.warning("RCON connection lost: %s", e)
            error = RCONClientConnectionError(f"Connection lost: {e}")

        LOGGER.info("RCON connection closed")
        self._reader_task = None
        self._mark_disconnected(error)

    def _handle_data(self, data: bytes) -> None:
        """Append received bytes and dispatch every complete frame.

        :param data: Bytes just read from the socket
        :raises RCONClientProtocolError: if a frame header is invalid
        """
        self._buffer += data

        while True:
            decoded = decode_packet(self._buffer)
            if decoded is None:
                break
            packet, consumed = decoded
            del self._buffer[:consumed]
            self._dispatch(packet)

    def _dispatch(self, packet: RCONPacket) -> None:
        LOGGER.debug(
            "Response: ID=%d, type=%d, body=%s",
            packet.request_id,
            packet.packet_type,
            packet.payload,
        )

        if packet.request_id == AUTH_FAILED_REQUEST_ID:
            if self._state is not ConnectionState.AUTHENTICATING:
                LOGGER.warning("Dropping authentication failure outside of handshake")
                return
            error = RCONClientIncorrectPasswordError("Incorrect RCON password")
            for future in self._pending.values():
                if not future.done():
                    future.set_exception(error)
            return

        if (
            self._state is ConnectionState.AUTHENTICATING
            and packet.packet_type != RCONPacketType.AUTH_RESPONSE
        ):
            # some servers send an empty RESPONSE_VALUE ahead of the auth reply
            LOGGER.debug("Ignoring type %d packet during handshake", packet.packet_type)
            return

        future = self._pending.pop(packet.request_id, None)
        if future is None:
            LOGGER.debug("Dropping reply with unmatched ID %d", packet.request_id)
            return
        if not future.done():
            future.set_result(packet.payload)

    def _mark_disconnected(self, error: RCONClientConnectionError) -> None:
        if self._writer is not None:
            self._writer.close()
        self._reader = None
        self._writer = None
        self._state = ConnectionState.DISCONNECTED
        self.authenticated = False

        pending, self._pending = self._pending, {}
        for future in pending.values():
            if not future.done():
                future.set_exception(error)
