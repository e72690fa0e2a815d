"""RCON packet types and wire encoding.

Every frame is a little-endian ``int32`` length followed by exactly that
many bytes: request id, packet type, the UTF-8 payload and two NUL bytes.

Packet format reference: https://minecraft.wiki/w/RCON#Packet_format
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from .rcon_exceptions import RCONClientProtocolError

# request id (4) + packet type (4) + 2 null bytes (2)
PACKET_METADATA_SIZE = 10
LENGTH_PREFIX_SIZE = 4
# length prefix (4) + request id (4) + packet type (4)
PAYLOAD_OFFSET = 12

AUTH_FAILED_REQUEST_ID = -1


class RCONPacketType(IntEnum):
    """Types for an RCON TCP packet.

    Defined in the `Minecraft Wiki RCON documentation <https://minecraft.wiki/w/RCON#Packets>`_.

    ``EXEC_COMMAND`` and ``AUTH_RESPONSE`` share the value 2. A reply's meaning
    is decided by the connection phase it arrives in, not by this field.

    :cvar RESPONSE_VALUE: Reply to a command packet
    :cvar EXEC_COMMAND: Standard command packet
    :cvar AUTH_RESPONSE: Reply to an authentication packet
    :cvar AUTH: Authentication packet
    """

    RESPONSE_VALUE = 0
    EXEC_COMMAND = 2
    AUTH_RESPONSE = 2
    AUTH = 3


@dataclass(frozen=True)
class RCONPacket:
    """A single decoded RCON packet.

    :param request_id: Id of the originating request, or -1 on auth failure
    :param packet_type: Raw type field from the wire
    :param payload: Packet body decoded as UTF-8
    """

    request_id: int
    packet_type: int
    payload: str


def encode_packet(request_id: int, packet_type: int, payload: str) -> bytes:
    """Format a packet to be sent to the RCON server.

    :param request_id: The request ID for the packet
    :param packet_type: The type of the packet (RCONPacketType)
    :param payload: The body of the packet
    :return: The formatted packet as bytes
    """
    body_bytes = payload.encode("utf-8")

    return (
        struct.pack("<i", len(body_bytes) + PACKET_METADATA_SIZE)
        + struct.pack("<i", request_id)
        + struct.pack("<i", int(packet_type))
        + body_bytes
        + b"\x00\x00"
    )


def decode_packet(buffer: bytes | bytearray) -> tuple[RCONPacket, int] | None:
    """Decode the first complete frame at the start of ``buffer``.

    :param buffer: Bytes received so far, starting at a frame boundary
    :return: The packet and the number of bytes it occupied, or None if the
        buffer does not yet hold a whole frame
    :raises RCONClientProtocolError: if the length field is below the
        fixed packet overhead
    """
    if len(buffer) < LENGTH_PREFIX_SIZE:
        return None

    packet_length: int = struct.unpack_from("<i", buffer, 0)[0]
    if packet_length < PACKET_METADATA_SIZE:
        msg = f"Invalid packet length: {packet_length}"
        raise RCONClientProtocolError(msg)

    frame_size = LENGTH_PREFIX_SIZE + packet_length
    if len(buffer) < frame_size:
        return None

    request_id, packet_type = struct.unpack_from("<ii", buffer, LENGTH_PREFIX_SIZE)
    payload = bytes(buffer[PAYLOAD_OFFSET : frame_size - 2]).decode(
        "utf-8",
        errors="replace",
    )

    return RCONPacket(request_id, packet_type, payload), frame_size
