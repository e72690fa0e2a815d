"""Provides async RCON session functionality for the tool layer."""

from .connection import ConnectionState, RCONSession, RCONSessionConfig
from .packet import RCONPacket, RCONPacketType, decode_packet, encode_packet
from .rcon_exceptions import (
    RCONClientConnectionError,
    RCONClientError,
    RCONClientIncorrectPasswordError,
    RCONClientNotConnectedError,
    RCONClientProtocolError,
    RCONClientTimeoutError,
)

__all__ = [
    "ConnectionState",
    "RCONClientConnectionError",
    "RCONClientError",
    "RCONClientIncorrectPasswordError",
    "RCONClientNotConnectedError",
    "RCONClientProtocolError",
    "RCONClientTimeoutError",
    "RCONPacket",
    "RCONPacketType",
    "RCONSession",
    "RCONSessionConfig",
    "decode_packet",
    "encode_packet",
]
