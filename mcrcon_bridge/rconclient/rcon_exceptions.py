"""Custom exceptions for the RCON client module."""


class RCONClientError(Exception):
    """Base class for all RCON client failures."""


class RCONClientConnectionError(RCONClientError, ConnectionError):
    """Raised when the TCP socket fails or closes before a request completes."""


class RCONClientNotConnectedError(RCONClientConnectionError):
    """Raised when a command is sent while the session is not ready."""


class RCONClientIncorrectPasswordError(RCONClientError):
    """Raised when the RCON password is incorrect."""


class RCONClientTimeoutError(RCONClientError, TimeoutError):
    """Raised when a connect, handshake, or command exceeds its deadline."""


class RCONClientProtocolError(RCONClientError):
    """Raised when a frame header can never describe a valid packet."""
