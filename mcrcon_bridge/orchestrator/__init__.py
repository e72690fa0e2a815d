"""Server operations interpreted from free-text RCON replies."""

from .commands import ServerCommands, is_operator_probe_success, parse_player_list
from .types import CommandResult, PlayerList, ResultErrorKind, ServerInfo

__all__ = [
    "CommandResult",
    "PlayerList",
    "ResultErrorKind",
    "ServerCommands",
    "ServerInfo",
    "is_operator_probe_success",
    "parse_player_list",
]
