"""Result structures returned by server command operations."""

from dataclasses import dataclass, field
from enum import StrEnum


class ResultErrorKind(StrEnum):
    """Logical failures reported as results instead of raised exceptions.

    :cvar NO_OPERATOR_ONLINE: No operator was online to run a command as
    :cvar AMBIGUOUS_OPERATOR: Several operators were online and none was chosen
    """

    NO_OPERATOR_ONLINE = "NoOperatorOnlineError"
    AMBIGUOUS_OPERATOR = "AmbiguousOperatorError"


@dataclass(frozen=True)
class PlayerList:
    """Parsed reply of the ``list`` command.

    :param online: Number of players online
    :param max: Player slots on the server
    :param players: Names of online players
    """

    online: int
    max: int
    players: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ServerInfo:
    """Raw replies of the ``tps`` and ``version`` commands."""

    tps: str
    version: str


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a command that may fail for a logical reason.

    :param text: Server reply, or a description of the failure
    :param error: The failure kind, None on success
    :param candidates: Operators the caller may choose from, if relevant
    """

    text: str
    error: ResultErrorKind | None = None
    candidates: list[str] = field(default_factory=list)

    @property
    def is_error(self) -> bool:
        """Whether the result describes a failure."""
        return self.error is not None
