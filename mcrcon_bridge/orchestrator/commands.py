"""Higher-level server operations built on an RCON session.

RCON replies are free text, so structured results come from matching the
vanilla server's wording. Whenever a reply does not match, the raw text is
passed through instead of failing.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import TYPE_CHECKING

from .types import CommandResult, PlayerList, ResultErrorKind, ServerInfo

if TYPE_CHECKING:
    from mcrcon_bridge.rconclient import RCONSession

LOGGER = logging.getLogger(__name__)

EMPTY_RESPONSE = "(empty response)"
DONE_RESPONSE = "Done"
UNPARSED_PLAYER_LIST = "Failed to parse player list"

PLAYER_LIST_PATTERN = re.compile(
    r"There are (\d+) of a max of (\d+) players online:(.*)",
)
PLAYER_SEPARATOR = ", "

OPERATOR_PROBE_SUCCESS = "Test passed"
OPERATOR_PROBE_FAILURE = "No entity was found"


def parse_player_list(reply: str) -> PlayerList | None:
    """Parse the reply of the ``list`` command.

    :param reply: Raw reply text
    :return: The parsed list, or None if the reply has an unknown shape
    """
    match = PLAYER_LIST_PATTERN.search(reply)
    if match is None:
        return None

    online, max_players, names = match.groups()
    names = names.strip()
    players = [name for name in names.split(PLAYER_SEPARATOR) if name] if names else []

    return PlayerList(online=int(online), max=int(max_players), players=players)


def is_operator_probe_success(reply: str) -> bool:
    """Interpret the reply of an operator probe command.

    Any reply that does not report "No entity was found" counts as success.
    A vanilla server answers a failed ``execute if`` with "Test failed",
    which therefore also counts, so the check errs towards listing a
    player as an operator.

    :param reply: Raw reply of ``execute if entity ...``
    :return: True if the probed player counts as an operator
    """
    return OPERATOR_PROBE_SUCCESS in reply or OPERATOR_PROBE_FAILURE not in reply


class ServerCommands:
    """Command orchestration for a single RCON session.

    Transport errors from the session propagate to the caller. Logical
    outcomes such as an unparseable reply or an ambiguous operator are
    returned as values.
    """

    def __init__(self, session: RCONSession, default_op: str | None = None) -> None:
        """Create the orchestrator.

        :param session: Connected session used for every command
        :param default_op: Operator used by execute_as_op when none is given
        """
        self._session = session
        self._default_op = default_op

    @property
    def session(self) -> RCONSession:
        """The session commands are sent through."""
        return self._session

    async def execute_command(self, command: str) -> str:
        """Run a raw console command.

        :param command: The command, without leading slash
        :return: The reply, or a placeholder if it was empty
        """
        reply = await self._session.send(command)
        return reply or EMPTY_RESPONSE

    async def list_players(self) -> PlayerList | str:
        """List online players.

        :return: The parsed player list, or the raw reply if it did not parse
        """
        reply = await self._session.send("list")
        player_list = parse_player_list(reply)
        if player_list is None:
            LOGGER.debug("Unrecognized list reply: %s", reply)
            return reply or UNPARSED_PLAYER_LIST
        return player_list

    async def get_server_info(self) -> ServerInfo:
        """Fetch the tps and version replies concurrently."""
        tps, version = await asyncio.gather(
            self._session.send("tps"),
            self._session.send("version"),
        )
        return ServerInfo(tps=tps, version=version)

    async def whitelist_add(self, player: str) -> str:
        """Add a player to the whitelist."""
        return await self._send_or_done(f"whitelist add {player}")

    async def whitelist_remove(self, player: str) -> str:
        """Remove a player from the whitelist."""
        return await self._send_or_done(f"whitelist remove {player}")

    async def op(self, player: str) -> str:
        """Give a player operator status."""
        return await self._send_or_done(f"op {player}")

    async def deop(self, player: str) -> str:
        """Remove operator status from a player."""
        return await self._send_or_done(f"deop {player}")

    async def get_online_ops(self) -> list[str]:
        """Find which online players are operators.

        Sends one probe per online player, one after another.

        :return: Names of online operators in player list order
        """
        reply = await self._session.send("list")
        player_list = parse_player_list(reply)
        if player_list is None:
            LOGGER.warning("Cannot detect operators, unrecognized list reply: %s", reply)
            return []

        operators = []
        for player in player_list.players:
            probe = await self._session.send(
                f"execute if entity @a[name={player},operator=true]",
            )
            if is_operator_probe_success(probe):
                operators.append(player)

        LOGGER.debug("Online operators: %s", operators)
        return operators

    async def execute_as_op(
        self,
        command: str,
        op: str | None = None,
        default_op: str | None = None,
    ) -> CommandResult:
        """Run a command as an online operator.

        The operator is, in order: ``op``, ``default_op``, the configured
        default, or the single operator currently online.

        :param command: The command to run, without leading slash
        :param op: Operator to run as, not checked against online players
        :param default_op: Fallback operator for this call
        :return: The reply, or an error-flagged result if no single operator
            could be chosen
        """
        operator = op or default_op or self._default_op

        if operator is None:
            candidates = await self.get_online_ops()
            if not candidates:
                return CommandResult(
                    text="No operators are online to run the command as",
                    error=ResultErrorKind.NO_OPERATOR_ONLINE,
                )
            if len(candidates) > 1:
                return CommandResult(
                    text=(
                        "Multiple operators are online, specify one of: "
                        + ", ".join(candidates)
                    ),
                    error=ResultErrorKind.AMBIGUOUS_OPERATOR,
                    candidates=candidates,
                )
            operator = candidates[0]

        LOGGER.info("Running command as %s: %s", operator, command)
        reply = await self._session.send(f"execute as {operator} run {command}")
        return CommandResult(text=reply or EMPTY_RESPONSE)

    async def _send_or_done(self, command: str) -> str:
        reply = await self._session.send(command)
        return reply or DONE_RESPONSE
