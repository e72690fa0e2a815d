"""Named tools exposing server operations to an outside caller.

Every tool call ends in a :class:`ToolResult`. Logical failures and any
exception raised by the RCON session are both rendered as error-flagged
text, so callers never have to handle exceptions.
"""

from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mcrcon_bridge.orchestrator import PlayerList

from .models import ToolDefinition, ToolResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from mcrcon_bridge.orchestrator import ServerCommands

    ToolHandler = Callable[[ServerCommands, dict[str, Any]], Awaitable[ToolResult]]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Tool:
    """A tool definition together with the coroutine that runs it."""

    definition: ToolDefinition
    handler: ToolHandler

    @property
    def required(self) -> list[str]:
        """Argument names the caller must supply."""
        return self.definition.input_schema.get("required", [])


def _schema(
    properties: dict[str, str] | None = None,
    required: list[str] | None = None,
) -> dict[str, Any]:
    schema: dict[str, Any] = {
        "type": "object",
        "properties": {
            name: {"type": "string", "description": description}
            for name, description in (properties or {}).items()
        },
    }
    if required:
        schema["required"] = required
    return schema


def _json_text(value: Any) -> str:
    if dataclasses.is_dataclass(value):
        value = dataclasses.asdict(value)
    return json.dumps(value, indent=2)


async def _execute_command(commands: ServerCommands, args: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(await commands.execute_command(str(args["command"])))


async def _list_players(commands: ServerCommands, _: dict[str, Any]) -> ToolResult:
    player_list = await commands.list_players()
    if isinstance(player_list, PlayerList):
        return ToolResult.from_text(_json_text(player_list))
    return ToolResult.from_text(player_list)


async def _get_server_info(commands: ServerCommands, _: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(_json_text(await commands.get_server_info()))


async def _whitelist_add(commands: ServerCommands, args: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(await commands.whitelist_add(str(args["player"])))


async def _whitelist_remove(
    commands: ServerCommands,
    args: dict[str, Any],
) -> ToolResult:
    return ToolResult.from_text(await commands.whitelist_remove(str(args["player"])))


async def _op(commands: ServerCommands, args: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(await commands.op(str(args["player"])))


async def _deop(commands: ServerCommands, args: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(await commands.deop(str(args["player"])))


async def _get_online_ops(commands: ServerCommands, _: dict[str, Any]) -> ToolResult:
    return ToolResult.from_text(_json_text(await commands.get_online_ops()))


async def _execute_as_op(commands: ServerCommands, args: dict[str, Any]) -> ToolResult:
    op = args.get("op")
    result = await commands.execute_as_op(
        str(args["command"]),
        op=str(op) if op else None,
    )
    return ToolResult.from_text(result.text, is_error=result.is_error)


_COMMAND_DESCRIPTION = "The command to execute (without leading slash)"

TOOLS: dict[str, Tool] = {
    tool.definition.name: tool
    for tool in (
        Tool(
            ToolDefinition(
                name="mc_execute_command",
                description="Execute a Minecraft command on the server via RCON",
                input_schema=_schema({"command": _COMMAND_DESCRIPTION}, ["command"]),
            ),
            _execute_command,
        ),
        Tool(
            ToolDefinition(
                name="mc_list_players",
                description="List all online players on the server",
            ),
            _list_players,
        ),
        Tool(
            ToolDefinition(
                name="mc_get_server_info",
                description="Get server information (TPS, version)",
            ),
            _get_server_info,
        ),
        Tool(
            ToolDefinition(
                name="mc_whitelist_add",
                description="Add a player to the server whitelist",
                input_schema=_schema(
                    {"player": "The player name to whitelist"},
                    ["player"],
                ),
            ),
            _whitelist_add,
        ),
        Tool(
            ToolDefinition(
                name="mc_whitelist_remove",
                description="Remove a player from the server whitelist",
                input_schema=_schema(
                    {"player": "The player name to remove from whitelist"},
                    ["player"],
                ),
            ),
            _whitelist_remove,
        ),
        Tool(
            ToolDefinition(
                name="mc_op",
                description="Give a player operator status",
                input_schema=_schema(
                    {"player": "The player name to make an operator"},
                    ["player"],
                ),
            ),
            _op,
        ),
        Tool(
            ToolDefinition(
                name="mc_deop",
                description="Remove operator status from a player",
                input_schema=_schema(
                    {"player": "The player name to remove operator status"},
                    ["player"],
                ),
            ),
            _deop,
        ),
        Tool(
            ToolDefinition(
                name="mc_get_online_ops",
                description="List online players that have operator status",
            ),
            _get_online_ops,
        ),
        Tool(
            ToolDefinition(
                name="mc_execute_as_op",
                description=(
                    "Execute a command as an online operator. Uses the given "
                    "operator, else the configured default, else the only "
                    "operator online"
                ),
                input_schema=_schema(
                    {
                        "command": _COMMAND_DESCRIPTION,
                        "op": "The operator to run the command as",
                    },
                    ["command"],
                ),
            ),
            _execute_as_op,
        ),
    )
}


def list_tools() -> list[ToolDefinition]:
    """List every available tool.

    :return: Tool definitions in registration order
    """
    return [tool.definition for tool in TOOLS.values()]


async def call_tool(
    commands: ServerCommands,
    name: str,
    arguments: dict[str, Any] | None,
) -> ToolResult:
    """Run a named tool and shape its outcome as a ToolResult.

    :param commands: Orchestrator bound to the live session
    :param name: Name of the tool to run
    :param arguments: Tool arguments; None if the caller sent none
    :return: The tool's result, error-flagged on any failure
    """
    if arguments is None:
        return ToolResult.from_error("No arguments provided")

    tool = TOOLS.get(name)
    if tool is None:
        return ToolResult.from_error(f"Unknown tool: {name}")

    missing = [key for key in tool.required if key not in arguments]
    if missing:
        return ToolResult.from_error(
            f"Missing required argument: {', '.join(missing)}",
        )

    LOGGER.debug("Calling tool %s with %s", name, arguments)
    try:
        return await tool.handler(commands, arguments)
    except Exception as e:
        LOGGER.error("Tool %s failed: %s", name, e)
        return ToolResult.from_error(str(e))
