"""Model Context Protocol server for the tool registry.

The same tools served by the HTTP router are exposed to MCP clients, either
mounted into the FastAPI app over streamable HTTP or run over stdio.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.server.streamable_http_manager import StreamableHTTPSessionManager

from mcrcon_bridge.orchestrator import ServerCommands
from mcrcon_bridge.rconclient import RCONSession

from .registry import call_tool, list_tools

if TYPE_CHECKING:
    from mcrcon_bridge.config import AppConfig

    from .models import ToolResult

LOGGER = logging.getLogger(__name__)

MCP_SERVER_NAME = "minecraft-rcon"


def to_call_tool_result(result: ToolResult) -> types.CallToolResult:
    """Convert a ToolResult to its MCP wire form.

    :param result: Result produced by call_tool
    :return: MCP CallToolResult carrying the same text and error flag
    """
    return types.CallToolResult(
        content=[
            types.TextContent(type="text", text=block.text) for block in result.content
        ],
        isError=result.is_error,
    )


def create_mcp_server(commands: ServerCommands) -> Server:
    """Create an MCP server dispatching to the tool registry.

    :param commands: The ServerCommands bound to the live RCON session
    :return: The configured low-level MCP server
    """
    server: Server = Server(MCP_SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=definition.name,
                description=definition.description,
                inputSchema=definition.input_schema,
            )
            for definition in list_tools()
        ]

    @server.call_tool()
    async def handle_call_tool(
        name: str,
        arguments: dict[str, Any] | None,
    ) -> types.CallToolResult:
        result = await call_tool(commands, name, arguments)
        if result.is_error:
            LOGGER.info("MCP tool %s returned an error result", name)
        return to_call_tool_result(result)

    return server


def create_session_manager(server: Server) -> StreamableHTTPSessionManager:
    """Create the streamable HTTP transport for mounting into an ASGI app.

    The manager's ``run()`` context must be active while requests arrive.

    :param server: The MCP server to serve
    :return: Stateless session manager
    """
    return StreamableHTTPSessionManager(app=server, stateless=True)


async def serve_stdio(config: AppConfig) -> None:
    """Connect to the RCON server and serve MCP over stdin/stdout.

    :param config: Application configuration
    """
    session = RCONSession(config.session_config)
    server = create_mcp_server(ServerCommands(session, default_op=config.default_op))

    async with session:
        LOGGER.info(
            "Connected to RCON server at %s:%d, serving MCP over stdio",
            config.rcon_host,
            config.rcon_port,
        )
        async with stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                server.create_initialization_options(),
            )
