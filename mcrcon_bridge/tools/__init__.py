"""Tool surface over the server command orchestrator."""

from .mcp_server import create_mcp_server, create_session_manager, serve_stdio
from .models import TextContent, ToolDefinition, ToolResult
from .registry import TOOLS, call_tool, list_tools
from .router import configure_tool_router

__all__ = [
    "TOOLS",
    "TextContent",
    "ToolDefinition",
    "ToolResult",
    "call_tool",
    "configure_tool_router",
    "create_mcp_server",
    "create_session_manager",
    "list_tools",
    "serve_stdio",
]
