"""Router for listing and calling tools over HTTP."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import APIRouter, Body

from .models import ToolDefinition, ToolResult
from .registry import call_tool, list_tools

if TYPE_CHECKING:
    from mcrcon_bridge.orchestrator import ServerCommands

LOGGER = logging.getLogger(__name__)


def configure_tool_router(
    router: APIRouter,
    commands: ServerCommands,
) -> APIRouter:
    """Configure the tool router with the orchestrator it dispatches to.

    :param router: The FastAPI APIRouter to configure
    :param commands: The ServerCommands bound to the live RCON session
    :return: The configured APIRouter
    """

    @router.get("")
    async def tools() -> list[ToolDefinition]:
        return list_tools()

    @router.post("/{name}")
    async def tool_call(
        name: str,
        arguments: Annotated[dict[str, Any] | None, Body()] = None,
    ) -> ToolResult:
        result = await call_tool(commands, name, arguments)
        if result.is_error:
            LOGGER.info("Tool %s returned an error result", name)
        return result

    return router
