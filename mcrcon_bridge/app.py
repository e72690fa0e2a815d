"""FastAPI application factory for the RCON tool bridge."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, FastAPI

from mcrcon_bridge.orchestrator import ServerCommands
from mcrcon_bridge.rconclient import RCONSession
from mcrcon_bridge.tools import (
    configure_tool_router,
    create_mcp_server,
    create_session_manager,
)

from .config import configure_logging, load_config_from_env

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.types import Receive, Scope, Send

    from .config import AppConfig

LOGGER = logging.getLogger(__name__)


def configure_fastapi_app(config: AppConfig) -> FastAPI:
    """Configure and return the FastAPI application.

    The RCON session is connected when the app starts and closed when it
    stops. Startup fails if the session cannot connect or authenticate.
    Tools are served both as JSON routes under /tools and to MCP clients
    over streamable HTTP at /mcp/.

    :param config: Application configuration
    :return: Configured FastAPI application
    """
    session = RCONSession(config.session_config)
    commands = ServerCommands(session, default_op=config.default_op)
    mcp_session_manager = create_session_manager(create_mcp_server(commands))

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[Any, Any]:
        """Application lifespan manager.

        Handles startup and shutdown of the RCON session and the MCP
        transport.
        """
        LOGGER.info("Minecraft RCON bridge is starting")

        async with mcp_session_manager.run(), session:
            LOGGER.info(
                "Connected to RCON server at %s:%d",
                config.rcon_host,
                config.rcon_port,
            )
            yield

            LOGGER.info("Minecraft RCON bridge is shutting down")

    app = FastAPI(
        title="Minecraft RCON Bridge",
        version="0.1.0",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    app.include_router(
        configure_tool_router(APIRouter(), commands),
        prefix="/tools",
        tags=["tools"],
    )

    async def handle_mcp(scope: Scope, receive: Receive, send: Send) -> None:
        await mcp_session_manager.handle_request(scope, receive, send)

    app.mount("/mcp", app=handle_mcp)

    @app.get("/")
    def read_root() -> str:
        return "Minecraft RCON Bridge"

    @app.get("/health")
    def health() -> dict[str, bool]:
        return {"connected": session.is_connected()}

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    configure_logging(config)
    return configure_fastapi_app(config)
