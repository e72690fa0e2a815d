"""Main entry point for the RCON tool bridge."""

import argparse
import asyncio

import uvicorn

from mcrcon_bridge import create_app
from mcrcon_bridge.config import configure_logging, load_config_from_env
from mcrcon_bridge.tools import serve_stdio


def main() -> None:
    """Run the FastAPI application using Uvicorn, or the MCP server on stdio."""
    parser = argparse.ArgumentParser(
        description="Expose Minecraft RCON commands as HTTP and MCP tools.",
    )
    parser.add_argument(
        "--env-file",
        type=str,
        default=".env",
        help="Path to the environment configuration file.",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the FastAPI application on.",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to run the FastAPI application on.",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Serve MCP over stdin/stdout instead of running the HTTP server.",
    )
    args = parser.parse_args()

    if args.stdio:
        config = load_config_from_env(args.env_file)
        configure_logging(config)
        asyncio.run(serve_stdio(config))
        return

    app = create_app(args.env_file)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
