"""Main application entry point for Vikunja MCP server.

Exit Codes:
    0: Normal successful termination
    1: Configuration failures (see ``ConfigurationError``) or unhandled exceptions
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal, get_args, get_origin

from fastmcp import Context, FastMCP

from vikunja_mcp import __version__
from vikunja_mcp.api.client import VikunjaClient
from vikunja_mcp.config import ConfigurationError, ServerConfig
from vikunja_mcp.tools.tasks import TaskTools

logger = logging.getLogger(__name__)


class CoreServer:
    """Runs the FastMCP server over stdio with one shared Vikunja client.

    Logging goes to stderr so stdout carries only MCP JSON-RPC traffic. The
    client's connection pool is closed when the server's lifespan ends.
    """

    def __init__(self, config: ServerConfig) -> None:
        self.config = config
        self._vikunja_client: VikunjaClient | None = None
        self._shutdown_requested = False
        self._setup_logging()
        self.app = FastMCP(name="vikunja-mcp", version=__version__, lifespan=self._lifespan)
        self.app.tool(self.ping_tool, name="ping")
        TaskTools(self.app, self.get_vikunja_client())
        self._setup_signal_handlers()

    def _setup_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.config.log_level),
            format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            stream=sys.stderr,
        )

    def _setup_signal_handlers(self) -> None:
        """Exit on SIGINT and SIGTERM without writing to stdout.

        FastMCP's stdio loop offers no cooperative shutdown hook, so the
        handler terminates the process directly.
        """

        def signal_handler(signum: int, _: object | None) -> None:
            if self._shutdown_requested:
                logger.warning("Second shutdown signal received; forcing exit")
                os._exit(1)
            self._shutdown_requested = True
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            os._exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    @asynccontextmanager
    async def _lifespan(self, _app: FastMCP) -> AsyncIterator[dict[str, Any]]:
        """Close the shared client's connection pool when the server stops."""
        try:
            yield {}
        finally:
            if self._vikunja_client is not None:
                await self._vikunja_client.aclose()
                logger.debug("Closed Vikunja HTTP client")

    def get_config(self) -> ServerConfig:
        """Get the server configuration instance."""
        return self.config

    def get_vikunja_client(self) -> VikunjaClient:
        """Get or create the Vikunja API client shared by every tool."""
        if self._vikunja_client is None:
            self._vikunja_client = VikunjaClient(self.config)
        return self._vikunja_client

    async def ping_tool(self, ctx: Context) -> str:
        """Ping health-check tool that returns a static 'pong' response."""
        await ctx.info("Ping tool called, returning pong")
        return "pong"

    async def _test_connectivity_if_enabled(self) -> None:
        """Check Vikunja API connectivity once before serving; failures are only logged."""
        if not self.config.test_connectivity_on_startup:
            return

        logger.info("Testing Vikunja API connectivity...")
        vikunja_client = self.get_vikunja_client()
        try:
            # The check runs in its own event loop, so its pool must not outlive it.
            async with vikunja_client:
                success = await vikunja_client.test_connectivity()
        except Exception:
            logger.exception("Vikunja API connectivity test failed with exception")
            return

        if success:
            logger.info("Vikunja API connectivity test successful")
        else:
            logger.warning("Vikunja API connectivity test failed")

    def run(self) -> None:
        """Run the MCP server with stdio transport."""
        logger.info("Starting Vikunja MCP server with stdio transport")
        if self.config.test_connectivity_on_startup:
            asyncio.run(self._test_connectivity_if_enabled())
        self.app.run(transport="stdio")


def load_configuration(args: argparse.Namespace) -> ServerConfig:
    """Load configuration with CLI > file > defaults precedence.

    Raises:
        SystemExit: With status 1 on any ``ConfigurationError``.
    """
    overrides = {name: getattr(args, name, None) for name, _, _ in ServerConfig.cli_options()}
    config_file = overrides.pop("config_file", None)

    try:
        config = ServerConfig.load(config_file, overrides)
    except ConfigurationError:
        logger.exception("Invalid configuration")
        sys.exit(1)

    logger.info("Effective configuration: %s", config.to_redacted_dict())
    return config


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse the flags declared on ``ServerConfig`` fields.

    Each flag stores into its field name and defaults to ``None`` so that an
    omitted flag never overrides a file value.
    """
    parser = argparse.ArgumentParser(description="Vikunja MCP Server")
    for name, flag, field in ServerConfig.cli_options():
        choices = get_args(field.annotation) if get_origin(field.annotation) is Literal else None
        parser.add_argument(flag, dest=name, default=None, choices=choices, help=field.description)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the Vikunja MCP server."""
    config = load_configuration(parse_cli_args(argv))
    try:
        CoreServer(config).run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested via KeyboardInterrupt")
    except Exception:
        logger.exception("Unhandled exception in server")
        sys.exit(1)
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
