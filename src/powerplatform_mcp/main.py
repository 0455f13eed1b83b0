"""
Power Platform MCP Server

Main entry point for the Dataverse / Power Automate MCP server.
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional
import structlog

from .config import Settings, get_settings, load_dotenv_if_exists
from .server_factory import ServerFactory, ServerValidator


def configure_logging(log_level: str = "info") -> None:
    """Route structlog through stdlib logging on stderr; stdout carries the stdio transport"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logger = structlog.get_logger(__name__)


def resolve_log_level(cli_level: Optional[str], settings: Settings) -> str:
    """--log-level wins, then DEBUG=true, then LOG_LEVEL"""
    if cli_level:
        return cli_level
    if settings.debug:
        return "debug"
    return settings.log_level


def main() -> Optional[int]:
    """Main entry point with command line argument parsing"""
    # Load environment variables
    load_dotenv_if_exists()

    parser = argparse.ArgumentParser(description="Power Platform MCP Server")
    parser.add_argument(
        "--transport",
        choices=["stdio"],
        default="stdio",
        help="Transport mode (currently only stdio supported)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error"],
        help="Log level (default: LOG_LEVEL from the environment, else info)",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Acquire tokens for the configured endpoints and exit",
    )

    args = parser.parse_args()

    # Configure before the first log call so nothing reaches stdout
    configure_logging(args.log_level or "info")
    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("Failed to load settings", error=str(e))
        return 1

    configure_logging(resolve_log_level(args.log_level, settings))

    if args.validate_config:
        return 0 if asyncio.run(ServerValidator.validate_configuration()) else 1

    try:
        mcp = ServerFactory.create_configured_server()
    except Exception as e:
        logger.error("Failed to initialize server", error=str(e))
        return 1

    logger.info("Starting Power Platform MCP Server with STDIO transport")
    mcp.run(transport="stdio")
    return 0


if __name__ == "__main__":
    exit_code = main()
    sys.exit(exit_code or 0)
