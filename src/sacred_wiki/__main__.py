"""Entry point for the sacred-wiki MCP server."""

import argparse
import asyncio
import logging
import sys

from sacred_wiki import __version__
from sacred_wiki.config.settings import Settings
from sacred_wiki.server import create_server, initialize_services, shutdown_services


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="sacred-wiki",
        description="Sacred Madness wiki link graph and research assistant via MCP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--content-dir",
        help="Directory of markdown pages (overrides SACRED_WIKI_CONTENT_DIR)",
    )
    return parser.parse_args()


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout carries the stdio transport."""
    logging.basicConfig(
        level=level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def main(args: argparse.Namespace) -> None:
    """Main entry point for the MCP server."""
    overrides = {"content_dir": args.content_dir} if args.content_dir else {}
    settings = Settings(**overrides)
    configure_logging(settings.log_level)

    await initialize_services(settings)
    mcp = create_server()

    try:
        await mcp.run_stdio_async()
    finally:
        await shutdown_services()


def cli() -> None:
    """CLI entry point."""
    asyncio.run(main(parse_args()))


if __name__ == "__main__":
    cli()
