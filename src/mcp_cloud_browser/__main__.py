"""
Entry point: ``mcp-cloud-browser`` or ``python -m mcp_cloud_browser``.

Stdout carries the MCP stream, so all logging goes to stderr.
"""

import os
import sys
import asyncio
import logging

from .config import get_env_config, load_env_file
from .context import build_context, set_context
from .server import CloudBrowserServer

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = (os.getenv("MCP_LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def serve(config: dict) -> None:
    ctx = build_context(config)
    set_context(ctx)
    await CloudBrowserServer(ctx).run()


def main() -> None:
    configure_logging()
    load_env_file()
    try:
        config = get_env_config()
    except EnvironmentError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
