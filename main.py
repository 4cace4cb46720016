"""
Application server entry point.

Run with: python main.py
"""

import asyncio

from appserver.core.config import settings
from appserver.core.logging import configure_logging
from appserver.server import create_server, wait_for_listeners


async def serve() -> None:
    await create_server(settings.host, settings.port, settings)
    await wait_for_listeners()


def main() -> None:
    """Run the application server."""
    configure_logging(settings.log_level)
    asyncio.run(serve())


if __name__ == "__main__":
    main()
