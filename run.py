"""Entry point for serving the Volunteer Board API.

Host, port and log level are read from the ``HOST``, ``PORT`` and
``LOG_LEVEL`` environment variables (see ``core.config``).

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from volunteer_board_api.app.core.config import settings


async def main() -> None:
    """Start the API using Uvicorn."""
    config = Config(
        app="volunteer_board_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
