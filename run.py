"""Entry point for the Community Sport API server.

Launches the FastAPI application with Uvicorn.  Configuration is read
from environment variables (see ``community_sport_api.app.core.config``);
``API_HOST`` and ``API_PORT`` select the listening address.

Usage:
    python run.py
"""
import asyncio
import os

from uvicorn import Config, Server

from community_sport_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted.

    Defaults are ``0.0.0.0`` and ``8000``.
    """
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level=os.getenv("LOG_LEVEL", "info").lower())
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
