"""
FastAPI Application Entry Point for PokerTable.

This module creates and configures the FastAPI application with:
- HTTP routes for room management
- WebSocket endpoint for real-time play
- Static file serving for the browser client
- CORS middleware for development
"""

import os
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware

from pokertable import __version__
from pokertable.server.config import ServerConfig
from pokertable.server.rooms import RoomRegistry
from pokertable.server.routes import router
from pokertable.server.websocket import websocket_endpoint

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Server settings, read from the environment by default

    Returns:
        Configured FastAPI application instance
    """
    config = config or ServerConfig.from_env()
    configure_logging(config.log_level)

    app = FastAPI(
        title="PokerTable",
        description="Multi-room Texas Hold'em server with WebSocket API",
        version=__version__,
    )
    app.state.config = config
    app.state.rooms = RoomRegistry(config)

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include HTTP routes
    app.include_router(router)

    # WebSocket endpoint
    app.websocket("/ws")(websocket_endpoint)

    # Mount static files
    if os.path.isdir(config.static_dir):
        app.mount("/static", StaticFiles(directory=config.static_dir, html=True), name="static")
        logger.info(f"Mounted static files from {config.static_dir}")
    else:
        logger.warning(f"Static directory not found: {config.static_dir}")

    @app.on_event("startup")
    async def startup_event():
        logger.info("PokerTable server starting up...")

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.rooms.close()
        logger.info("PokerTable server shutting down...")

    return app


# Create the application instance
app = create_app()


def main():
    """Run the server (for use as entry point)."""
    import uvicorn
    config = app.state.config
    uvicorn.run(
        "pokertable.server.app:app",
        host=config.host,
        port=config.port,
    )


if __name__ == "__main__":
    main()
