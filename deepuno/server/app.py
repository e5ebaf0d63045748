"""
FastAPI Application Entry Point for DeepUno.

This module creates and configures the FastAPI application with:
- HTTP routes for game lifecycle, turns and the discard pile
- A GameService backed by in-memory repositories
- CORS middleware for development
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from deepuno import __version__
from deepuno.config import Settings
from deepuno.server.routes import router
from deepuno.service import (
    GameService, InMemoryGameRepository, InMemoryPlayerRepository, InMemoryHandTracker,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def build_service(settings: Settings) -> GameService:
    """Wire the game service to in-memory storage."""
    return GameService(
        InMemoryGameRepository(),
        player_repository=InMemoryPlayerRepository(),
        hand_tracker=InMemoryHandTracker(starting_hand_size=settings.starting_hand_size),
        initial_card=settings.initial_card,
        recent_discards_limit=settings.recent_discards_limit,
    )


def create_app(settings: Optional[Settings] = None, service: Optional[GameService] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Runtime settings; read from the environment when omitted
        service: Pre-built GameService, mostly for tests

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="DeepUno",
        description="UNO game session service with an HTTP API",
        version=__version__,
    )
    app.state.settings = settings
    app.state.game_service = service or build_service(settings)

    # CORS middleware for development
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    @app.on_event("startup")
    async def startup_event():
        logger.info("DeepUno server starting up...")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("DeepUno server shutting down...")

    return app


# Create the application instance
app = create_app()


def main():
    """Run the server (for use as entry point)."""
    import uvicorn
    settings = app.state.settings
    uvicorn.run(
        "deepuno.server.app:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
