"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from massaswap import __version__
from massaswap.config import get_settings
from massaswap.node.client import MassaNodeClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Using Massa node {app.state.node.rpc_url}")
    yield


def create_app(node: Optional[MassaNodeClient] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        node: Node client to serve requests with (defaults to one built
            from settings)
    """
    settings = get_settings()

    app = FastAPI(
        title="massaswap API",
        description="Quotes and swap plans for Dusa on Massa",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.node = node or MassaNodeClient(settings=settings)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.debug else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes
    from massaswap.api.routes import health
    from massaswap.web.controllers import quotes, swaps, tokens

    app.include_router(health.router, tags=["Health"])
    app.include_router(tokens.router)
    app.include_router(quotes.router)
    app.include_router(swaps.router)

    return app
