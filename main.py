import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import Settings, get_settings
from app.infrastructure.backend import create_backend_clients
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store clients on startup and release them on shutdown."""

    clients = getattr(app.state, "backend", None)
    owns_clients = clients is None
    if owns_clients:
        clients = create_backend_clients(get_settings())
        app.state.backend = clients
    yield
    if owns_clients:
        clients.dispose()
        app.state.backend = None


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = settings or get_settings()
    app = FastAPI(title="Marketplace Notifications", lifespan=lifespan)

    # The dashboard is the only browser client.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.public_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
