"""Entry point for the Biblioteca admin (FastAPI)."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from loguru import logger

from biblioteca.core.config import Settings, get_settings
from biblioteca.core.logging import configure_logging
from biblioteca.repositories.store_provider import StoreProvider, build_store_provider
from biblioteca.routers import autores as autores_router
from biblioteca.routers import libros as libros_router
from biblioteca.routers import pages as pages_router
from biblioteca.services.author_controller import AuthorController
from biblioteca.services.book_controller import BookController
from biblioteca.services.notifications import Notifier


def create_app(settings: Optional[Settings] = None, provider: Optional[StoreProvider] = None) -> FastAPI:
    """Factory compatible with uvicorn (`uvicorn biblioteca.app:create_app --factory`)."""
    settings = settings or get_settings()
    configure_logging(settings)
    provider = provider or build_store_provider(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Biblioteca admin started in {} mode", provider.mode)
        yield
        await provider.aclose()

    app = FastAPI(title="Biblioteca Admin", lifespan=lifespan)
    app.state.settings = settings
    app.state.provider = provider
    app.state.controllers = {
        "autores": AuthorController(provider, Notifier(settings.notification_timeout_ms)),
        "libros": BookController(provider, Notifier(settings.notification_timeout_ms)),
    }

    app.include_router(pages_router.router)
    app.include_router(autores_router.router)
    app.include_router(libros_router.router)
    return app
