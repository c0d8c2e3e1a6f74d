"""FastAPI dependency injection and shared state."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from fastapi import Request

from secondleash.services.dogs import DogService
from secondleash.storage.repositories.dogs import DogStore, InMemoryDogRepository

if TYPE_CHECKING:
    from secondleash.config.settings import Settings

logger = structlog.get_logger(__name__)


def create_dog_store(settings: Settings) -> DogStore:
    """Create the appropriate dog store based on settings."""
    if settings.use_database:
        from secondleash.storage.database import get_engine
        from secondleash.storage.repositories.db_dogs import DatabaseDogRepository

        logger.info("dog_store_selected", backend="database")
        return DatabaseDogRepository(get_engine())
    logger.info("dog_store_selected", backend="memory")
    return InMemoryDogRepository()


def create_dog_service(settings: Settings, store: DogStore | None = None) -> DogService:
    return DogService(
        store or create_dog_store(settings),
        max_page_size=settings.max_page_size,
    )


def get_dog_service(request: Request) -> DogService:
    """Return the DogService built for this application instance."""
    service: DogService = request.app.state.dog_service
    return service
