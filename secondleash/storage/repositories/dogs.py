"""Dog record store interface and in-memory implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

import structlog

from secondleash.exceptions import ConflictError

if TYPE_CHECKING:
    from datetime import datetime

    from secondleash.models.domain import DogFilter, DogRecord

logger = structlog.get_logger(__name__)


class DogStore(ABC):
    """Persistence contract used by DogService.

    Implementations must enforce microchip uniqueness among live dogs
    themselves; the service pre-check is only a fast reject.
    """

    @abstractmethod
    async def find_live_by_id(self, dog_id: str) -> DogRecord | None:
        """Return the dog if it exists and is not soft-deleted."""

    @abstractmethod
    async def find_live(
        self, filters: DogFilter, page: int, limit: int
    ) -> tuple[list[DogRecord], int]:
        """Return one page of live dogs (newest first) and the total match count."""

    @abstractmethod
    async def insert(self, dog: DogRecord) -> DogRecord:
        """Persist a new dog."""

    @abstractmethod
    async def update_fields(self, dog_id: str, fields: dict[str, Any]) -> DogRecord | None:
        """Apply ``fields`` to a live dog and return it, or None if it is gone."""

    @abstractmethod
    async def soft_delete(self, dog_id: str, timestamp: datetime) -> bool:
        """Mark a live dog as deleted. Returns False if it was not live."""

    @abstractmethod
    async def exists_live_with_microchip(
        self, microchip_id: str, exclude_id: str | None = None
    ) -> bool:
        """Check whether another live dog already carries ``microchip_id``."""


class InMemoryDogRepository(DogStore):
    """In-memory dog store. Replaced by SQLModel + PostgreSQL in production."""

    def __init__(self) -> None:
        self._dogs: dict[str, DogRecord] = {}

    async def find_live_by_id(self, dog_id: str) -> DogRecord | None:
        dog = self._dogs.get(dog_id)
        if dog and dog.is_live:
            return dog.model_copy()
        return None

    async def find_live(
        self, filters: DogFilter, page: int, limit: int
    ) -> tuple[list[DogRecord], int]:
        matches = [
            dog
            for dog in self._dogs.values()
            if dog.is_live
            and (filters.shelter_id is None or dog.shelter_id == filters.shelter_id)
            and (filters.status is None or dog.status == filters.status)
        ]
        matches.sort(key=lambda d: d.created_at, reverse=True)
        offset = (page - 1) * limit
        return [d.model_copy() for d in matches[offset : offset + limit]], len(matches)

    async def insert(self, dog: DogRecord) -> DogRecord:
        if dog.microchip_id and self._microchip_taken(dog.microchip_id, exclude_id=None):
            raise ConflictError("Microchip ID already exists")
        self._dogs[dog.id] = dog.model_copy()
        logger.debug("dog_inserted", id=dog.id, shelter_id=dog.shelter_id)
        return dog.model_copy()

    async def update_fields(self, dog_id: str, fields: dict[str, Any]) -> DogRecord | None:
        dog = self._dogs.get(dog_id)
        if not dog or not dog.is_live:
            return None
        microchip_id = fields.get("microchip_id")
        if microchip_id and self._microchip_taken(microchip_id, exclude_id=dog_id):
            raise ConflictError("Microchip ID already exists")
        updated = dog.model_copy(update=fields)
        self._dogs[dog_id] = updated
        return updated.model_copy()

    async def soft_delete(self, dog_id: str, timestamp: datetime) -> bool:
        dog = self._dogs.get(dog_id)
        if not dog or not dog.is_live:
            return False
        self._dogs[dog_id] = dog.model_copy(update={"deleted_at": timestamp})
        logger.debug("dog_soft_deleted", id=dog_id)
        return True

    async def exists_live_with_microchip(
        self, microchip_id: str, exclude_id: str | None = None
    ) -> bool:
        return self._microchip_taken(microchip_id, exclude_id=exclude_id)

    def _microchip_taken(self, microchip_id: str, exclude_id: str | None) -> bool:
        return any(
            dog.is_live and dog.microchip_id == microchip_id and dog.id != exclude_id
            for dog in self._dogs.values()
        )
