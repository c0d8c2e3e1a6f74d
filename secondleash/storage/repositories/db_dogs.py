"""Database-backed dog repository using SQLModel + AsyncSession."""

from __future__ import annotations

from contextlib import asynccontextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import col, select
from sqlmodel.ext.asyncio.session import AsyncSession

from secondleash.exceptions import ConflictError, StoreError
from secondleash.models.database import MICROCHIP_INDEX_NAME, Dog
from secondleash.models.domain import DogRecord
from secondleash.storage.repositories.dogs import DogStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from datetime import datetime

    from sqlalchemy.ext.asyncio import AsyncEngine

    from secondleash.models.domain import DogFilter

logger = structlog.get_logger(__name__)


def _column_value(value: Any) -> Any:
    """Enum members are stored as their plain string value."""
    return value.value if isinstance(value, Enum) else value


def _is_microchip_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig).lower()
    return MICROCHIP_INDEX_NAME in message or "dogs.microchip_id" in message


class DatabaseDogRepository(DogStore):
    """PostgreSQL-backed dog store using SQLModel.

    The partial unique index on ``microchip_id`` closes the race left open by
    the service's check-then-insert.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with AsyncSession(self._engine, expire_on_commit=False) as session:
                yield session
        except IntegrityError as exc:
            if _is_microchip_violation(exc):
                raise ConflictError("Microchip ID already exists") from exc
            logger.error("dog_store_integrity_error", error=str(exc.orig))
            raise StoreError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            logger.error("dog_store_error", error=str(exc))
            raise StoreError(str(exc)) from exc

    @staticmethod
    def _to_record(dog: Dog) -> DogRecord:
        """Convert a Dog ORM instance to a DogRecord."""
        return DogRecord.model_validate(dog.model_dump())

    @staticmethod
    def _live() -> Any:
        return col(Dog.deleted_at).is_(None)

    async def find_live_by_id(self, dog_id: str) -> DogRecord | None:
        async with self._session() as session:
            statement = select(Dog).where(col(Dog.id) == dog_id, self._live())
            result = await session.execute(statement)
            dog = result.scalars().first()
            return self._to_record(dog) if dog else None

    async def find_live(
        self, filters: DogFilter, page: int, limit: int
    ) -> tuple[list[DogRecord], int]:
        conditions = [self._live()]
        if filters.shelter_id is not None:
            conditions.append(col(Dog.shelter_id) == filters.shelter_id)
        if filters.status is not None:
            conditions.append(col(Dog.status) == filters.status.value)

        async with self._session() as session:
            count_stmt = select(func.count()).select_from(Dog).where(*conditions)
            total = (await session.execute(count_stmt)).scalar_one()

            statement = (
                select(Dog)
                .where(*conditions)
                .order_by(col(Dog.created_at).desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            result = await session.execute(statement)
            return [self._to_record(d) for d in result.scalars().all()], int(total)

    async def insert(self, dog: DogRecord) -> DogRecord:
        async with self._session() as session:
            row = Dog(**{key: _column_value(value) for key, value in dog.model_dump().items()})
            session.add(row)
            await session.commit()
            logger.info("dog_persisted", id=row.id, shelter_id=row.shelter_id)
            return self._to_record(row)

    async def update_fields(self, dog_id: str, fields: dict[str, Any]) -> DogRecord | None:
        async with self._session() as session:
            statement = select(Dog).where(col(Dog.id) == dog_id, self._live())
            dog = (await session.execute(statement)).scalars().first()
            if not dog:
                return None
            for key, value in fields.items():
                setattr(dog, key, _column_value(value))
            session.add(dog)
            await session.commit()
            return self._to_record(dog)

    async def soft_delete(self, dog_id: str, timestamp: datetime) -> bool:
        async with self._session() as session:
            statement = select(Dog).where(col(Dog.id) == dog_id, self._live())
            dog = (await session.execute(statement)).scalars().first()
            if not dog:
                return False
            dog.deleted_at = timestamp
            session.add(dog)
            await session.commit()
            return True

    async def exists_live_with_microchip(
        self, microchip_id: str, exclude_id: str | None = None
    ) -> bool:
        conditions = [col(Dog.microchip_id) == microchip_id, self._live()]
        if exclude_id is not None:
            conditions.append(col(Dog.id) != exclude_id)
        async with self._session() as session:
            statement = select(Dog.id).where(*conditions).limit(1)
            result = await session.execute(statement)
            return result.first() is not None
