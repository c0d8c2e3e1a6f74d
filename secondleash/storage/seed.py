"""Development seed data: one shelter and a handful of dogs.

Run with ``python -m secondleash.storage.seed`` against the configured
database. Existing shelters and dogs are removed first.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING, Any

import structlog
from sqlmodel import delete
from sqlmodel.ext.asyncio.session import AsyncSession

from secondleash.config.logging import setup_logging
from secondleash.models.database import Dog, Shelter
from secondleash.models.domain import DogRecord, new_id, utc_now
from secondleash.storage.repositories.db_dogs import DatabaseDogRepository
from secondleash.types import DogStatus, Sex, Size

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

logger = structlog.get_logger(__name__)

SEED_SHELTER: dict[str, Any] = {
    "name": "Rifugio Amici a Quattro Zampe",
    "address_line": "Via della Speranza 42",
    "city": "Bologna",
    "region": "Emilia-Romagna",
    "country": "IT",
    "phone": "+39 051 123456",
}

SEED_DOGS: list[dict[str, Any]] = [
    {
        "name": "Luna",
        "sex": Sex.FEMALE,
        "approx_birthdate": datetime(2020, 3, 15),
        "breed": "Labrador Retriever",
        "size": Size.LARGE,
        "weight_kg": 28.5,
        "microchip_id": "380260123456789",
        "intake_date": datetime(2023, 6, 10),
        "status": DogStatus.AVAILABLE,
        "description": "Sweet and affectionate, great with children. Loves long walks.",
    },
    {
        "name": "Max",
        "sex": Sex.MALE,
        "approx_birthdate": datetime(2019, 8, 22),
        "breed": "German Shepherd",
        "size": Size.LARGE,
        "weight_kg": 35.2,
        "microchip_id": "380260987654321",
        "intake_date": datetime(2023, 1, 15),
        "status": DogStatus.FOSTERED,
        "description": "Smart and obedient. Needs an experienced owner.",
    },
    {
        "name": "Bella",
        "sex": Sex.FEMALE,
        "approx_birthdate": datetime(2021, 11, 5),
        "breed": "Mixed",
        "size": Size.MEDIUM,
        "weight_kg": 18.0,
        "microchip_id": "380260555444333",
        "intake_date": datetime(2023, 9, 20),
        "status": DogStatus.AVAILABLE,
        "description": "Lively and playful. Gets along with other dogs.",
    },
    {
        "name": "Rocky",
        "sex": Sex.MALE,
        "approx_birthdate": datetime(2018, 5, 12),
        "breed": "Rottweiler",
        "size": Size.XL,
        "weight_kg": 45.8,
        "intake_date": datetime(2022, 11, 30),
        "status": DogStatus.MEDICAL,
        "description": "Under treatment for a leg problem. Very calm.",
    },
    {
        "name": "Charlie",
        "sex": Sex.MALE,
        "approx_birthdate": datetime(2022, 2, 28),
        "breed": "Beagle",
        "size": Size.SMALL,
        "weight_kg": 12.5,
        "microchip_id": "380260111222333",
        "intake_date": datetime(2024, 1, 10),
        "status": DogStatus.ON_HOLD,
        "description": "Energetic and curious puppy.",
    },
]


async def seed(engine: AsyncEngine) -> Shelter:
    """Reset shelters/dogs and insert the seed shelter with its dogs."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        await session.execute(delete(Dog))
        await session.execute(delete(Shelter))
        shelter = Shelter(**SEED_SHELTER)
        session.add(shelter)
        await session.commit()
    logger.info("seed_shelter_created", shelter_id=shelter.id, name=shelter.name)

    repo = DatabaseDogRepository(engine)
    for data in SEED_DOGS:
        now = utc_now()
        await repo.insert(
            DogRecord(
                **data, id=new_id(), shelter_id=shelter.id, created_at=now, updated_at=now
            )
        )
    logger.info("seed_dogs_created", count=len(SEED_DOGS), shelter_id=shelter.id)
    return shelter


async def _main() -> None:
    from secondleash.storage.database import get_engine, init_db

    engine = get_engine()
    await init_db(engine)
    await seed(engine)
    await engine.dispose()


def main() -> None:
    """CLI entry point for seeding the database."""
    setup_logging(log_level="INFO")
    asyncio.run(_main())


if __name__ == "__main__":
    main()
