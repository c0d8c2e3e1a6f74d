"""Tests for DatabaseDogRepository using in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta
from importlib.metadata import version
from typing import Any

import pytest

from secondleash.exceptions import ConflictError, ForbiddenError, NotFoundError
from secondleash.models.domain import DogFilter, DogQuery, DogRecord, new_id
from secondleash.policy.identity import CallerIdentity
from secondleash.services.dogs import DogService
from secondleash.storage.repositories.db_dogs import DatabaseDogRepository
from secondleash.types import DogStatus, Sex, Size

_BASE_TIME = datetime(2024, 5, 1, 9, 0, 0)


def _record(name: str, shelter_id: str = "shelter-a", offset: int = 0, **extra: Any) -> DogRecord:
    ts = _BASE_TIME + timedelta(minutes=offset)
    return DogRecord(
        id=new_id(),
        shelter_id=shelter_id,
        name=name,
        sex=Sex.MALE,
        size=Size.SMALL,
        status=extra.pop("status", DogStatus.AVAILABLE),
        created_at=ts,
        updated_at=ts,
        **extra,
    )


@pytest.mark.unit
class TestDatabaseDogRepository:
    @pytest.fixture()
    def repo(self, async_engine) -> DatabaseDogRepository:
        return DatabaseDogRepository(async_engine)

    async def test_insert_and_find(self, repo: DatabaseDogRepository) -> None:
        dog = await repo.insert(_record("Rocky", weight_kg=45.8, breed="Rottweiler"))
        found = await repo.find_live_by_id(dog.id)
        assert found is not None
        assert found.name == "Rocky"
        assert found.sex is Sex.MALE
        assert found.weight_kg == pytest.approx(45.8)

    async def test_find_missing_returns_none(self, repo: DatabaseDogRepository) -> None:
        assert await repo.find_live_by_id("nope") is None

    async def test_find_live_filters_and_orders(self, repo: DatabaseDogRepository) -> None:
        await repo.insert(_record("Old", offset=0))
        await repo.insert(_record("Sick", offset=1, status=DogStatus.MEDICAL))
        await repo.insert(_record("New", offset=2))
        await repo.insert(_record("Elsewhere", shelter_id="shelter-b", offset=3))

        dogs, total = await repo.find_live(DogFilter(shelter_id="shelter-a"), page=1, limit=20)
        assert total == 3
        assert [d.name for d in dogs] == ["New", "Sick", "Old"]

        dogs, total = await repo.find_live(
            DogFilter(status=DogStatus.AVAILABLE), page=1, limit=2
        )
        assert total == 3
        assert [d.name for d in dogs] == ["Elsewhere", "New"]

    async def test_find_live_page_offset(self, repo: DatabaseDogRepository) -> None:
        for i in range(5):
            await repo.insert(_record(f"Dog {i}", offset=i))
        dogs, total = await repo.find_live(DogFilter(), page=2, limit=2)
        assert total == 5
        assert [d.name for d in dogs] == ["Dog 2", "Dog 1"]

    async def test_update_fields(self, repo: DatabaseDogRepository) -> None:
        dog = await repo.insert(_record("Bella"))
        updated = await repo.update_fields(
            dog.id, {"status": DogStatus.ADOPTED, "updated_at": _BASE_TIME + timedelta(hours=1)}
        )
        assert updated is not None
        assert updated.status is DogStatus.ADOPTED
        assert updated.updated_at > updated.created_at

    async def test_soft_delete_hides_dog(self, repo: DatabaseDogRepository) -> None:
        dog = await repo.insert(_record("Max"))
        assert await repo.soft_delete(dog.id, _BASE_TIME) is True
        assert await repo.find_live_by_id(dog.id) is None
        assert await repo.soft_delete(dog.id, _BASE_TIME) is False
        assert await repo.update_fields(dog.id, {"name": "Ghost"}) is None
        _, total = await repo.find_live(DogFilter(), page=1, limit=20)
        assert total == 0

    async def test_live_microchip_unique_index(self, repo: DatabaseDogRepository) -> None:
        await repo.insert(_record("Luna", microchip_id="380260123456789"))
        with pytest.raises(ConflictError):
            await repo.insert(
                _record("Copy", shelter_id="shelter-b", microchip_id="380260123456789")
            )

    async def test_microchip_freed_by_soft_delete(self, repo: DatabaseDogRepository) -> None:
        first = await repo.insert(_record("Luna", microchip_id="chip-9"))
        await repo.soft_delete(first.id, _BASE_TIME)
        second = await repo.insert(_record("Luna II", microchip_id="chip-9"))
        assert second.microchip_id == "chip-9"

    async def test_exists_live_with_microchip(self, repo: DatabaseDogRepository) -> None:
        dog = await repo.insert(_record("Luna", microchip_id="chip-1"))
        assert await repo.exists_live_with_microchip("chip-1")
        assert not await repo.exists_live_with_microchip("chip-1", exclude_id=dog.id)
        assert not await repo.exists_live_with_microchip("chip-2")

    async def test_update_to_taken_microchip_conflicts(self, repo: DatabaseDogRepository) -> None:
        await repo.insert(_record("Luna", microchip_id="chip-1"))
        other = await repo.insert(_record("Max", microchip_id="chip-2"))
        with pytest.raises(ConflictError):
            await repo.update_fields(other.id, {"microchip_id": "chip-1"})


@pytest.mark.unit
class TestInstalledSqlmodel:
    def test_version_accepts_naive_utc_timestamps(self) -> None:
        # Timestamps are stored as naive UTC; sqlmodel 0.0.46 started rejecting those
        installed = tuple(int(part) for part in version("sqlmodel").split(".")[:3])
        assert installed < (0, 0, 46)


@pytest.mark.unit
class TestDogServiceOnDatabase:
    @pytest.fixture()
    def db_service(self, async_engine, clock) -> DogService:
        return DogService(DatabaseDogRepository(async_engine), clock=clock)

    async def test_full_dog_lifecycle(
        self,
        db_service: DogService,
        staff_a: CallerIdentity,
        staff_b: CallerIdentity,
    ) -> None:
        base = {"sex": "FEMALE", "size": "LARGE", "status": "AVAILABLE", "breed": "Labrador"}
        luna = await db_service.create({**base, "name": "Luna", "microchip_id": "chip-1"}, staff_a)
        await db_service.create({**base, "name": "Bella"}, staff_b)

        with pytest.raises(ConflictError):
            await db_service.create({**base, "name": "Copy", "microchip_id": "chip-1"}, staff_b)

        page = await db_service.list(DogQuery(shelter_id="shelter-b"), staff_a)
        assert [d.name for d in page.data] == ["Luna"]

        patched = await db_service.update(luna.id, {"status": "ADOPTED"}, staff_a)
        assert patched.status == "ADOPTED"
        assert patched.breed == luna.breed
        assert patched.microchip_id == luna.microchip_id
        assert patched.created_at == luna.created_at
        assert patched.updated_at > luna.updated_at

        with pytest.raises(ForbiddenError):
            await db_service.delete(luna.id, staff_b)

        await db_service.delete(luna.id, staff_a)
        with pytest.raises(NotFoundError):
            await db_service.get_by_id(luna.id, staff_a)
        with pytest.raises(NotFoundError):
            await db_service.update(luna.id, {"name": "Ghost"}, staff_a)
        with pytest.raises(NotFoundError):
            await db_service.delete(luna.id, staff_a)

        reused = await db_service.create(
            {**base, "name": "Luna II", "microchip_id": "chip-1"}, staff_b
        )
        assert reused.shelter_id == "shelter-b"
