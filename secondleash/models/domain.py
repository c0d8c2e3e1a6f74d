"""Inter-module data contracts (not persisted directly)."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from pydantic import BaseModel

from secondleash.types import DogStatus, Sex, Size

# Fields a caller may set on create or patch on update
DOG_MUTABLE_FIELDS = (
    "name",
    "sex",
    "approx_birthdate",
    "breed",
    "size",
    "weight_kg",
    "microchip_id",
    "intake_date",
    "status",
    "description",
)


def utc_now() -> datetime:
    """Return current UTC time as naive datetime for TIMESTAMP WITHOUT TIME ZONE columns."""
    return datetime.now(UTC).replace(tzinfo=None)


def new_id() -> str:
    return str(uuid.uuid4())


class DogRecord(BaseModel):
    """A dog as seen by the service layer, independent of the backing store."""

    id: str
    shelter_id: str
    name: str
    sex: Sex
    approx_birthdate: datetime | None = None
    breed: str | None = None
    size: Size
    weight_kg: float | None = None
    microchip_id: str | None = None
    intake_date: datetime | None = None
    status: DogStatus
    description: str | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_live(self) -> bool:
        return self.deleted_at is None


@dataclass(frozen=True, slots=True)
class DogFilter:
    """Store-level filter for listing live dogs. ``shelter_id=None`` means every shelter."""

    shelter_id: str | None = None
    status: DogStatus | None = None


@dataclass(frozen=True, slots=True)
class DogQuery:
    """Caller-supplied list query, before tenant scoping and page normalisation."""

    status: DogStatus | None = None
    shelter_id: str | None = None
    page: int = 1
    limit: int = 20

    def to_filter(self) -> DogFilter:
        return DogFilter(shelter_id=self.shelter_id, status=self.status)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_total(cls, *, page: int, limit: int, total: int) -> Pagination:
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit))


class DogPage(BaseModel):
    data: list[DogRecord]
    pagination: Pagination
