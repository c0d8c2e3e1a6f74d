"""API request/response schemas for FastAPI endpoints."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from secondleash.types import DogStatus, Role, Sex, Size

# Required columns that an update may omit but never clear
_NON_NULLABLE_FIELDS = ("name", "sex", "size", "status")


def _as_naive_utc(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class DogCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    sex: Sex
    approx_birthdate: datetime | None = None
    breed: str | None = Field(default=None, max_length=100)
    size: Size
    weight_kg: float | None = Field(default=None, gt=0, le=200)
    microchip_id: str | None = Field(default=None, max_length=50)
    intake_date: datetime | None = None
    status: DogStatus
    description: str | None = Field(default=None, max_length=2000)

    normalize_dates = field_validator("approx_birthdate", "intake_date")(_as_naive_utc)


class DogUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    sex: Sex | None = None
    approx_birthdate: datetime | None = None
    breed: str | None = Field(default=None, max_length=100)
    size: Size | None = None
    weight_kg: float | None = Field(default=None, gt=0, le=200)
    microchip_id: str | None = Field(default=None, max_length=50)
    intake_date: datetime | None = None
    status: DogStatus | None = None
    description: str | None = Field(default=None, max_length=2000)

    normalize_dates = field_validator("approx_birthdate", "intake_date")(_as_naive_utc)

    @model_validator(mode="after")
    def _reject_null_required(self) -> DogUpdate:
        cleared = [
            name
            for name in _NON_NULLABLE_FIELDS
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            msg = f"Fields cannot be null: {', '.join(cleared)}"
            raise ValueError(msg)
        return self

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class DogResponse(BaseModel):
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


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ErrorBody(BaseModel):
    message: str
    details: list[dict[str, Any]] | None = None


class DogEnvelope(BaseModel):
    success: bool = True
    data: DogResponse


class DogListEnvelope(BaseModel):
    success: bool = True
    data: list[DogResponse]
    pagination: PaginationResponse


class MessageEnvelope(BaseModel):
    success: bool = True
    data: dict[str, str]


class IdentityResponse(BaseModel):
    user_id: str | None
    role: Role
    shelter_id: str | None


class ErrorEnvelope(BaseModel):
    success: bool = False
    error: ErrorBody
