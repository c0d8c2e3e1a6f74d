"""SQLModel database table models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, Index, Numeric, text
from sqlmodel import Field, SQLModel

from secondleash.models.domain import new_id, utc_now

# Partial unique index backing the microchip pre-check in DogService
MICROCHIP_INDEX_NAME = "uq_dogs_microchip_id_live"


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------


class Shelter(SQLModel, table=True):
    __tablename__ = "shelters"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    address_line: str | None = None
    city: str | None = None
    region: str | None = None
    country: str | None = Field(default=None, max_length=2)
    phone: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


class Dog(SQLModel, table=True):
    __tablename__ = "dogs"
    __table_args__ = (
        Index(
            MICROCHIP_INDEX_NAME,
            "microchip_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
        Index("ix_dogs_shelter_live", "shelter_id", "deleted_at"),
    )

    id: str = Field(default_factory=new_id, primary_key=True)
    shelter_id: str = Field(foreign_key="shelters.id", index=True)
    name: str = Field(max_length=100)
    sex: str  # MALE | FEMALE | UNKNOWN
    approx_birthdate: datetime | None = None
    breed: str | None = Field(default=None, max_length=100)
    size: str  # SMALL | MEDIUM | LARGE | XL | UNKNOWN
    weight_kg: float | None = Field(default=None, sa_column=Column(Numeric(5, 2, asdecimal=False)))
    microchip_id: str | None = Field(default=None, max_length=50)
    intake_date: datetime | None = None
    status: str = Field(default="AVAILABLE", index=True)
    description: str | None = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = None


# ---------------------------------------------------------------------------
# Audit
# ---------------------------------------------------------------------------


class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True)
    shelter_id: str | None = Field(default=None, index=True)
    user_id: str = ""
    action: str = Field(index=True)  # dog.create | dog.update | dog.delete
    resource_type: str = ""
    resource_id: str = ""
    details_json: str = "{}"
    ip_address: str = ""
    request_id: str = ""
    created_at: datetime = Field(default_factory=utc_now)
