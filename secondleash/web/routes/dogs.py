"""Dog CRUD API routes."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, Query, Request

from secondleash.audit.logger import audit
from secondleash.config.settings import get_settings
from secondleash.models.api import (
    DogCreate,
    DogEnvelope,
    DogListEnvelope,
    DogResponse,
    DogUpdate,
    ErrorEnvelope,
    MessageEnvelope,
)
from secondleash.models.domain import DogQuery, DogRecord
from secondleash.policy.identity import CallerIdentity
from secondleash.services.dogs import DogService
from secondleash.types import DogStatus
from secondleash.web.auth.rbac import get_identity
from secondleash.web.dependencies import get_dog_service

router = APIRouter(
    prefix="/api/dogs",
    tags=["dogs"],
    responses={code: {"model": ErrorEnvelope} for code in (401, 403, 404, 409, 422)},
)


def _to_response(dog: DogRecord) -> DogResponse:
    return DogResponse.model_validate(dog.model_dump(exclude={"deleted_at"}))


def _request_meta(request: Request) -> dict[str, str]:
    return {
        "ip_address": request.client.host if request.client else "",
        "request_id": structlog.contextvars.get_contextvars().get("request_id", ""),
    }


@router.get("", response_model=DogListEnvelope)
async def list_dogs(
    status: DogStatus | None = None,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1, le=100),
    shelter_id: str | None = None,
    identity: CallerIdentity = Depends(get_identity),
    service: DogService = Depends(get_dog_service),
) -> dict[str, Any]:
    if limit is None:
        limit = get_settings().default_page_size
    query = DogQuery(status=status, shelter_id=shelter_id, page=page, limit=limit)
    result = await service.list(query, identity)
    return {
        "success": True,
        "data": [_to_response(dog) for dog in result.data],
        "pagination": result.pagination.model_dump(),
    }


@router.post("", status_code=201, response_model=DogEnvelope)
async def create_dog(
    body: DogCreate,
    request: Request,
    identity: CallerIdentity = Depends(get_identity),
    service: DogService = Depends(get_dog_service),
) -> dict[str, Any]:
    dog = await service.create(body.model_dump(), identity)
    await audit(
        identity,
        action="dog.create",
        shelter_id=dog.shelter_id,
        resource_id=dog.id,
        details={"name": dog.name, "microchip_id": dog.microchip_id},
        **_request_meta(request),
    )
    return {"success": True, "data": _to_response(dog)}


@router.get("/{dog_id}", response_model=DogEnvelope)
async def get_dog(
    dog_id: str,
    identity: CallerIdentity = Depends(get_identity),
    service: DogService = Depends(get_dog_service),
) -> dict[str, Any]:
    dog = await service.get_by_id(dog_id, identity)
    return {"success": True, "data": _to_response(dog)}


@router.put("/{dog_id}", response_model=DogEnvelope)
@router.patch("/{dog_id}", response_model=DogEnvelope)
async def update_dog(
    dog_id: str,
    body: DogUpdate,
    request: Request,
    identity: CallerIdentity = Depends(get_identity),
    service: DogService = Depends(get_dog_service),
) -> dict[str, Any]:
    patch = body.to_patch()
    dog = await service.update(dog_id, patch, identity)
    await audit(
        identity,
        action="dog.update",
        shelter_id=dog.shelter_id,
        resource_id=dog.id,
        details={"fields": sorted(patch)},
        **_request_meta(request),
    )
    return {"success": True, "data": _to_response(dog)}


@router.delete("/{dog_id}", response_model=MessageEnvelope)
async def delete_dog(
    dog_id: str,
    request: Request,
    identity: CallerIdentity = Depends(get_identity),
    service: DogService = Depends(get_dog_service),
) -> dict[str, Any]:
    dog = await service.delete(dog_id, identity)
    await audit(
        identity,
        action="dog.delete",
        shelter_id=dog.shelter_id,
        resource_id=dog_id,
        **_request_meta(request),
    )
    return {"success": True, "data": {"message": "Dog deleted successfully"}}
