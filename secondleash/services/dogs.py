"""Shelter-scoped dog service.

Applies the policy engine to every operation before touching the store:
list and read are narrowed to the caller's shelter, create assigns the
shelter from the caller identity, update and delete re-check ownership of
the live record. Every call reads current store state; nothing is cached.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from secondleash.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidDogError,
    NotFoundError,
)
from secondleash.models.domain import (
    DOG_MUTABLE_FIELDS,
    DogPage,
    DogQuery,
    DogRecord,
    Pagination,
    new_id,
    utc_now,
)
from secondleash.policy import engine
from secondleash.types import Operation

if TYPE_CHECKING:
    from datetime import datetime

    from secondleash.policy.identity import CallerIdentity
    from secondleash.storage.repositories.dogs import DogStore

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100

_REQUIRED_ON_CREATE = ("name", "sex", "size", "status")
_DOG_NOT_FOUND = "Dog not found"
_MICROCHIP_TAKEN = "Microchip ID already exists"


class DogService:
    """Orchestrates policy decisions against a DogStore."""

    def __init__(
        self,
        store: DogStore,
        *,
        clock: Callable[[], datetime] = utc_now,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._store = store
        self._clock = clock
        self._max_page_size = max_page_size

    # -- queries ------------------------------------------------------------

    async def list(self, query: DogQuery, identity: CallerIdentity) -> DogPage:
        filters = self._guard(
            identity, Operation.LIST, engine.apply_tenant_scope, query.to_filter(), identity
        )
        if query.shelter_id is not None and filters.shelter_id != query.shelter_id:
            logger.info(
                "shelter_filter_overridden",
                requested=query.shelter_id,
                enforced=filters.shelter_id,
            )

        page = max(query.page, 1)
        limit = min(max(query.limit, 1), self._max_page_size)
        dogs, total = await self._store.find_live(filters, page, limit)
        pagination = Pagination.from_total(page=page, limit=limit, total=total)
        return DogPage(data=dogs, pagination=pagination)

    async def get_by_id(self, dog_id: str, identity: CallerIdentity) -> DogRecord:
        dog = await self._require_live(dog_id)
        self._guard(identity, Operation.READ, engine.authorize_read, identity, dog.shelter_id)
        return dog

    # -- mutations ----------------------------------------------------------

    async def create(self, data: Mapping[str, Any], identity: CallerIdentity) -> DogRecord:
        shelter_id = self._guard(identity, Operation.CREATE, engine.authorize_create, identity)

        missing = [name for name in _REQUIRED_ON_CREATE if data.get(name) is None]
        if missing:
            msg = f"Missing required dog fields: {', '.join(missing)}"
            raise InvalidDogError(msg)

        microchip_id = data.get("microchip_id")
        if microchip_id and await self._store.exists_live_with_microchip(microchip_id):
            raise ConflictError(_MICROCHIP_TAKEN)

        now = self._clock()
        dog = DogRecord(
            **{name: data[name] for name in DOG_MUTABLE_FIELDS if name in data},
            id=new_id(),
            shelter_id=shelter_id,
            created_at=now,
            updated_at=now,
            deleted_at=None,
        )
        created = await self._store.insert(dog)
        logger.info(
            "dog_created", dog_id=created.id, shelter_id=shelter_id, user_id=identity.user_id
        )
        return created

    async def update(
        self, dog_id: str, patch: Mapping[str, Any], identity: CallerIdentity
    ) -> DogRecord:
        dog = await self._require_live(dog_id)
        self._guard(
            identity,
            Operation.UPDATE,
            engine.authorize_mutate,
            identity,
            dog.shelter_id,
            Operation.UPDATE,
        )

        fields = {name: value for name, value in patch.items() if name in DOG_MUTABLE_FIELDS}
        ignored = sorted(set(patch) - set(fields))
        if ignored:
            logger.info("dog_update_fields_ignored", dog_id=dog_id, fields=ignored)

        microchip_id = fields.get("microchip_id")
        if microchip_id and await self._store.exists_live_with_microchip(
            microchip_id, exclude_id=dog_id
        ):
            raise ConflictError(_MICROCHIP_TAKEN)

        fields["updated_at"] = self._clock()
        updated = await self._store.update_fields(dog_id, fields)
        if updated is None:
            # Soft-deleted between the read and the write
            raise NotFoundError(_DOG_NOT_FOUND)
        logger.info("dog_updated", dog_id=dog_id, fields=sorted(fields), user_id=identity.user_id)
        return updated

    async def delete(self, dog_id: str, identity: CallerIdentity) -> DogRecord:
        """Soft-delete a dog and return it as it was just before deletion."""
        dog = await self._require_live(dog_id)
        self._guard(
            identity,
            Operation.DELETE,
            engine.authorize_mutate,
            identity,
            dog.shelter_id,
            Operation.DELETE,
        )
        if not await self._store.soft_delete(dog_id, self._clock()):
            raise NotFoundError(_DOG_NOT_FOUND)
        logger.info(
            "dog_deleted", dog_id=dog_id, shelter_id=dog.shelter_id, user_id=identity.user_id
        )
        return dog

    # -- helpers ------------------------------------------------------------

    async def _require_live(self, dog_id: str) -> DogRecord:
        dog = await self._store.find_live_by_id(dog_id)
        if dog is None:
            raise NotFoundError(_DOG_NOT_FOUND)
        return dog

    @staticmethod
    def _guard(
        identity: CallerIdentity,
        operation: Operation,
        decide: Callable[..., Any],
        *args: Any,
    ) -> Any:
        try:
            return decide(*args)
        except ForbiddenError as exc:
            logger.warning(
                "access_denied",
                operation=operation.value,
                role=identity.role.value,
                shelter_id=identity.shelter_id,
                reason=exc.message,
            )
            raise
