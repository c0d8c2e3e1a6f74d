"""Authorization and shelter-scoping decisions for dog operations.

Every rule lives in ``PERMISSIONS``, keyed by ``(role, operation)``. The
``check_*`` functions return a ``Decision`` without raising; the matching
``scope_for_list`` / ``authorize_*`` functions raise ``ForbiddenError`` on a
denial. Nothing here touches a store or suspends.

Callers must confirm a record is live before calling ``authorize_read`` or
``authorize_mutate`` so that a missing dog is reported as not found rather
than forbidden.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING

from secondleash.exceptions import ForbiddenError
from secondleash.types import Operation, Role

if TYPE_CHECKING:
    from collections.abc import Mapping

    from secondleash.models.domain import DogFilter
    from secondleash.policy.identity import CallerIdentity

NO_SHELTER_ASSIGNED = "No shelter assigned"
SHELTER_MISMATCH = "Access denied to this dog"


class Grant(StrEnum):
    DENY = "deny"
    OWN_SHELTER = "own_shelter"
    ANY_SHELTER = "any_shelter"


_OWN_ONLY = {op: Grant.OWN_SHELTER for op in Operation}

# SUPER_ADMIN create is OWN_SHELTER: a new dog is attributed to the caller's
# home shelter and there is no explicit target-shelter path.
PERMISSIONS: Mapping[tuple[Role, Operation], Grant] = MappingProxyType(
    {
        (Role.SUPER_ADMIN, Operation.LIST): Grant.ANY_SHELTER,
        (Role.SUPER_ADMIN, Operation.READ): Grant.ANY_SHELTER,
        (Role.SUPER_ADMIN, Operation.CREATE): Grant.OWN_SHELTER,
        (Role.SUPER_ADMIN, Operation.UPDATE): Grant.ANY_SHELTER,
        (Role.SUPER_ADMIN, Operation.DELETE): Grant.ANY_SHELTER,
        **{(Role.SHELTER_ADMIN, op): grant for op, grant in _OWN_ONLY.items()},
        **{(Role.STAFF, op): grant for op, grant in _OWN_ONLY.items()},
        (Role.VOLUNTEER, Operation.LIST): Grant.OWN_SHELTER,
        (Role.VOLUNTEER, Operation.READ): Grant.OWN_SHELTER,
        (Role.VOLUNTEER, Operation.CREATE): Grant.DENY,
        (Role.VOLUNTEER, Operation.UPDATE): Grant.DENY,
        (Role.VOLUNTEER, Operation.DELETE): Grant.DENY,
    }
)


@dataclass(frozen=True, slots=True)
class Decision:
    """Verdict for one operation.

    ``shelter_id`` is the effective shelter filter for list decisions
    (``None`` meaning every shelter) and the shelter to assign for create.
    """

    allowed: bool
    reason: str | None = None
    shelter_id: str | None = None

    def raise_if_denied(self) -> Decision:
        if not self.allowed:
            raise ForbiddenError(self.reason)
        return self


@dataclass(frozen=True, slots=True)
class TenantScope:
    shelter_id: str | None


def grant_for(role: Role, operation: Operation) -> Grant:
    return PERMISSIONS.get((role, operation), Grant.DENY)


def _deny(reason: str) -> Decision:
    return Decision(allowed=False, reason=reason)


def _role_denied(role: Role, operation: Operation) -> Decision:
    return _deny(f"Role {role.value} cannot {operation.value} dogs")


# ---------------------------------------------------------------------------
# Non-raising checks
# ---------------------------------------------------------------------------


def check_list(identity: CallerIdentity, requested_shelter_id: str | None = None) -> Decision:
    grant = grant_for(identity.role, Operation.LIST)
    if grant is Grant.DENY:
        return _role_denied(identity.role, Operation.LIST)
    if grant is Grant.ANY_SHELTER:
        # Narrowing by shelter is always permitted for cross-shelter roles
        return Decision(allowed=True, shelter_id=requested_shelter_id)
    if identity.shelter_id is None:
        return _deny(NO_SHELTER_ASSIGNED)
    return Decision(allowed=True, shelter_id=identity.shelter_id)


def check_create(identity: CallerIdentity) -> Decision:
    grant = grant_for(identity.role, Operation.CREATE)
    if grant is Grant.DENY:
        return _role_denied(identity.role, Operation.CREATE)
    if identity.shelter_id is None:
        return _deny(NO_SHELTER_ASSIGNED)
    return Decision(allowed=True, shelter_id=identity.shelter_id)


def check_record(
    identity: CallerIdentity, operation: Operation, record_shelter_id: str
) -> Decision:
    """Decide a read/update/delete on an existing, live dog."""
    grant = grant_for(identity.role, operation)
    if grant is Grant.DENY:
        return _role_denied(identity.role, operation)
    if grant is Grant.ANY_SHELTER:
        return Decision(allowed=True, shelter_id=record_shelter_id)
    if identity.shelter_id is None:
        return _deny(NO_SHELTER_ASSIGNED)
    if record_shelter_id != identity.shelter_id:
        return _deny(SHELTER_MISMATCH)
    return Decision(allowed=True, shelter_id=record_shelter_id)


def check_read(identity: CallerIdentity, record_shelter_id: str) -> Decision:
    return check_record(identity, Operation.READ, record_shelter_id)


def check_mutate(
    identity: CallerIdentity,
    record_shelter_id: str,
    operation: Operation = Operation.UPDATE,
) -> Decision:
    if operation not in (Operation.UPDATE, Operation.DELETE):
        msg = f"Not a mutating operation: {operation}"
        raise ValueError(msg)
    return check_record(identity, operation, record_shelter_id)


# ---------------------------------------------------------------------------
# Raising entry points
# ---------------------------------------------------------------------------


def scope_for_list(
    identity: CallerIdentity, requested_shelter_id: str | None = None
) -> TenantScope:
    decision = check_list(identity, requested_shelter_id).raise_if_denied()
    return TenantScope(shelter_id=decision.shelter_id)


def apply_tenant_scope(filters: DogFilter, identity: CallerIdentity) -> DogFilter:
    """Rewrite a caller's list filter so it can only reach permitted shelters.

    A shelter filter supplied by a shelter-bound role is replaced with the
    caller's own shelter, never honoured.
    """
    scope = scope_for_list(identity, filters.shelter_id)
    if scope.shelter_id == filters.shelter_id:
        return filters
    return dataclasses.replace(filters, shelter_id=scope.shelter_id)


def authorize_read(identity: CallerIdentity, record_shelter_id: str) -> None:
    check_read(identity, record_shelter_id).raise_if_denied()


def authorize_create(identity: CallerIdentity) -> str:
    """Return the shelter id the new dog must be assigned to."""
    decision = check_create(identity).raise_if_denied()
    if decision.shelter_id is None:
        raise ForbiddenError(NO_SHELTER_ASSIGNED)
    return decision.shelter_id


def authorize_mutate(
    identity: CallerIdentity,
    record_shelter_id: str,
    operation: Operation = Operation.UPDATE,
) -> None:
    check_mutate(identity, record_shelter_id, operation).raise_if_denied()
