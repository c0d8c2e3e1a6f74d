"""Caller identity dependency for shelter-scoped requests."""

from __future__ import annotations

import structlog
from fastapi import Depends

from secondleash.policy.identity import AuthenticatedPrincipal, CallerIdentity, resolve_identity
from secondleash.web.auth.principal import get_principal


async def get_identity(
    principal: AuthenticatedPrincipal | None = Depends(get_principal),
) -> CallerIdentity:
    """Resolve the caller identity for the current request.

    Raises UnauthenticatedError (401) when no verified principal is attached.
    Role and shelter are bound to the request's log context.
    """
    identity = resolve_identity(principal)
    structlog.contextvars.bind_contextvars(
        user_id=identity.user_id,
        role=identity.role.value,
        shelter_id=identity.shelter_id,
    )
    return identity
