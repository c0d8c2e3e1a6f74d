"""Caller identity carried through each request."""

from __future__ import annotations

from dataclasses import dataclass

from secondleash.exceptions import UnauthenticatedError
from secondleash.types import Role


@dataclass(frozen=True, slots=True)
class AuthenticatedPrincipal:
    """Verified claims handed over by the authentication layer."""

    user_id: str
    role: str
    shelter_id: str | None = None


@dataclass(frozen=True, slots=True)
class CallerIdentity:
    """Immutable (role, shelter) pair that every authorization decision is based on.

    Built once per request and passed explicitly to the service; there is no
    process-wide "current shelter".
    """

    role: Role
    shelter_id: str | None
    user_id: str | None = None


def resolve_identity(principal: AuthenticatedPrincipal | None) -> CallerIdentity:
    """Project an authenticated principal onto a CallerIdentity.

    Raises UnauthenticatedError when no principal is attached or its role is
    not one we know about.
    """
    if principal is None:
        raise UnauthenticatedError()

    try:
        role = Role(principal.role)
    except ValueError as exc:
        raise UnauthenticatedError(f"Unknown role: {principal.role}") from exc

    return CallerIdentity(
        role=role,
        shelter_id=principal.shelter_id or None,
        user_id=principal.user_id,
    )
