"""Bearer-token principal verification.

Tokens are issued by the authentication service; this module only verifies
the signature and expiry and extracts ``sub``, ``role`` and ``shelter_id``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import jwt
import structlog
from fastapi import Request

from secondleash.config.settings import get_settings
from secondleash.policy.identity import AuthenticatedPrincipal

if TYPE_CHECKING:
    from secondleash.config.settings import Settings

logger = structlog.get_logger(__name__)

_REQUIRED_CLAIMS = ["sub", "role"]


def decode_principal(token: str, settings: Settings) -> AuthenticatedPrincipal | None:
    """Verify a bearer token and return its principal, or None if it is not valid."""
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"require": _REQUIRED_CLAIMS},
        )
    except jwt.PyJWTError as exc:
        logger.info("bearer_token_rejected", error=str(exc))
        return None

    shelter_id = claims.get("shelter_id")
    return AuthenticatedPrincipal(
        user_id=str(claims["sub"]),
        role=str(claims["role"]),
        shelter_id=str(shelter_id) if shelter_id else None,
    )


async def get_principal(request: Request) -> AuthenticatedPrincipal | None:
    """Return the verified principal attached to the request, if any."""
    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    return decode_principal(auth_header[7:], get_settings())
