"""Who-am-I route exposing the resolved caller identity."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from secondleash.models.api import IdentityResponse
from secondleash.policy.identity import CallerIdentity
from secondleash.web.auth.rbac import get_identity

router = APIRouter(prefix="/api", tags=["identity"])


@router.get("/me", response_model=IdentityResponse)
async def me(identity: CallerIdentity = Depends(get_identity)) -> IdentityResponse:
    return IdentityResponse(
        user_id=identity.user_id,
        role=identity.role,
        shelter_id=identity.shelter_id,
    )
