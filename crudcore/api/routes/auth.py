"""Auth Routes — member join, login and token refresh.

Invariants:
    - All three endpoints return the AuthorizedPrincipal shape (member + token)
    - No endpoint here requires a bearer token
"""

from fastapi import APIRouter, Depends, status

from crudcore.api.dependencies import get_provider_context
from crudcore.schemas.auth import JoinRequest, LoginRequest, RefreshRequest
from crudcore.services import auth_providers
from crudcore.services.context import ProviderContext

router = APIRouter(prefix="/api/v1/auth/member", tags=["auth"])


@router.post("/join", status_code=status.HTTP_201_CREATED)
async def join(
    body: JoinRequest, ctx: ProviderContext = Depends(get_provider_context),
):
    return await auth_providers.join(ctx, body=body)


@router.post("/login")
async def login(
    body: LoginRequest, ctx: ProviderContext = Depends(get_provider_context),
):
    return await auth_providers.login(ctx, body=body)


@router.post("/refresh")
async def refresh(
    body: RefreshRequest, ctx: ProviderContext = Depends(get_provider_context),
):
    return await auth_providers.refresh(ctx, body=body)
