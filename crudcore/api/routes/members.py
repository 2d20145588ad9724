"""Admin Member Routes — PATCH search and lookup by id, admin token required."""

from uuid import UUID

from fastapi import APIRouter, Depends

from crudcore.api.dependencies import get_current_principal, get_provider_context
from crudcore.core.domain_types import Principal
from crudcore.schemas.member import MemberSearch
from crudcore.services import member_providers
from crudcore.services.context import ProviderContext

router = APIRouter(prefix="/api/v1/admin/members", tags=["admin"])


@router.patch("")
async def search_members(
    body: MemberSearch,
    principal: Principal = Depends(get_current_principal),
    ctx: ProviderContext = Depends(get_provider_context),
):
    return await member_providers.search_members(
        ctx, principal=principal, body=body,
    )


@router.get("/{member_id}")
async def get_member(
    member_id: UUID,
    principal: Principal = Depends(get_current_principal),
    ctx: ProviderContext = Depends(get_provider_context),
):
    return await member_providers.get_member(
        ctx, principal=principal, member_id=member_id,
    )
