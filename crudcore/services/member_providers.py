"""Member Providers — admin-only member search and lookup.

Invariants:
    - Only active admins reach persistence; everyone else gets ForbiddenError
    - password_hash is never exposed: the DTO carries the mask sentinel instead
    - Soft-deleted members are listed (deleted_at is a nullable field in the DTO)
"""

import logging

from crudcore.core.domain_types import FilterOp, MemberId, Principal, SortOrder
from crudcore.core.errors import NotFoundError
from crudcore.core.pagination import FilterRule, PaginatedQueryBuilder, SearchSpec
from crudcore.core.response_mapping import FieldKind, FieldRule, ResponseMapper
from crudcore.schemas.member import MemberSearch
from crudcore.services.context import ProviderContext
from crudcore.services.principals import require_admin
from crudcore.services.search import run_search

logger = logging.getLogger(__name__)

MEMBER_RULES = (
    FieldRule("id"),
    FieldRule("email"),
    FieldRule("password", FieldKind.MASKED),
    FieldRule("display_name"),
    FieldRule("role"),
    FieldRule("created_at"),
    FieldRule("updated_at"),
    FieldRule("deleted_at", FieldKind.NULLABLE),
)

MEMBER_SEARCH = SearchSpec(
    filters={
        "email": FilterRule("email", FilterOp.CONTAINS),
        "display_name": FilterRule("display_name", FilterOp.CONTAINS),
        "role": FilterRule("role"),
    },
    sortable=("created_at", "email", "display_name"),
    default_sort="created_at",
    default_order=SortOrder.DESC,
)


def member_mapper(ctx: ProviderContext) -> ResponseMapper:
    return ResponseMapper(MEMBER_RULES, mask=ctx.settings.mask_sentinel)


async def search_members(
    ctx: ProviderContext, *, principal: Principal, body: MemberSearch,
) -> dict:
    await require_admin(ctx, principal)
    builder = PaginatedQueryBuilder(
        MEMBER_SEARCH,
        ctx.settings.default_page_limit,
        ctx.settings.max_page_limit,
    )
    page = await run_search(ctx.members, builder, body, member_mapper(ctx))
    return page.to_dict()


async def get_member(
    ctx: ProviderContext, *, principal: Principal, member_id: MemberId,
) -> dict:
    await require_admin(ctx, principal)
    member = await ctx.members.find_unique(member_id)
    if member is None:
        raise NotFoundError("Member", str(member_id))
    return member_mapper(ctx).map(member)
