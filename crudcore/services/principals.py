"""Principal Checks — re-verify the token principal against persistence.

Invariants:
    - A token alone never authorizes a write: the member row must exist and not be deleted
    - The stored role wins over the role in the token
"""

import logging

from crudcore.core.domain_types import FilterOp, Principal, PrincipalType
from crudcore.core.errors import AuthenticationError, ForbiddenError
from crudcore.core.pagination import Predicate
from crudcore.models.member import Member
from crudcore.services.context import ProviderContext

logger = logging.getLogger(__name__)


async def require_active(ctx: ProviderContext, principal: Principal) -> Member:
    member = await ctx.members.find_first([
        Predicate("id", FilterOp.EQ, principal.id),
        Predicate("deleted_at", FilterOp.IS_NULL),
    ])
    if member is None:
        logger.warning(
            "Principal no longer active",
            extra={"principal_id": principal.id},
        )
        raise AuthenticationError("Principal is not active")
    return member


async def require_admin(ctx: ProviderContext, principal: Principal) -> Member:
    if principal.type is not PrincipalType.ADMIN:
        raise ForbiddenError("Admin role required")
    member = await require_active(ctx, principal)
    if member.role != PrincipalType.ADMIN.value:
        raise ForbiddenError("Admin role required")
    return member


def can_manage(member: Member, owner_id) -> bool:
    """Owners manage their own resources; admins manage everything."""
    return member.id == owner_id or member.role == PrincipalType.ADMIN.value
