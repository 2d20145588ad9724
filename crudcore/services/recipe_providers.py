"""Recipe Providers — create, read, search, update and soft-delete recipes.

Invariants:
    - Deleted recipes never appear in get or search results
    - Only the owner or an admin may update or delete; others get ForbiddenError
    - The principal is re-read from persistence before every mutation
    - Deleting an already deleted recipe raises NotFoundError (conditional UPDATE)
    - Empty update payloads follow Settings.empty_update_policy

Design Decisions:
    - Mapping rules declared once (RECIPE_MAPPER) and shared by every operation
    - Search scope (deleted_at IS NULL) is ANDed in by the builder, never user-controlled
"""

import logging
from datetime import datetime, timezone

from crudcore.core.domain_types import FilterOp, Principal, RecipeId, SortOrder
from crudcore.core.errors import ForbiddenError, NotFoundError
from crudcore.core.pagination import (
    FilterRule,
    PaginatedQueryBuilder,
    Predicate,
    SearchSpec,
)
from crudcore.core.response_mapping import FieldKind, FieldRule, ResponseMapper
from crudcore.core.updates import collect_update_fields
from crudcore.models.recipe import Recipe
from crudcore.schemas.recipe import RecipeCreate, RecipeSearch, RecipeUpdate
from crudcore.services.context import ProviderContext
from crudcore.services.principals import can_manage, require_active
from crudcore.services.search import run_search

logger = logging.getLogger(__name__)

RECIPE_MAPPER = ResponseMapper([
    FieldRule("id"),
    FieldRule("member_id"),
    FieldRule("name"),
    FieldRule("description", FieldKind.NULLABLE),
    FieldRule("cuisine", FieldKind.OPTIONAL),
    FieldRule("servings"),
    FieldRule("published_on", FieldKind.OPTIONAL, date_only=True),
    FieldRule("created_at"),
    FieldRule("updated_at"),
    FieldRule("deleted_at", FieldKind.OPTIONAL),
])

RECIPE_SEARCH = SearchSpec(
    filters={
        "name": FilterRule("name", FilterOp.CONTAINS),
        "cuisine": FilterRule("cuisine"),
        "member_id": FilterRule("member_id"),
        "servings_min": FilterRule("servings", FilterOp.GTE),
        "servings_max": FilterRule("servings", FilterOp.LTE),
        "published_from": FilterRule("published_on", FilterOp.GTE),
        "published_to": FilterRule("published_on", FilterOp.LTE),
    },
    sortable=("created_at", "name", "servings", "published_on"),
    default_sort="created_at",
    default_order=SortOrder.DESC,
)

_NOT_DELETED = Predicate("deleted_at", FilterOp.IS_NULL)


def _live(recipe_id: RecipeId) -> list[Predicate]:
    return [Predicate("id", FilterOp.EQ, recipe_id), _NOT_DELETED]


async def _load_live(ctx: ProviderContext, recipe_id: RecipeId) -> Recipe:
    recipe = await ctx.recipes.find_first(_live(recipe_id))
    if recipe is None:
        raise NotFoundError("Recipe", str(recipe_id))
    return recipe


async def create_recipe(
    ctx: ProviderContext, *, principal: Principal, body: RecipeCreate,
) -> dict:
    member = await require_active(ctx, principal)
    now = datetime.now(timezone.utc)
    recipe = await ctx.recipes.create({
        **body.model_dump(),
        "member_id": member.id,
        "created_at": now,
        "updated_at": now,
    })
    logger.info(
        f"Recipe created: {recipe.id}",
        extra={
            "principal_id": member.id,
            "resource": "recipe",
            "resource_id": recipe.id,
            "operation": "create",
        },
    )
    return RECIPE_MAPPER.map(recipe)


async def get_recipe(ctx: ProviderContext, *, recipe_id: RecipeId) -> dict:
    return RECIPE_MAPPER.map(await _load_live(ctx, recipe_id))


async def search_recipes(ctx: ProviderContext, *, body: RecipeSearch) -> dict:
    """Paginated recipe search; deleted recipes are always excluded."""
    builder = PaginatedQueryBuilder(
        RECIPE_SEARCH,
        ctx.settings.default_page_limit,
        ctx.settings.max_page_limit,
    )
    page = await run_search(
        ctx.recipes, builder, body, RECIPE_MAPPER, scope=(_NOT_DELETED,),
    )
    return page.to_dict()


async def update_recipe(
    ctx: ProviderContext,
    *,
    principal: Principal,
    recipe_id: RecipeId,
    body: RecipeUpdate,
) -> dict:
    """Apply the fields the caller sent; unsent fields keep their values."""
    changes = collect_update_fields(body, ctx.settings.empty_update_policy)
    async with ctx.transaction() as tx:
        member = await require_active(tx, principal)
        recipe = await _load_live(tx, recipe_id)
        if not can_manage(member, recipe.member_id):
            raise ForbiddenError(f"Recipe '{recipe_id}' belongs to another member")
        if not changes:
            return RECIPE_MAPPER.map(recipe)

        updated = await tx.recipes.update(
            _live(recipe_id),
            {**changes, "updated_at": datetime.now(timezone.utc)},
        )
        if updated is None:
            raise NotFoundError("Recipe", str(recipe_id))
        dto = RECIPE_MAPPER.map(updated)

    logger.info(
        f"Recipe updated: {recipe_id} ({', '.join(sorted(changes))})",
        extra={
            "principal_id": member.id,
            "resource": "recipe",
            "resource_id": recipe_id,
            "operation": "update",
        },
    )
    return dto


async def delete_recipe(
    ctx: ProviderContext, *, principal: Principal, recipe_id: RecipeId,
) -> None:
    """Soft delete. A second delete of the same id raises NotFoundError."""
    async with ctx.transaction() as tx:
        member = await require_active(tx, principal)
        recipe = await _load_live(tx, recipe_id)
        if not can_manage(member, recipe.member_id):
            raise ForbiddenError(f"Recipe '{recipe_id}' belongs to another member")
        deleted = await tx.recipes.update(
            _live(recipe_id), {"deleted_at": datetime.now(timezone.utc)},
        )
        if deleted is None:
            raise NotFoundError("Recipe", str(recipe_id))

    logger.info(
        f"Recipe deleted: {recipe_id}",
        extra={
            "principal_id": member.id,
            "resource": "recipe",
            "resource_id": recipe_id,
            "operation": "delete",
        },
    )
