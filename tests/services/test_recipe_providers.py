"""Recipe Provider tests — create/search/update/delete with ownership and soft delete.

Tests cover:
    - Created recipe appears in an unfiltered first-page search
    - Second delete of the same id raises NotFoundError
    - Non-owners get ForbiddenError; admins may manage any recipe
    - Empty updates follow the configured policy
    - DTO nullability: description null kept, cuisine null omitted
"""

from dataclasses import replace
from uuid import UUID, uuid4

import pytest

from crudcore.core.domain_types import EmptyUpdatePolicy, Principal, PrincipalType
from crudcore.core.errors import (
    AuthenticationError, ForbiddenError, NotFoundError, ValidationError,
)
from crudcore.schemas.recipe import RecipeCreate, RecipeSearch, RecipeUpdate
from crudcore.services import recipe_providers


def as_principal(record) -> Principal:
    return Principal(record.id, PrincipalType(record.role), {"email": record.email})


def _id(dto: dict) -> UUID:
    return UUID(dto["id"])


async def _create(ctx, owner, **fields):
    body = RecipeCreate(**{"name": "Widget", **fields})
    return await recipe_providers.create_recipe(
        ctx, principal=as_principal(owner), body=body,
    )


async def test_created_recipe_appears_in_search(ctx, member):
    created = await _create(ctx, member)
    page = await recipe_providers.search_recipes(
        ctx, body=RecipeSearch(page=1, limit=10),
    )
    assert page["pagination"]["records"] >= 1
    assert created["id"] in [r["id"] for r in page["data"]]


async def test_dto_nullability(ctx, member):
    created = await _create(ctx, member)
    assert created["description"] is None
    assert "cuisine" not in created
    assert "published_on" not in created
    assert "deleted_at" not in created
    assert created["member_id"] == str(member.id)
    assert created["created_at"].endswith("Z")


async def test_published_on_renders_as_date(ctx, member):
    created = await _create(ctx, member, published_on="2026-04-01")
    assert created["published_on"] == "2026-04-01"


async def test_get_recipe(ctx, member):
    created = await _create(ctx, member, cuisine="thai")
    fetched = await recipe_providers.get_recipe(ctx, recipe_id=_id(created))
    assert fetched == created


async def test_get_missing_recipe(ctx):
    with pytest.raises(NotFoundError):
        await recipe_providers.get_recipe(ctx, recipe_id=uuid4())


async def test_search_filters_and_sort(ctx, member):
    await _create(ctx, member, name="Pad Thai", cuisine="thai", servings=2)
    await _create(ctx, member, name="Green Curry", cuisine="thai", servings=4)
    await _create(ctx, member, name="Lasagna", cuisine="italian", servings=8)

    page = await recipe_providers.search_recipes(
        ctx, body=RecipeSearch(cuisine="thai", order_by="servings_DESC"),
    )
    assert [r["name"] for r in page["data"]] == ["Green Curry", "Pad Thai"]
    assert page["pagination"] == {"current": 1, "limit": 10, "records": 2, "pages": 1}


async def test_search_unknown_sort_falls_back(ctx, member):
    await _create(ctx, member)
    page = await recipe_providers.search_recipes(
        ctx, body=RecipeSearch(sort="password_hash", order="asc"),
    )
    assert page["pagination"]["records"] == 1


async def test_search_rejects_page_zero(ctx):
    with pytest.raises(ValidationError):
        await recipe_providers.search_recipes(ctx, body=RecipeSearch(page=0))


async def test_search_clamps_limit(ctx, member):
    await _create(ctx, member)
    page = await recipe_providers.search_recipes(ctx, body=RecipeSearch(limit=5000))
    assert page["pagination"]["limit"] == ctx.settings.max_page_limit


async def test_double_delete_is_not_found(ctx, member):
    created = await _create(ctx, member)
    principal = as_principal(member)
    await recipe_providers.delete_recipe(ctx, principal=principal, recipe_id=_id(created))
    with pytest.raises(NotFoundError):
        await recipe_providers.delete_recipe(ctx, principal=principal, recipe_id=_id(created))


async def test_deleted_recipe_hidden(ctx, member):
    created = await _create(ctx, member)
    await recipe_providers.delete_recipe(
        ctx, principal=as_principal(member), recipe_id=_id(created),
    )
    page = await recipe_providers.search_recipes(ctx, body=RecipeSearch())
    assert page["pagination"]["records"] == 0
    with pytest.raises(NotFoundError):
        await recipe_providers.get_recipe(ctx, recipe_id=_id(created))


async def test_non_owner_cannot_update_or_delete(ctx, member, other_member):
    created = await _create(ctx, member)
    intruder = as_principal(other_member)
    with pytest.raises(ForbiddenError):
        await recipe_providers.update_recipe(
            ctx, principal=intruder, recipe_id=_id(created),
            body=RecipeUpdate(name="Mine now"),
        )
    with pytest.raises(ForbiddenError):
        await recipe_providers.delete_recipe(
            ctx, principal=intruder, recipe_id=_id(created),
        )


async def test_admin_can_delete_any_recipe(ctx, member, admin):
    created = await _create(ctx, member)
    await recipe_providers.delete_recipe(
        ctx, principal=as_principal(admin), recipe_id=_id(created),
    )
    with pytest.raises(NotFoundError):
        await recipe_providers.get_recipe(ctx, recipe_id=_id(created))


async def test_update_applies_only_sent_fields(ctx, member):
    created = await _create(ctx, member, description="Tasty", cuisine="thai")
    updated = await recipe_providers.update_recipe(
        ctx, principal=as_principal(member), recipe_id=_id(created),
        body=RecipeUpdate(name="Better Widget", description=None),
    )
    assert updated["name"] == "Better Widget"
    assert updated["description"] is None
    assert updated["cuisine"] == "thai"
    assert updated["servings"] == created["servings"]


async def test_empty_update_allowed_by_default(ctx, member):
    created = await _create(ctx, member)
    unchanged = await recipe_providers.update_recipe(
        ctx, principal=as_principal(member), recipe_id=_id(created),
        body=RecipeUpdate(),
    )
    assert unchanged == created


async def test_empty_update_rejected_when_configured(ctx, member):
    created = await _create(ctx, member)
    strict = replace(
        ctx,
        settings=ctx.settings.model_copy(
            update={"empty_update_policy": EmptyUpdatePolicy.REJECT},
        ),
    )
    with pytest.raises(ValidationError):
        await recipe_providers.update_recipe(
            strict, principal=as_principal(member), recipe_id=_id(created),
            body=RecipeUpdate(),
        )


async def test_update_deleted_recipe_is_not_found(ctx, member):
    created = await _create(ctx, member)
    principal = as_principal(member)
    await recipe_providers.delete_recipe(ctx, principal=principal, recipe_id=_id(created))
    with pytest.raises(NotFoundError):
        await recipe_providers.update_recipe(
            ctx, principal=principal, recipe_id=_id(created),
            body=RecipeUpdate(name="Zombie"),
        )


async def test_unknown_principal_cannot_create(ctx, member):
    ghost = Principal(uuid4(), PrincipalType.MEMBER)
    with pytest.raises(AuthenticationError):
        await recipe_providers.create_recipe(
            ctx, principal=ghost, body=RecipeCreate(name="Nope"),
        )
