"""Recipe Routes — CRUD plus PATCH search.

Invariants:
    - PATCH /recipes is the paginated search (body = RecipeSearch)
    - Reads are public; writes require a bearer token
    - Responses are plain dicts so OPTIONAL fields stay absent instead of null
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from crudcore.api.dependencies import get_current_principal, get_provider_context
from crudcore.core.domain_types import Principal
from crudcore.schemas.recipe import RecipeCreate, RecipeSearch, RecipeUpdate
from crudcore.services import recipe_providers
from crudcore.services.context import ProviderContext

router = APIRouter(prefix="/api/v1/recipes", tags=["recipes"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_recipe(
    body: RecipeCreate,
    principal: Principal = Depends(get_current_principal),
    ctx: ProviderContext = Depends(get_provider_context),
):
    return await recipe_providers.create_recipe(ctx, principal=principal, body=body)


@router.patch("")
async def search_recipes(
    body: RecipeSearch, ctx: ProviderContext = Depends(get_provider_context),
):
    return await recipe_providers.search_recipes(ctx, body=body)


@router.get("/{recipe_id}")
async def get_recipe(
    recipe_id: UUID, ctx: ProviderContext = Depends(get_provider_context),
):
    return await recipe_providers.get_recipe(ctx, recipe_id=recipe_id)


@router.put("/{recipe_id}")
async def update_recipe(
    recipe_id: UUID,
    body: RecipeUpdate,
    principal: Principal = Depends(get_current_principal),
    ctx: ProviderContext = Depends(get_provider_context),
):
    return await recipe_providers.update_recipe(
        ctx, principal=principal, recipe_id=recipe_id, body=body,
    )


@router.delete("/{recipe_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_recipe(
    recipe_id: UUID,
    principal: Principal = Depends(get_current_principal),
    ctx: ProviderContext = Depends(get_provider_context),
):
    await recipe_providers.delete_recipe(
        ctx, principal=principal, recipe_id=recipe_id,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
