"""SQLAlchemy Repository tests — predicates, paging, conditional updates, errors.

Tests cover:
    - Each FilterOp translates to the expected SQL condition
    - find_many orders, offsets and limits; ties broken by id
    - Conditional update returns None when nothing matched
    - Unique violations surface as ConflictError
    - transaction() rolls back on error
    - Ownership lives in the member_id column; models declare no relationships
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import inspect

from crudcore.core.domain_types import FilterOp, SortOrder
from crudcore.core.errors import ConflictError
from crudcore.core.pagination import Predicate
from crudcore.infrastructure.repository import SqlAlchemyRepository
from crudcore.models.member import Member
from crudcore.models.recipe import Recipe


@pytest.fixture
def members(test_session_factory):
    return SqlAlchemyRepository(test_session_factory, Member)


@pytest.fixture
def recipes(test_session_factory):
    return SqlAlchemyRepository(test_session_factory, Recipe)


@pytest.fixture
async def owner(members):
    return await members.create({
        "email": "owner@example.com",
        "password_hash": "x",
        "display_name": "Owner",
    })


@pytest.fixture
async def seeded(recipes, owner):
    rows = []
    for name, cuisine, servings in [
        ("Pad Thai", "thai", 2),
        ("Green Curry", "thai", 4),
        ("Lasagna", "italian", 8),
        ("Plain Rice", None, 1),
    ]:
        rows.append(await recipes.create({
            "member_id": owner.id,
            "name": name,
            "cuisine": cuisine,
            "servings": servings,
        }))
    return rows


async def test_create_assigns_id(owner):
    assert owner.id is not None
    assert owner.role == "member"


async def test_find_unique(members, owner):
    found = await members.find_unique(owner.id)
    assert found.email == "owner@example.com"


async def test_eq_and_contains(recipes, seeded):
    thai = await recipes.find_many([Predicate("cuisine", FilterOp.EQ, "thai")])
    assert {r.name for r in thai} == {"Pad Thai", "Green Curry"}
    curry = await recipes.find_many([Predicate("name", FilterOp.CONTAINS, "Curry")])
    assert [r.name for r in curry] == ["Green Curry"]


async def test_contains_escapes_wildcards(recipes, seeded):
    assert await recipes.find_many([Predicate("name", FilterOp.CONTAINS, "%")]) == []


async def test_range_and_in(recipes, seeded):
    mid = await recipes.find_many([
        Predicate("servings", FilterOp.GTE, 2),
        Predicate("servings", FilterOp.LTE, 4),
    ])
    assert {r.name for r in mid} == {"Pad Thai", "Green Curry"}
    picked = await recipes.find_many([Predicate("servings", FilterOp.IN, [1, 8])])
    assert {r.name for r in picked} == {"Lasagna", "Plain Rice"}


async def test_is_null_and_is_not_null(recipes, seeded):
    no_cuisine = await recipes.find_many([Predicate("cuisine", FilterOp.IS_NULL)])
    assert [r.name for r in no_cuisine] == ["Plain Rice"]
    assert await recipes.count([Predicate("cuisine", FilterOp.IS_NULL, False)]) == 3


async def test_find_many_orders_and_pages(recipes, seeded):
    first = await recipes.find_many(
        [], order_by="servings", order=SortOrder.ASC, skip=0, take=2,
    )
    second = await recipes.find_many(
        [], order_by="servings", order=SortOrder.ASC, skip=2, take=2,
    )
    assert [r.servings for r in first] == [1, 2]
    assert [r.servings for r in second] == [4, 8]


async def test_count(recipes, seeded):
    assert await recipes.count([]) == 4
    assert await recipes.count([Predicate("cuisine", FilterOp.EQ, "thai")]) == 2


async def test_conditional_update(recipes, seeded):
    target = seeded[0]
    where = [
        Predicate("id", FilterOp.EQ, target.id),
        Predicate("deleted_at", FilterOp.IS_NULL),
    ]
    now = datetime.now(timezone.utc)
    first = await recipes.update(where, {"deleted_at": now})
    assert first is not None
    assert first.deleted_at is not None
    assert await recipes.update(where, {"deleted_at": now}) is None


async def test_delete_returns_rowcount(recipes, seeded):
    where = [Predicate("cuisine", FilterOp.EQ, "thai")]
    assert await recipes.delete(where) == 2
    assert await recipes.count([]) == 2


async def test_unique_violation_is_conflict(members, owner):
    with pytest.raises(ConflictError):
        await members.create({
            "email": "owner@example.com",
            "password_hash": "y",
            "display_name": "Copy",
        })


async def test_transaction_rolls_back(members):
    with pytest.raises(RuntimeError):
        async with members.transaction() as tx:
            await tx.create({
                "email": "ghost@example.com",
                "password_hash": "x",
                "display_name": "Ghost",
            })
            raise RuntimeError("abort")
    assert await members.count([Predicate("email", FilterOp.EQ, "ghost@example.com")]) == 0


def test_models_carry_ownership_as_plain_foreign_keys():
    assert not inspect(Member).relationships
    assert not inspect(Recipe).relationships
    assert {fk.target_fullname for fk in Recipe.__table__.c.member_id.foreign_keys} == {
        "members.id",
    }


async def test_loaded_recipe_exposes_owner_id(recipes, owner):
    recipe = await recipes.create({"member_id": owner.id, "name": "Soup"})
    loaded = await recipes.find_unique(recipe.id)
    assert loaded.member_id == owner.id
