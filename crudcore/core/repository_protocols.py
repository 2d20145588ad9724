"""Boundary Protocols — contract between providers and the persistence collaborator.

Invariants:
    - Providers and services/search.py depend on ResourceRepository, never on an ORM
    - where arguments are sequences of Predicate (ANDed); an empty sequence matches all rows
    - Constraint violations surface as ConflictError; other failures as DatabaseError
    - update() returns None and delete() returns 0 when nothing matched

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
    - Async methods: implementations do IO; core/ functions that build the
      arguments stay synchronous
"""

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol, Sequence, TypeVar
from uuid import UUID

from crudcore.core.domain_types import SortOrder
from crudcore.core.pagination import Predicate

RecordT = TypeVar("RecordT")


class ResourceRepository(Protocol[RecordT]):
    """Per-entity persistence operations, implemented by the shell."""

    async def find_unique(self, id: UUID) -> RecordT | None: ...

    async def find_first(self, where: Sequence[Predicate]) -> RecordT | None: ...

    async def find_many(
        self,
        where: Sequence[Predicate],
        order_by: str | None = None,
        order: SortOrder = SortOrder.DESC,
        skip: int = 0,
        take: int | None = None,
    ) -> list[RecordT]: ...

    async def count(self, where: Sequence[Predicate]) -> int: ...

    async def create(self, data: dict[str, Any]) -> RecordT: ...

    async def update(
        self, where: Sequence[Predicate], data: dict[str, Any],
    ) -> RecordT | None: ...

    async def delete(self, where: Sequence[Predicate]) -> int: ...

    def transaction(self) -> AbstractAsyncContextManager["ResourceRepository[RecordT]"]: ...
