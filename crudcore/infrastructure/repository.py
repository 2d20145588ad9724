"""SQLAlchemy Repository — ResourceRepository implementation over async ORM models.

Invariants:
    - Unbound repositories open one short-lived session per call and commit on success
    - Repositories bound by transaction() share one session; commit happens on context exit
    - Predicates translate 1:1 to SQL conditions; unknown columns raise AttributeError
    - find_many always adds the primary key as a tie-breaker, so paging is stable
    - SQLAlchemy exceptions leave as ConflictError / DatabaseError (translate_db_error)

Design Decisions:
    - Session per call on unbound repositories: count and find_many can run concurrently
      (one AsyncSession cannot execute two statements at once)
    - Conditional UPDATE ... RETURNING id: "not already deleted" checks are atomic in the database
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Generic, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crudcore.core.domain_types import FilterOp, SortOrder
from crudcore.core.pagination import Predicate
from crudcore.db.base import Base
from crudcore.infrastructure.database import translate_db_error

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """One session, committed on success, rolled back and translated on SQLAlchemy errors."""
    async with session_factory() as db:
        try:
            yield db
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            raise translate_db_error(e) from e


def build_condition(model: type[Base], predicate: Predicate):
    """Translate one Predicate into a SQLAlchemy boolean expression."""
    column = getattr(model, predicate.column)
    op, value = predicate.op, predicate.value
    if op is FilterOp.EQ:
        return column == value
    if op is FilterOp.CONTAINS:
        return column.contains(value, autoescape=True)
    if op is FilterOp.GTE:
        return column >= value
    if op is FilterOp.LTE:
        return column <= value
    if op is FilterOp.IN:
        return column.in_(list(value))
    if op is FilterOp.IS_NULL:
        return column.is_not(None) if value is False else column.is_(None)
    raise ValueError(f"Unsupported filter operator: {op}")


class SqlAlchemyRepository(Generic[ModelT]):
    """Per-model persistence operations."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[ModelT],
        session: AsyncSession | None = None,
    ):
        self._session_factory = session_factory
        self.model = model
        self._bound = session

    def bind(self, session: AsyncSession) -> "SqlAlchemyRepository[ModelT]":
        return SqlAlchemyRepository(self._session_factory, self.model, session)

    @asynccontextmanager
    async def _use(self) -> AsyncGenerator[AsyncSession, None]:
        if self._bound is not None:
            yield self._bound
            await self._bound.flush()
            return
        async with session_scope(self._session_factory) as db:
            yield db

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator["SqlAlchemyRepository[ModelT]", None]:
        async with session_scope(self._session_factory) as db:
            yield self.bind(db)

    def _where(self, where: Sequence[Predicate]) -> list:
        return [build_condition(self.model, p) for p in where]

    async def find_unique(self, id: UUID) -> ModelT | None:
        async with self._use() as db:
            return await db.get(self.model, id, populate_existing=True)

    async def find_first(self, where: Sequence[Predicate]) -> ModelT | None:
        stmt = select(self.model).where(*self._where(where)).limit(1)
        async with self._use() as db:
            result = await db.execute(stmt)
            return result.scalars().first()

    async def find_many(
        self,
        where: Sequence[Predicate],
        order_by: str | None = None,
        order: SortOrder = SortOrder.DESC,
        skip: int = 0,
        take: int | None = None,
    ) -> list[ModelT]:
        stmt = select(self.model).where(*self._where(where))
        if order_by is not None:
            column = getattr(self.model, order_by)
            stmt = stmt.order_by(
                column.asc() if order is SortOrder.ASC else column.desc(),
            )
        stmt = stmt.order_by(self.model.id.asc()).offset(skip)
        if take is not None:
            stmt = stmt.limit(take)
        async with self._use() as db:
            result = await db.execute(stmt)
            return list(result.scalars().all())

    async def count(self, where: Sequence[Predicate]) -> int:
        stmt = select(func.count()).select_from(self.model).where(
            *self._where(where),
        )
        async with self._use() as db:
            result = await db.execute(stmt)
            return int(result.scalar_one())

    async def create(self, data: dict[str, Any]) -> ModelT:
        record = self.model(**data)
        async with self._use() as db:
            db.add(record)
            await db.flush()
            await db.refresh(record)
        return record

    async def update(
        self, where: Sequence[Predicate], data: dict[str, Any],
    ) -> ModelT | None:
        stmt = (
            update(self.model)
            .where(*self._where(where))
            .values(**data)
            .returning(self.model.id)
            .execution_options(synchronize_session=False)
        )
        async with self._use() as db:
            result = await db.execute(stmt)
            ids = list(result.scalars().all())
            if not ids:
                return None
            return await db.get(self.model, ids[0], populate_existing=True)

    async def delete(self, where: Sequence[Predicate]) -> int:
        stmt = delete(self.model).where(*self._where(where)).execution_options(
            synchronize_session=False,
        )
        async with self._use() as db:
            result = await db.execute(stmt)
            return result.rowcount or 0
