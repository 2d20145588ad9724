"""Provider Context — configuration and repositories handed to every provider.

Invariants:
    - Built once per request (api/dependencies.py) or per test; no ambient globals
    - transaction() yields a copy whose repositories share one session,
      committed on success and rolled back on any error
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from crudcore.config import Settings
from crudcore.infrastructure.repository import SqlAlchemyRepository, session_scope
from crudcore.infrastructure.token_issuer import TokenIssuer
from crudcore.models.auth_session import AuthSession
from crudcore.models.member import Member
from crudcore.models.recipe import Recipe


@dataclass(frozen=True)
class ProviderContext:
    settings: Settings
    token_issuer: TokenIssuer
    session_factory: async_sessionmaker[AsyncSession]
    members: SqlAlchemyRepository[Member]
    recipes: SqlAlchemyRepository[Recipe]
    auth_sessions: SqlAlchemyRepository[AuthSession]

    @classmethod
    def create(
        cls,
        session_factory: async_sessionmaker[AsyncSession],
        settings: Settings,
        token_issuer: TokenIssuer | None = None,
    ) -> "ProviderContext":
        return cls(
            settings=settings,
            token_issuer=token_issuer or TokenIssuer.from_settings(settings),
            session_factory=session_factory,
            members=SqlAlchemyRepository(session_factory, Member),
            recipes=SqlAlchemyRepository(session_factory, Recipe),
            auth_sessions=SqlAlchemyRepository(session_factory, AuthSession),
        )

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator["ProviderContext", None]:
        async with session_scope(self.session_factory) as db:
            yield replace(
                self,
                members=self.members.bind(db),
                recipes=self.recipes.bind(db),
                auth_sessions=self.auth_sessions.bind(db),
            )
