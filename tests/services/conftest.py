"""Service test fixtures — file-backed async SQLite, ProviderContext, FastAPI client.

Invariants:
    - Every test gets a fresh SQLite file under tmp_path
    - Provider dependencies are overridden to use the test context
    - db_manager patched so readiness checks hit the test engine

Design Decisions:
    - File-backed rather than :memory: so concurrent count/find_many sessions
      see the same database
    - bcrypt_rounds=4 keeps hashing fast
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import crudcore.infrastructure.database as db_module
import crudcore.models  # noqa: F401
from crudcore.api.dependencies import get_provider_context, get_token_issuer
from crudcore.config import Settings
from crudcore.core.domain_types import Principal, PrincipalType
from crudcore.db.base import Base
from crudcore.infrastructure.database import DatabaseSessionManager
from crudcore.infrastructure.passwords import hash_password
from crudcore.main import app
from crudcore.services.context import ProviderContext

PASSWORD = "s3cret-pass"


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'services.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def test_session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///unused.db",
        jwt_secret_key="service-test-secret",
        bcrypt_rounds=4,
    )


@pytest.fixture
def ctx(test_session_factory, settings):
    return ProviderContext.create(test_session_factory, settings)


async def _seed_member(ctx: ProviderContext, email: str, role: str):
    return await ctx.members.create({
        "email": email,
        "password_hash": hash_password(PASSWORD, rounds=4),
        "display_name": email.split("@")[0],
        "role": role,
    })


@pytest.fixture
async def member(ctx):
    return await _seed_member(ctx, "cook@example.com", "member")


@pytest.fixture
async def other_member(ctx):
    return await _seed_member(ctx, "rival@example.com", "member")


@pytest.fixture
async def admin(ctx):
    return await _seed_member(ctx, "admin@example.com", "admin")


def as_principal(record) -> Principal:
    return Principal(record.id, PrincipalType(record.role), {"email": record.email})


@pytest.fixture
def auth_header(ctx):
    """Build an Authorization header for a seeded member."""
    def _header(record) -> dict:
        token = ctx.token_issuer.issue(as_principal(record)).envelope.access
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest.fixture
async def client(test_engine, test_session_factory, ctx):
    """FastAPI test client with provider dependencies overridden."""
    app.dependency_overrides[get_provider_context] = lambda: ctx
    app.dependency_overrides[get_token_issuer] = lambda: ctx.token_issuer

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager.session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
