"""API Dependencies — FastAPI providers for settings, context and the current principal.

Invariants:
    - One TokenIssuer per process, built from Settings on first use
    - A missing or invalid bearer token raises AuthenticationError (401), never 403
    - Routes receive a ProviderContext; they never touch the session manager directly

Design Decisions:
    - Dependencies are overridable (app.dependency_overrides) so tests swap the database
"""

from functools import lru_cache

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from crudcore.config import Settings, get_settings
from crudcore.core.domain_types import Principal
from crudcore.core.errors import AuthenticationError
from crudcore.infrastructure.database import get_db_manager
from crudcore.infrastructure.token_issuer import TokenIssuer
from crudcore.services.context import ProviderContext

_bearer = HTTPBearer(auto_error=False)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    return TokenIssuer.from_settings(get_settings())


def get_provider_context(
    settings: Settings = Depends(get_settings),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> ProviderContext:
    return ProviderContext.create(
        get_db_manager().session_factory, settings, token_issuer,
    )


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    token_issuer: TokenIssuer = Depends(get_token_issuer),
) -> Principal:
    """Resolve the Authorization: Bearer header into a Principal."""
    if credentials is None:
        raise AuthenticationError("Missing token")
    return token_issuer.verify_access(credentials.credentials)
