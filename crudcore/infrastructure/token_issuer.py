"""Token Issuer — signed access/refresh JWT pairs with fixed expiry windows.

Invariants:
    - Access token: {id, type, **claims, token_type: "access"}; refresh token: {id, type, tokenType: "refresh"}
    - Both tokens carry iss, iat, exp and a fresh jti, so two issuances never yield equal strings
    - expired_at / refreshable_until derive from the same `now` as the signed exp claims
    - Any verification failure raises AuthenticationError; no fallback, no retry
    - No persistence access

Design Decisions:
    - PyJWT with HS256 and a process-wide secret passed in through the constructor
    - `now` truncated to whole seconds: JWT exp is an integer, the envelope must match it
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable
from uuid import UUID

import jwt

from crudcore.config import Settings
from crudcore.core.domain_types import Principal, PrincipalType, TokenType
from crudcore.core.errors import AuthenticationError
from crudcore.core.response_mapping import to_iso
from crudcore.schemas.auth import TokenEnvelope

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
_RESERVED_CLAIMS = frozenset({
    "id", "type", "token_type", "tokenType", "jti", "iat", "exp", "iss",
})


@dataclass(frozen=True)
class RefreshClaims:
    id: UUID
    type: PrincipalType
    jti: str


@dataclass(frozen=True)
class IssuedTokens:
    """Envelope plus the bookkeeping a caller needs to record the refresh token."""
    envelope: TokenEnvelope
    refresh_jti: str
    refresh_expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Signs and verifies access/refresh tokens for principals."""

    def __init__(
        self,
        secret_key: str,
        issuer: str,
        access_ttl: timedelta = timedelta(hours=1),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.jwt_secret_key,
            issuer=settings.jwt_issuer,
            access_ttl=timedelta(seconds=settings.access_token_ttl_seconds),
            refresh_ttl=timedelta(seconds=settings.refresh_token_ttl_seconds),
        )

    def _sign(
        self, payload: dict[str, Any], now: datetime, expires_at: datetime, jti: str,
    ) -> str:
        claims = {
            **payload,
            "jti": jti,
            "iat": int(now.timestamp()),
            "exp": int(expires_at.timestamp()),
            "iss": self.issuer,
        }
        return jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)

    def issue(self, principal: Principal) -> IssuedTokens:
        """Produce a fresh access/refresh pair for the principal."""
        now = self._clock().astimezone(timezone.utc).replace(microsecond=0)
        extra = {
            k: v for k, v in principal.claims.items() if k not in _RESERVED_CLAIMS
        }
        base = {"id": str(principal.id), "type": principal.type.value}
        access_expires_at = now + self.access_ttl
        refresh_expires_at = now + self.refresh_ttl
        refresh_jti = uuid.uuid4().hex
        access = self._sign(
            {**base, **extra, "token_type": TokenType.ACCESS.value},
            now, access_expires_at, uuid.uuid4().hex,
        )
        refresh = self._sign(
            {**base, "tokenType": TokenType.REFRESH.value},
            now, refresh_expires_at, refresh_jti,
        )
        envelope = TokenEnvelope(
            access=access,
            refresh=refresh,
            expired_at=to_iso(access_expires_at),
            refreshable_until=to_iso(refresh_expires_at),
        )
        return IssuedTokens(envelope, refresh_jti, refresh_expires_at)

    def _decode(self, token: str | None) -> dict[str, Any]:
        if not token or not isinstance(token, str):
            raise AuthenticationError("Missing token")
        try:
            return jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={"require": ["exp", "iat", "iss", "jti"]},
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise AuthenticationError("Invalid token")

    @staticmethod
    def _identity(payload: dict[str, Any]) -> tuple[UUID, PrincipalType]:
        try:
            return UUID(str(payload["id"])), PrincipalType(payload["type"])
        except (KeyError, ValueError):
            raise AuthenticationError("Invalid token")

    def verify_refresh(self, token: str | None) -> RefreshClaims:
        """Validate a refresh token; return the embedded principal id, role and jti."""
        payload = self._decode(token)
        if payload.get("tokenType") != TokenType.REFRESH.value:
            raise AuthenticationError("Invalid token")
        principal_id, principal_type = self._identity(payload)
        return RefreshClaims(principal_id, principal_type, payload["jti"])

    def verify_access(self, token: str | None) -> Principal:
        """Validate an access token and rebuild the Principal it was issued for."""
        payload = self._decode(token)
        if payload.get("token_type") != TokenType.ACCESS.value:
            raise AuthenticationError("Invalid token")
        principal_id, principal_type = self._identity(payload)
        claims = {k: v for k, v in payload.items() if k not in _RESERVED_CLAIMS}
        return Principal(principal_id, principal_type, claims)
