"""Auth Providers — member join, login and refresh.

Invariants:
    - Every provider returns the same AuthorizedPrincipal shape: member DTO + token envelope
    - join rejects an already registered email with ConflictError before any write
    - login failures (unknown email, deleted member, wrong password) raise one identical
      AuthenticationError("Invalid credentials")
    - refresh verifies the token before touching persistence, revokes the presented
      session and returns a brand-new pair
    - Each issued refresh token is recorded as an AuthSession inside the same transaction

Design Decisions:
    - bcrypt runs in a worker thread (asyncio.to_thread): hashing is CPU-bound
    - Failed logins are logged at WARNING, never persisted
"""

import asyncio
import logging
from datetime import datetime, timezone

from crudcore.core.domain_types import FilterOp, Principal, PrincipalType
from crudcore.core.errors import AuthenticationError, ConflictError
from crudcore.core.pagination import Predicate
from crudcore.core.response_mapping import FieldKind, FieldRule, ResponseMapper
from crudcore.infrastructure.passwords import hash_password, verify_password
from crudcore.models.member import Member
from crudcore.schemas.auth import JoinRequest, LoginRequest, RefreshRequest
from crudcore.services.context import ProviderContext

logger = logging.getLogger(__name__)

AUTHORIZED_MEMBER = ResponseMapper([
    FieldRule("id"),
    FieldRule("email"),
    FieldRule("display_name"),
    FieldRule("role"),
    FieldRule("created_at"),
    FieldRule("updated_at"),
    FieldRule("deleted_at", FieldKind.OPTIONAL),
])


def _principal_for(member: Member) -> Principal:
    return Principal(
        id=member.id,
        type=PrincipalType(member.role),
        claims={"email": member.email},
    )


async def _authorize(tx: ProviderContext, member: Member) -> dict:
    """Issue a token pair for the member and record its refresh session."""
    issued = tx.token_issuer.issue(_principal_for(member))
    await tx.auth_sessions.create({
        "member_id": member.id,
        "refresh_jti": issued.refresh_jti,
        "issued_at": datetime.now(timezone.utc),
        "expires_at": issued.refresh_expires_at,
    })
    return {
        **AUTHORIZED_MEMBER.map(member),
        "token": issued.envelope.model_dump(),
    }


async def join(ctx: ProviderContext, *, body: JoinRequest) -> dict:
    """Register a member and return it authorized."""
    email = body.email.lower()
    existing = await ctx.members.find_first(
        [Predicate("email", FilterOp.EQ, email)],
    )
    if existing is not None:
        raise ConflictError(f"Email '{email}' is already registered")

    password_hash = await asyncio.to_thread(
        hash_password, body.password, ctx.settings.bcrypt_rounds,
    )
    now = datetime.now(timezone.utc)
    async with ctx.transaction() as tx:
        member = await tx.members.create({
            "email": email,
            "password_hash": password_hash,
            "display_name": body.display_name,
            "role": PrincipalType.MEMBER.value,
            "created_at": now,
            "updated_at": now,
        })
        authorized = await _authorize(tx, member)

    logger.info(
        f"Member joined: {member.id}",
        extra={"principal_id": member.id, "operation": "join"},
    )
    return authorized


async def login(ctx: ProviderContext, *, body: LoginRequest) -> dict:
    """Authenticate by email and password."""
    member = await ctx.members.find_first([
        Predicate("email", FilterOp.EQ, body.email.lower()),
        Predicate("deleted_at", FilterOp.IS_NULL),
    ])
    if member is None:
        logger.warning("Login failed: unknown email", extra={"operation": "login"})
        raise AuthenticationError()

    valid = await asyncio.to_thread(
        verify_password, body.password, member.password_hash,
    )
    if not valid:
        logger.warning(
            "Login failed: wrong password",
            extra={"principal_id": member.id, "operation": "login"},
        )
        raise AuthenticationError()

    async with ctx.transaction() as tx:
        authorized = await _authorize(tx, member)
    logger.info(
        f"Member logged in: {member.id}",
        extra={"principal_id": member.id, "operation": "login"},
    )
    return authorized


async def refresh(ctx: ProviderContext, *, body: RefreshRequest) -> dict:
    """Rotate a refresh token into a new access/refresh pair."""
    claims = ctx.token_issuer.verify_refresh(body.refresh)

    async with ctx.transaction() as tx:
        revoked = await tx.auth_sessions.update(
            [
                Predicate("refresh_jti", FilterOp.EQ, claims.jti),
                Predicate("member_id", FilterOp.EQ, claims.id),
                Predicate("revoked_at", FilterOp.IS_NULL),
            ],
            {"revoked_at": datetime.now(timezone.utc)},
        )
        if revoked is None:
            logger.warning(
                "Refresh rejected: session unknown or already rotated",
                extra={"principal_id": claims.id, "operation": "refresh"},
            )
            raise AuthenticationError("Invalid token")

        member = await tx.members.find_first([
            Predicate("id", FilterOp.EQ, claims.id),
            Predicate("deleted_at", FilterOp.IS_NULL),
        ])
        if member is None:
            raise AuthenticationError("Invalid token")
        authorized = await _authorize(tx, member)

    logger.info(
        f"Tokens refreshed: {claims.id}",
        extra={"principal_id": claims.id, "operation": "refresh"},
    )
    return authorized
