"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - MemberId and RecipeId wrap UUIDs
    - Every closed set of string values is an Enum
    - Principal is immutable once produced by the identity layer

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

MemberId = NewType("MemberId", UUID)
RecipeId = NewType("RecipeId", UUID)


# ─── Enums ───────────────────────────────────────────────────────

class PrincipalType(str, Enum):
    """Role tag carried in every access token and provider principal."""
    MEMBER = "member"
    ADMIN = "admin"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class FilterOp(str, Enum):
    """Predicate operators a search request field may map to."""
    EQ = "eq"
    CONTAINS = "contains"
    GTE = "gte"
    LTE = "lte"
    IN = "in"
    IS_NULL = "is_null"


class EmptyUpdatePolicy(str, Enum):
    """What an update provider does when the payload changes no field."""
    ALLOW = "allow"
    REJECT = "reject"


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


# ─── Principal ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Principal:
    """Authenticated actor handed to providers by the identity layer."""
    id: UUID
    type: PrincipalType
    claims: dict[str, Any] = field(default_factory=dict)
