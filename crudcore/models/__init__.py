"""ORM Models — SQLAlchemy declarative models for the example domain.

Invariants:
    - All models inherit from Base (db/base.py)
    - Timestamps are timezone-aware UTC; soft-deleted rows carry deleted_at

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from crudcore.models.member import Member  # noqa: F401
from crudcore.models.recipe import Recipe  # noqa: F401
from crudcore.models.auth_session import AuthSession  # noqa: F401
