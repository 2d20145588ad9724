"""Page Request Schema — common fields of every search request body.

Invariants:
    - page / limit are left unconstrained here; core/pagination.py validates them
      so direct provider calls and HTTP calls fail the same way
    - sort / order / order_by are free strings; unknown values fall back to the
      resource's default sort instead of failing
"""

from pydantic import BaseModel


class PageRequest(BaseModel):
    """Base for search bodies: paging plus either sort+order or order_by."""
    page: int | None = None
    limit: int | None = None
    sort: str | None = None
    order: str | None = None
    order_by: str | None = None
