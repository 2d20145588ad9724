"""Member Schemas — admin search body.

Invariants:
    - email filter is lowercased, matching how join stores addresses
"""

from typing import Literal

from pydantic import field_validator

from crudcore.schemas.pagination import PageRequest


class MemberSearch(PageRequest):
    email: str | None = None
    display_name: str | None = None
    role: Literal["member", "admin"] | None = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else v
