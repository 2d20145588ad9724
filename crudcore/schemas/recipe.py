"""Recipe Schemas — create, update and search bodies.

Invariants:
    - RecipeUpdate distinguishes "not sent" from "sent as null" (model_fields_set)
    - name and servings may be omitted from an update but never set to null
    - RecipeSearch filters are all optional; None means "no predicate"
"""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from crudcore.schemas.pagination import PageRequest


class RecipeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    cuisine: str | None = Field(None, max_length=50)
    servings: int = Field(1, ge=1, le=1000)
    published_on: date | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class RecipeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=10_000)
    cuisine: str | None = Field(None, max_length=50)
    servings: int | None = Field(None, ge=1, le=1000)
    published_on: date | None = None

    @model_validator(mode="after")
    def reject_null_required(self):
        for name in ("name", "servings"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class RecipeSearch(PageRequest):
    name: str | None = None
    cuisine: str | None = None
    member_id: UUID | None = None
    servings_min: int | None = None
    servings_max: int | None = None
    published_from: date | None = None
    published_to: date | None = None
