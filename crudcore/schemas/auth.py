"""Auth Schemas — join/login/refresh bodies and the token envelope.

Invariants:
    - Join passwords are at least 8 characters and at most 72 UTF-8 bytes
      (bcrypt input limit)
    - Login accepts any non-empty strings; malformed credentials fail as invalid credentials
    - Refresh accepts any string, including "", so verification decides
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from crudcore.infrastructure.passwords import BCRYPT_MAX_BYTES


class TokenEnvelope(BaseModel):
    access: str
    refresh: str
    expired_at: str
    refreshable_until: str


class JoinRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    display_name: str = Field(min_length=1, max_length=100)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"password cannot exceed {BCRYPT_MAX_BYTES} bytes")
        return v

    @field_validator("display_name")
    @classmethod
    def strip_display_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("display_name cannot be empty or whitespace")
        return v


class LoginRequest(BaseModel):
    email: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class RefreshRequest(BaseModel):
    refresh: str
