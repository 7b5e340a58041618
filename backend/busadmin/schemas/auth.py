"""
Bus Admin Backend — Authentication Schemas
============================================

What:  Bodies for POST /login and POST /admins, and the login reply.
"""

import uuid

from pydantic import BaseModel, Field, field_validator


def _normalize_email(v: str) -> str:
    email = v.strip().lower()
    local, _, domain = email.partition("@")
    if not local or not domain:
        raise ValueError("must be a valid email address")
    return email


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)


class AdminCreate(BaseModel):
    """Body of the protected bootstrap endpoint."""

    name: str = Field(min_length=1, max_length=200)
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=256)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        name = v.strip()
        if not name:
            raise ValueError("must not be blank")
        return name


class AdminUser(BaseModel):
    """Public view of an administrator (never includes the hash)."""

    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class LoginResponse(BaseModel):
    token: str = Field(description="Bearer token, valid for 24 hours")
    user: AdminUser
