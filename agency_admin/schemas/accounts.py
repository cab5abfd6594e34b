from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agency_admin.models.enums import AccountRole
from agency_admin.schemas.validators import validate_email


class AccountCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: str
    handle: Optional[str] = Field(default=None, max_length=60)
    role: AccountRole = AccountRole.STAFF
    password: str = Field(..., min_length=6)

    _email = field_validator("email")(validate_email)

    @field_validator("handle")
    @classmethod
    def _handle(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip().lower()
        if "@" in v:
            raise ValueError("Handle must not contain '@'")
        return v or None


class AccountPatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[str] = None
    handle: Optional[str] = Field(default=None, max_length=60)
    role: Optional[AccountRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=6)

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v) if v is not None else None

    @field_validator("handle")
    @classmethod
    def _handle(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip().lower()
        if "@" in v:
            raise ValueError("Handle must not contain '@'")
        return v


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    handle: Optional[str] = None
    name: str
    role: AccountRole
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountListResponse(BaseModel):
    data: List[AccountOut]
    page: int
    limit: int
    total: int
    total_pages: int
