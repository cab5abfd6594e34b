from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agency_admin.schemas.validators import validate_email


class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    email: str
    phone: str = Field(..., min_length=1, max_length=20)
    company: Optional[str] = Field(default=None, max_length=160)

    _email = field_validator("email")(validate_email)


class ClientPatch(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=1, max_length=20)
    company: Optional[str] = Field(default=None, max_length=160)

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v) if v is not None else None


class ClientOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    company: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    project_count: int = 0
