from __future__ import annotations

from pydantic import BaseModel, field_validator

from agency_admin.models.enums import CandidateStatus
from agency_admin.schemas.validators import PHONE_RE, validate_email


class CandidateCreateRequest(BaseModel):
    name: str
    email: str
    phone: str
    position: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < 3:
            raise ValueError("Name must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        try:
            return validate_email(v)
        except ValueError:
            raise ValueError("Valid email is required")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = (v or "").strip()
        if not PHONE_RE.match(v):
            raise ValueError("Valid 10-digit phone starting with 6-9 is required")
        return v

    @field_validator("position")
    @classmethod
    def _position(cls, v: str) -> str:
        v = (v or "").strip()
        if len(v) < 2:
            raise ValueError("Position must be at least 2 characters")
        return v


class CandidateStatusRequest(BaseModel):
    status: CandidateStatus
