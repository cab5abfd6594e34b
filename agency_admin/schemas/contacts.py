from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from agency_admin.models.enums import ContactStatus
from agency_admin.schemas.validators import LETTERS_RE, validate_email, validate_phone


class ContactSubmitRequest(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Name is required")
        if len(v) < 3:
            raise ValueError("Name must be at least 3 characters")
        if not LETTERS_RE.match(v):
            raise ValueError("Only letters and spaces allowed")
        return v

    _email = field_validator("email")(validate_email)
    _phone = field_validator("phone")(validate_phone)

    @field_validator("subject")
    @classmethod
    def _subject(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Please select a service")
        return v[:80]

    @field_validator("message")
    @classmethod
    def _message(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Message is required")
        if len(v) < 10:
            raise ValueError("Message must be at least 10 characters")
        return v


class ContactPatchRequest(BaseModel):
    status: Optional[ContactStatus] = None
    admin_notes: Optional[str] = None


class ContactBulkRequest(BaseModel):
    ids: List[int] = Field(default_factory=list)
    action: Literal["delete", "status"]
    status: Optional[ContactStatus] = None

    @model_validator(mode="after")
    def _check(self) -> "ContactBulkRequest":
        if not self.ids:
            raise ValueError("No ids provided")
        if self.action == "status" and self.status is None:
            raise ValueError("Invalid status")
        return self
