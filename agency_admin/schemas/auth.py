from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator

from agency_admin.schemas.accounts import AccountOut


class LoginRequest(BaseModel):
    identifier: Optional[str] = Field(default=None, description="email or handle")
    email: Optional[str] = Field(default=None, description="accepted in place of identifier")
    password: str = ""

    @model_validator(mode="after")
    def _normalize(self) -> "LoginRequest":
        ident = (self.identifier or self.email or "").strip().lower()
        if not ident or not self.password:
            raise ValueError("Identifier and password required")
        self.identifier = ident
        return self

    @property
    def is_email(self) -> bool:
        return "@" in (self.identifier or "")


class TokenResponse(BaseModel):
    token: str
    access_token: str
    token_type: str = "bearer"
    account: AccountOut
