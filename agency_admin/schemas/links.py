from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class CandidateLinkRequest(BaseModel):
    candidate_id: int


class LinkToggleRequest(BaseModel):
    active: bool


class PaymentLinkCreateRequest(BaseModel):
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    kind: Optional[str] = Field(default=None, description="project | registration")


class PaymentLinkPatchRequest(BaseModel):
    amount: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    active: Optional[bool] = None
    expires_at: Optional[datetime] = None


class LinkResponse(BaseModel):
    id: int
    kind: str
    token: str
    active: bool
    expires_at: datetime
    created_at: Optional[datetime] = None
    candidate_id: Optional[int] = None
    project_id: Optional[int] = None
    amount: Optional[Decimal] = None
    payment_kind: Optional[str] = None
    upload_completed: bool = False
    url: Optional[str] = None
