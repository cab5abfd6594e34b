from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class MembershipGrantRequest(BaseModel):
    account_id: int
    can_edit: bool = False
    can_manage_payments: bool = False


class MembershipPatchRequest(BaseModel):
    can_edit: Optional[bool] = None
    can_manage_payments: Optional[bool] = None


class MemberResponse(BaseModel):
    project_id: int
    account_id: int
    can_edit: bool
    can_manage_payments: bool
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
