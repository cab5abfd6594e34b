#agency_admin/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

from agency_admin.models.enums import AccountRole


@dataclass(frozen=True)
class Principal:
    account_id: int
    email: str
    name: str
    role: AccountRole
    handle: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN

    def claims(self) -> dict:
        return {
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
            "handle": self.handle,
        }


def is_admin(principal: Principal) -> bool:
    """
    Pure RBAC: administrators have unconditional authority over every project.
    """
    return principal.role == AccountRole.ADMIN
