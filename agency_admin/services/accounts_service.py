# agency_admin/services/accounts_service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agency_admin.core.errors import Conflict, NotFound, ValidationError
from agency_admin.core.query import PageParams
from agency_admin.core.security import hash_password
from agency_admin.models.account import Account
from agency_admin.models.enums import AccountRole


class AccountsService:
    def list(
        self, db: Session, *, search: Optional[str], page: PageParams
    ) -> Tuple[List[Account], int]:
        stmt = select(Account)
        if search:
            like = f"%{search.strip().lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Account.name).like(like),
                    func.lower(Account.email).like(like),
                    func.lower(Account.handle).like(like),
                )
            )

        total = db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()
        rows = db.execute(page.apply(stmt.order_by(Account.created_at.desc(), Account.id.desc()))).scalars().all()
        return list(rows), int(total)

    def get(self, db: Session, account_id: int) -> Account:
        account = db.get(Account, account_id)
        if account is None:
            raise NotFound("Account not found.")
        return account

    def create(
        self,
        db: Session,
        *,
        name: str,
        email: str,
        password: str,
        role: AccountRole = AccountRole.STAFF,
        handle: Optional[str] = None,
    ) -> Account:
        account = Account(
            name=name.strip(),
            email=email,
            handle=handle or None,
            role=role.value,
            password_hash=hash_password(password),
            is_active=True,
        )
        db.add(account)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Email or handle already exists.")
        db.refresh(account)
        return account

    def update(self, db: Session, account_id: int, changes: Dict[str, Any]) -> Account:
        if not changes:
            raise ValidationError("No fields to update.")

        account = self.get(db, account_id)
        for key, value in changes.items():
            if value is None and key != "handle":
                continue
            if key == "password":
                account.password_hash = hash_password(value)
            elif key == "role":
                account.role = AccountRole(value).value
            elif key == "handle":
                account.handle = value or None
            else:
                setattr(account, key, value)

        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Email or handle already exists.")
        db.refresh(account)
        return account

    def delete(self, db: Session, account_id: int, *, actor_id: int) -> None:
        if account_id == actor_id:
            raise ValidationError("You cannot delete your own account.", fields={"id": "Cannot delete self"})
        account = self.get(db, account_id)
        db.delete(account)
        db.commit()
