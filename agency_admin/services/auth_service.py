# agency_admin/services/auth_service.py
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from agency_admin.core.config import Settings
from agency_admin.core.deps import Clock, utcnow
from agency_admin.core.errors import Unauthenticated
from agency_admin.core.security import create_session_token, verify_and_upgrade
from agency_admin.models.account import Account
from agency_admin.models.enums import AccountRole
from agency_admin.policies.rbac import Principal

logger = logging.getLogger(__name__)


def principal_for(account: Account) -> Principal:
    return Principal(
        account_id=account.id,
        email=account.email,
        name=account.name,
        role=AccountRole(account.role),
        handle=account.handle,
    )


def authenticate(db: Session, identifier: str, password: str, *, clock: Clock = utcnow) -> Account:
    """
    Identifier is an email when it contains '@', otherwise a handle.
    Every failure is reported the same way.
    """
    ident = (identifier or "").strip().lower()
    column = Account.email if "@" in ident else Account.handle

    account = db.execute(select(Account).where(column == ident)).scalar_one_or_none()

    ok, new_hash = verify_and_upgrade(password, account.password_hash if account is not None else None)
    if account is None or not account.is_active or not ok:
        logger.warning("login_failed", extra={"by_email": "@" in ident})
        raise Unauthenticated("Invalid credentials.")

    if new_hash:
        account.password_hash = new_hash
    account.last_login_at = clock()
    db.commit()
    db.refresh(account)

    logger.info("login_succeeded", extra={"account_id": account.id})
    return account


def issue_session_token(settings: Settings, account: Account) -> str:
    principal = principal_for(account)
    return create_session_token(settings, account.id, principal.claims())
