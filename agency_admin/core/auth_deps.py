# agency_admin/core/auth_deps.py
from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from agency_admin.core.errors import Forbidden, InvalidToken, Unauthenticated
from agency_admin.core.security import decode_session_token
from agency_admin.db.session import get_db
from agency_admin.models.enums import AccountRole
from agency_admin.policies.project_access import can_edit_project, can_manage_payments
from agency_admin.policies.rbac import Principal

bearer = HTTPBearer(auto_error=False)


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    The session token is accepted as a bearer credential or from the session
    cookie. Guarantees:
    - a token is present                  (else 401 Missing token)
    - signature and expiry verify         (else 401 Invalid token)
    - the payload carries a known role    (else 403)
    """
    settings = request.app.state.settings

    token = creds.credentials if creds else request.cookies.get(settings.session_cookie_name)
    if not token:
        raise Unauthenticated()

    try:
        payload = decode_session_token(settings, token)
    except JWTError:
        raise InvalidToken()

    role = payload.get("role")
    if not role:
        raise Forbidden()

    try:
        role_enum = AccountRole(role)
    except ValueError:
        raise Forbidden()

    try:
        account_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise InvalidToken()

    principal = Principal(
        account_id=account_id,
        email=str(payload.get("email") or ""),
        name=str(payload.get("name") or "Unknown"),
        role=role_enum,
        handle=payload.get("handle"),
    )

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal

    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise Forbidden("Administrator only.")
    return principal


def require_project_edit(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not can_edit_project(db, principal, project_id):
        raise Forbidden()
    return principal


def require_project_payments(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not can_manage_payments(db, principal, project_id):
        raise Forbidden()
    return principal
