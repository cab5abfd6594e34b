# agency_admin/api/v1/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session

from agency_admin.core.auth_deps import get_current_principal
from agency_admin.core.deps import Clock, get_clock
from agency_admin.db.session import get_db
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.accounts import AccountOut
from agency_admin.schemas.auth import LoginRequest, TokenResponse
from agency_admin.services.auth_service import authenticate, issue_session_token

router = APIRouter(prefix="/auth")


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
):
    settings = request.app.state.settings

    account = authenticate(db, body.identifier, body.password, clock=clock)
    token = issue_session_token(settings, account)

    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        max_age=settings.jwt_access_token_minutes * 60,
        path="/",
    )
    return TokenResponse(
        token=token,
        access_token=token,
        account=AccountOut.model_validate(account),
    )


@router.post("/logout")
def logout(request: Request, response: Response):
    settings = request.app.state.settings
    response.delete_cookie(settings.session_cookie_name, path="/")
    return {"ok": True}


@router.get("/me")
def me(principal: Principal = Depends(get_current_principal)):
    return {
        "id": principal.account_id,
        "email": principal.email,
        "name": principal.name,
        "role": principal.role.value,
        "handle": principal.handle,
    }
