# agency_admin/api/v1/accounts.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from agency_admin.core.auth_deps import require_admin
from agency_admin.core.query import PageParams
from agency_admin.db.session import get_db
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.accounts import AccountCreate, AccountListResponse, AccountOut, AccountPatch
from agency_admin.services.accounts_service import AccountsService

router = APIRouter(prefix="/admin/accounts")

svc = AccountsService()


@router.get("", response_model=AccountListResponse)
def list_accounts(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    params = PageParams.normalize(page, limit)
    rows, total = svc.list(db, search=search, page=params)
    return {
        "data": rows,
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": params.total_pages(total),
    }


@router.post("", response_model=AccountOut, status_code=201)
def create_account(
    body: AccountCreate,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    return svc.create(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
        handle=body.handle,
    )


@router.patch("/{account_id}", response_model=AccountOut)
def patch_account(
    account_id: int,
    body: AccountPatch,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    return svc.update(db, account_id, body.model_dump(exclude_unset=True))


@router.delete("/{account_id}")
def delete_account(
    account_id: int,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    svc.delete(db, account_id, actor_id=admin.account_id)
    return {"ok": True}
