# agency_admin/api/v1/members.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_admin.core.auth_deps import get_current_principal, require_admin
from agency_admin.core.errors import Forbidden
from agency_admin.db.session import get_db
from agency_admin.policies.project_access import can_view_project
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.memberships import MemberResponse, MembershipGrantRequest, MembershipPatchRequest
from agency_admin.services.memberships_service import MembershipsService

router = APIRouter(prefix="/admin/projects/{project_id}/members")

svc = MembershipsService()


def _resp(m) -> dict:
    account = m.account
    return MemberResponse(
        project_id=m.project_id,
        account_id=m.account_id,
        can_edit=m.can_edit,
        can_manage_payments=m.can_manage_payments,
        name=account.name if account is not None else None,
        email=account.email if account is not None else None,
        role=account.role if account is not None else None,
    ).model_dump()


@router.get("")
def list_members(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    if not can_view_project(db, principal, project_id):
        raise Forbidden()
    return {"data": [_resp(m) for m in svc.list(db, project_id)]}


@router.post("", status_code=201)
def grant_member(
    project_id: int,
    body: MembershipGrantRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    m = svc.grant(
        db,
        project_id=project_id,
        account_id=body.account_id,
        can_edit=body.can_edit,
        can_manage_payments=body.can_manage_payments,
    )
    return _resp(m)


@router.patch("/{account_id}")
def patch_member(
    project_id: int,
    account_id: int,
    body: MembershipPatchRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    m = svc.update(
        db,
        project_id=project_id,
        account_id=account_id,
        can_edit=body.can_edit,
        can_manage_payments=body.can_manage_payments,
    )
    return _resp(m)


@router.delete("/{account_id}")
def revoke_member(
    project_id: int,
    account_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    svc.revoke(db, project_id=project_id, account_id=account_id)
    return {"ok": True}
