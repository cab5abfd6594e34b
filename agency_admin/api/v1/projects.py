# agency_admin/api/v1/projects.py
from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_admin.core.auth_deps import get_current_principal, require_admin, require_project_edit
from agency_admin.db.session import get_db
from agency_admin.policies.project_access import permissions_for
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.projects import ProjectCreateRequest, ProjectPatchRequest, ProjectResponse
from agency_admin.services.projects_service import ProjectsService

router = APIRouter(prefix="/admin/projects")

svc = ProjectsService()


def project_resp(p, perms: Optional[Dict[str, bool]] = None) -> dict:
    editor = p.editor
    return ProjectResponse(
        id=p.id,
        client_id=p.client_id,
        code=p.code,
        tracking_id=p.tracking_id,
        name=p.name,
        description=p.description,
        type=p.type,
        other_type=p.other_type,
        status=p.status,
        updated_by=p.updated_by,
        updated_by_name=editor.name if editor is not None else None,
        created_at=p.created_at,
        updated_at=p.updated_at,
        my_perms=perms,
    ).model_dump(mode="json")


@router.post("", status_code=201)
def create_project(
    body: ProjectCreateRequest,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    p = svc.create(
        db,
        client_id=body.client_id,
        name=body.name,
        description=body.description,
        type=body.type,
        other_type=body.other_type,
        actor_id=admin.account_id,
    )
    return project_resp(p, {"can_edit": True, "can_manage_payments": True})


@router.get("/{project_id}")
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    p = svc.get_visible(db, principal, project_id)
    perms = permissions_for(db, principal, [p.id])
    return project_resp(p, perms[p.id])


@router.patch("/{project_id}")
def patch_project(
    project_id: int,
    body: ProjectPatchRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_project_edit),
):
    p = svc.update(
        db,
        project_id,
        body.model_dump(exclude_unset=True, exclude_none=True),
        actor_id=principal.account_id,
    )
    perms = permissions_for(db, principal, [p.id])
    return project_resp(p, perms[p.id])


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    svc.delete(db, project_id)
    return {"ok": True}
