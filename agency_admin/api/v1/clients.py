# agency_admin/api/v1/clients.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from agency_admin.api.v1.projects import project_resp
from agency_admin.core.auth_deps import get_current_principal, require_admin
from agency_admin.db.session import get_db
from agency_admin.policies.project_access import permissions_for
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.clients import ClientCreate, ClientOut, ClientPatch
from agency_admin.services.clients_service import ClientsService
from agency_admin.services.projects_service import ProjectsService

router = APIRouter(prefix="/admin/clients")

clients = ClientsService()
projects = ProjectsService()


def _resp(c, project_count: int = 0) -> dict:
    out = ClientOut.model_validate(c).model_dump(mode="json")
    out["project_count"] = project_count
    return out


@router.get("")
def list_clients(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    rows = clients.list_visible(db, principal)
    return {"data": [_resp(c, n) for c, n in rows]}


@router.post("", status_code=201)
def create_client(
    body: ClientCreate,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    c = clients.create(db, name=body.name, email=body.email, phone=body.phone, company=body.company)
    return _resp(c)


@router.get("/{client_id}")
def get_client(
    client_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return _resp(clients.get_visible(db, principal, client_id))


@router.patch("/{client_id}")
def patch_client(
    client_id: int,
    body: ClientPatch,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    c = clients.update(db, client_id, body.model_dump(exclude_unset=True, exclude_none=True))
    return _resp(c)


@router.delete("/{client_id}")
def delete_client(
    client_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    clients.delete(db, client_id)
    return {"ok": True}


@router.get("/{client_id}/projects")
def list_client_projects(
    client_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Projects of the client visible to the caller, each with the caller's permissions."""
    clients.get_visible(db, principal, client_id)
    rows = projects.list_for_client(db, principal, client_id)
    perms = permissions_for(db, principal, [p.id for p in rows])
    return {"data": [project_resp(p, perms.get(p.id)) for p in rows]}
