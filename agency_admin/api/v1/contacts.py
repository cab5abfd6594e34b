# agency_admin/api/v1/contacts.py
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from agency_admin.core.auth_deps import get_current_principal, require_admin
from agency_admin.core.query import PageParams, SortParams
from agency_admin.core.streaming import csv_stream
from agency_admin.db.session import get_db
from agency_admin.models.enums import ContactStatus
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.contacts import ContactBulkRequest, ContactPatchRequest
from agency_admin.services.contacts_service import EXPORT_FIELDS, SORTABLE, ContactFilters, ContactsService

router = APIRouter(prefix="/admin/contacts")

svc = ContactsService()


def _iso(dt):
    return dt.isoformat() if dt else None


def _resp(c) -> dict:
    return {
        "id": c.id,
        "name": c.name,
        "email": c.email,
        "phone": c.phone,
        "subject": c.subject,
        "message": c.message,
        "status": c.status,
        "admin_notes": c.admin_notes,
        "created_at": _iso(c.created_at),
        "updated_at": _iso(c.updated_at),
    }


def _filters(
    search: Optional[str] = Query(None),
    status: Optional[ContactStatus] = Query(None),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
) -> ContactFilters:
    return ContactFilters(
        search=search,
        status=status.value if status else None,
        date_from=date_from,
        date_to=date_to,
    )


def _sort(
    sort: Optional[str] = Query(None),
    order: Optional[str] = Query(None),
) -> SortParams:
    return SortParams.normalize(sort, order, SORTABLE, default="created_at")


@router.get("")
def list_contacts(
    page: int = Query(1),
    limit: int = Query(20),
    filters: ContactFilters = Depends(_filters),
    sort: SortParams = Depends(_sort),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
):
    params = PageParams.normalize(page, limit)
    rows, total = svc.list(db, filters=filters, sort=sort, page=params)
    return {
        "data": [_resp(c) for c in rows],
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": params.total_pages(total),
        "sort": sort.key,
        "order": "desc" if sort.descending else "asc",
    }


@router.get("/export.csv")
def export_contacts(
    filters: ContactFilters = Depends(_filters),
    sort: SortParams = Depends(_sort),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
):
    # rows are read while the session is still open
    rows = list(svc.export_rows(db, filters=filters, sort=sort))
    return StreamingResponse(
        csv_stream(rows, EXPORT_FIELDS),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="contacts.csv"'},
    )


@router.post("/bulk")
def bulk_contacts(
    body: ContactBulkRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    affected = svc.bulk(db, ids=body.ids, action=body.action, status=body.status)
    return {"ok": True, "affected": affected}


@router.get("/{contact_id}")
def get_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
):
    return _resp(svc.get(db, contact_id))


@router.patch("/{contact_id}")
def patch_contact(
    contact_id: int,
    body: ContactPatchRequest,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(get_current_principal),
):
    return _resp(svc.update(db, contact_id, body.model_dump(exclude_unset=True)))


@router.delete("/{contact_id}")
def delete_contact(
    contact_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    svc.delete(db, contact_id)
    return {"ok": True}
