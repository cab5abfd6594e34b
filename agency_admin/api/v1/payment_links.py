# agency_admin/api/v1/payment_links.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from agency_admin.api.v1.deps import get_link_service, get_submission_service
from agency_admin.api.v1.links_resp import link_resp, submission_resp
from agency_admin.core.auth_deps import get_current_principal, require_admin, require_project_payments
from agency_admin.core.errors import Forbidden
from agency_admin.db.session import get_db
from agency_admin.models.enums import LinkKind
from agency_admin.policies.project_access import can_manage_payments
from agency_admin.policies.rbac import Principal
from agency_admin.schemas.links import LinkToggleRequest, PaymentLinkCreateRequest, PaymentLinkPatchRequest
from agency_admin.services.links_service import TokenLinkService
from agency_admin.services.submissions_service import SubmissionService

router = APIRouter(prefix="/admin")


def _receipt_url(request: Request, submission_id: int) -> str:
    return str(request.url_for("download_payment_receipt", submission_id=submission_id))


# ---------------------------
# PER PROJECT
# ---------------------------


@router.get("/projects/{project_id}/payment-links")
def list_payment_links(
    project_id: int,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_project_payments),
    links: TokenLinkService = Depends(get_link_service),
):
    return {"links": [link_resp(link, links) for link in links.list_payment_links(db, project_id)]}


@router.post("/projects/{project_id}/payment-links", status_code=201)
def create_payment_link(
    project_id: int,
    body: PaymentLinkCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_project_payments),
    links: TokenLinkService = Depends(get_link_service),
):
    link = links.issue_payment(
        db,
        project_id=project_id,
        actor_id=principal.account_id,
        amount=body.amount,
        payment_kind=body.kind,
    )
    return link_resp(link, links)


@router.put("/projects/{project_id}/payment-links/toggle")
def toggle_project_payment_links(
    project_id: int,
    body: LinkToggleRequest,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_project_payments),
    links: TokenLinkService = Depends(get_link_service),
):
    updated = links.toggle_project(db, project_id=project_id, active=body.active)
    return {"ok": True, "updated": updated, "active": body.active}


# ---------------------------
# PER LINK
# ---------------------------


@router.patch("/payment-links/{link_id}")
def patch_payment_link(
    link_id: int,
    body: PaymentLinkPatchRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    links: TokenLinkService = Depends(get_link_service),
):
    link = links.update_payment_link(db, principal, link_id, body.model_dump(exclude_unset=True))
    return link_resp(link, links)


@router.put("/payment-links/{link_id}/toggle")
def toggle_payment_link(
    link_id: int,
    body: LinkToggleRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    links: TokenLinkService = Depends(get_link_service),
):
    return link_resp(links.toggle(db, principal, link_id, body.active, LinkKind.PAYMENT), links)


@router.post("/payment-links/{link_id}/regenerate")
def regenerate_payment_link(
    link_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    links: TokenLinkService = Depends(get_link_service),
):
    return link_resp(links.regenerate(db, principal, link_id, LinkKind.PAYMENT), links)


@router.get("/payment-links/{link_id}/submissions")
def list_payment_link_submissions(
    link_id: int,
    request: Request,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    links: TokenLinkService = Depends(get_link_service),
):
    rows = links.list_link_submissions(db, principal, link_id)
    return {"data": [submission_resp(s, _receipt_url(request, s.id)) for s in rows]}


@router.delete("/payment-links/{link_id}")
def delete_payment_link(
    link_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
    links: TokenLinkService = Depends(get_link_service),
):
    links.delete_payment_link(db, link_id)
    return {"ok": True}


@router.get("/payment-registrations/{submission_id}/receipt", name="download_payment_receipt")
def download_payment_receipt(
    submission_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    submissions: SubmissionService = Depends(get_submission_service),
):
    sub = submissions.payment_receipt(db, submission_id)
    if not principal.is_admin and (
        sub.project_id is None or not can_manage_payments(db, principal, sub.project_id)
    ):
        raise Forbidden()
    return FileResponse(sub.file_path, media_type=sub.content_type, filename=sub.file_name)
