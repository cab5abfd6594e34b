# agency_admin/api/v1/public.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from agency_admin.api.v1.deps import get_link_service, get_submission_service
from agency_admin.core.artifacts import IncomingArtifact
from agency_admin.db.session import get_db
from agency_admin.schemas.contacts import ContactSubmitRequest
from agency_admin.services.contacts_service import ContactsService
from agency_admin.services.links_service import TokenLinkService
from agency_admin.services.submissions_service import SubmissionService

# No session on any of these: a token link (or nothing, for the contact form)
# is the whole credential.
router = APIRouter(prefix="/public")

contacts = ContactsService()


def _incoming(upload: Optional[UploadFile]) -> Optional[IncomingArtifact]:
    if upload is None:
        return None
    return IncomingArtifact(filename=upload.filename or "", content_type=upload.content_type, stream=upload.file)


def _iso(dt):
    return dt.isoformat() if dt else None


# ---------------------------
# ONBOARDING
# ---------------------------


@router.get("/candidate-links/{token}")
def candidate_link_details(
    token: str,
    db: Session = Depends(get_db),
    links: TokenLinkService = Depends(get_link_service),
):
    ctx = links.validate_onboarding(db, token)
    c = ctx.candidate
    upload = ctx.upload
    return {
        "candidate": {
            "id": c.id,
            "candidate_code": c.candidate_code,
            "name": c.name,
            "email": c.email,
            "phone": c.phone,
            "position": c.position,
            "status": c.status,
            "has_uploaded": ctx.has_uploaded,
            "upload_details": (
                {
                    "file_name": upload.file_name,
                    "file_size": upload.file_size,
                    "uploaded_at": _iso(upload.created_at),
                }
                if upload is not None
                else None
            ),
        },
        "link_id": ctx.link.id,
        "expires_at": _iso(ctx.link.expires_at),
    }


@router.post("/candidate-links/{token}/upload", status_code=201)
def candidate_upload(
    token: str,
    certificate: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    submissions: SubmissionService = Depends(get_submission_service),
):
    sub = submissions.submit_candidate_upload(db, token, _incoming(certificate))
    return {
        "ok": True,
        "message": "Documents uploaded.",
        "upload": {
            "id": sub.id,
            "file_name": sub.file_name,
            "file_size": sub.file_size,
            "uploaded_at": _iso(sub.created_at),
        },
    }


# ---------------------------
# PAYMENT
# ---------------------------


@router.get("/payment-links/{token}")
def payment_link_details(
    token: str,
    db: Session = Depends(get_db),
    links: TokenLinkService = Depends(get_link_service),
):
    ctx = links.validate_payment(db, token)
    return {
        "client": {
            "id": ctx.client.id,
            "name": ctx.client.name,
            "email": ctx.client.email,
            "phone": ctx.client.phone,
            "company": ctx.client.company,
        },
        "project": {
            "id": ctx.project.id,
            "name": ctx.project.name,
            "code": ctx.project.code,
            "tracking_id": ctx.project.tracking_id,
            "type": ctx.project.type,
        },
        "amount": str(ctx.amount),
        "due_date": _iso(ctx.due_date),
        "payment_kind": ctx.payment_kind,
        "link_id": ctx.link.id,
    }


@router.post("/payment-links/{token}/submit", status_code=201)
def payment_submit(
    token: str,
    receipt: Optional[UploadFile] = File(None),
    amount: Optional[str] = Form(None),
    payment_kind: Optional[str] = Form(None),
    payment_type: Optional[str] = Form(None),
    payment_description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    submissions: SubmissionService = Depends(get_submission_service),
):
    sub = submissions.submit_payment(
        db,
        token,
        _incoming(receipt),
        amount=amount,
        payment_kind=payment_kind,
        payment_type=payment_type,
        payment_description=payment_description,
    )
    return {
        "ok": True,
        "reference_id": sub.reference_id,
        "amount": str(sub.amount),
        "due_date": _iso(sub.due_date),
        "payment_kind": sub.payment_kind,
        "payment_type": sub.payment_type,
    }


# ---------------------------
# CONTACT FORM
# ---------------------------


@router.post("/contact", status_code=201)
def submit_contact(body: ContactSubmitRequest, db: Session = Depends(get_db)):
    c = contacts.submit(
        db,
        name=body.name,
        email=body.email,
        phone=body.phone,
        subject=body.subject,
        message=body.message,
    )
    return {"ok": True, "message": "Thank you! We'll get back to you soon.", "id": c.id}
